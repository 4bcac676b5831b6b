"""
Environment-driven settings.  ``Settings.from_env()`` loads a ``.env`` file
(if present) before reading ``GADGET_*`` variables; pydantic does the
coercion (``GADGET_ALLOW_OVERWRITE=off`` ➜ False, ``GADGET_PORT=9000`` ➜ 9000).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

_ENV = {
    "database_url": "GADGET_DATABASE_URL",
    "allow_overwrite": "GADGET_ALLOW_OVERWRITE",
    "log_level": "GADGET_LOG_LEVEL",
    "host": "GADGET_HOST",
    "port": "GADGET_PORT",
}


class Settings(BaseModel):
    database_url: str = "sqlite:///gadgets.db"
    allow_overwrite: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"frozen": True}

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def from_env(cls) -> "Settings":
        """Unset or blank variables keep their defaults."""
        load_dotenv()
        raw = {
            field: os.environ[var].strip()
            for field, var in _ENV.items()
            if os.environ.get(var, "").strip()
        }
        return cls(**raw)
