#!/usr/bin/env python3
"""Serve the gadget contract over HTTP; settings come from GADGET_* / .env."""

from __future__ import annotations

import logging

import uvicorn

from gadgetledger.config import Settings
from gadgetledger.runtime import GadgetRuntime

logger = logging.getLogger(__name__)


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Connecting to ledger database at %s", settings.database_url)

    app = GadgetRuntime.create_app(
        "gadgetledger",
        db_url=settings.database_url,
        allow_overwrite=settings.allow_overwrite,
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
