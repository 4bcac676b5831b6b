"""
gadgetledger.runtime  ──  A thin façade that hosts the contract behind FastAPI.

Usage pattern
-------------
    from gadgetledger.runtime import GadgetRuntime

    app = GadgetRuntime.create_app("gadgets", db_url="sqlite:///gadgets.db")
    # POST /invoke  {"function": "queryGadget", "args": ["GADGET0"]}
"""

from __future__ import annotations

from typing import Any, ClassVar, List, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response as HttpResponse
from pydantic import BaseModel
from sqlalchemy.engine import Engine

from .bootstrap import init_contract, make_engine
from .contract.dispatcher import Dispatcher


class Invocation(BaseModel):
    function: str
    args: List[str] = []


class GadgetRuntime:
    """
    Process-wide singleton holding the engine and the dispatcher, so request
    handlers in different modules share one contract instance.
    """

    _singleton: ClassVar[Optional["GadgetRuntime"]] = None

    def __init__(self, engine: Engine, dispatcher: Dispatcher):
        self.engine = engine
        self.dispatcher = dispatcher

    # ---------- one-shot initialiser ----------
    @classmethod
    def init(cls, *, database_url: str, allow_overwrite: bool = True) -> "GadgetRuntime":
        if cls._singleton is None:
            engine = make_engine(database_url)
            dispatcher = init_contract(engine, allow_overwrite=allow_overwrite)
            cls._singleton = cls(engine, dispatcher)
        return cls._singleton

    @classmethod
    def instance(cls) -> "GadgetRuntime":
        if cls._singleton is None:
            raise RuntimeError("GadgetRuntime.init() has not been called")
        return cls._singleton

    @classmethod
    def shutdown(cls) -> None:
        if cls._singleton is not None:
            cls._singleton.engine.dispose()
            cls._singleton = None

    # ---------- convenience helpers ----------
    @classmethod
    def create_app(
        cls,
        name: str,
        *,
        db_url: str,
        allow_overwrite: bool = True,
        **fastapi_kwargs: Any,
    ) -> FastAPI:
        """
        One-liner for web apps:
            app = GadgetRuntime.create_app("svc-name", db_url=URL)
        """
        runtime = cls.init(database_url=db_url, allow_overwrite=allow_overwrite)
        app = FastAPI(title=name, **fastapi_kwargs)

        @app.get("/")
        def health() -> dict[str, str]:
            return {"status": "running", "name": name}

        @app.post("/invoke")
        def invoke(body: Invocation):
            result = runtime.dispatcher.invoke(body.function, body.args)
            if not result.ok:
                return JSONResponse(
                    {"status": result.status.value, "message": result.message},
                    status_code=result.status_code,
                )
            return HttpResponse(content=result.payload, media_type="application/json")

        return app
