"""FastAPI relay keeping the OAuth client secret and Gemini key server-side.

Endpoints:
- GET /health
- POST /api/token-exchange  { "code": "...", "redirect_uri": "..." }
- POST /api/roast           { "summaryText": "..." }
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roast_relay.common.config import Settings
from roast_relay.common.errors import RelayError
from roast_relay.common.schema import ErrorOut, RoastIn, RoastOut, TokenExchangeIn
from roast_relay.serve.roast import generate_roast
from roast_relay.serve.token_exchange import exchange_token

LOGGER = logging.getLogger("roastrelay.serve.app")

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {400: {"model": ErrorOut}, 500: {"model": ErrorOut}}


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid body"


def create_app(settings: Settings, http_client: httpx.Client | None = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Immutable relay settings.
        http_client: Outbound client; when omitted one is created for the app's
            lifetime with the configured timeout.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if http_client is not None:
            yield
            return
        client = httpx.Client(timeout=settings.upstream_timeout)
        app.state.http_client = client
        try:
            yield
        finally:
            client.close()

    app = FastAPI(title="roast-relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.http_client = http_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RelayError)
    async def _relay_error(request: Request, exc: RelayError) -> JSONResponse:
        LOGGER.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = _describe_validation(exc)
        LOGGER.warning("%s %s -> 400 %s", request.method, request.url.path, detail)
        return JSONResponse(status_code=400, content={"error": "Invalid request body.", "details": detail})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "model": settings.gemini_model}

    @app.post("/api/token-exchange", responses=ERROR_RESPONSES)
    def token_exchange(body: TokenExchangeIn, request: Request) -> Any:
        return exchange_token(body, request.app.state.settings, request.app.state.http_client)

    @app.post("/api/roast", response_model=RoastOut, responses=ERROR_RESPONSES)
    def roast(body: RoastIn, request: Request) -> RoastOut:
        return generate_roast(body, request.app.state.settings, request.app.state.http_client)

    return app
