from __future__ import annotations

from typing import Callable

import httpx
import pytest

from roast_relay.common.config import Settings


class Recorder:
    """MockTransport handler that records requests and replays a canned answer."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        client_id="cid",
        client_secret="csecret",
        gemini_api_key="gk-test",
        token_url="https://accounts.example/api/token",
        gemini_base_url="https://ai.example/v1beta/models",
        gemini_model="gemini-test",
        temperature=0.9,
    )


@pytest.fixture
def recorder() -> Callable[..., Recorder]:
    def _make(status: int = 200, json: object | None = None, text: str | None = None) -> Recorder:
        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)
        return Recorder(respond)
    return _make
