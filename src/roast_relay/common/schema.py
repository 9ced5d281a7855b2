"""Pydantic models for request/response bodies."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TokenExchangeIn(BaseModel):
    """Authorization code and the redirect URI it was issued for."""
    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    redirect_uri: str | None = None


class RoastIn(BaseModel):
    """Caller-built description of the listener's preferences."""
    model_config = ConfigDict(extra="ignore")

    summaryText: str | None = None


class RoastOut(BaseModel):
    roastText: str


class ErrorOut(BaseModel):
    error: str
    details: str | None = None
