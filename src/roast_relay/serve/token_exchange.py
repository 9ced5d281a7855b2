"""OAuth authorization-code exchange against the identity provider's token endpoint."""
from __future__ import annotations
import base64
import logging
from typing import Any

import httpx

from roast_relay.common.config import Settings
from roast_relay.common.errors import UpstreamError, ValidationError
from roast_relay.common.schema import TokenExchangeIn

LOGGER = logging.getLogger("roastrelay.serve.token")

EXCHANGE_FAILED = "Failed to exchange authorization code for access token."


def basic_auth_header(client_id: str, client_secret: str) -> str:
    """Return the Basic credential value for ``client_id:client_secret``."""
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def _provider_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("error_description", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Token endpoint returned HTTP {response.status_code}"


def exchange_token(body: TokenExchangeIn, settings: Settings, client: httpx.Client) -> dict[str, Any]:
    """
    Exchange an authorization code for the provider's token bundle.

    Args:
        body: Caller request with code and redirect_uri.
        settings: Relay settings holding the client credentials.
        client: HTTP client used for the single outbound call.

    Returns:
        The provider's JSON body, unmodified.
    """
    if not body.code or not body.code.strip():
        raise ValidationError("Missing authorization code.")
    if not body.redirect_uri or not body.redirect_uri.strip():
        raise ValidationError("Missing redirect_uri in request body.")

    LOGGER.info("Attempting token exchange for redirect_uri=%s", body.redirect_uri)
    headers = {
        "Authorization": basic_auth_header(settings.client_id, settings.client_secret),
        "Content-Type": "application/x-www-form-urlencoded",
    }
    form = {
        "grant_type": "authorization_code",
        "code": body.code,
        "redirect_uri": body.redirect_uri,
    }

    try:
        r = client.post(settings.token_url, headers=headers, data=form)
    except httpx.HTTPError as e:
        LOGGER.error("Token exchange request failed: %s", e)
        raise UpstreamError(EXCHANGE_FAILED, details=str(e) or type(e).__name__) from e

    if not r.is_success:
        detail = _provider_detail(r)
        LOGGER.error("Token endpoint returned %s: %s", r.status_code, r.text)
        raise UpstreamError(EXCHANGE_FAILED, details=detail)

    try:
        data = r.json()
    except ValueError as e:
        LOGGER.error("Token endpoint returned non-JSON body: %s", r.text)
        raise UpstreamError(EXCHANGE_FAILED, details="Token endpoint returned a non-JSON body") from e

    LOGGER.info("Token exchange succeeded")
    return data
