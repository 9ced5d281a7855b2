"""Roast generation via the Gemini generateContent endpoint."""
from __future__ import annotations
import logging
from typing import Any

import httpx

from roast_relay.common.config import Settings
from roast_relay.common.errors import ConfigurationError, ExtractionError, UpstreamError, ValidationError
from roast_relay.common.schema import RoastIn, RoastOut
from roast_relay.common.templates import render_prompt

LOGGER = logging.getLogger("roastrelay.serve.roast")

UPSTREAM_FAILED = "Failed to communicate with the Gemini API."
EXTRACTION_FAILED = "AI failed to generate a roast. Check API response structure or safety filters."


def build_payload(summary: str, settings: Settings) -> dict[str, Any]:
    """Compose the generateContent body for a caller summary."""
    user_query = render_prompt(settings.user_template, summary)
    return {
        "contents": [{"parts": [{"text": user_query}]}],
        "systemInstruction": {"parts": [{"text": settings.system_prompt}]},
        "generationConfig": {"temperature": settings.temperature},
    }


def extract_text(data: Any) -> str | None:
    """Return candidates[0].content.parts[0].text, or None when any step is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(text, str) and text:
        return text
    return None


def _redact(text: str, secret: str) -> str:
    return text.replace(secret, "***") if secret else text


def _provider_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        # Gemini wraps failures as {"error": {"code", "message", "status"}}
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"]
        if isinstance(data.get("error_description"), str):
            return data["error_description"]
        if isinstance(err, str):
            return err
    return f"Gemini API returned HTTP {response.status_code}"


def generate_roast(body: RoastIn, settings: Settings, client: httpx.Client) -> RoastOut:
    """
    Generate a roast for the caller's summary.

    Args:
        body: Caller request carrying summaryText.
        settings: Relay settings with API key, prompts and temperature.
        client: HTTP client used for the single outbound call.
    """
    if not body.summaryText or not body.summaryText.strip():
        raise ValidationError("Missing summaryText for the roast.")
    if not settings.has_usable_gemini_key:
        LOGGER.error("Roast requested but GEMINI_API_KEY is unset or a placeholder")
        raise ConfigurationError("Gemini API key is not configured on the server.")

    key = settings.gemini_api_key
    payload = build_payload(body.summaryText, settings)
    try:
        r = client.post(
            settings.generate_url,
            params={"key": key},
            headers={"Content-Type": "application/json"},
            json=payload,
        )
    except httpx.HTTPError as e:
        detail = _redact(str(e) or type(e).__name__, key)
        LOGGER.error("Gemini request failed: %s", detail)
        raise UpstreamError(UPSTREAM_FAILED, details=detail) from e

    if not r.is_success:
        detail = _redact(_provider_detail(r), key)
        LOGGER.error("Gemini returned %s: %s", r.status_code, _redact(r.text, key))
        raise UpstreamError(UPSTREAM_FAILED, details=detail)

    try:
        data = r.json()
    except ValueError as e:
        LOGGER.error("Gemini returned non-JSON body: %s", _redact(r.text, key))
        raise UpstreamError(UPSTREAM_FAILED, details="Gemini API returned a non-JSON body") from e

    text = extract_text(data)
    if text is None:
        block_reason = None
        if isinstance(data, dict) and isinstance(data.get("promptFeedback"), dict):
            block_reason = data["promptFeedback"].get("blockReason")
        LOGGER.error("No roast text in Gemini response (blockReason=%s): %s", block_reason, data)
        raise ExtractionError(EXTRACTION_FAILED)

    LOGGER.info("Roast generated (%d chars)", len(text))
    return RoastOut(roastText=text)
