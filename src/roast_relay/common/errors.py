"""Error kinds surfaced to callers as JSON bodies."""
from __future__ import annotations
from typing import Any


class RelayError(Exception):
    """Base error carrying the HTTP status reported to the caller."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(RelayError):
    """Caller input missing or malformed."""

    status_code = 400


class ConfigurationError(RelayError):
    """Server misconfigured; needs an operator fix."""


class UpstreamError(RelayError):
    """Network failure or non-2xx answer from a provider."""


class ExtractionError(RelayError):
    """Provider answered but the expected data was absent."""
