"""Process-wide settings, read once at startup and immutable afterwards."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import httpx
import yaml

from roast_relay.common.errors import ConfigurationError
from roast_relay.common.templates import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_USER_TEMPLATE,
    extract_system,
    extract_user,
    load_template,
)

LOGGER = logging.getLogger("roastrelay.config")

DEFAULT_CFG_PATH = "configs/relay.yaml"
DEFAULT_TEMPLATE_PATH = "configs/roast_prompt.txt"
DEFAULT_TOKEN_URL = "https://accounts.spotify.com/api/token"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_PORT = 8888
DEFAULT_TEMPERATURE = 0.9
DEFAULT_TIMEOUT = 15.0

PLACEHOLDER_KEYS = frozenset({"your_gemini_api_key", "your-api-key", "changeme"})

REQUIRED_ENV = ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "GEMINI_API_KEY")


@dataclass(frozen=True)
class Settings:
    """Immutable relay configuration handed to the app at construction."""
    client_id: str
    client_secret: str = field(repr=False)
    gemini_api_key: str = field(repr=False)
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    token_url: str = DEFAULT_TOKEN_URL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    gemini_model: str = DEFAULT_GEMINI_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    upstream_timeout: float = DEFAULT_TIMEOUT
    cors_origins: tuple[str, ...] = ("*",)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    user_template: str = DEFAULT_USER_TEMPLATE

    @property
    def has_usable_gemini_key(self) -> bool:
        key = self.gemini_api_key.strip()
        return bool(key) and key.lower() not in PLACEHOLDER_KEYS

    @property
    def generate_url(self) -> str:
        return f"{self.gemini_base_url.rstrip('/')}/{self.gemini_model}:generateContent"


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping.")
    return data


def _as_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}.") from None


def _as_origins(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value or []]
    origins = tuple(o.strip() for o in items if o.strip())
    return origins or ("*",)


def _as_url(name: str, value: Any) -> str:
    text = str(value).strip()
    try:
        url = httpx.URL(text)
    except httpx.InvalidURL:
        raise ConfigurationError(f"{name} is not a valid URL: {text!r}.") from None
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"{name} must be an absolute http(s) URL, got {text!r}.")
    return text


def _load_prompts(path: str) -> tuple[str, str]:
    try:
        template = load_template(path)
    except FileNotFoundError:
        LOGGER.warning("Prompt template %s not found; using built-in prompts", path)
        return DEFAULT_SYSTEM_PROMPT, DEFAULT_USER_TEMPLATE
    if "<|system|>" not in template or "<|user|>" not in template:
        LOGGER.warning("Prompt template %s missing expected tags; using defaults where absent", path)
    return extract_system(template), extract_user(template)


def load_settings(env: Mapping[str, str] | None = None, cfg_path: str | None = None) -> Settings:
    """
    Build settings from the environment and the optional YAML tuning file.

    Args:
        env: Environment mapping; defaults to os.environ.
        cfg_path: YAML file of non-secret knobs. Falls back to RELAY_CONFIG,
            then configs/relay.yaml (skipped when absent).

    Raises:
        ConfigurationError: A secret is missing, a knob is out of range, or
            a provider URL is malformed.
    """
    if env is None:
        env = os.environ

    missing = [name for name in REQUIRED_ENV if not env.get(name, "").strip()]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    explicit = cfg_path or env.get("RELAY_CONFIG")
    path = explicit or DEFAULT_CFG_PATH
    cfg: dict[str, Any] = {}
    if Path(path).exists():
        cfg = load_cfg(path)
    elif explicit:
        raise ConfigurationError(f"Config file not found: {path}")

    raw_port = env.get("PORT", str(DEFAULT_PORT))
    try:
        port = int(raw_port)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer, got {raw_port!r}.") from None

    temperature = _as_float("temperature", env.get("ROAST_TEMPERATURE", cfg.get("temperature", DEFAULT_TEMPERATURE)))
    if not 0.0 <= temperature <= 2.0:
        raise ConfigurationError(f"temperature must be within [0.0, 2.0], got {temperature}.")

    timeout = _as_float("upstream_timeout", env.get("UPSTREAM_TIMEOUT", cfg.get("upstream_timeout", DEFAULT_TIMEOUT)))
    if timeout <= 0:
        raise ConfigurationError(f"upstream_timeout must be positive, got {timeout}.")

    token_url = _as_url("token_url", cfg.get("token_url", DEFAULT_TOKEN_URL))
    gemini_base_url = _as_url("gemini_base_url", cfg.get("gemini_base_url", DEFAULT_GEMINI_BASE_URL))
    gemini_model = str(cfg.get("gemini_model", DEFAULT_GEMINI_MODEL)).strip()
    _as_url("gemini_model", f"{gemini_base_url.rstrip('/')}/{gemini_model}:generateContent")

    template_path = env.get("ROAST_PROMPT_TEMPLATE") or cfg.get("prompt_template") or DEFAULT_TEMPLATE_PATH
    system_prompt, user_template = _load_prompts(str(template_path))

    return Settings(
        client_id=env["SPOTIFY_CLIENT_ID"].strip(),
        client_secret=env["SPOTIFY_CLIENT_SECRET"].strip(),
        gemini_api_key=env["GEMINI_API_KEY"].strip(),
        port=port,
        host=env.get("HOST", "0.0.0.0"),
        token_url=token_url,
        gemini_base_url=gemini_base_url,
        gemini_model=gemini_model,
        temperature=temperature,
        upstream_timeout=timeout,
        cors_origins=_as_origins(env.get("CORS_ORIGINS", cfg.get("cors_origins", ["*"]))),
        system_prompt=system_prompt,
        user_template=user_template,
    )
