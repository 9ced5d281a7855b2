from __future__ import annotations

from pathlib import Path

import pytest

from roast_relay.common.config import DEFAULT_TOKEN_URL, Settings, load_settings
from roast_relay.common.errors import ConfigurationError
from roast_relay.common.templates import DEFAULT_SYSTEM_PROMPT

ENV = {
    "SPOTIFY_CLIENT_ID": "cid",
    "SPOTIFY_CLIENT_SECRET": "csecret",
    "GEMINI_API_KEY": "gk-test",
}


@pytest.fixture(autouse=True)
def _empty_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # keep configs/ from the repo root out of default lookups
    monkeypatch.chdir(tmp_path)


def test_defaults_without_config_file() -> None:
    s = load_settings(env=dict(ENV))
    assert s.port == 8888
    assert s.token_url == DEFAULT_TOKEN_URL
    assert s.temperature == 0.9
    assert s.upstream_timeout == 15.0
    assert s.cors_origins == ("*",)
    assert s.system_prompt == DEFAULT_SYSTEM_PROMPT
    assert s.generate_url.endswith("/gemini-2.5-flash:generateContent")


def test_missing_secrets_are_all_named() -> None:
    with pytest.raises(ConfigurationError) as ei:
        load_settings(env={"SPOTIFY_CLIENT_ID": "cid", "GEMINI_API_KEY": "  "})
    assert "SPOTIFY_CLIENT_SECRET" in ei.value.message
    assert "GEMINI_API_KEY" in ei.value.message
    assert "SPOTIFY_CLIENT_ID" not in ei.value.message


def test_yaml_knobs_and_env_overrides(tmp_path: Path) -> None:
    tpl = tmp_path / "prompt.txt"
    tpl.write_text("<|system|>Roast hard.<|user|>Data: {{input}}", encoding="utf-8")
    cfg = tmp_path / "relay.yaml"
    cfg.write_text(
        "gemini_model: gemini-x\n"
        "temperature: 0.85\n"
        "upstream_timeout: 20\n"
        "cors_origins: [https://app.example]\n"
        f"prompt_template: {tpl}\n",
        encoding="utf-8",
    )
    env = dict(ENV, PORT="9000", ROAST_TEMPERATURE="0.95", CORS_ORIGINS="https://a.example, https://b.example")
    s = load_settings(env=env, cfg_path=str(cfg))
    assert s.port == 9000
    assert s.gemini_model == "gemini-x"
    assert s.temperature == 0.95
    assert s.upstream_timeout == 20.0
    assert s.cors_origins == ("https://a.example", "https://b.example")
    assert s.system_prompt == "Roast hard."
    assert s.user_template == "Data: {{input}}"


def test_explicit_missing_config_file_is_an_error() -> None:
    with pytest.raises(ConfigurationError):
        load_settings(env=dict(ENV, RELAY_CONFIG="nope.yaml"))


@pytest.mark.parametrize(
    "extra",
    [{"PORT": "eighty"}, {"ROAST_TEMPERATURE": "3.5"}, {"ROAST_TEMPERATURE": "hot"}, {"UPSTREAM_TIMEOUT": "0"}],
)
def test_bad_knobs_rejected(extra: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(env=dict(ENV, **extra))


@pytest.mark.parametrize("key,usable", [("gk-real", True), ("YOUR_GEMINI_API_KEY", False), ("changeme", False), ("", False)])
def test_placeholder_key_detection(key: str, usable: bool) -> None:
    s = Settings(client_id="cid", client_secret="csecret", gemini_api_key=key)
    assert s.has_usable_gemini_key is usable


def test_repr_hides_secrets() -> None:
    s = load_settings(env=dict(ENV))
    text = repr(s)
    assert "csecret" not in text
    assert "gk-test" not in text
    assert "cid" in text


def test_settings_are_immutable() -> None:
    s = load_settings(env=dict(ENV))
    with pytest.raises(AttributeError):
        s.port = 1  # type: ignore[misc]


@pytest.mark.parametrize(
    "line",
    [
        "token_url: accounts.example/api/token",
        "token_url: ftp://accounts.example/api/token",
        "token_url: https://accounts.example:notaport/api/token",
        "gemini_base_url: /v1beta/models",
    ],
)
def test_malformed_provider_urls_rejected(tmp_path: Path, line: str) -> None:
    cfg = tmp_path / "relay.yaml"
    cfg.write_text(line + "\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(env=dict(ENV), cfg_path=str(cfg))


def test_provider_urls_from_yaml(tmp_path: Path) -> None:
    cfg = tmp_path / "relay.yaml"
    cfg.write_text(
        "token_url: http://localhost:9000/api/token\n"
        "gemini_base_url: http://localhost:9001/v1beta/models/\n",
        encoding="utf-8",
    )
    s = load_settings(env=dict(ENV), cfg_path=str(cfg))
    assert s.token_url == "http://localhost:9000/api/token"
    assert s.generate_url == "http://localhost:9001/v1beta/models/gemini-2.5-flash:generateContent"
