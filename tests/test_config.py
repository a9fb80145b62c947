from __future__ import annotations

import os
from pathlib import Path

import pytest

from staticserver.config import ConfigError, Settings, get_settings, parse_blacklist


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "SWS_PORT",
        "SWS_RATE_LIMIT",
        "SWS_BLACKLIST",
        "SWS_QUIET",
        "SWS_VERBOSE",
        "SWS_ROOT",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = Settings()

    assert settings.bind_address == "127.0.0.1"
    assert settings.port == 8080
    assert settings.rate_limit_requests == 120
    assert settings.penalty_seconds == 180
    assert settings.rate_limit_window_seconds == 60
    assert settings.blacklist == frozenset()
    assert settings.rate_limit_enabled


def test_from_env(monkeypatch):
    monkeypatch.setenv("SWS_PORT", "9000")
    monkeypatch.setenv("SWS_RATE_LIMIT", "0")
    monkeypatch.setenv("SWS_BLACKLIST", "secret.txt, .env,,")
    monkeypatch.setenv("SWS_VERBOSE", "true")
    monkeypatch.setenv("SWS_ROOT", "/srv/www")

    settings = Settings.from_env()

    assert settings.port == 9000
    assert not settings.rate_limit_enabled
    assert settings.blacklist == {"secret.txt", ".env"}
    assert settings.verbose
    assert settings.root == Path("/srv/www")


def test_invalid_integer_in_env(monkeypatch):
    monkeypatch.setenv("SWS_PORT", "eighty")

    with pytest.raises(ConfigError, match="SWS_PORT"):
        Settings.from_env()


def test_dotenv_is_loaded(monkeypatch, tmp_path):
    monkeypatch.setattr(os, "environ", dict(os.environ))
    (tmp_path / ".env").write_text("# comment\nSWS_PORT=8181\nnot-a-pair\n")
    monkeypatch.chdir(tmp_path)

    assert get_settings().port == 8181


@pytest.mark.parametrize(
    "overrides",
    [
        {"port": 70000},
        {"rate_limit_requests": -1},
        {"penalty_seconds": -5},
        {"rate_limit_window_seconds": 0},
        {"quiet": True, "verbose": True},
        {"default_document": "sub/index.html"},
    ],
)
def test_invalid_settings(overrides):
    with pytest.raises(ConfigError):
        Settings(**overrides)


def test_root_and_blacklist_are_normalised():
    settings = Settings(root="public", blacklist=["a.txt"])

    assert settings.root == Path("public")
    assert settings.blacklist == frozenset({"a.txt"})


def test_parse_blacklist_merges_entries():
    assert parse_blacklist(["a.txt,b.txt", " c.txt "]) == {"a.txt", "b.txt", "c.txt"}
