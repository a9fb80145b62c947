"""Server settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

ENV_PREFIX = "SWS_"


class ConfigError(RuntimeError):
    """Raised when the server configuration is unusable."""


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_int(value: Optional[str], name: str, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from exc


def _parse_float(value: Optional[str], name: str, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from exc


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").lower() in {"1", "true", "yes", "on"}


def parse_blacklist(entries: Iterable[str]) -> FrozenSet[str]:
    """Split comma separated entries into a set of bare file names."""

    names = set()
    for entry in entries:
        for name in entry.split(","):
            name = name.strip()
            if name:
                names.add(name)
    return frozenset(names)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables and CLI flags."""

    bind_address: str = "127.0.0.1"
    port: int = 8080
    root: Path = Path(".")
    default_document: str = "index.html"
    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60
    penalty_seconds: int = 180
    blacklist: FrozenSet[str] = field(default_factory=frozenset)
    quiet: bool = False
    verbose: bool = False
    log_file: Optional[str] = None
    max_request_bytes: int = 8192
    read_timeout_seconds: float = 10.0
    max_tracked_clients: int = 10_000

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))
        object.__setattr__(self, "blacklist", frozenset(self.blacklist))
        if not 0 <= self.port <= 65535:
            raise ConfigError(f"Port out of range: {self.port}")
        if self.rate_limit_requests < 0:
            raise ConfigError("Rate limit must be zero (disabled) or positive.")
        if self.rate_limit_window_seconds <= 0:
            raise ConfigError("Rate limit window must be positive.")
        if self.penalty_seconds < 0:
            raise ConfigError("Penalty duration must not be negative.")
        if self.max_request_bytes <= 0:
            raise ConfigError("Maximum request size must be positive.")
        if self.quiet and self.verbose:
            raise ConfigError("Quiet and verbose logging are mutually exclusive.")
        if not self.default_document or "/" in self.default_document:
            raise ConfigError(f"Invalid default document: {self.default_document!r}")

    @property
    def rate_limit_enabled(self) -> bool:
        return self.rate_limit_requests > 0

    @classmethod
    def from_env(cls) -> "Settings":
        blacklist = _env("BLACKLIST")
        return cls(
            bind_address=_env("BIND") or cls.bind_address,
            port=_parse_int(_env("PORT"), "PORT", cls.port),
            root=Path(_env("ROOT") or "."),
            default_document=_env("DEFAULT_DOCUMENT") or cls.default_document,
            rate_limit_requests=_parse_int(
                _env("RATE_LIMIT"), "RATE_LIMIT", cls.rate_limit_requests
            ),
            rate_limit_window_seconds=_parse_int(
                _env("RATE_LIMIT_WINDOW_SECONDS"),
                "RATE_LIMIT_WINDOW_SECONDS",
                cls.rate_limit_window_seconds,
            ),
            penalty_seconds=_parse_int(
                _env("PENALTY_SECONDS"), "PENALTY_SECONDS", cls.penalty_seconds
            ),
            blacklist=parse_blacklist([blacklist]) if blacklist else frozenset(),
            quiet=_parse_bool(_env("QUIET")),
            verbose=_parse_bool(_env("VERBOSE")),
            log_file=_env("LOG_FILE"),
            max_request_bytes=_parse_int(
                _env("MAX_REQUEST_BYTES"), "MAX_REQUEST_BYTES", cls.max_request_bytes
            ),
            read_timeout_seconds=_parse_float(
                _env("READ_TIMEOUT_SECONDS"), "READ_TIMEOUT_SECONDS", cls.read_timeout_seconds
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings loaded from the environment."""

    _load_dotenv()
    return Settings.from_env()
