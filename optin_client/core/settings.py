from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Tuple
import os

DEFAULT_BASE_URL = "https://api.double-opt.in"
DEFAULT_EVENT_LOG_PATH = "./data/logs/events.jsonl"


def parse_env_lines(lines: Iterable[str]) -> Iterator[Tuple[str, str]]:
    """Yield (key, value) pairs from .env lines.

    Accepts `KEY=value`, `export KEY=value` and quoted values; comments,
    blank lines and lines without `=` are skipped.
    """
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        if key:
            yield key, value


def load_env_file(path: str | Path = ".env") -> Dict[str, str]:
    """Copy .env entries into os.environ; variables already set win."""
    p = Path(path)
    if not p.is_file():
        return {}
    loaded = {
        k: v
        for k, v in parse_env_lines(p.read_text(encoding="utf-8").splitlines())
        if k not in os.environ
    }
    os.environ.update(loaded)
    return loaded


def _env_str(key: str, default: str = "") -> str:
    return (os.getenv(key) or "").strip() or default


def _env_positive_int(key: str, default: int) -> int:
    v = _env_str(key)
    if not v:
        return default
    try:
        n = int(v)
    except ValueError:
        raise ValueError(f"Invalid int for {key}: {v}")
    if n <= 0:
        raise ValueError(f"{key} must be positive, got {n}")
    return n


@dataclass(frozen=True)
class Settings:
    optin_base_url: str
    optin_api_token: str
    optin_http_timeout_sec: int
    event_log_path: str

    @property
    def base_url(self) -> str:
        return self.optin_base_url

    @staticmethod
    def from_env(env_path: str | Path = ".env") -> "Settings":
        load_env_file(env_path)
        return Settings(
            optin_base_url=_env_str("OPTIN_BASE_URL", DEFAULT_BASE_URL),
            optin_api_token=_env_str("OPTIN_API_TOKEN"),
            optin_http_timeout_sec=_env_positive_int("OPTIN_HTTP_TIMEOUT_SEC", 10),
            event_log_path=_env_str("EVENT_LOG_PATH", DEFAULT_EVENT_LOG_PATH),
        )
