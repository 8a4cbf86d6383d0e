# utils/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# --- ensure repo root is known for .env lookup ---
THIS_FILE = Path(__file__).resolve()
REPO_ROOT = THIS_FILE.parents[1]

DEFAULT_API_BASE = "https://api.schoology.com/v1"
DEFAULT_TIMEOUT: tuple[float, float] = (5, 30)  # (connect, read) seconds
DEFAULT_OAUTH_CALLBACK = "example.com"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def load_env_if_opted_in(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Only load .env files when explicitly opted in.
    - Set SCHOOLOGY_DOTENV_LOAD=1 to enable
    Returns True when files were loaded.
    """
    env = os.environ if environ is None else environ
    if env.get("SCHOOLOGY_DOTENV_LOAD") != "1":
        return False
    # repo defaults, then local overrides
    load_dotenv(str(REPO_ROOT / ".env"))
    load_dotenv(str(REPO_ROOT / ".env.local"), override=True)
    return True


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_int(name: str, raw: Optional[str], default: int, minimum: int = 0) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _parse_timeout(raw: Optional[str]) -> tuple[float, float]:
    """Accepts "read" or "connect,read", e.g. SCHOOLOGY_HTTP_TIMEOUT="10,300"."""
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        parts = [float(p.strip()) for p in raw.split(",")]
    except ValueError:
        raise ValueError(f"SCHOOLOGY_HTTP_TIMEOUT must be numbers, got {raw!r}") from None
    if len(parts) == 1:
        return (DEFAULT_TIMEOUT[0], parts[0])
    if len(parts) == 2:
        return (parts[0], parts[1])
    raise ValueError(f"SCHOOLOGY_HTTP_TIMEOUT takes one or two values, got {raw!r}")


@dataclass(frozen=True, slots=True)
class Settings:
    api_base: str = DEFAULT_API_BASE
    timeout: tuple[float, float] = DEFAULT_TIMEOUT
    retries: int = 0
    continue_on_error: bool = False
    export_root: Path = Path(".")
    verbosity: int = 1
    oauth_callback: str = DEFAULT_OAUTH_CALLBACK

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            api_base=(env.get("SCHOOLOGY_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            timeout=_parse_timeout(env.get("SCHOOLOGY_HTTP_TIMEOUT")),
            retries=_parse_int("SCHOOLOGY_HTTP_RETRIES", env.get("SCHOOLOGY_HTTP_RETRIES"), 0),
            continue_on_error=_parse_bool(
                "SCHOOLOGY_CONTINUE_ON_ERROR", env.get("SCHOOLOGY_CONTINUE_ON_ERROR"), False
            ),
            export_root=Path(env.get("SCHOOLOGY_EXPORT_ROOT") or "."),
            verbosity=_parse_int("SCHOOLOGY_VERBOSITY", env.get("SCHOOLOGY_VERBOSITY"), 1),
            oauth_callback=env.get("SCHOOLOGY_OAUTH_CALLBACK") or DEFAULT_OAUTH_CALLBACK,
        )


__all__ = ["Settings", "load_env_if_opted_in", "DEFAULT_API_BASE", "DEFAULT_TIMEOUT"]
