"""Runtime configuration read from the process environment."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _data_dir() -> Path:
    env_root = os.getenv("LOCALBRANDS_DATA_DIR")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[1] / "data"


@dataclass(slots=True)
class Settings:
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    github_token: str | None = None
    environment: str = "development"
    data_dir: Path = Path("data")
    call_timeout: float = 30.0
    pages_domain: str = "pages.dev"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL") or "gemini-2.0-flash",
            github_token=os.getenv("GITHUB_TOKEN") or None,
            environment=os.getenv("ENVIRONMENT") or "development",
            data_dir=_data_dir(),
            call_timeout=_float_env("LOCALBRANDS_CALL_TIMEOUT", 30.0),
            pages_domain=os.getenv("LOCALBRANDS_PAGES_DOMAIN") or "pages.dev",
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install the root logging configuration for the service."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["Settings", "configure_logging"]
