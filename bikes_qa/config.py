from __future__ import annotations

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_HOST = "http://localhost:8080"
DEFAULT_MODEL = "Ministral-3-14B-Instruct-2512-Q4_0"
DEFAULT_API_KEY = "x"
DEFAULT_DB_FILE = "bikes.ddb"

DIALECTS = ("prompt", "chat")


class ConfigError(ValueError):
    """Invalid environment configuration."""


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_HOST + "/v1"
    model: str = DEFAULT_MODEL
    api_key: str = DEFAULT_API_KEY
    dialect: str = "prompt"
    db_file: str = DEFAULT_DB_FILE
    debug: bool = False
    turn_timeout: Optional[float] = None
    select_only: bool = False

    @property
    def chat(self) -> bool:
        return self.dialect == "chat"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables (os.environ by default)."""
        if env is None:
            env = os.environ

        host = env.get("KRONK_WEB_API_HOST") or env.get("OLLAMA_HOST") or DEFAULT_HOST

        dialect = (env.get("LLM_DIALECT") or "prompt").strip().lower()
        if dialect not in DIALECTS:
            raise ConfigError(f"LLM_DIALECT must be one of {', '.join(DIALECTS)}, got {dialect!r}")

        return cls(
            base_url=host.rstrip("/") + "/v1",
            model=env.get("MODEL") or DEFAULT_MODEL,
            api_key=env.get("LLM_API_KEY") or DEFAULT_API_KEY,
            dialect=dialect,
            db_file=env.get("DB_FILE") or DEFAULT_DB_FILE,
            debug=bool(env.get("DEBUG")),
            turn_timeout=_parse_timeout(env.get("TURN_TIMEOUT")),
            select_only=bool(env.get("SELECT_ONLY")),
        )


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"TURN_TIMEOUT must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"TURN_TIMEOUT must be positive, got {raw!r}")
    return value


def load_settings() -> Settings:
    # Values already in the environment win over .env
    load_dotenv(Path.cwd() / ".env")
    return Settings.from_env()
