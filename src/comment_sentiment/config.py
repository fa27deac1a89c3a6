# src/comment_sentiment/config.py
"""
Runtime settings, read from the environment (a local .env is loaded first).

    OPENAI_API_KEY         key for the openai backend
    SENTIMENT_MODEL        chat model, default gpt-4o-mini
    SENTIMENT_BACKEND      "openai" | "vader"
    SENTIMENT_BATCH_SIZE   comments per classifier request, default 50
    SENTIMENT_TABLE_LIMIT  rows shown in the results table, default 100
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import dotenv

BACKENDS = ("openai", "vader")
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BATCH_SIZE = 50
DEFAULT_TABLE_LIMIT = 100


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    backend: str = "openai"
    batch_size: int = DEFAULT_BATCH_SIZE
    table_limit: int = DEFAULT_TABLE_LIMIT


def _as_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        val = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if val < 1:
        raise ValueError(f"{key} must be >= 1, got {val}")
    return val


def load_settings(env: Optional[Mapping[str, str]] = None, *, use_dotenv: bool = True) -> Settings:
    if env is None:
        if use_dotenv:
            dotenv.load_dotenv()
        env = os.environ

    backend = (env.get("SENTIMENT_BACKEND") or "openai").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"SENTIMENT_BACKEND must be one of {BACKENDS}, got {backend!r}")

    return Settings(
        openai_api_key=env.get("OPENAI_API_KEY") or None,
        model=(env.get("SENTIMENT_MODEL") or DEFAULT_MODEL).strip(),
        backend=backend,
        batch_size=_as_int(env, "SENTIMENT_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        table_limit=_as_int(env, "SENTIMENT_TABLE_LIMIT", DEFAULT_TABLE_LIMIT),
    )
