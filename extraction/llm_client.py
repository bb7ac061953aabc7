"""
OpenAI access for the AI enrichment collaborator.

Environment variables (a local .env file is loaded via dotenv):
- OPENAI_API_KEY: credentials, read by the OpenAI client itself
- OPENAI_MODEL: overrides config.DEFAULT_MODEL
- OPENAI_TIMEOUT: request timeout in seconds
"""

from __future__ import annotations

import os
import threading

from dotenv import load_dotenv
from openai import OpenAI

from config import DEFAULT_MODEL

load_dotenv()

_client: OpenAI | None = None
_lock = threading.Lock()


def enrichment_model() -> str:
    return os.getenv("OPENAI_MODEL") or DEFAULT_MODEL


def _timeout() -> float | None:
    raw = os.getenv("OPENAI_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"OPENAI_TIMEOUT must be a number of seconds, got {raw!r}") from None


def get_client() -> OpenAI:
    """Return the shared OpenAI client, created on first use (thread-safe)."""
    global _client
    with _lock:
        if _client is None:
            timeout = _timeout()
            _client = OpenAI(timeout=timeout) if timeout is not None else OpenAI()
        return _client


def reset_client() -> None:
    """Drop the shared client so the next call picks up changed environment settings."""
    global _client
    with _lock:
        _client = None
