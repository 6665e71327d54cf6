"""
Configuration helpers and defaults.

Centralize tunables to avoid magic numbers in code/tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REPLY_ENDPOINT = "https://api.line.me/v2/bot/message/reply"


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v is not None else default


def _csv(name: str) -> tuple[str, ...]:
    return tuple(s.strip() for s in (_env(name, "") or "").split(",") if s.strip())


@dataclass(frozen=True)
class Settings:
    line_channel_access_token: str | None
    line_channel_secret_name: str | None
    line_reply_endpoint: str
    line_timeout_seconds: int
    allowed_group_ids: tuple[str, ...]
    message_prefix: str | None
    cors_allow_origin: str


def load_settings() -> Settings:
    """Load settings from environment with safe defaults for local tests."""

    return Settings(
        line_channel_access_token=_env("LINE_CHANNEL_ACCESS_TOKEN") or None,
        line_channel_secret_name=_env("LINE_CHANNEL_SECRET_NAME") or None,
        line_reply_endpoint=_env("LINE_REPLY_ENDPOINT", DEFAULT_REPLY_ENDPOINT)
        or DEFAULT_REPLY_ENDPOINT,
        line_timeout_seconds=int(_env("LINE_TIMEOUT_SECONDS", "8") or 8),
        allowed_group_ids=_csv("ALLOWED_GROUP_IDS"),
        message_prefix=(_env("MESSAGE_PREFIX") or "").strip() or None,
        cors_allow_origin=_env("CORS_ALLOW_ORIGIN", "*") or "*",
    )
