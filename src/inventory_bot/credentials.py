"""
Channel access token lookup: environment first, then AWS Secrets Manager.
"""

from __future__ import annotations

import functools
import importlib
import json

from .config import Settings

TOKEN_KEYS = ("LINE_CHANNEL_ACCESS_TOKEN", "channelAccessToken")


def _boto3():
    # Allow tests to monkeypatch module-level `boto3` symbol.
    return globals().get("boto3") or importlib.import_module("boto3")


def _from_secret_string(raw: str) -> str | None:
    raw = raw.strip()
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        # Plain-text secret holds the token itself
        return raw
    if isinstance(data, dict):
        for k in TOKEN_KEYS:
            if data.get(k):
                return str(data[k])
        return None
    return raw


# Warm Lambda containers reuse the token; failures are not cached
@functools.lru_cache(maxsize=8)
def _secret_token(secret_name: str) -> str | None:
    sm = _boto3().client("secretsmanager")
    resp = sm.get_secret_value(SecretId=secret_name)
    return _from_secret_string(resp.get("SecretString") or "")


def load_channel_access_token(settings: Settings) -> str | None:
    if settings.line_channel_access_token:
        return settings.line_channel_access_token
    if not settings.line_channel_secret_name:
        return None
    return _secret_token(settings.line_channel_secret_name)
