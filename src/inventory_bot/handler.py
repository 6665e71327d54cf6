"""
AWS Lambda handler for the LINE Messaging API webhook -> inventory request reply.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Callable

from . import messages
from .config import Settings, load_settings
from .credentials import load_channel_access_token
from .line import LineClient

logger = logging.getLogger(__name__)

ROUTE = "/api/line-webhook"


def _configure_logging() -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)
    root = logging.getLogger()
    if root.level and root.level > level:
        root.setLevel(level)


def _rid(context: Any) -> str | None:
    return getattr(context, "aws_request_id", None)


def _log(msg: str, **fields: Any) -> None:
    try:
        rec = {"msg": msg, **fields}
        logger.info(json.dumps(rec, ensure_ascii=False))
    except (TypeError, ValueError):
        # Fallback to plain log
        logger.info("%s | %s", msg, fields)


def _cors_headers(settings: Settings) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, X-Line-Signature",
    }


def _response(settings: Settings, status: int, body: dict[str, Any] | None) -> dict[str, Any]:
    headers = _cors_headers(settings)
    if body is None:
        return {"statusCode": status, "headers": headers, "body": ""}
    headers["Content-Type"] = "application/json"
    return {
        "statusCode": status,
        "headers": headers,
        "body": json.dumps(body, ensure_ascii=False),
    }


def _get_method(event: dict[str, Any]) -> str:
    ctx = event.get("requestContext")
    http = ctx.get("http") if isinstance(ctx, dict) else None
    method = http.get("method") if isinstance(http, dict) else None
    return str(method or event.get("httpMethod") or "").upper()


def _get_body(event: dict[str, Any]) -> dict[str, Any]:
    body = event.get("body")
    try:
        if event.get("isBase64Encoded"):
            body = base64.b64decode(body or b"")
        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8")
        data = json.loads(body or "{}")
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _send_reply(
    get_client: Callable[[], LineClient | None],
    event: dict[str, Any],
    reply: dict[str, Any],
    rid: str | None,
) -> None:
    reply_token = event.get("replyToken")
    if not reply_token:
        _log("line_reply_skipped", rid=rid, reason="no_reply_token")
        return
    client = get_client()
    if client is None:
        _log("line_reply_skipped", rid=rid, reason="no_channel_token")
        return
    try:
        status = client.reply(reply_token, [reply])
        _log("line_reply", rid=rid, status=status)
    except OSError as e:
        # Best-effort: no retry, webhook still succeeds
        logger.exception("LINE reply failed")
        _log("line_reply_error", rid=rid, error=str(e))


def _handle_event(
    settings: Settings,
    get_client: Callable[[], LineClient | None],
    event: dict[str, Any],
    rid: str | None,
) -> None:
    if not messages.is_text_message(event):
        _log("event_skipped", rid=rid, reason="not_text", type=event.get("type"))
        return
    if not messages.is_allowed_source(event, settings.allowed_group_ids):
        _log(
            "event_skipped",
            rid=rid,
            reason="source_not_allowed",
            source=messages.source_id(event),
        )
        return

    raw = event["message"].get("text") or ""
    text = messages.strip_prefix(raw, settings.message_prefix)
    if text is None:
        _log("event_skipped", rid=rid, reason="no_prefix")
        return

    reply, record = messages.build_reply(text, original_text=raw)
    if record:
        _log("inventory_request", rid=rid, source=messages.source_id(event), **record)
    _send_reply(get_client, event, reply, rid)


def _handle_post(settings: Settings, event: dict[str, Any], rid: str | None) -> dict[str, Any]:
    payload = _get_body(event)
    events = payload.get("events")
    if not isinstance(events, list):
        _log("ignored_no_events", rid=rid, keys=list(payload.keys()))
        return _response(settings, 200, {"ok": True})

    client: LineClient | None = None
    resolved = False

    # Token lookup waits for the first event that actually replies
    def _client() -> LineClient | None:
        nonlocal client, resolved
        if not resolved:
            resolved = True
            token = load_channel_access_token(settings)
            if token:
                client = LineClient(
                    token, settings.line_reply_endpoint, settings.line_timeout_seconds
                )
        return client

    for ev in events:
        if isinstance(ev, dict):
            _handle_event(settings, _client, ev, rid)
    return _response(settings, 200, {"ok": True})


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    _configure_logging()
    settings = load_settings()
    start_ts = time.time()
    rid = _rid(context)
    method = _get_method(event)

    if method == "OPTIONS":
        return _response(settings, 200, None)
    if method == "GET":
        now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        now = now.replace("+00:00", "Z")
        return _response(settings, 200, {"ok": True, "route": ROUTE, "time": now})
    if method != "POST":
        _log("method_not_allowed", rid=rid, method=method)
        return _response(settings, 405, {"error": "Method not allowed"})

    try:
        res = _handle_post(settings, event, rid)
    except Exception as e:
        logger.exception("Webhook processing failed")
        _log("unhandled_error", rid=rid, error=str(e))
        return _response(settings, 500, {"error": str(e)})
    _log("ok", rid=rid, ms_total=int((time.time() - start_ts) * 1000))
    return res
