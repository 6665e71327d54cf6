"""
Event gating, help detection, and reply rendering.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .parser import (
    CategoryResult,
    InventoryRequest,
    detect_category,
    has_trigger,
    normalize_text,
    parse_inventory_request,
)

HELP_WORDS = ("ヘルプ", "help")

HELP_TEXT = (
    "📦 在庫管理BOT\n\n"
    "【在庫リクエスト例】\n"
    "・5NN 2本 欲しい\n"
    "・GR13 1本 欲しい\n"
    "・クオライン80 3本 お願い\n\n"
    "【ヒント】数字やスペースが全角でもOK"
)
UNRECOGNIZED_TEXT = (
    "⚠️ 形式が認識できませんでした。\n"
    "例: 5NN 2本 欲しい / GR13 1本 欲しい / クオライン80 3本 お願い"
)
GREETING_TEXT = "こんにちは！\n「ヘルプ」と送信すると使い方が表示されます。"


def is_text_message(event: dict[str, Any]) -> bool:
    if event.get("type") != "message":
        return False
    message = event.get("message") or {}
    return isinstance(message, dict) and message.get("type") == "text"


def source_id(event: dict[str, Any]) -> str | None:
    source = event.get("source") or {}
    if not isinstance(source, dict):
        return None
    return source.get("groupId") or source.get("roomId") or source.get("userId")


def is_allowed_source(event: dict[str, Any], allowed_group_ids: tuple[str, ...]) -> bool:
    if not allowed_group_ids:
        return True
    source = event.get("source") or {}
    if not isinstance(source, dict):
        return False
    gid = source.get("groupId") or source.get("roomId")
    return gid in allowed_group_ids


def strip_prefix(text: str, prefix: str | None) -> str | None:
    """Return the text after ``prefix``, or None when the text does not start with it."""
    if not prefix:
        return text
    normalized = normalize_text(text)
    p = normalize_text(prefix)
    if not normalized.startswith(p):
        return None
    return normalized[len(p) :].strip()


def is_help_command(text: str | None) -> bool:
    t = normalize_text(text).lower()
    return t in HELP_WORDS


def new_request_id(now: datetime | None = None) -> str:
    ts = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return "req_" + ts.strftime("%Y%m%d%H%M%S")


def _text(body: str) -> dict[str, str]:
    return {"type": "text", "text": body}


def help_reply() -> dict[str, str]:
    return _text(HELP_TEXT)


def unrecognized_reply() -> dict[str, str]:
    return _text(UNRECOGNIZED_TEXT)


def greeting_reply() -> dict[str, str]:
    return _text(GREETING_TEXT)


def accepted_reply(request_id: str, req: InventoryRequest, cat: CategoryResult) -> dict[str, str]:
    return _text(
        "✅ 在庫リクエストを受け付けました！\n\n"
        f"リクエストID: {request_id}\n"
        f"商品: {req.product_code}\n"
        f"数量: {req.quantity}{req.unit}\n"
        f"カテゴリー: {cat.category}"
    )


def build_reply(
    text: str, now: datetime | None = None, original_text: str | None = None
) -> tuple[dict[str, str], dict[str, Any] | None]:
    """Pick the reply for one message.

    Returns (LINE message, accepted record). The record is only set when an
    inventory request was parsed, and holds the request id, the request and
    its category for logging. ``original_text`` is the message as received,
    before prefix stripping.
    """
    if is_help_command(text):
        return help_reply(), None

    req = parse_inventory_request(text, original_text=original_text)
    if req:
        cat = detect_category(req.product_code, text)
        rid = new_request_id(now)
        record = {"id": rid, **req.to_dict(), "cat": cat.to_dict()}
        return accepted_reply(rid, req, cat), record

    if has_trigger(normalize_text(text)):
        return unrecognized_reply(), None
    return greeting_reply(), None
