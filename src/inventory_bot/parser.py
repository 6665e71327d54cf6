"""
Text normalization, trigger detection, and inventory request parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

TRIGGER_WORDS = (
    "欲しい",
    "ほしい",
    "発注",
    "注文",
    "お願い",
    "必要",
    "下さい",
    "ください",
    "至急",
    "緊急",
)

DEFAULT_UNIT = "本"

# 例: 5NN 2本 欲しい / 5NN2本 / 5NN 2 ほしい
CODE_QTY_RE = re.compile(
    r"([A-Z0-9]{2,})\s*(\d+)\s*(本|個|g|グラム)?", re.IGNORECASE | re.ASCII
)
# 例: クオライン8 3本 お願い
QUOLINE_RE = re.compile(
    r"(クオライン|QuoLine|quoline)\s*(\d+)\s*(\d+)\s*(本|個)?", re.IGNORECASE | re.ASCII
)
GRAM_RE = re.compile(r"g|グラム", re.IGNORECASE)
URGENT_RE = re.compile(r"至急|緊急")

COLOR_CODE_RE = re.compile(r"^(\d{1,2}[a-z]{1,3})")
COLOR_LINE_RE = re.compile(r"(gr|sb|be|mt|ash)")
STRAIGHT_RE = re.compile(r"クオライン|quoline|縮毛|ストレート")
TREATMENT_RE = re.compile(r"トリートメント|treatment|リペア|repair")

# 全角 ！(U+FF01) .. ～(U+FF5E) -> ASCII
_FULLWIDTH = {c: c - 0xFEE0 for c in range(0xFF01, 0xFF5F)}
_FULLWIDTH[0x3000] = ord(" ")


@dataclass(frozen=True)
class InventoryRequest:
    product_code: str
    quantity: int
    unit: str
    original_text: str
    priority: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "productCode": self.product_code,
            "quantity": self.quantity,
            "unit": self.unit,
            "originalText": self.original_text,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class CategoryResult:
    category: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"category": self.category, "type": self.type}


def normalize_text(text: str | None) -> str:
    if not text:
        return ""
    return text.translate(_FULLWIDTH).strip()


def has_trigger(text: str | None) -> bool:
    if not text:
        return False
    return any(w in text for w in TRIGGER_WORDS)


def get_product_unit(product_code: str | None) -> str:
    """Default unit when the message omits one. カラー剤もストレートも本数で数える。"""
    return DEFAULT_UNIT


def _priority(text: str) -> str:
    return "urgent" if URGENT_RE.search(text) else "normal"


def parse_inventory_request(
    text: str | None, original_text: str | None = None
) -> InventoryRequest | None:
    """Parse ``text``. ``original_text`` is recorded instead when the caller pre-processed it."""
    raw = text or ""
    recorded = raw if original_text is None else original_text
    normalized = normalize_text(raw)
    if not has_trigger(normalized):
        return None

    m = CODE_QTY_RE.search(normalized)
    if m:
        product_code = m.group(1).upper()
        specified = m.group(3)
        if specified:
            unit = "g" if GRAM_RE.search(specified) else DEFAULT_UNIT
        else:
            unit = get_product_unit(product_code)
        return InventoryRequest(
            product_code=product_code,
            quantity=int(m.group(2)),
            unit=unit,
            original_text=recorded,
            priority=_priority(normalized),
        )

    m = QUOLINE_RE.search(normalized)
    if m:
        return InventoryRequest(
            product_code=f"{m.group(1)}_{m.group(2)}",
            quantity=int(m.group(3)),
            unit=DEFAULT_UNIT,
            original_text=recorded,
            priority=_priority(normalized),
        )

    return None


def detect_category(product_code: str | None, text: str | None) -> CategoryResult:
    code = (product_code or "").lower()
    t = (text or "").lower()
    if COLOR_CODE_RE.search(code) or COLOR_LINE_RE.search(code):
        return CategoryResult("color", "color")
    if STRAIGHT_RE.search(t):
        return CategoryResult("straightening", "chemical")
    if TREATMENT_RE.search(t):
        return CategoryResult("treatment", "treatment")
    return CategoryResult("other", "other")
