"""
Minimal LINE Messaging API reply client using stdlib urllib.
"""

from __future__ import annotations

import json
import urllib.request
from typing import Any

from .config import DEFAULT_REPLY_ENDPOINT


class LineClient:
    def __init__(
        self,
        access_token: str,
        endpoint: str = DEFAULT_REPLY_ENDPOINT,
        timeout: int = 8,
    ) -> None:
        self.access_token = access_token
        self.endpoint = endpoint
        self.timeout = timeout

    def _post_json(self, url: str, payload: dict[str, Any]) -> int:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=body,
            method="POST",
            headers={
                "User-Agent": "InventoryBot/1.0",
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.access_token}",
            },
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
            return resp.status

    def reply(self, reply_token: str, messages: list[dict[str, Any]]) -> int:
        """Send a reply and return the HTTP status. Non-2xx raises urllib.error.HTTPError."""
        return self._post_json(
            self.endpoint, {"replyToken": reply_token, "messages": messages}
        )
