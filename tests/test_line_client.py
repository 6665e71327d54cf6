import json

import inventory_bot.line as line


class FakeResp:
    status = 200

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_reply_posts_json(monkeypatch):
    captured = {}

    def fake_urlopen(req, timeout):
        captured["req"] = req
        captured["timeout"] = timeout
        return FakeResp()

    monkeypatch.setattr(line.urllib.request, "urlopen", fake_urlopen)

    client = line.LineClient("tok", "https://line.invalid/reply", timeout=3)
    status = client.reply("rt-1", [{"type": "text", "text": "こんにちは"}])

    assert status == 200
    req = captured["req"]
    assert captured["timeout"] == 3
    assert req.full_url == "https://line.invalid/reply"
    assert req.get_method() == "POST"
    assert req.get_header("Authorization") == "Bearer tok"
    assert json.loads(req.data.decode("utf-8")) == {
        "replyToken": "rt-1",
        "messages": [{"type": "text", "text": "こんにちは"}],
    }
