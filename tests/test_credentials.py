import json

import pytest

import inventory_bot.credentials as cred
from inventory_bot.config import load_settings


class FakeSecrets:
    def __init__(self, secret_string):
        self.secret_string = secret_string
        self.requested = []

    def get_secret_value(self, SecretId: str):
        self.requested.append(SecretId)
        return {"SecretString": self.secret_string}


def _install(monkeypatch, secrets):
    class BotoModule:
        def client(self, name: str):
            if name == "secretsmanager":
                return secrets
            raise ValueError(name)

    monkeypatch.setitem(cred.__dict__, "boto3", BotoModule())
    cred._secret_token.cache_clear()


def test_env_token_wins(monkeypatch):
    monkeypatch.setenv("LINE_CHANNEL_ACCESS_TOKEN", "env-token")
    monkeypatch.setenv("LINE_CHANNEL_SECRET_NAME", "line/bot")
    fs = FakeSecrets("ignored")
    _install(monkeypatch, fs)
    assert cred.load_channel_access_token(load_settings()) == "env-token"
    assert fs.requested == []


@pytest.mark.parametrize(
    "secret,expect",
    [
        (json.dumps({"LINE_CHANNEL_ACCESS_TOKEN": "json-token"}), "json-token"),
        (json.dumps({"channelAccessToken": "camel-token"}), "camel-token"),
        ("plain-token\n", "plain-token"),
        (json.dumps({"other": "x"}), None),
        ("", None),
    ],
)
def test_token_from_secrets_manager(monkeypatch, secret, expect):
    monkeypatch.delenv("LINE_CHANNEL_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("LINE_CHANNEL_SECRET_NAME", "line/bot")
    fs = FakeSecrets(secret)
    _install(monkeypatch, fs)
    assert cred.load_channel_access_token(load_settings()) == expect
    assert fs.requested == ["line/bot"]


def test_no_token_configured(monkeypatch):
    monkeypatch.delenv("LINE_CHANNEL_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("LINE_CHANNEL_SECRET_NAME", raising=False)
    assert cred.load_channel_access_token(load_settings()) is None


def test_secret_lookup_is_cached(monkeypatch):
    monkeypatch.delenv("LINE_CHANNEL_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("LINE_CHANNEL_SECRET_NAME", "line/bot")
    fs = FakeSecrets("plain-token")
    _install(monkeypatch, fs)
    assert cred.load_channel_access_token(load_settings()) == "plain-token"
    assert cred.load_channel_access_token(load_settings()) == "plain-token"
    assert fs.requested == ["line/bot"]


def test_secret_failure_is_not_cached(monkeypatch):
    monkeypatch.delenv("LINE_CHANNEL_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("LINE_CHANNEL_SECRET_NAME", "line/bot")

    class FlakySecrets(FakeSecrets):
        def get_secret_value(self, SecretId: str):
            if not self.requested:
                self.requested.append(SecretId)
                raise RuntimeError("AccessDenied")
            return super().get_secret_value(SecretId)

    fs = FlakySecrets("plain-token")
    _install(monkeypatch, fs)
    with pytest.raises(RuntimeError):
        cred.load_channel_access_token(load_settings())
    assert cred.load_channel_access_token(load_settings()) == "plain-token"
