from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from google.oauth2.credentials import Credentials

from config.gmail_config import GmailConfig

TOKEN_URI = "https://oauth2.googleapis.com/token"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def expiry_string(delta: timedelta) -> str:
    return (utcnow() + delta).strftime("%Y-%m-%dT%H:%M:%SZ")


def token_info(expiry: str, token: str = "ya29.stored") -> dict:
    return {
        "token": token,
        "refresh_token": "1//stored-refresh",
        "token_uri": TOKEN_URI,
        "client_id": "client-id.apps.googleusercontent.com",
        "client_secret": "client-secret",
        "scopes": ["https://www.googleapis.com/auth/gmail.send"],
        "expiry": expiry,
    }


class FakeFlow:
    """Stands in for google_auth_oauthlib.flow.Flow; never touches the network."""

    instances: list["FakeFlow"] = []

    def __init__(self, client_config: dict, redirect_uri, source: str) -> None:
        self.client_config = client_config
        self.redirect_uri = redirect_uri
        self.source = source
        self.fetched_codes: list[str] = []
        self.credentials = None
        self.code_verifier = "should-be-cleared"
        self.autogenerate_code_verifier = True
        FakeFlow.instances.append(self)

    @classmethod
    def from_client_config(cls, client_config, scopes, **kwargs):
        section = client_config.get("web") or client_config["installed"]
        return cls(section, kwargs.get("redirect_uri"), "config")

    @classmethod
    def from_client_secrets_file(cls, client_secrets_file, scopes, **kwargs):
        data = json.loads(Path(client_secrets_file).read_text(encoding="utf-8"))
        section = data.get("web") or data["installed"]
        return cls(section, kwargs.get("redirect_uri"), "file")

    def authorization_url(self, **kwargs):
        url = (
            "https://accounts.google.com/o/oauth2/auth"
            f"?client_id={self.client_config['client_id']}"
            f"&redirect_uri={self.redirect_uri}"
            f"&access_type={kwargs.get('access_type')}"
        )
        return url, "state-123"

    def fetch_token(self, code: str):
        self.fetched_codes.append(code)
        creds = Credentials(
            token="ya29.exchanged",
            refresh_token="1//exchanged-refresh",
            token_uri=TOKEN_URI,
            client_id=self.client_config["client_id"],
            client_secret=self.client_config.get("client_secret"),
            scopes=["https://www.googleapis.com/auth/gmail.send"],
        )
        creds.expiry = utcnow() + timedelta(hours=1)
        self.credentials = creds
        return {"access_token": creds.token}


@pytest.fixture(autouse=True)
def fake_flow(monkeypatch):
    FakeFlow.instances = []
    monkeypatch.setattr("tools.gmail_auth.Flow", FakeFlow)
    return FakeFlow


@pytest.fixture(autouse=True)
def no_gmail_service(monkeypatch):
    def _fail(credentials):
        raise AssertionError("Gmail service must not be built in this test")

    monkeypatch.setattr("tools.mail_dispatcher.build_gmail_service", _fail)


@pytest.fixture
def cfg(tmp_path) -> GmailConfig:
    return GmailConfig(storage_dir=tmp_path / "storage")


@pytest.fixture
def write_token(cfg):
    def _write(info: dict) -> Path:
        path = cfg.credentials_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(info), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def refresh_calls(monkeypatch):
    calls: list[str] = []

    def _refresh(self, request):
        calls.append(self.token)
        self.token = "ya29.refreshed"
        self.expiry = utcnow() + timedelta(hours=1)

    monkeypatch.setattr(Credentials, "refresh", _refresh)
    return calls
