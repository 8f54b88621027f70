from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Manual copy/paste flow: the consent page shows the code instead of redirecting.
OOB_REDIRECT_URI = "urn:ietf:wg:oauth:2.0:oob"


@dataclass(frozen=True)
class GmailConfig:
    application_name: str = "Gmail API"

    # Least-privilege: sending only. If you change these, revoke the stored token.
    scopes: tuple[str, ...] = ("https://www.googleapis.com/auth/gmail.send",)

    # Secrets live outside source control
    storage_dir: Path = Path("storage")
    default_redirect_uri: str = OOB_REDIRECT_URI

    @property
    def credentials_path(self) -> Path:
        return self.storage_dir / ".credentials" / "gmail-quickstart.json"

    @property
    def client_secret_path(self) -> Path:
        return self.storage_dir / "client_secret.json"

    @classmethod
    def from_env(cls) -> "GmailConfig":
        storage = os.environ.get("GMAIL_STORAGE_DIR")
        if storage:
            return cls(storage_dir=Path(storage))
        return cls()


@dataclass(frozen=True)
class ClientConfig:
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            client_id=os.environ.get("GMAIL_CLIENT_ID", ""),
            client_secret=os.environ.get("GMAIL_CLIENT_SECRET", ""),
            redirect_uri=os.environ.get("GMAIL_REDIRECT_URI", ""),
        )

    def to_client_config(self, default_redirect_uri: str) -> dict:
        """Client config in Google's client-secret JSON shape."""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.redirect_uri or default_redirect_uri],
            }
        }
