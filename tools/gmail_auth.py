from __future__ import annotations

import json
from typing import Any, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from config.gmail_config import ClientConfig, GmailConfig


def _build_flow(cfg: GmailConfig, client: ClientConfig) -> Flow:
    """
    A client-secret file in the storage dir wins over explicit id/secret.
    Without a redirect URI the manual (out-of-band) flow is used.
    """
    secret_path = cfg.client_secret_path
    if secret_path.exists():
        kwargs: dict[str, Any] = {}
        if client.redirect_uri:
            kwargs["redirect_uri"] = client.redirect_uri
        flow = Flow.from_client_secrets_file(str(secret_path), scopes=list(cfg.scopes), **kwargs)
        if not flow.redirect_uri:
            redirect_uris = flow.client_config.get("redirect_uris") or [cfg.default_redirect_uri]
            flow.redirect_uri = redirect_uris[0]
    else:
        flow = Flow.from_client_config(
            client.to_client_config(cfg.default_redirect_uri),
            scopes=list(cfg.scopes),
            redirect_uri=client.redirect_uri or cfg.default_redirect_uri,
        )

    # The URL and the code exchange usually happen in different processes,
    # so there is no shared PKCE verifier to send back.
    flow.autogenerate_code_verifier = False
    flow.code_verifier = None
    return flow


def _to_info(creds: Credentials) -> dict[str, Any]:
    return json.loads(creds.to_json())


class OAuthClient:
    """Google OAuth flow plus the credential currently installed on it."""

    def __init__(self, cfg: GmailConfig, client: ClientConfig) -> None:
        self.cfg = cfg
        self.flow = _build_flow(cfg, client)
        self._credentials: Optional[Credentials] = None

    @property
    def credentials(self) -> Optional[Credentials]:
        return self._credentials

    def authorization_url(self) -> str:
        # offline + consent so Google hands out a refresh token
        url, _state = self.flow.authorization_url(
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        return url

    def exchange_code(self, code: str) -> dict[str, Any]:
        self.flow.fetch_token(code=code)
        self._credentials = self.flow.credentials
        return _to_info(self._credentials)

    def install(self, token_info: dict[str, Any]) -> None:
        self._credentials = Credentials.from_authorized_user_info(token_info, scopes=list(self.cfg.scopes))

    def clear(self) -> None:
        self._credentials = None

    def is_access_token_expired(self) -> bool:
        if self._credentials is None:
            return True
        return bool(self._credentials.expired)

    def refresh(self) -> dict[str, Any]:
        if self._credentials is None:
            raise RuntimeError("No credential installed to refresh.")
        self._credentials.refresh(Request())
        return _to_info(self._credentials)
