from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from config.gmail_config import ClientConfig, GmailConfig
from tools.errors import AuthenticationError, ConfigurationError
from tools.gmail_auth import OAuthClient
from tools.gmail_sender import OutgoingMessage, SendResult, build_gmail_service, build_mime, encode_raw, send_raw
from tools.token_store import FileTokenStore, TokenStore
from utils.logger import log_event


class MailDispatcher:
    """
    Sends mail through the Gmail API on behalf of one delegated account.

    First-time setup is manual: show get_authorization_url() to an operator,
    take the code they paste back, set_authorization_code(), then
    exchange_authorization_code(). After that every construction refreshes
    the stored token if it has expired.
    """

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        redirect_uri: str = "",
        *,
        config: Optional[GmailConfig] = None,
        store: Optional[TokenStore] = None,
        session_check: Optional[Callable[[], bool]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.cfg = config or GmailConfig()
        self.store = store or FileTokenStore(self.cfg.credentials_path)
        self.logger = logger or logging.getLogger("mail_dispatch")
        self._session_check = session_check
        self._auth_code = ""

        client = ClientConfig(client_id=client_id, client_secret=client_secret, redirect_uri=redirect_uri)
        self.client = OAuthClient(self.cfg, client)

        self.refresh_if_needed()

    @property
    def authorization_code(self) -> str:
        return self._auth_code

    def set_authorization_code(self, code: str) -> None:
        self._auth_code = (code or "").strip()

    def is_authorization_code_set(self) -> bool:
        return bool(self._auth_code)

    def get_authorization_url(self) -> str:
        # A code is already pending exchange; don't send the operator round again.
        if self._auth_code:
            return ""
        return self.client.authorization_url()

    def has_stored_credential(self) -> bool:
        return self.store.exists()

    def exchange_authorization_code(self) -> None:
        if not self._auth_code:
            raise ConfigurationError("No authorization code.")
        if self.has_stored_credential():
            log_event(self.logger, "exchange_skipped", reason="credential_already_stored")
            return

        token_info = self.client.exchange_code(self._auth_code)
        self.store.save(token_info)
        log_event(self.logger, "credential_stored", expiry=token_info.get("expiry"))

    def revoke_credential(self) -> None:
        existed = self.has_stored_credential()
        self.store.delete()
        self.client.clear()
        if existed:
            log_event(self.logger, "credential_revoked")

    def refresh_if_needed(self) -> None:
        if not self.has_stored_credential():
            return

        self.client.install(self.store.load())
        if self.client.is_access_token_expired():
            token_info = self.client.refresh()
            self.store.save(token_info)
            log_event(self.logger, "credential_refreshed", expiry=token_info.get("expiry"))

    def send(
        self,
        from_name: str,
        from_address: str,
        to_address: str,
        subject: str,
        body: str,
        attachments: Iterable[Union[str, Path]] = (),
    ) -> SendResult:
        if not self.has_stored_credential():
            raise AuthenticationError("No credentials exists.")
        # picks up a token stored by another process and re-issues an expired one
        self.refresh_if_needed()

        message = OutgoingMessage(
            from_address=from_address,
            from_name=from_name,
            to_address=to_address,
            subject=subject,
            body=body,
            attachments=tuple(attachments),
        )
        raw = encode_raw(build_mime(message))

        service = build_gmail_service(self.client.credentials)
        result = send_raw(service, raw)
        log_event(
            self.logger,
            "mail_sent",
            message_id=result.id,
            thread_id=result.thread_id,
            to=to_address,
            attachments=len(message.attachments),
        )
        return result

    def is_user_logged(self) -> bool:
        if self._session_check is None:
            return False
        return bool(self._session_check())

    def is_operational(self) -> bool:
        return self.has_stored_credential() and not self.client.is_access_token_expired()
