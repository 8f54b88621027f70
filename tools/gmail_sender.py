from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Union

from googleapiclient.discovery import build


@dataclass(frozen=True)
class OutgoingMessage:
    from_address: str
    from_name: str
    to_address: str
    subject: str
    body: str
    attachments: tuple[Union[str, Path], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SendResult:
    id: str
    thread_id: str


def _guess_type(path: Path) -> tuple[str, str]:
    ctype, encoding = mimetypes.guess_type(path.name)
    if ctype is None or encoding is not None:
        ctype = "application/octet-stream"
    maintype, subtype = ctype.split("/", 1)
    return maintype, subtype


def build_mime(message: OutgoingMessage) -> bytes:
    sender = formataddr((message.from_name, message.from_address))

    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = message.to_address
    msg["Reply-To"] = sender
    msg["Subject"] = message.subject
    msg.set_content(message.body, subtype="html", charset="utf-8")

    for attachment in message.attachments:
        path = Path(attachment)
        maintype, subtype = _guess_type(path)
        msg.add_attachment(path.read_bytes(), maintype=maintype, subtype=subtype, filename=path.name)
    return msg.as_bytes()


def encode_raw(data: bytes) -> str:
    """Gmail's `raw` field: URL-safe base64 with the padding stripped."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def build_gmail_service(credentials):
    return build("gmail", "v1", credentials=credentials, cache_discovery=False)


def send_raw(service, raw: str) -> SendResult:
    sent = (
        service.users()
        .messages()
        .send(userId="me", body={"raw": raw})
        .execute()
    )
    return SendResult(id=sent.get("id", ""), thread_id=sent.get("threadId", ""))
