"""Plain-text and markdown transcripts, and shareable links."""

import base64
import binascii
import json
from collections.abc import Sequence
from urllib.parse import parse_qs, urlencode, urlsplit

from pydantic import ValidationError

from chatbot.client.models import Message, Role
from chatbot.core.exceptions import AppException
from chatbot.schemas.base_schema import CamelModel

SHARE_PARAM = "share"

_SPEAKERS = {"user": "You", "assistant": "Assistant"}


class SharedMessage(CamelModel):
    role: Role
    content: str
    timestamp: str = ""


class SharedConversation(CamelModel):
    """Payload carried by a share link."""

    messages: list[SharedMessage]
    title: str = ""


def to_text(messages: Sequence[Message]) -> bytes:
    lines = [
        f"[{m.timestamp}] {_SPEAKERS[m.role]}: {m.content}" for m in messages
    ]
    return ("\n\n".join(lines) + "\n").encode("utf-8")


def to_markdown(messages: Sequence[Message], title: str) -> bytes:
    parts = [f"# {title}"]
    for m in messages:
        parts.append(f"**{_SPEAKERS[m.role]}** _{m.timestamp}_\n\n{m.content}")
    return ("\n\n".join(parts) + "\n").encode("utf-8")


def encode_share_link(base_url: str, messages: Sequence[Message], title: str) -> str:
    """Embed the conversation as base64 JSON in the ``share`` query parameter."""
    payload = SharedConversation(
        messages=[
            SharedMessage(role=m.role, content=m.content, timestamp=m.timestamp)
            for m in messages
        ],
        title=title,
    )
    raw = json.dumps(payload.model_dump(mode="json"), ensure_ascii=False)
    token = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode({SHARE_PARAM: token})}"


def decode_share_link(url_or_token: str) -> SharedConversation:
    """Read a conversation back from a share link or its bare token.

    Raises:
        AppException: the link carries no valid conversation.
    """
    token = url_or_token.strip()
    if "://" in token or "?" in token:
        values = parse_qs(urlsplit(token).query).get(SHARE_PARAM)
        if not values:
            raise AppException(
                message="Link has no shared conversation", code="INVALID_SHARE_LINK"
            )
        token = values[0]
    try:
        raw = base64.b64decode(token, validate=True)
        return SharedConversation.model_validate(json.loads(raw))
    except (binascii.Error, ValueError, ValidationError) as exc:
        raise AppException(
            message="Shared conversation could not be read", code="INVALID_SHARE_LINK"
        ) from exc
