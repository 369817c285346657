"""Pydantic v2 schemas for the chat block-message webhook body."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextObject(BaseModel):
    """A text element inside a block."""

    model_config = ConfigDict(frozen=True)

    type: Literal["plain_text", "mrkdwn"] = "mrkdwn"
    text: str


class Block(BaseModel):
    """A section block: optional text plus an optional list of fields."""

    model_config = ConfigDict(frozen=True)

    type: Literal["section"] = "section"
    block_id: str
    text: TextObject | None = None
    fields: list[TextObject] | None = Field(default=None, max_length=10)


class Attachment(BaseModel):
    """Colored attachment holding the ordered content blocks."""

    model_config = ConfigDict(frozen=True)

    color: str
    fallback: str
    blocks: list[Block]


class NotificationPayload(BaseModel):
    """The message posted to the webhook."""

    model_config = ConfigDict(frozen=True)

    channel: str
    username: str
    icon_emoji: str
    attachments: list[Attachment] = Field(min_length=1, max_length=1)

    @property
    def attachment(self) -> Attachment:
        return self.attachments[0]

    @property
    def fallback(self) -> str:
        return self.attachment.fallback

    @property
    def color(self) -> str:
        return self.attachment.color

    def block(self, block_id: str) -> Block | None:
        for block in self.attachment.blocks:
            if block.block_id == block_id:
                return block
        return None

    def to_body(self) -> dict[str, Any]:
        """JSON-ready body in the shape the webhook expects."""
        return self.model_dump(mode="json", exclude_none=True)


__all__ = ["Attachment", "Block", "NotificationPayload", "TextObject"]
