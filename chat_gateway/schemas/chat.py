"""
Pydantic schemas for POST /chat.

The reply contract is strict: a non-empty reply and at most MAX_CHIPS chips.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

MAX_CHIPS = 6


class ChatTurn(BaseModel):
    """One caller-supplied conversation turn."""

    role: Literal["system", "user", "assistant"]
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must be non-empty text")
        return value


class StructuredReply(BaseModel):
    """Output contract for POST /chat."""

    reply: str = Field(..., min_length=1)
    chips: list[str] = Field(default_factory=list, max_length=MAX_CHIPS)
