"""Pydantic schemas for POST /lead."""

import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now_iso() -> str:
    """Current UTC time as ISO8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_phone(phone: Any) -> str:
    """Keep only the digit characters of a phone number."""
    return re.sub(r"\D", "", str(phone))


class LeadSubmission(BaseModel):
    """Inbound lead. Field names follow the widget's camelCase payload."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    firstMessage: str = ""
    conversation: list[dict[str, Any]] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_now_iso)

    @field_validator("name", "phone", mode="before")
    @classmethod
    def _to_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("firstMessage", mode="before")
    @classmethod
    def _first_message_default(cls, value: Any) -> Any:
        return value or ""

    @field_validator("conversation", mode="before")
    @classmethod
    def _conversation_default(cls, value: Any) -> Any:
        return value or []

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_default(cls, value: Any) -> Any:
        return value or utc_now_iso()

    def outbound_payload(self) -> dict:
        """Payload sent to the webhook: phone reduced to digits."""
        return {
            "name": self.name.strip(),
            "phone": normalize_phone(self.phone),
            "firstMessage": self.firstMessage,
            "conversation": self.conversation,
            "timestamp": self.timestamp,
        }


class LeadForwardResponse(BaseModel):
    success: bool = True
    forwarded: bool = True
    upstreamResponse: Any = None
