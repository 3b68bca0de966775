"""
Coerce free-form model output into the {reply, chips} contract.

Three branches, tried in order:
  1. parsed-direct     the whole text (minus markdown fences) is the object
  2. parsed-extracted  the span from the first "{" to the last "}" is the object
  3. fallback          first non-empty line of the text plus DEFAULT_CHIPS

coerce_reply never raises. The worst case is the fallback, which is itself
a valid StructuredReply.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from chat_gateway.schemas.chat import MAX_CHIPS, StructuredReply

logger = logging.getLogger(__name__)

DEFAULT_CHIPS = ["Fees", "Eligibility", "Talk to a counselor"]
PLACEHOLDER_REPLY = "Sorry, could you rephrase that?"


class CoercionBranch(str, Enum):
    DIRECT = "parsed-direct"
    EXTRACTED = "parsed-extracted"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CoercionResult:
    reply: StructuredReply
    branch: CoercionBranch


def coerce_reply(raw: Any) -> CoercionResult:
    """Turn raw model output into a StructuredReply, tagging the branch taken."""
    if not isinstance(raw, str):
        raw = ""

    shaped = _shape(_parse_object(_strip_markdown_json(raw)))
    if shaped is not None:
        return CoercionResult(shaped, CoercionBranch.DIRECT)

    start, end = raw.find("{"), raw.rfind("}")
    if start != -1 and end > start:
        shaped = _shape(_parse_object(raw[start : end + 1]))
        if shaped is not None:
            return CoercionResult(shaped, CoercionBranch.EXTRACTED)

    logger.warning("Model output is not a reply object, using fallback (%d chars)", len(raw))
    return CoercionResult(_fallback(raw), CoercionBranch.FALLBACK)


def _parse_object(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _shape(data: Any) -> StructuredReply | None:
    """Return a cleaned reply if data has the {reply: str, chips: [str]} shape."""
    if not isinstance(data, dict):
        return None
    reply, chips = data.get("reply"), data.get("chips")
    if not isinstance(reply, str) or not reply.strip():
        return None
    if not isinstance(chips, list):
        return None
    if not all(isinstance(c, (str, int, float)) and not isinstance(c, bool) for c in chips):
        return None

    cleaned = [str(c).strip() for c in chips]
    cleaned = [c for c in cleaned if c][:MAX_CHIPS]
    return StructuredReply(reply=reply.strip(), chips=cleaned)


def _fallback(raw: str) -> StructuredReply:
    first_line = next((line.strip() for line in raw.splitlines() if line.strip()), "")
    return StructuredReply(reply=first_line or PLACEHOLDER_REPLY, chips=list(DEFAULT_CHIPS))


def _strip_markdown_json(text: str) -> str:
    """Remove ```json ... ``` wrapper if present."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```(?:json)?\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    return text
