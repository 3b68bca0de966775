"""
POST /chat — one conversational turn.

Always answers with a well-shaped {reply, chips}: malformed model output is
absorbed by the coercion fallback, only upstream failures produce a 500.
"""

from fastapi import APIRouter, Request
from pydantic import TypeAdapter, ValidationError

from chat_gateway.errors import RequestValidationFailed
from chat_gateway.schemas.chat import ChatTurn, StructuredReply

router = APIRouter(tags=["chat"])

_turns_adapter = TypeAdapter(list[ChatTurn])


@router.post("/chat", response_model=StructuredReply)
async def chat(request: Request):
    """
    Reply to the conversation so far.

    Body: {"turns": [{"role": ..., "content": ...}, ...]}. Older widget
    builds send the same list under "messages"; it is accepted too.
    """
    turns = _parse_turns(await _json_body(request))
    return await request.app.state.chat_gateway.reply(turns)


async def _json_body(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


def _parse_turns(payload) -> list[ChatTurn]:
    if not isinstance(payload, dict):
        raise RequestValidationFailed(error="turns required")

    raw = payload.get("turns")
    if raw is None:
        raw = payload.get("messages")
    if not isinstance(raw, list) or not raw:
        raise RequestValidationFailed(error="turns required")

    try:
        return _turns_adapter.validate_python(raw)
    except ValidationError:
        raise RequestValidationFailed(error="turns required")
