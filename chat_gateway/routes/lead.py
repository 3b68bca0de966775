"""POST /lead — validate a lead and relay it to the intake webhook."""

from fastapi import APIRouter, Request
from pydantic import ValidationError

from chat_gateway.errors import RequestValidationFailed
from chat_gateway.schemas.lead import LeadForwardResponse, LeadSubmission, normalize_phone

router = APIRouter(tags=["lead"])


@router.post("/lead", response_model=LeadForwardResponse)
async def lead(request: Request):
    """
    Forward {name, phone, firstMessage?, conversation?, timestamp?}.

    The phone is reduced to digits before sending. Each call is one forward
    attempt; duplicates are not detected.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict) or not _has_contact(payload):
        raise RequestValidationFailed(error="name & phone required")

    try:
        submission = LeadSubmission.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationFailed(str(e), error="invalid_lead")

    upstream = await request.app.state.lead_forwarder.forward(submission)
    return LeadForwardResponse(upstreamResponse=upstream)


def _has_contact(payload: dict) -> bool:
    name, phone = payload.get("name"), payload.get("phone")
    if name is None or phone is None or isinstance(name, (dict, list)) or isinstance(phone, (dict, list)):
        return False
    return bool(str(name).strip()) and bool(normalize_phone(phone))
