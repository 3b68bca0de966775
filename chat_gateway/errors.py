"""
Error taxonomy for the request boundary.

Each GatewayError maps to a fixed status code and a stable error code;
the exception handler in main.py renders it as {"error": ..., "details": ...}.
"""


class GatewayError(Exception):
    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, details: str | None = None, *, error: str | None = None):
        super().__init__(details or error or self.error)
        if error is not None:
            self.error = error
        self.details = details

    def to_body(self) -> dict:
        body: dict = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class RequestValidationFailed(GatewayError):
    """Missing or malformed client input. No upstream call is made."""

    status_code = 400
    error = "invalid_request"


class ChatUpstreamError(GatewayError):
    """Language-model call failed (network, status, timeout or not configured)."""

    error = "chat_error"


class LeadWebhookNotConfigured(GatewayError):
    error = "lead_webhook_not_configured"


class LeadForwardError(GatewayError):
    """Webhook call failed. Forwarding is at-most-once, never retried here."""

    error = "lead_forward_error"


class OriginNotAllowed(Exception):
    """Raised by OriginMatcher.check for an origin outside the allow-list."""

    def __init__(self, origin: str):
        super().__init__(f"CORS policy: Origin not allowed: {origin}")
        self.origin = origin
