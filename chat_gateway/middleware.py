"""
Origin admission and CORS middleware.

OriginGateMiddleware runs outermost: a disallowed Origin gets a 403 before
any route logic runs, and bare OPTIONS requests are answered with 200.
MatcherCORSMiddleware is Starlette's CORS middleware with origin admission
delegated to the same OriginMatcher, so scheme-less allow-list entries
behave the same for preflights as for the gate.
"""

from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from chat_gateway.errors import OriginNotAllowed
from chat_gateway.services.origins import OriginMatcher


class OriginGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, matcher: OriginMatcher):
        super().__init__(app)
        self.matcher = matcher

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            self.matcher.check(request.headers.get("origin"))
        except OriginNotAllowed:
            return JSONResponse(
                status_code=403,
                content={"error": "CORS error", "message": "CORS policy: Origin not allowed"},
            )

        # Only a CORS preflight (Origin plus Access-Control-Request-Method) goes on to the CORS layer
        if request.method == "OPTIONS" and not _is_preflight(request):
            return Response(status_code=200)

        return await call_next(request)


class MatcherCORSMiddleware(CORSMiddleware):
    def __init__(self, app: ASGIApp, matcher: OriginMatcher, **kwargs):
        super().__init__(app, **kwargs)
        self.matcher = matcher

    def is_allowed_origin(self, origin: str) -> bool:
        return self.matcher.allows(origin)


def _is_preflight(request: Request) -> bool:
    return bool(request.headers.get("origin")) and "access-control-request-method" in request.headers
