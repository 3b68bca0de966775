"""
Chat Gateway — FastAPI Service

Admits browser origins from an allow-list, relays chat turns to the language
model under a {reply, chips} contract, and forwards leads to an intake webhook.
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chat_gateway.config import Settings, get_settings
from chat_gateway.errors import GatewayError
from chat_gateway.middleware import MatcherCORSMiddleware, OriginGateMiddleware
from chat_gateway.routes import chat, lead
from chat_gateway.schemas.lead import utc_now_iso
from chat_gateway.services.chat import ChatGateway
from chat_gateway.services.lead_forwarder import LeadForwarder
from chat_gateway.services.origins import OriginMatcher

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    *,
    chat_gateway: ChatGateway | None = None,
    lead_forwarder: LeadForwarder | None = None,
) -> FastAPI:
    """Build the app; collaborators default to the ones described by settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
    )

    matcher = OriginMatcher(settings.allowed_origins_list)
    logger.info("Allowed origins: %s", list(matcher.raw_origins))

    app = FastAPI(
        title="Chat Gateway API",
        description="Chat relay with structured replies and lead forwarding.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.origin_matcher = matcher
    app.state.chat_gateway = chat_gateway or ChatGateway.from_settings(settings)
    app.state.lead_forwarder = lead_forwarder or LeadForwarder.from_settings(settings)

    # Last added runs first: the origin gate wraps the CORS layer
    app.add_middleware(
        MatcherCORSMiddleware,
        matcher=matcher,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginGateMiddleware, matcher=matcher)

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(chat.router)
    app.include_router(lead.router)

    @app.get("/", tags=["health"])
    @app.get("/health", tags=["health"], include_in_schema=False)
    async def health():
        """Health check for load balancers and uptime probes."""
        return {"status": "ok", "time": utc_now_iso()}

    return app


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback and answer 500, the process keeps serving."""
    logger.error(
        "Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "details": str(exc)},
    )


app = create_app(get_settings())


if __name__ == "__main__":
    uvicorn.run("chat_gateway.main:app", host="0.0.0.0", port=get_settings().port, reload=False)
