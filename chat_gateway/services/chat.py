"""
Single chat turn against the language model.

Stateless: every call is built only from the turns the caller supplies.
Upstream failures surface as ChatUpstreamError and are never retried here.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from chat_gateway.config import Settings
from chat_gateway.errors import ChatUpstreamError
from chat_gateway.schemas.chat import ChatTurn, StructuredReply
from chat_gateway.services.coercion import coerce_reply

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an empathetic MBA counselor for working professionals.
Answer in 1 to 5 words only (very short, precise). Do not explain.
End with a tiny follow-up question (1-3 words).
If the user shows intent keywords (fees, eligibility, admission, apply, compare, placement, worth it)
and explicitly confirms interest, collect their name, then their WhatsApp number.

Output ONLY valid JSON matching this exact schema (no markdown, no extra text):
{
  "reply": "short answer",
  "chips": ["Quick reply 1", "Quick reply 2"]
}
Give at most 6 chips, each 1-4 words."""


def build_client(settings: Settings) -> AsyncOpenAI | None:
    """Build the AsyncOpenAI client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; /chat will fail until it is configured.")
        return None
    kwargs: dict = {
        "api_key": settings.openai_api_key,
        "timeout": settings.openai_timeout_seconds,
        "max_retries": 0,
    }
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    return AsyncOpenAI(**kwargs)


class ChatGateway:
    def __init__(
        self,
        client: AsyncOpenAI | None,
        *,
        model: str,
        history_window: int = 8,
        max_tokens: int = 200,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.client = client
        self.model = model
        self.history_window = history_window
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatGateway":
        return cls(
            build_client(settings),
            model=settings.openai_model,
            history_window=settings.chat_history_window,
            max_tokens=settings.chat_max_tokens,
        )

    def build_messages(self, turns: list[ChatTurn]) -> list[dict]:
        """System instruction followed by the last history_window turns."""
        window = turns[-self.history_window :] if self.history_window > 0 else []
        return [{"role": "system", "content": self.system_prompt}] + [
            {"role": t.role, "content": t.content} for t in window
        ]

    async def reply(self, turns: list[ChatTurn]) -> StructuredReply:
        if self.client is None:
            raise ChatUpstreamError("OPENAI_API_KEY is not configured")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(turns),
                max_tokens=self.max_tokens,
                temperature=0,
            )
        except OpenAIError as e:
            logger.error("Chat upstream error: %s", e)
            raise ChatUpstreamError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        result = coerce_reply(content or "")
        logger.debug("Chat reply coerced via %s", result.branch.value)
        return result.reply
