# coding: utf-8
"""
Assistant Service - "Volga" chat assistant

Uses the OpenAI chat completions API when OPENAI_API_KEY is configured.
Any upstream failure (no key, timeout, API error, empty completion) is
absorbed: the local keyword responder answers instead. No retries.
"""

import random
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from loguru import logger
from openai import AsyncOpenAI

from config.config import (
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    OPENAI_TIMEOUT,
    OPENAI_MAX_TOKENS,
    OPENAI_TEMPERATURE,
)
from config.prompts import (
    FALLBACK_RULES,
    GENERIC_RESPONSE,
    GUEST_USERNAME,
    MOOD_HINTS,
    PREMIUM_GREETING_SUFFIX,
    RECOMMENDATION_INTRO,
    SUGGESTIONS,
    SUGGESTIONS_SHOWN,
    TIME_OF_DAY_HINTS,
    USER_CONTEXT_TEMPLATE,
    VOLGA_SYSTEM_PROMPT,
)
from src.core.enums import AssistantTopic
from src.core.exceptions import UpstreamError
from src.database.models import User


def select_topic(message: str) -> AssistantTopic:
    """
    Pick the response bucket for a message (first matching rule wins)
    """
    lowered = message.lower()
    for topic, keywords, _ in FALLBACK_RULES:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return AssistantTopic.GENERIC


def local_response(message: str, is_premium: bool = False, rng: Optional[random.Random] = None) -> str:
    """
    Canned answer from the bucket selected by select_topic()
    """
    topic = select_topic(message)
    if topic is AssistantTopic.GENERIC:
        return GENERIC_RESPONSE

    responses = next(bucket for t, _, bucket in FALLBACK_RULES if t is topic)
    text = (rng or random).choice(responses)

    if topic is AssistantTopic.GREETING and is_premium:
        text = f"{text} {PREMIUM_GREETING_SUFFIX}"

    return text


def suggestions() -> List[str]:
    return SUGGESTIONS[:SUGGESTIONS_SHOWN]


def recommendation_message(
    time_of_day: Optional[str] = None,
    mood: Optional[str] = None,
) -> str:
    """
    Recommendation blurb: intro + optional time-of-day hint + optional mood hint
    """
    return (
        RECOMMENDATION_INTRO
        + TIME_OF_DAY_HINTS.get(time_of_day or "", "")
        + MOOD_HINTS.get(mood or "", "")
    )


def user_context(user: Optional[User]) -> str:
    if user is None:
        return USER_CONTEXT_TEMPLATE.format(username=GUEST_USERNAME, level=1, tier="обычный", points=0)

    return USER_CONTEXT_TEMPLATE.format(
        username=user.username,
        level=user.level,
        tier="Premium" if user.is_premium else "обычный",
        points=user.points,
    )


class AssistantService:
    """
    Chat assistant with an optional hosted model

    The client is built once with a hard timeout and retries disabled.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = OPENAI_MODEL,
    ):
        api_key = OPENAI_API_KEY if api_key is None else api_key
        base_url = base_url or OPENAI_BASE_URL or None

        self.model = model
        self.client: Optional[AsyncOpenAI] = None

        if api_key:
            self.client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=OPENAI_TIMEOUT,
                max_retries=0,
            )
            logger.info(f"Assistant uses hosted model {model} (timeout {OPENAI_TIMEOUT}s)")
        else:
            logger.info("OPENAI_API_KEY not set - assistant answers with the local responder")

    async def remote_completion(self, message: str, user: Optional[User] = None) -> str:
        """
        Ask the hosted model

        Raises:
            UpstreamError: no client, request failure or empty completion
        """
        if self.client is None:
            raise UpstreamError("Hosted model is not configured")

        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": VOLGA_SYSTEM_PROMPT},
                    {"role": "user", "content": f"{user_context(user)}\n\nВопрос: {message}"},
                ],
                max_tokens=OPENAI_MAX_TOKENS,
                temperature=OPENAI_TEMPERATURE,
            )
        except Exception as e:
            raise UpstreamError(f"{type(e).__name__}: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise UpstreamError("Empty completion")

        return content

    async def generate_response(self, message: str, user: Optional[User] = None) -> str:
        try:
            return await self.remote_completion(message, user)
        except UpstreamError as e:
            if self.client is not None:
                logger.warning(f"Assistant upstream failed, using local responder: {e}")

        return local_response(message, is_premium=bool(user and user.is_premium))

    async def chat(self, message: str, user: Optional[User] = None) -> Dict[str, Any]:
        """
        Returns:
            {response, suggestions, timestamp}
        """
        response = await self.generate_response(message, user)
        return {
            "response": response,
            "suggestions": suggestions(),
            "timestamp": datetime.now(UTC).isoformat(),
        }


_assistant_service: Optional[AssistantService] = None


def get_assistant_service() -> AssistantService:
    """Process-wide assistant (FastAPI dependency)"""
    global _assistant_service

    if _assistant_service is None:
        _assistant_service = AssistantService()

    return _assistant_service
