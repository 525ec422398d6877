"""
Liveness probe — one trivial chat completion against the default provider.

Any exception from the completion is reported as unhealthy with the error
attached; it is never re-raised. Task cancellation is not an exception
here and still propagates.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from aibridge.llm.messages import ChatMessage
from aibridge.services.ai_service import AIService

logger = logging.getLogger(__name__)

PING_PROMPT = "ping"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    status: HealthStatus
    description: str = ""
    exception: Optional[BaseException] = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @classmethod
    def healthy(cls, description: str = "", **data: Any) -> HealthCheckResult:
        return cls(HealthStatus.HEALTHY, description, data=data)

    @classmethod
    def unhealthy(
        cls, description: str, exception: Optional[BaseException] = None, **data: Any
    ) -> HealthCheckResult:
        return cls(HealthStatus.UNHEALTHY, description, exception, data=data)


class AIServiceHealthCheck:
    """Reports whether the default chat provider answers a one-message request."""

    def __init__(self, ai_service: AIService):
        self._ai_service = ai_service

    async def check_health(self) -> HealthCheckResult:
        chat = self._ai_service.chat
        start = time.monotonic()
        try:
            await chat.complete([ChatMessage.user(PING_PROMPT)])
        except Exception as e:
            logger.warning(
                "health_check_failed",
                extra={
                    "provider": chat.current_provider,
                    "status": HealthStatus.UNHEALTHY.value,
                    "error": str(e),
                },
            )
            return HealthCheckResult.unhealthy(
                f"AI service is unhealthy: {e}",
                exception=e,
                provider=chat.current_provider,
            )

        duration_ms = round((time.monotonic() - start) * 1000, 1)
        logger.debug(
            "health_check_passed",
            extra={"provider": chat.current_provider, "duration_ms": duration_ms},
        )
        return HealthCheckResult.healthy(
            "AI service is healthy",
            provider=chat.current_provider,
            duration_ms=duration_ms,
        )
