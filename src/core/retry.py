"""
Bounded retries with exponential backoff for AI service calls.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from src.config.settings import Settings, get_settings
from src.core.errors import AIRequestRejected, InvocationExhausted, MalformedResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """How many times to try and how long to wait in between."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0, description="Seconds before the 2nd attempt")
    multiplier: float = Field(default=2.0, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RetryPolicy":
        settings = settings or get_settings()
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            multiplier=settings.retry_multiplier,
        )

    def delay_after(self, attempt: int) -> float:
        """Backoff after the given 0-based failed attempt."""
        return self.base_delay * self.multiplier ** attempt


class RetryableInvoker:
    """
    Runs a fallible async operation with bounded retries.

    Between attempt i and i+1 the caller is suspended for
    ``base_delay * multiplier ** i`` seconds (1s, 2s, 4s ... by default).
    Errors listed in ``give_up_on`` are raised immediately, since another
    attempt will not fix them.
    """

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        give_up_on: tuple[type[BaseException], ...] = (MalformedResponse, AIRequestRejected),
    ):
        self._sleep = sleep
        self.give_up_on = give_up_on

    async def invoke(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        name: str = "operation",
    ) -> T:
        """
        Execute ``operation`` until it succeeds or the policy is exhausted.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            policy: Retry policy
            name: Label used in log lines

        Returns:
            The first successful result

        Raises:
            InvocationExhausted: If every attempt failed
        """
        last_error: Exception | None = None

        for attempt in range(policy.max_attempts):
            try:
                return await operation()
            except self.give_up_on:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"{name} attempt {attempt + 1}/{policy.max_attempts} failed: {e}"
                )

            if attempt < policy.max_attempts - 1:
                await self._sleep(policy.delay_after(attempt))

        raise InvocationExhausted(policy.max_attempts, last_error) from last_error
