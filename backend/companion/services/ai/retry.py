"""Bounded retries with differentiated backoff for remote model calls."""
from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional, TypeVar

from companion.core.config import Settings
from companion.observability.metrics import log_metric
from companion.services.ai.errors import AuthExpired, RateLimited

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_MARKERS = ("resource_exhausted", "quota", "rate limit", "too many requests")
AUTH_MARKERS = (
    "entity was not found",
    "entity not found",
    "api_key_invalid",
    "invalid api key",
    "incorrect api key",
)


class FailureClass(str, Enum):
    AUTH_EXPIRED = "auth_expired"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"


def classify_failure(exc: BaseException) -> FailureClass:
    """Classify an attempt failure from its type, HTTP status and message."""
    if isinstance(exc, AuthExpired):
        return FailureClass.AUTH_EXPIRED
    if isinstance(exc, RateLimited):
        return FailureClass.RATE_LIMITED

    status_code = getattr(exc, "status_code", None)
    if status_code == 429:
        return FailureClass.RATE_LIMITED
    if status_code == 401:
        return FailureClass.AUTH_EXPIRED

    message = str(exc).lower()
    if any(marker in message for marker in AUTH_MARKERS):
        return FailureClass.AUTH_EXPIRED
    if "429" in message or any(marker in message for marker in RATE_LIMIT_MARKERS):
        return FailureClass.RATE_LIMITED
    return FailureClass.TRANSIENT


class RetryPolicy:
    """
    Run an attempt function up to ``max_attempts`` times.

    Rate-limited attempts wait ``initial_backoff * 2 ** attempt_index``; other failures
    wait ``transient_delay``. A rejected credential triggers ``refresh_credentials``
    once per run and is retried immediately without using up an attempt. The attempt
    function is expected to build its remote client from the current credential every
    time it is called.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 4,
        initial_backoff: float = 2.0,
        transient_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        refresh_credentials: Optional[Callable[[], None]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self.transient_delay = transient_delay
        self.sleep = sleep
        self.refresh_credentials = refresh_credentials

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        refresh_credentials: Optional[Callable[[], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "RetryPolicy":
        return cls(
            max_attempts=settings.ai_max_attempts,
            initial_backoff=settings.ai_initial_backoff_seconds,
            transient_delay=settings.ai_transient_delay_seconds,
            sleep=sleep,
            refresh_credentials=refresh_credentials,
        )

    def delay_for(self, failure: FailureClass, attempt_index: int) -> float:
        if failure is FailureClass.RATE_LIMITED:
            return self.initial_backoff * (2 ** attempt_index)
        return self.transient_delay

    def run(self, attempt: Callable[[], T], *, operation: str = "ai.call") -> T:
        attempt_index = 0
        refreshed = False

        while True:
            try:
                result = attempt()
            except Exception as exc:
                failure = classify_failure(exc)

                if failure is FailureClass.AUTH_EXPIRED:
                    if self.refresh_credentials is None or refreshed:
                        logger.error("%s: credential rejected and cannot be refreshed: %s", operation, exc)
                        raise AuthExpired(f"Credential rejected during {operation}") from exc
                    refreshed = True
                    logger.warning("%s: credential rejected, refreshing before retry", operation)
                    log_metric("ai.credential.refresh", 1, {"operation": operation})
                    try:
                        self.refresh_credentials()
                    except Exception as refresh_exc:
                        raise AuthExpired(f"Credential refresh failed during {operation}") from refresh_exc
                    continue

                if attempt_index >= self.max_attempts - 1:
                    logger.error(
                        "%s: giving up after %s attempts (%s): %s",
                        operation,
                        attempt_index + 1,
                        failure.value,
                        exc,
                    )
                    if failure is FailureClass.RATE_LIMITED:
                        raise RateLimited(f"Rate limited during {operation}") from exc
                    raise

                delay = self.delay_for(failure, attempt_index)
                logger.warning(
                    "%s: attempt %s/%s failed (%s), retrying in %.2fs: %s",
                    operation,
                    attempt_index + 1,
                    self.max_attempts,
                    failure.value,
                    delay,
                    exc,
                )
                log_metric("ai.retry", 1, {"operation": operation, "failure": failure.value, "attempt": attempt_index + 1})
                self.sleep(delay)
                attempt_index += 1
                continue

            if attempt_index or refreshed:
                logger.info("%s: succeeded after %s attempt(s)", operation, attempt_index + 1)
            return result
