from __future__ import annotations

import random

from pydantic import BaseModel, Field

# Statuses worth another attempt on an idempotent lookup.
TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


class RetryPolicy(BaseModel):
    """How often a service client re-sends a failed lookup.

    Only GET and HEAD are ever retried. Each service picks its own policy:
    registry, managed-asset and asset-host lookups use ``for_lookups()``,
    while the generation client uses ``no_retries()`` because its poll loop
    already repeats status checks on a fixed schedule.

    Args:
        attempts: Total tries per request, including the first
        backoff_s: Delay before the second try, doubled for each later one
        max_backoff_s: Upper bound on a single delay
    """

    model_config = {"frozen": True}

    attempts: int = Field(default=3, ge=1)
    backoff_s: float = Field(default=0.25, ge=0.0)
    max_backoff_s: float = Field(default=2.0, ge=0.0)

    @classmethod
    def for_lookups(cls) -> RetryPolicy:
        return cls()

    @classmethod
    def no_retries(cls) -> RetryPolicy:
        return cls(attempts=1, backoff_s=0.0, max_backoff_s=0.0)

    def should_retry(self, method: str, attempt: int, status_code: int | None) -> bool:
        """True when ``attempt`` (1-based) failed in a way worth repeating.

        ``status_code`` is None for transport failures, which always qualify.
        """
        if attempt >= self.attempts or method not in ("GET", "HEAD"):
            return False
        return status_code is None or status_code in TRANSIENT_STATUSES

    def delay_s(self, attempt: int, retry_after_s: float | None = None) -> float:
        if retry_after_s is not None:
            return min(retry_after_s, self.max_backoff_s)
        delay = min(self.max_backoff_s, self.backoff_s * 2 ** (attempt - 1))
        # +/-10% jitter.
        return delay * random.uniform(0.9, 1.1)
