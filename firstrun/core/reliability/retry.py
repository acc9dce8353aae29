"""
Retry policy — fixed-delay retries for package installs.

Package sources are flaky: a download times out, a CDN serves a stale
manifest. Installs are retried a bounded number of times with a fixed
pause between consumed attempts. A content hash mismatch is handled
separately by the install action: the first one triggers a forced
redownload that does not count against the budget.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """How many consumed attempts an install gets, and the pause between them."""

    max_retries: int = 3
    retry_delay_seconds: float = 5
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must not be negative")

    def pause(self, attempt: int) -> None:
        """Sleep between consumed attempts (never after the last one)."""
        if attempt >= self.max_retries:
            return
        logger.debug(
            "Attempt %d/%d failed, retrying in %.1fs",
            attempt,
            self.max_retries,
            self.retry_delay_seconds,
        )
        self.sleep(self.retry_delay_seconds)

    def exhausted(self, attempt: int) -> bool:
        """Whether ``attempt`` consumed attempts use up the budget."""
        return attempt >= self.max_retries
