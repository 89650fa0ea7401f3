"""
================================================================================
Delay Provider
================================================================================

Randomized (jittered) delays between automated actions.

Human-like timing avoids fixed automation signatures. Every delay goes
through a DelayProvider so tests can substitute ``DelayProvider(enabled=False)``
and run without any waiting.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import random
from typing import Optional

from playwright.async_api import Page

from ..models import RetryPolicy


# Pre-configured jitter windows (milliseconds)
PRE_TYPE_DELAY = (500, 1000)
KEYSTROKE_DELAY = (50, 150)
FOCUS_DELAY = (100, 300)
BETWEEN_FIELDS_DELAY = (500, 1000)
PRE_SUBMIT_DELAY = (1000, 2000)
CLICK_RETRY_DELAY = (500, 1000)


class DelayProvider:
    """
    Source of jittered delays.

    Usage:
        >>> delays = DelayProvider()
        >>> await delays.sleep(page, *PRE_TYPE_DELAY)
        >>> await element.type("abc", delay=delays.keystroke_delay())
    """

    def __init__(self, enabled: bool = True, rng: Optional[random.Random] = None):
        """
        Args:
            enabled: When False every delay is zero
            rng: Random source (seed it for reproducible timing)
        """
        self.enabled = enabled
        self._rng = rng or random.Random()

    def pick(self, min_ms: int, max_ms: int) -> int:
        """Random delay within ``[min_ms, max_ms]``, or 0 when disabled."""
        if not self.enabled or max_ms <= 0:
            return 0
        return self._rng.randint(min_ms, max_ms)

    def keystroke_delay(self) -> int:
        return self.pick(*KEYSTROKE_DELAY)

    async def sleep(self, page: Page, min_ms: int, max_ms: int) -> int:
        """
        Wait a random time through the page's own timer.

        Returns:
            The delay actually waited, in milliseconds
        """
        delay = self.pick(min_ms, max_ms)
        if delay:
            await page.wait_for_timeout(delay)
        return delay

    async def sleep_fixed(self, page: Page, delay_ms: int) -> None:
        """Wait a fixed time (skipped when disabled)."""
        if self.enabled and delay_ms > 0:
            await page.wait_for_timeout(delay_ms)

    async def backoff(self, page: Page, policy: RetryPolicy) -> int:
        """Wait between two resolution passes of ``policy``."""
        return await self.sleep(page, policy.min_delay_ms, policy.max_delay_ms)


__all__ = [
    "DelayProvider",
    "PRE_TYPE_DELAY",
    "KEYSTROKE_DELAY",
    "FOCUS_DELAY",
    "BETWEEN_FIELDS_DELAY",
    "PRE_SUBMIT_DELAY",
    "CLICK_RETRY_DELAY",
]
