"""
================================================================================
Form Filler
================================================================================

Writes a value into a resolved field with a technique matching the UI
paradigm:

    - Standard: click, clear, jitter, type character by character
    - Framework-aware (React/Vue): multi-way clear, typing, synthetic
      input/change/blur events, read-back with one repair pass

Values are never logged; only field roles are.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Page

from ..models import FieldHandle, StrategyKind
from .delays import FOCUS_DELAY, PRE_TYPE_DELAY, DelayProvider


FRAMEWORK_EVENTS = ("input", "change", "blur")


class FormFiller:
    """
    Field filler with a verify-and-repair step for reactive UIs.

    Usage:
        >>> filler = FormFiller(DelayProvider(enabled=False))
        >>> await filler.fill(page, handle, "demo_user", StrategyKind.FORM)
    """

    def __init__(self, delays: Optional[DelayProvider] = None, log=None):
        self.delays = delays or DelayProvider()
        self.log = log or logger.bind(component="FormFiller")

    async def fill(
        self,
        page: Page,
        field: FieldHandle,
        value: str,
        strategy: StrategyKind,
    ) -> None:
        """
        Fill ``field`` with ``value``.

        Args:
            page: Page owning the field (used for jitter timers)
            field: Resolved field handle
            value: Value to enter
            strategy: Active strategy; React/Vue use the framework-aware path

        Raises:
            playwright Error: On unrecoverable driver failure
        """
        with allure.step(f"Fill {field.role.value} field"):
            if StrategyKind(strategy).is_reactive:
                await self._fill_framework_aware(page, field, value)
            else:
                await self._fill_standard(page, field, value)
            self.log.info(f"✅ {field.role.value} field filled")

    async def _fill_standard(self, page: Page, field: FieldHandle, value: str) -> None:
        element = field.element
        await element.click()
        await element.fill("")
        await self.delays.sleep(page, *PRE_TYPE_DELAY)
        await element.type(value, delay=self.delays.keystroke_delay())

    async def _fill_framework_aware(self, page: Page, field: FieldHandle, value: str) -> None:
        element = field.element
        await element.click()
        await self.delays.sleep(page, *FOCUS_DELAY)

        # Framework state can diverge from the DOM value; clear every way
        await element.select_text()
        await element.press("Delete")
        await element.press("Backspace")
        await element.evaluate("el => { el.value = ''; }")
        await element.fill("")
        await self.delays.sleep(page, *FOCUS_DELAY)

        await element.type(value, delay=self.delays.keystroke_delay())
        for event in FRAMEWORK_EVENTS:
            await element.dispatch_event(event)

        actual = await element.input_value()
        if actual != value:
            # Single repair pass; the result is accepted as-is
            self.log.warning(
                f"⚠️ {field.role.value} value mismatch after typing, forcing value"
            )
            await element.fill(value)
            await element.dispatch_event("input")


__all__ = [
    "FormFiller",
    "FRAMEWORK_EVENTS",
]
