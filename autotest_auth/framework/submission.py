"""
================================================================================
Submission Dispatcher
================================================================================

Submits a login form through an ordered fallback chain and waits for the
page to settle.

Fallback chain (each tried only if the previous is unavailable or fails):
    1. Click the submit button (plain -> forced -> script click)
    2. Press Enter in the password field
    3. Call submit() on the first <form>

Settle signals (first one wins, bounded by a timeout):
    - Main-frame navigation followed by network idle
    - A non-GET login/auth response or any redirect status
    - The timeout itself (pure AJAX logins that never navigate)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, List, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import ElementHandle, Page, Response

from ..models import DriverError, FieldHandle, SubmissionUnavailableError
from .delays import CLICK_RETRY_DELAY, DelayProvider
from .selector_resolver import ensure_page_open


MAX_CLICK_ATTEMPTS = 3

DEFAULT_SETTLE_TIMEOUT_MS = 10000

AUTH_RESPONSE_PATTERN = re.compile(r"login|auth|signin|session|token", re.IGNORECASE)


def is_auth_response(response: Response) -> bool:
    """
    Response that signals a login round-trip finished.

    Auth-looking URLs only count for non-GET requests, so a ``login.js``
    chunk still loading does not end the wait; any redirect counts.
    """
    if 300 <= response.status < 400:
        return True
    return response.request.method != "GET" and bool(AUTH_RESPONSE_PATTERN.search(response.url))


class SubmissionDispatcher:
    """
    Form submission with a click/Enter/form.submit() fallback chain.

    Usage:
        >>> dispatcher = SubmissionDispatcher(DelayProvider(enabled=False))
        >>> method = await dispatcher.submit(page, submit_handle, password_handle)
        >>> method
        'button_click'
    """

    def __init__(
        self,
        delays: Optional[DelayProvider] = None,
        settle_timeout_ms: int = DEFAULT_SETTLE_TIMEOUT_MS,
        log=None,
    ):
        """
        Args:
            delays: Delay provider for waits between click escalations
            settle_timeout_ms: Upper bound of the post-submit settle race
            log: Loguru logger (defaults to one bound to this component)
        """
        self.delays = delays or DelayProvider()
        self.settle_timeout_ms = settle_timeout_ms
        self.log = log or logger.bind(component="SubmissionDispatcher")

    async def submit(
        self,
        page: Page,
        submit_field: Optional[FieldHandle],
        password_field: Optional[FieldHandle],
    ) -> str:
        """
        Submit the login form.

        Args:
            page: Playwright page
            submit_field: Resolved submit button, if any
            password_field: Resolved password field, if any

        Returns:
            Method used: "button_click", "enter_key" or "form_submit"

        Raises:
            SubmissionUnavailableError: If no method is available or all failed
            DriverError: If the page is closed
        """
        with allure.step("Submit login form"):
            # Armed before dispatch so a fast navigation is not missed
            waiters = self._arm_settle_signals(page)
            try:
                method = await self._dispatch(page, submit_field, password_field)
            except BaseException:
                await self._cancel(waiters)
                raise

            await self._wait_for_settle(waiters)
            return method

    # =========================================================================
    # Fallback Chain
    # =========================================================================

    async def _dispatch(
        self,
        page: Page,
        submit_field: Optional[FieldHandle],
        password_field: Optional[FieldHandle],
    ) -> str:
        errors: List[str] = []

        if submit_field is not None:
            try:
                await self.click_with_retry(page, submit_field.element)
                self.log.info(f"✅ Form submitted with submit button: {submit_field.selector}")
                return "button_click"
            except PlaywrightError as e:
                ensure_page_open(page)
                errors.append(f"button_click: {str(e)[:80]}")
                self.log.warning(f"⚠️ Submit button click failed: {str(e)[:80]}")

        if password_field is not None:
            try:
                await password_field.element.press("Enter")
                self.log.info("✅ Form submitted with Enter key")
                return "enter_key"
            except PlaywrightError as e:
                ensure_page_open(page)
                errors.append(f"enter_key: {str(e)[:80]}")
                self.log.warning(f"⚠️ Enter key submission failed: {str(e)[:80]}")

        try:
            form = await page.query_selector("form")
            if form is not None:
                await form.evaluate("f => f.submit()")
                self.log.info("✅ Form submitted with form.submit()")
                return "form_submit"
            errors.append("form_submit: no <form> element")
        except PlaywrightError as e:
            ensure_page_open(page)
            errors.append(f"form_submit: {str(e)[:80]}")
            self.log.warning(f"⚠️ form.submit() failed: {str(e)[:80]}")

        message = "Unable to submit login form with any available method"
        self.log.error(f"❌ {message}: {'; '.join(errors)}")
        raise SubmissionUnavailableError(message)

    async def click_with_retry(
        self,
        page: Page,
        element: ElementHandle,
        max_attempts: int = MAX_CLICK_ATTEMPTS,
    ) -> None:
        """
        Click with escalation: plain click, forced click, script click.

        Raises:
            playwright Error: The last failure when every attempt failed
        """
        for attempt in range(max_attempts):
            try:
                await element.scroll_into_view_if_needed()
                await element.wait_for_element_state("visible", timeout=5000)
                if attempt == 0:
                    await element.click()
                elif attempt == 1:
                    await element.click(force=True)
                else:
                    await element.evaluate("el => el.click()")
                return
            except PlaywrightError as e:
                ensure_page_open(page)
                self.log.warning(f"Click attempt {attempt + 1}/{max_attempts} failed: {str(e)[:80]}")
                if attempt == max_attempts - 1:
                    raise
                await self.delays.sleep(page, *CLICK_RETRY_DELAY)

    # =========================================================================
    # Settle Race
    # =========================================================================

    def _arm_settle_signals(self, page: Page) -> List["asyncio.Task[Any]"]:
        return [
            asyncio.ensure_future(self._navigation_settled(page)),
            asyncio.ensure_future(self._auth_response(page)),
        ]

    async def _navigation_settled(self, page: Page) -> Optional[str]:
        try:
            await page.wait_for_event(
                "framenavigated",
                predicate=lambda frame: frame == page.main_frame,
                timeout=self.settle_timeout_ms,
            )
            await page.wait_for_load_state("networkidle", timeout=self.settle_timeout_ms)
        except PlaywrightTimeoutError:
            return None
        return "navigation"

    async def _auth_response(self, page: Page) -> Optional[str]:
        try:
            response = await page.wait_for_event(
                "response",
                predicate=is_auth_response,
                timeout=self.settle_timeout_ms,
            )
        except PlaywrightTimeoutError:
            return None
        return f"response {response.status} {response.url}"

    async def _wait_for_settle(self, waiters: List["asyncio.Task[Any]"]) -> Optional[str]:
        done, pending = await asyncio.wait(
            waiters,
            timeout=self.settle_timeout_ms / 1000,
            return_when=asyncio.FIRST_COMPLETED,
        )
        await self._cancel(list(pending))

        for task in done:
            error = task.exception()
            if error is not None:
                raise DriverError(f"Driver failed while waiting for submission: {error}") from error

        signals = [task.result() for task in done if task.result()]
        if signals:
            self.log.debug(f"Submission settled: {signals[0]}")
            return signals[0]
        self.log.info("Timeout waiting for submission response, continuing to verification...")
        return None

    @staticmethod
    async def _cancel(tasks: List["asyncio.Task[Any]"]) -> None:
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = [
    "SubmissionDispatcher",
    "MAX_CLICK_ATTEMPTS",
    "is_auth_response",
]
