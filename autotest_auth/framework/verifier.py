"""
================================================================================
Login Verifier
================================================================================

Decides whether a submitted login succeeded by probing the resulting page.

Positive probes (first true wins):
    1. Configured success selectors
    2. Logged-in UI markers (user menu, dashboard)
    3. No visible password field left on the page
    4. Logout affordances

Error probes (only when no positive probe matched):
    1. Configured error selectors
    2. Common alert / error containers with non-empty visible text

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .delays import DelayProvider
from .selector_resolver import ensure_page_open, query_first
from .selectors import PASSWORD_PRESENCE_SELECTORS


UNKNOWN_FAILURE = "Login failed - unknown reason"

USER_MENU_SELECTORS = [
    ".user-menu",
    ".profile-menu",
    ".dashboard",
    "#dashboard",
    "[data-testid='user-menu']",
]

LOGOUT_SELECTORS = [
    "a[href*='logout']",
    ".logout",
    "[data-testid*='logout']",
    "a:has-text('Logout')",
    "button:has-text('Logout')",
    "a:has-text('Log out')",
    "button:has-text('Sign out')",
]

ERROR_SELECTORS = [
    ".alert-danger",
    ".alert-error",
    ".error-message",
    ".login-error",
    ".form-error",
    ".invalid-feedback",
    "[data-testid*='error']",
    ".notification.is-danger",
    "[role='alert']",
]


@dataclass
class Verification:
    """Outcome of one verification run."""
    success: bool
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class LoginVerifier:
    """
    Post-submit login verification.

    Usage:
        >>> verifier = LoginVerifier(success_selectors=[".account-header"])
        >>> verification = await verifier.verify(page)
        >>> verification.success
        True
    """

    def __init__(
        self,
        success_selectors: Sequence[str] = (),
        error_selectors: Sequence[str] = (),
        settle_ms: int = 2000,
        delays: Optional[DelayProvider] = None,
        log=None,
    ):
        """
        Args:
            success_selectors: App-specific logged-in markers, probed first
            error_selectors: App-specific error containers, probed first
            settle_ms: Pause before probing
            delays: Delay provider (a disabled one skips the pause)
            log: Loguru logger (defaults to one bound to this component)
        """
        self.success_selectors = list(success_selectors)
        self.error_selectors = list(error_selectors)
        self.settle_ms = settle_ms
        self.delays = delays or DelayProvider()
        self.log = log or logger.bind(component="LoginVerifier")

    async def verify(self, page: Page) -> Verification:
        """
        Probe the page for login success or a visible error.

        Returns:
            Verification with ``success`` and, on failure, the error text

        Raises:
            DriverError: If the page is closed
        """
        with allure.step("Verify login"):
            await self.delays.sleep_fixed(page, self.settle_ms)
            ensure_page_open(page)

            indicator = await self._positive_indicator(page)
            if indicator is not None:
                self.log.info(f"✅ Login verified: {indicator[0]}")
                return Verification(success=True, details={"indicator": indicator[0], "selector": indicator[1]})

            message = await self._error_message(page)
            if message is not None:
                self.log.warning(f"❌ Login failed with visible error: {message[0]}")
                return Verification(success=False, error=message[0], details={"error_selector": message[1]})

            self.log.warning(f"⚠️ {UNKNOWN_FAILURE}")
            return Verification(success=False, error=UNKNOWN_FAILURE, details={"ambiguous": True})

    async def existing_session(self, page: Page) -> Optional[Tuple[str, str]]:
        """
        Look for an already logged-in session before any login attempt.

        Stricter than ``verify``: a page without a password field only counts
        when it also shows a success selector, a user menu or a logout link.

        Returns:
            ``(indicator, selector)`` or None
        """
        ensure_page_open(page)
        if await query_first(page, PASSWORD_PRESENCE_SELECTORS) is not None:
            return None
        checks: List[Tuple[str, Sequence[str]]] = [
            ("success_selector", self.success_selectors),
            ("user_menu", USER_MENU_SELECTORS),
            ("logout_link", LOGOUT_SELECTORS),
        ]
        for name, selectors in checks:
            selector = await self._first_visible(page, selectors)
            if selector is not None:
                return name, selector
        return None

    async def _positive_indicator(self, page: Page) -> Optional[Tuple[str, Optional[str]]]:
        checks: List[Tuple[str, Sequence[str]]] = [
            ("success_selector", self.success_selectors),
            ("user_menu", USER_MENU_SELECTORS),
        ]
        for name, selectors in checks:
            selector = await self._first_visible(page, selectors)
            if selector is not None:
                return name, selector

        if await query_first(page, PASSWORD_PRESENCE_SELECTORS) is None:
            return "no_password_field", None

        selector = await self._first_visible(page, LOGOUT_SELECTORS)
        if selector is not None:
            return "logout_link", selector
        return None

    async def _first_visible(self, page: Page, selectors: Sequence[str]) -> Optional[str]:
        for selector in selectors:
            if await query_first(page, [selector]) is not None:
                return selector
        return None

    async def _error_message(self, page: Page) -> Optional[Tuple[str, str]]:
        for selector in [*self.error_selectors, *ERROR_SELECTORS]:
            try:
                element = await page.query_selector(selector)
                if element is None or not await element.is_visible():
                    continue
                text = (await element.text_content() or "").strip()
            except PlaywrightError:
                ensure_page_open(page)
                continue
            if text:
                return text, selector
        return None


__all__ = [
    "LoginVerifier",
    "Verification",
    "UNKNOWN_FAILURE",
    "USER_MENU_SELECTORS",
    "LOGOUT_SELECTORS",
    "ERROR_SELECTORS",
]
