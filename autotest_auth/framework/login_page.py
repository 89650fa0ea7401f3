"""
================================================================================
Login Page Locator
================================================================================

Gets the page onto a login form before field resolution starts.

Features:
    - Navigation to a configured login URL
    - Discovery through login links, then common login paths
    - CSRF token presence check (the value is never read)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config_loader import AuthConfig
from .selector_resolver import ensure_page_open, query_first
from .selectors import COMMON_LOGIN_PATHS, CSRF_SELECTORS, LOGIN_LINK_SELECTORS, PASSWORD_PRESENCE_SELECTORS


class LoginPageLocator:
    """
    Navigation helpers used by interactive strategies.

    Usage:
        >>> locator = LoginPageLocator()
        >>> await locator.open_login_url(page, config)
        >>> await locator.discover(page, config)
        >>> await locator.has_csrf_token(page)
        False
    """

    def __init__(self, log=None):
        self.log = log or logger.bind(component="LoginPageLocator")

    async def open_login_url(self, page: Page, config: AuthConfig) -> bool:
        """
        Navigate to the configured login URL unless already there.

        Returns:
            True if a navigation happened
        """
        login_url = config.resolve_login_url(page.url)
        if not login_url:
            return False
        path = urlsplit(login_url).path or login_url
        if login_url in page.url or (path != "/" and path in page.url):
            return False

        self.log.info(f"🌐 Navigating to login URL: {login_url}")
        await page.goto(login_url, wait_until="domcontentloaded", timeout=config.timing.navigation_timeout_ms)
        return True

    async def has_password_field(self, page: Page) -> bool:
        return await query_first(page, PASSWORD_PRESENCE_SELECTORS) is not None

    async def discover(self, page: Page, config: AuthConfig) -> Optional[str]:
        """
        Try to reach a page with a password field.

        Follows the first visible login link, then tries the common login
        paths of the current origin. Never raises on a miss.

        Returns:
            How the login form was reached ("present", "link", a path), or None
        """
        if await self.has_password_field(page):
            return "present"

        link = await query_first(page, LOGIN_LINK_SELECTORS)
        if link is not None:
            try:
                await link.click()
                await page.wait_for_load_state("domcontentloaded", timeout=config.timing.navigation_timeout_ms)
                if await self.has_password_field(page):
                    self.log.info("✅ Login form reached through login link")
                    return "link"
            except PlaywrightError as e:
                ensure_page_open(page)
                self.log.debug(f"Login link navigation failed: {str(e)[:80]}")

        parts = urlsplit(config.target_url or page.url)
        if not parts.scheme or not parts.netloc:
            return None
        origin = f"{parts.scheme}://{parts.netloc}"

        for path in COMMON_LOGIN_PATHS:
            try:
                await page.goto(origin + path, wait_until="domcontentloaded", timeout=config.timing.navigation_timeout_ms)
            except PlaywrightError as e:
                ensure_page_open(page)
                self.log.debug(f"Common login path {path} failed: {str(e)[:80]}")
                continue
            if await self.has_password_field(page):
                self.log.info(f"✅ Login form found at {path}")
                return path

        self.log.warning("⚠️ Login page discovery found no password field")
        return None

    async def has_csrf_token(self, page: Page) -> bool:
        """Whether a CSRF token input or meta tag is present."""
        found = await query_first(page, CSRF_SELECTORS, visible_only=False) is not None
        if found:
            self.log.debug("CSRF token present on login form")
        return found


__all__ = [
    "LoginPageLocator",
]
