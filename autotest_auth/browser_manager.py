"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle for running the authentication engine outside a test
harness.

Features:
    - Playwright startup / shutdown as an async context manager
    - Isolated contexts (HTTP credentials when basic auth is enabled)
    - Authentication state persistence after a successful login
    - ``authenticate_target`` one-call entry point

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from .config_loader import AuthConfig
from .models import AuthResult
from .orchestrator import AuthenticationOrchestrator


# Storage state file for authentication persistence
AUTH_STATE_FILE = Path(".auth_state.json")


class BrowserManager:
    """
    Manages the browser used for authentication runs.

    Usage:
        async with BrowserManager(headless=True) as manager:
            page = await manager.new_page(config)
            result = await AuthenticationOrchestrator().authenticate(page, config)
            if result.success:
                await manager.save_auth_state(page.context)
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--ignore-certificate-errors",
            "--disable-blink-features=AutomationControlled",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        auth_state_file: Path = AUTH_STATE_FILE,
        log=None,
    ):
        """
        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
            auth_state_file: Where ``save_auth_state`` writes the storage state
            log: Loguru logger (defaults to one bound to this component)
        """
        self.headless = headless
        self.browser_type = browser_type
        self.auth_state_file = Path(auth_state_file)
        self.log = log or logger.bind(component="BrowserManager")

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch the browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {**self.DEFAULT_LAUNCH_OPTIONS, "headless": self.headless}
        if self.browser_type != "chromium":
            launch_options.pop("args")

        self._browser = await browser_launcher.launch(**launch_options)
        self.log.debug(f"Browser started: {self.browser_type} (headless={self.headless})")

    async def close(self) -> None:
        """Close all contexts, the browser and Playwright."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                self.log.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        self.log.debug("Browser closed")

    async def new_context(self, config: Optional[AuthConfig] = None, **options: Any) -> BrowserContext:
        """
        Create an isolated browser context.

        When ``config`` enables basic auth, the context answers HTTP
        authentication challenges with those credentials.
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        if config is not None and config.basic_auth.enabled:
            username = config.basic_auth.username or config.credentials.username
            password = config.basic_auth.password or config.credentials.password
            if username and password:
                context_options["http_credentials"] = {"username": username, "password": password}
                self.log.debug("Context created with HTTP credentials")

        context = await self._browser.new_context(**context_options)
        self._contexts.append(context)
        return context

    async def new_page(self, config: Optional[AuthConfig] = None, **context_options: Any) -> Page:
        """Create a page in a fresh context."""
        context = await self.new_context(config, **context_options)
        return await context.new_page()

    async def save_auth_state(self, context: BrowserContext) -> Path:
        """
        Save cookies and localStorage of ``context`` for later sessions.

        Returns:
            Path of the written storage state file
        """
        self.auth_state_file.parent.mkdir(parents=True, exist_ok=True)
        await context.storage_state(path=str(self.auth_state_file))
        self.log.info(f"Authentication state saved to: {self.auth_state_file}")
        return self.auth_state_file

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


# =============================================================================
# Convenience Functions
# =============================================================================

async def authenticate_target(
    config: AuthConfig,
    manager: Optional[BrowserManager] = None,
    save_state: bool = False,
    orchestrator: Optional[AuthenticationOrchestrator] = None,
) -> AuthResult:
    """
    Open a page, log in to ``config.target_url`` and return the verdict.

    Args:
        config: Authentication configuration
        manager: Running BrowserManager (a headless one is started if None)
        save_state: Save the storage state after a successful login
        orchestrator: Orchestrator to use (default one if None)

    Returns:
        AuthResult

    Raises:
        DriverError: If the browser failed during authentication
    """
    owns_manager = manager is None
    if manager is None:
        manager = BrowserManager(headless=True)
        await manager.start()

    try:
        page = await manager.new_page(config)
        result = await (orchestrator or AuthenticationOrchestrator()).authenticate(page, config)
        if result.success and save_state:
            await manager.save_auth_state(page.context)
        return result
    finally:
        if owns_manager:
            await manager.close()


__all__ = [
    "BrowserManager",
    "authenticate_target",
    "AUTH_STATE_FILE",
]
