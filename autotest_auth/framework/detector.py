"""
================================================================================
Strategy Detector
================================================================================

Chooses the login strategy for the current page.

Detection order:
    1. Explicit strategy (configured or override) is returned untouched
    2. React / Vue fingerprint + password field -> react / vue
    3. Password + username field -> form
    4. Basic auth enabled -> basic
    5. Token configured -> token
    6. Default -> form

Detection never raises; driver errors fall back to ``form``.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Dict, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import Page

from ..config_loader import AuthConfig
from ..models import FieldRole, StrategyKind
from .selector_resolver import query_first
from .selectors import DEFAULT_SELECTORS, PASSWORD_PRESENCE_SELECTORS


FINGERPRINT_SCRIPT = """() => ({
    react: !!(window.React
        || window.__REACT_DEVTOOLS_GLOBAL_HOOK__
        || document.querySelector('[data-reactroot]')
        || document.querySelector('div#root')),
    vue: !!(window.Vue
        || window.__VUE__
        || document.querySelector('[data-v-app]')
        || document.querySelector('div#app'))
})"""

READY_SCRIPTS: Dict[Optional[StrategyKind], str] = {
    None: """() => document.readyState === 'complete'
        || !!(window.React || window.__REACT_DEVTOOLS_GLOBAL_HOOK__ || window.Vue || window.__VUE__)""",
    StrategyKind.REACT: """() => !!(window.React
        || document.querySelector('[data-reactroot]')
        || (document.querySelector('#root') && document.querySelector('#root').children.length > 0))""",
    StrategyKind.VUE: """() => !!(window.Vue
        || window.__VUE__
        || document.querySelector('[data-v-app]')
        || (document.querySelector('#app') && document.querySelector('#app').children.length > 0))""",
}


async def wait_for_framework(
    page: Page,
    kind: Optional[StrategyKind] = None,
    timeout_ms: int = 10000,
    log=None,
) -> bool:
    """
    Bounded wait until the page's UI framework looks ready.

    Args:
        page: Playwright page
        kind: REACT / VUE for a framework-specific check, None for any
        timeout_ms: Upper bound of the wait

    Returns:
        True if the readiness condition was met, False on timeout
    """
    log = log or logger.bind(component="StrategyDetector")
    script = READY_SCRIPTS.get(kind, READY_SCRIPTS[None])
    try:
        await page.wait_for_function(script, timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        log.debug(f"Framework readiness wait timed out after {timeout_ms}ms")
        return False


class StrategyDetector:
    """
    Login strategy detection from page fingerprints and configuration.

    Usage:
        >>> detector = StrategyDetector()
        >>> kind = await detector.detect(page, config)
    """

    def __init__(self, log=None):
        self.log = log or logger.bind(component="StrategyDetector")

    async def detect(
        self,
        page: Page,
        config: AuthConfig,
        override: Optional[StrategyKind] = None,
    ) -> StrategyKind:
        """
        Detect the strategy for ``page``.

        Args:
            page: Playwright page
            config: Authentication configuration
            override: Candidate forced by the orchestrator on a retry

        Returns:
            The chosen StrategyKind
        """
        explicit = override or config.strategy
        if explicit is not None:
            self.log.info(f"Using explicit strategy: {explicit.value}")
            return explicit

        with allure.step("Detect authentication strategy"):
            try:
                kind = await self._inspect(page, config)
            except PlaywrightError as e:
                self.log.warning(f"⚠️ Strategy detection failed, defaulting to form: {str(e)[:80]}")
                kind = StrategyKind.FORM
            self.log.info(f"🔍 Detected authentication strategy: {kind.value}")
            return kind

    async def _inspect(self, page: Page, config: AuthConfig) -> StrategyKind:
        await wait_for_framework(page, None, config.timing.framework_ready_timeout_ms, log=self.log)

        fingerprint = await page.evaluate(FINGERPRINT_SCRIPT) or {}
        has_password = await query_first(page, PASSWORD_PRESENCE_SELECTORS) is not None

        if has_password and fingerprint.get("react"):
            return StrategyKind.REACT
        if has_password and fingerprint.get("vue"):
            return StrategyKind.VUE

        if has_password and await query_first(page, DEFAULT_SELECTORS[FieldRole.USERNAME]) is not None:
            return StrategyKind.FORM
        if config.basic_auth.enabled:
            return StrategyKind.BASIC
        if config.has_token:
            return StrategyKind.TOKEN
        return StrategyKind.FORM


__all__ = [
    "StrategyDetector",
    "wait_for_framework",
    "FINGERPRINT_SCRIPT",
]
