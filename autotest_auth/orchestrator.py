"""
================================================================================
Authentication Orchestrator
================================================================================

Single entry point of the engine: ``authenticate(page, config) -> AuthResult``.

State machine:
    DETECT -> RESOLVE_FIELDS -> FILL -> SUBMIT -> VERIFY
           -> SUCCESS | RETRY_ALTERNATE_STRATEGY | FAIL

    A page that already shows a logged-in session short-circuits to
    VERIFY -> SUCCESS without running any strategy.

Retry rules:
    - An auto-detected strategy that fails is followed by each untried
      candidate of the fallback order, each from a fresh navigation
    - An explicitly configured strategy is never retried
    - The failure reported is the primary attempt's; every attempt is
      listed in ``details["attempts"]``

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .config_loader import AuthConfig
from .framework.detector import StrategyDetector
from .framework.diagnostics import PRE_NAVIGATION, capture_checkpoint
from .framework.verifier import LoginVerifier
from .models import AuthResult, AuthState, DriverError, StrategyKind
from .strategies import LoginStrategy, build_registry


class AuthenticationOrchestrator:
    """
    Drives detection, strategy execution and alternate-strategy retries.

    Holds no state between calls; one instance can authenticate any number
    of pages sequentially.

    Usage:
        >>> orchestrator = AuthenticationOrchestrator()
        >>> result = await orchestrator.authenticate(page, load_auth_config())
        >>> result.success, result.strategy
        (True, <StrategyKind.FORM: 'form'>)
    """

    def __init__(
        self,
        registry: Optional[Mapping[StrategyKind, LoginStrategy]] = None,
        detector: Optional[StrategyDetector] = None,
        log=None,
    ):
        """
        Args:
            registry: Strategy per kind (defaults to ``build_registry()``)
            detector: Strategy detector
            log: Loguru logger (defaults to one bound to this component)
        """
        self.log = log or logger.bind(component="AuthenticationOrchestrator")
        self.registry = dict(registry) if registry is not None else build_registry(log=log)
        self.detector = detector or StrategyDetector(log=log)

    async def authenticate(self, page: Page, config: AuthConfig) -> AuthResult:
        """
        Log in to ``config.target_url`` on ``page``.

        Returns:
            AuthResult for every target-application outcome

        Raises:
            DriverError: If the browser or page failed (including a closed page)
        """
        with allure.step(f"Authenticate against {config.target_url or 'current page'}"):
            try:
                return await self._run(page, config)
            except PlaywrightError as e:
                self.log.error(f"❌ Browser automation failed: {e}")
                raise DriverError(f"Browser automation failed: {e}") from e

    async def _run(self, page: Page, config: AuthConfig) -> AuthResult:
        trace: List[str] = []
        attempts: List[Dict[str, Any]] = []

        await capture_checkpoint(page, PRE_NAVIGATION, config, log=self.log)
        await self._navigate_to_target(page, config)

        if config.check_existing_session:
            session = await LoginVerifier(config.success_selectors, log=self.log).existing_session(page)
            if session is not None:
                kind = config.strategy or StrategyKind.FORM
                self.log.info(f"✅ Already authenticated ({session[0]}: {session[1]}), skipping login")
                trace.append(AuthState.VERIFY.value)
                result = AuthResult.succeeded(
                    kind, already_authenticated=True, indicator=session[0], selector=session[1]
                )
                return self._finish(result, trace, attempts)

        trace.append(AuthState.DETECT.value)
        primary_kind = await self.detector.detect(page, config)
        primary = await self._attempt(page, config, primary_kind, trace, attempts)
        if primary.success:
            return self._finish(primary, trace, attempts)

        if config.strategy is not None:
            self.log.info(f"Strategy '{config.strategy.value}' was configured explicitly, not retrying")
            return self._finish(primary, trace, attempts)

        tried = {primary_kind}
        for candidate in config.fallback_strategies:
            if candidate in tried:
                continue
            tried.add(candidate)

            trace.append(AuthState.RETRY_ALTERNATE_STRATEGY.value)
            self.log.info(f"🔄 Retrying login with alternate strategy: {candidate.value}")
            await self._navigate_to_target(page, config, force=True)

            trace.append(AuthState.DETECT.value)
            kind = await self.detector.detect(page, config, override=candidate)
            result = await self._attempt(page, config, kind, trace, attempts)
            if result.success:
                return self._finish(result, trace, attempts)

        return self._finish(primary, trace, attempts)

    async def _attempt(
        self,
        page: Page,
        config: AuthConfig,
        kind: StrategyKind,
        trace: List[str],
        attempts: List[Dict[str, Any]],
    ) -> AuthResult:
        strategy = self.registry.get(kind)
        if strategy is None:
            result = AuthResult.failed(kind, f"No strategy registered for '{kind.value}'")
        else:
            self.log.info(f"🔐 Attempt {len(attempts) + 1}: {kind.value} login")
            result = await strategy.execute_login(page, config)

        trace.extend(result.details.get("states", []))
        attempts.append({"strategy": kind.value, "success": result.success, "error": result.error})
        if not result.success:
            self.log.warning(f"⚠️ {kind.value} login failed: {result.error}")
        return result

    def _finish(self, result: AuthResult, trace: List[str], attempts: List[Dict[str, Any]]) -> AuthResult:
        trace.append(AuthState.SUCCESS.value if result.success else AuthState.FAIL.value)
        details = {**result.details, "states": list(trace), "attempts": list(attempts)}
        if result.success:
            self.log.info(f"✅ Authentication succeeded with {result.strategy.value} strategy")
            return AuthResult.succeeded(result.strategy, **details)
        self.log.error(f"❌ Authentication failed ({result.strategy.value}): {result.error}")
        return AuthResult.failed(result.strategy, result.error or "Authentication failed", **details)

    async def _navigate_to_target(self, page: Page, config: AuthConfig, force: bool = False) -> None:
        if not config.target_url:
            return
        if not force and page.url.rstrip("/") == config.target_url.rstrip("/"):
            return
        self.log.info(f"🌐 Navigating to {config.target_url}")
        await page.goto(
            config.target_url,
            wait_until="domcontentloaded",
            timeout=config.timing.navigation_timeout_ms,
        )


async def authenticate(page: Page, config: AuthConfig) -> AuthResult:
    """Authenticate with a default orchestrator."""
    return await AuthenticationOrchestrator().authenticate(page, config)


__all__ = [
    "AuthenticationOrchestrator",
    "authenticate",
]
