"""
================================================================================
Interactive Login Strategies
================================================================================

Form-based logins driven through the page UI:

    - FormLoginStrategy:  classic server-rendered forms
    - ReactLoginStrategy: React SPAs (framework-aware filling)
    - VueLoginStrategy:   Vue SPAs (framework-aware filling)

Each attempt walks RESOLVE_FIELDS -> FILL -> SUBMIT -> VERIFY. A missing
required field or an impossible submission ends the attempt with a failed
AuthResult; driver failures propagate.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import allure
from playwright.async_api import Page

from ..config_loader import AuthConfig
from ..framework.delays import BETWEEN_FIELDS_DELAY, PRE_SUBMIT_DELAY, DelayProvider
from ..framework.detector import wait_for_framework
from ..framework.diagnostics import POST_FIELD_RESOLUTION, POST_FILL, capture_checkpoint
from ..framework.form_filler import FormFiller
from ..framework.login_page import LoginPageLocator
from ..framework.selector_resolver import ReadinessHook, SelectorResolver, ensure_page_open
from ..framework.selectors import role_selectors
from ..framework.submission import SubmissionDispatcher
from ..framework.verifier import LoginVerifier
from ..models import (
    AuthResult,
    AuthState,
    FieldHandle,
    FieldNotFoundError,
    FieldRole,
    StrategyKind,
    SubmissionUnavailableError,
)
from .base import LoginStrategy


class InteractiveLoginStrategy(LoginStrategy):
    """
    Shared flow of the form / React / Vue strategies.

    Usage:
        >>> strategy = FormLoginStrategy(delays=DelayProvider(enabled=False))
        >>> result = await strategy.execute_login(page, config)
        >>> result.details["states"]
        ['RESOLVE_FIELDS', 'FILL', 'SUBMIT', 'VERIFY']
    """

    def __init__(
        self,
        delays: Optional[DelayProvider] = None,
        log=None,
        locator: Optional[LoginPageLocator] = None,
    ):
        super().__init__(delays=delays, log=log)
        self.locator = locator or LoginPageLocator(log=self.log)

    async def execute_login(self, page: Page, config: AuthConfig) -> AuthResult:
        kind = self.kind
        states: List[str] = []
        details: Dict[str, Any] = {"states": states}

        if not config.credentials.complete:
            self.log.error(f"❌ Username or password not configured for {kind.value} login")
            return AuthResult.failed(kind, "Login credentials not provided", **details)

        delays = self.delays_for(config)
        resolver = SelectorResolver(delays, log=self.log)
        filler = FormFiller(delays, log=self.log)
        dispatcher = SubmissionDispatcher(delays, config.timing.settle_timeout_ms, log=self.log)
        verifier = LoginVerifier(
            config.success_selectors,
            config.error_selectors,
            settle_ms=config.timing.verify_settle_ms,
            delays=delays,
            log=self.log,
        )

        with allure.step(f"{kind.value} login"):
            try:
                await self._prepare_page(page, config, details)

                states.append(AuthState.RESOLVE_FIELDS.value)
                fields = await self._resolve_fields(page, config, resolver)
                details["fields"] = {
                    role.value: handle.selector for role, handle in fields.items() if handle is not None
                }
                await capture_checkpoint(page, POST_FIELD_RESOLUTION, config, log=self.log)

                states.append(AuthState.FILL.value)
                await filler.fill(page, fields[FieldRole.USERNAME], config.credentials.username, kind)
                await delays.sleep(page, *BETWEEN_FIELDS_DELAY)
                await filler.fill(page, fields[FieldRole.PASSWORD], config.credentials.password, kind)
                await capture_checkpoint(page, POST_FILL, config, log=self.log)

                states.append(AuthState.SUBMIT.value)
                await delays.sleep(page, *PRE_SUBMIT_DELAY)
                details["submission"] = await dispatcher.submit(
                    page, fields[FieldRole.SUBMIT], fields[FieldRole.PASSWORD]
                )
            except (FieldNotFoundError, SubmissionUnavailableError) as e:
                self.log.error(f"❌ {kind.value} login aborted: {e}")
                return AuthResult.failed(kind, str(e), **details)

            states.append(AuthState.VERIFY.value)
            verification = await verifier.verify(page)
            details.update(verification.details)
            if verification.success:
                return AuthResult.succeeded(kind, **details)
            return AuthResult.failed(kind, verification.error, **details)

    async def _prepare_page(self, page: Page, config: AuthConfig, details: Dict[str, Any]) -> None:
        ensure_page_open(page)
        await self.locator.open_login_url(page, config)
        if self.kind.is_reactive:
            await wait_for_framework(page, self.kind, config.timing.framework_ready_timeout_ms, log=self.log)
        if config.discover_login_page:
            details["login_page"] = await self.locator.discover(page, config)
        details["csrf_token_present"] = await self.locator.has_csrf_token(page)

    async def _resolve_fields(
        self,
        page: Page,
        config: AuthConfig,
        resolver: SelectorResolver,
    ) -> Dict[FieldRole, Optional[FieldHandle]]:
        hook: Optional[ReadinessHook] = None
        if self.kind.is_reactive:
            async def wait_ready() -> None:
                await wait_for_framework(page, self.kind, config.timing.framework_ready_timeout_ms, log=self.log)
            hook = wait_ready

        fields: Dict[FieldRole, Optional[FieldHandle]] = {}
        for role in FieldRole:
            selectors = role_selectors(role, self.kind, config.selectors)
            required = role is not FieldRole.SUBMIT
            handle = await resolver.resolve(
                page,
                selectors,
                required=required,
                policy=config.retry_policy(role),
                role=role,
                readiness_hook=hook,
            )
            if handle is None and required:
                raise FieldNotFoundError(role.value, len(selectors), self.kind.value)
            fields[role] = handle
        return fields


class FormLoginStrategy(InteractiveLoginStrategy):
    kind = StrategyKind.FORM


class ReactLoginStrategy(InteractiveLoginStrategy):
    kind = StrategyKind.REACT


class VueLoginStrategy(InteractiveLoginStrategy):
    kind = StrategyKind.VUE


__all__ = [
    "InteractiveLoginStrategy",
    "FormLoginStrategy",
    "ReactLoginStrategy",
    "VueLoginStrategy",
]
