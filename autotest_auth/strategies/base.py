"""
Base class for login strategies.

A strategy has exactly one capability: ``execute_login(page, config)``,
which always returns an AuthResult for target-application outcomes and
only raises on driver failure.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from playwright.async_api import Page

from ..config_loader import AuthConfig
from ..framework.delays import DelayProvider
from ..models import AuthResult, StrategyKind


class LoginStrategy:
    """
    One login paradigm.

    Subclasses set ``kind`` and implement ``execute_login``.
    """

    kind: StrategyKind = StrategyKind.FORM

    def __init__(self, delays: Optional[DelayProvider] = None, log=None):
        """
        Args:
            delays: Delay provider; built from ``config.timing.jitter`` when None
            log: Loguru logger (defaults to one bound to the strategy name)
        """
        self._delays = delays
        self.log = log or logger.bind(component=type(self).__name__)

    def delays_for(self, config: AuthConfig) -> DelayProvider:
        return self._delays or DelayProvider(enabled=config.timing.jitter)

    async def execute_login(self, page: Page, config: AuthConfig) -> AuthResult:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value})"


__all__ = ["LoginStrategy"]
