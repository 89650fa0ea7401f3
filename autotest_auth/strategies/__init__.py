"""
Login strategy registry.

Maps every StrategyKind to the object that executes it.

Usage:
    from autotest_auth.strategies import build_registry

    registry = build_registry()
    result = await registry[StrategyKind.FORM].execute_login(page, config)
"""

from typing import Dict, Optional

from ..framework.delays import DelayProvider
from ..models import StrategyKind
from .base import LoginStrategy
from .http_auth import BasicAuthStrategy, OAuthStrategy, TokenAuthStrategy
from .interactive import (
    FormLoginStrategy,
    InteractiveLoginStrategy,
    ReactLoginStrategy,
    VueLoginStrategy,
)


STRATEGY_CLASSES = {
    StrategyKind.BASIC: BasicAuthStrategy,
    StrategyKind.FORM: FormLoginStrategy,
    StrategyKind.REACT: ReactLoginStrategy,
    StrategyKind.VUE: VueLoginStrategy,
    StrategyKind.TOKEN: TokenAuthStrategy,
    StrategyKind.OAUTH: OAuthStrategy,
}


def build_registry(delays: Optional[DelayProvider] = None, log=None) -> Dict[StrategyKind, LoginStrategy]:
    """Instantiate one strategy per kind, sharing ``delays`` and ``log``."""
    return {kind: cls(delays=delays, log=log) for kind, cls in STRATEGY_CLASSES.items()}


__all__ = [
    "LoginStrategy",
    "InteractiveLoginStrategy",
    "FormLoginStrategy",
    "ReactLoginStrategy",
    "VueLoginStrategy",
    "BasicAuthStrategy",
    "TokenAuthStrategy",
    "OAuthStrategy",
    "STRATEGY_CLASSES",
    "build_registry",
]
