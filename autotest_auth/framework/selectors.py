"""
================================================================================
Selector Catalogs
================================================================================

Default candidate selectors per field role and per login paradigm.

Priority order inside each list:
    1. id / name attributes (most stable on classic forms)
    2. input types
    3. partial id / placeholder matches
    4. test-id attributes and XPath text matches (SPA fallbacks)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..models import FieldRole, SelectorSet, StrategyKind, dedupe


DEFAULT_SELECTORS: Dict[FieldRole, List[str]] = {
    FieldRole.USERNAME: [
        "#username", "#user", "#email", "#login",
        "input[name='username']", "input[name='user']",
        "input[name='email']", "input[name='login']",
        "input[type='email']",
        "input[id*='username']", "input[id*='email']",
        "input[placeholder*='username' i]", "input[placeholder*='email' i]",
    ],
    FieldRole.PASSWORD: [
        "#password", "#pass", "#pwd",
        "input[name='password']", "input[name='pass']", "input[name='pwd']",
        "input[type='password']",
        "input[id*='password']",
    ],
    FieldRole.SUBMIT: [
        "button[type='submit']", "input[type='submit']",
        "button:has-text('Login')", "button:has-text('Sign In')",
        "button:has-text('Log In')", "button:has-text('Submit')",
        ".btn-login", ".login-button", "#login-button",
    ],
}

REACT_EXTRA_SELECTORS: Dict[FieldRole, List[str]] = {
    FieldRole.USERNAME: [
        "input[data-testid*='username']", "input[data-testid*='email']",
        "xpath=//input[@type='email']",
        "xpath=//input[contains(@placeholder, 'mail')]",
    ],
    FieldRole.PASSWORD: [
        "input[data-testid*='password']",
        "input[placeholder*='password' i]",
        "xpath=//input[@type='password']",
    ],
    FieldRole.SUBMIT: [
        "button[data-testid*='login']", "button[data-testid*='submit']",
        "xpath=//button[@type='submit']",
        "xpath=//button[contains(text(), 'Login')]",
    ],
}

VUE_EXTRA_SELECTORS: Dict[FieldRole, List[str]] = {
    FieldRole.USERNAME: [
        "input[v-model*='username']", "input[v-model*='email']",
        "input[data-cy*='username']", "input[data-cy*='email']",
    ],
    FieldRole.PASSWORD: [
        "input[v-model*='password']", "input[data-cy*='password']",
        "xpath=//input[@type='password']",
    ],
    FieldRole.SUBMIT: [
        "button[data-cy*='login']", "button[data-cy*='submit']",
        "button:has-text('Connexion')",
        "xpath=//button[contains(text(), 'Login')]",
    ],
}

# Any of these means a password field is on the page
PASSWORD_PRESENCE_SELECTORS = [
    "input[type='password']",
    "input[name*='password']",
    "[data-testid*='password']",
]

CSRF_SELECTORS = [
    "input[name='_token']",
    "input[name='csrf_token']",
    "input[name='authenticity_token']",
    "meta[name='csrf-token']",
    "[data-csrf]",
]

LOGIN_LINK_SELECTORS = [
    "a[href*='login']", "a[href*='signin']", "a[href*='masuk']",
    "[data-testid*='login']", "[data-cy*='login']",
    ".login-link", ".signin-link", "#login-link",
    "xpath=//a[contains(text(), 'Login')]",
    "xpath=//a[contains(text(), 'Sign In')]",
    "xpath=//a[contains(text(), 'Log in')]",
]

COMMON_LOGIN_PATHS = ["/login", "/signin", "/auth/login", "/user/login", "/account/login"]


def role_selectors(
    role: FieldRole,
    strategy: StrategyKind,
    overrides: Optional[SelectorSet] = None,
) -> List[str]:
    """
    Ordered candidate selectors for one role under one strategy.

    Configured overrides come first, then the defaults, then the
    strategy's own extras. Duplicates are dropped keeping first position.
    """
    selectors: List[str] = []
    if overrides is not None:
        selectors.extend(overrides.for_role(role))
    selectors.extend(DEFAULT_SELECTORS[role])
    if strategy is StrategyKind.REACT:
        selectors.extend(REACT_EXTRA_SELECTORS[role])
    elif strategy is StrategyKind.VUE:
        selectors.extend(VUE_EXTRA_SELECTORS[role])
    return dedupe(selectors)


__all__ = [
    "DEFAULT_SELECTORS",
    "REACT_EXTRA_SELECTORS",
    "VUE_EXTRA_SELECTORS",
    "PASSWORD_PRESENCE_SELECTORS",
    "CSRF_SELECTORS",
    "LOGIN_LINK_SELECTORS",
    "COMMON_LOGIN_PATHS",
    "role_selectors",
]
