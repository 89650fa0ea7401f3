"""
================================================================================
Authentication Framework
================================================================================

Page-level building blocks of the login engine.

Components:
    - selector_resolver: Ordered fallback selector resolution with retries
    - form_filler: Standard and framework-aware field filling
    - submission: Submission fallback chain and settle race
    - verifier: Post-submit success / error probing
    - detector: Login strategy detection and framework readiness
    - login_page: Login URL navigation, discovery and CSRF check
    - diagnostics: Debug screenshots

Author: Automation Team
License: MIT
================================================================================
"""

from .delays import DelayProvider
from .selector_resolver import SelectorResolver
from .form_filler import FormFiller
from .submission import SubmissionDispatcher
from .verifier import LoginVerifier, Verification
from .detector import StrategyDetector, wait_for_framework
from .login_page import LoginPageLocator
from .diagnostics import capture_checkpoint

__all__ = [
    "DelayProvider",
    "SelectorResolver",
    "FormFiller",
    "SubmissionDispatcher",
    "LoginVerifier",
    "Verification",
    "StrategyDetector",
    "wait_for_framework",
    "LoginPageLocator",
    "capture_checkpoint",
]
