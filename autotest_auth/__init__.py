"""
================================================================================
Autotest Auth
================================================================================

Playwright login automation engine: detects how a web application expects
users to log in, drives the login and reports a structured verdict.

Usage:
    from autotest_auth import AuthenticationOrchestrator, load_auth_config

    config = load_auth_config()
    result = await AuthenticationOrchestrator().authenticate(page, config)

Author: Automation Team
License: MIT
================================================================================
"""

from .models import (
    AuthResult,
    AuthState,
    AuthenticationError,
    ConfigurationError,
    Credentials,
    DriverError,
    FieldHandle,
    FieldNotFoundError,
    FieldRole,
    RetryPolicy,
    SelectorSet,
    StrategyKind,
    SubmissionUnavailableError,
    redact,
)
from .config_loader import AuthConfig, ConfigLoader, load_auth_config
from .logging_setup import configure_logging
from .orchestrator import AuthenticationOrchestrator, authenticate
from .browser_manager import BrowserManager, authenticate_target

__version__ = "1.0.0"

__all__ = [
    "AuthResult",
    "AuthState",
    "AuthenticationError",
    "ConfigurationError",
    "Credentials",
    "DriverError",
    "FieldHandle",
    "FieldNotFoundError",
    "FieldRole",
    "RetryPolicy",
    "SelectorSet",
    "StrategyKind",
    "SubmissionUnavailableError",
    "redact",
    "AuthConfig",
    "ConfigLoader",
    "load_auth_config",
    "configure_logging",
    "AuthenticationOrchestrator",
    "authenticate",
    "BrowserManager",
    "authenticate_target",
]
