"""
================================================================================
Authentication Data Model
================================================================================

Core types shared by every component of the authentication engine:

    - StrategyKind: supported login paradigms
    - Credentials: username/password pair (masked in repr)
    - RetryPolicy: bounded retry settings for field resolution
    - FieldHandle: transient reference to a resolved element
    - AuthResult: the single verdict returned to callers
    - Exception hierarchy (FieldNotFound, SubmissionUnavailable, DriverError)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from playwright.async_api import ElementHandle


MASK = "***MASKED***"

# Keys whose values never leave the process unmasked
SENSITIVE_KEYS = ("password", "passwd", "token", "api_key", "apikey", "authorization", "cookie", "secret")

# Keys whose values map field roles to CSS selectors
SELECTOR_MAP_KEYS = frozenset({"fields"})


class StrategyKind(str, Enum):
    """Login paradigm handled by one strategy implementation."""

    BASIC = "basic"
    FORM = "form"
    REACT = "react"
    VUE = "vue"
    TOKEN = "token"
    OAUTH = "oauth"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["StrategyKind"]:
        """
        Parse a configured strategy name.

        Args:
            value: Strategy name; ``None``, empty string and ``"auto"`` mean
                "detect automatically".

        Returns:
            Matching StrategyKind or None for auto-detection

        Raises:
            ValueError: If the name is not a known strategy
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        normalized = str(value).strip().lower()
        if normalized in ("", "auto"):
            return None
        return cls(normalized)

    @property
    def is_reactive(self) -> bool:
        return self in (StrategyKind.REACT, StrategyKind.VUE)

    @property
    def is_interactive(self) -> bool:
        return self in (StrategyKind.FORM, StrategyKind.REACT, StrategyKind.VUE)


class FieldRole(str, Enum):
    """Logical role of a login form field."""

    USERNAME = "username"
    PASSWORD = "password"
    SUBMIT = "submit"


class AuthState(str, Enum):
    """Orchestrator state recorded in ``AuthResult.details``."""

    DETECT = "DETECT"
    RESOLVE_FIELDS = "RESOLVE_FIELDS"
    FILL = "FILL"
    SUBMIT = "SUBMIT"
    VERIFY = "VERIFY"
    SUCCESS = "SUCCESS"
    RETRY_ALTERNATE_STRATEGY = "RETRY_ALTERNATE_STRATEGY"
    FAIL = "FAIL"


# =============================================================================
# Exceptions
# =============================================================================

class AuthenticationError(Exception):
    """Base class for authentication engine errors."""
    pass


class FieldNotFoundError(AuthenticationError):
    """Raised when a required field is not resolved after all retries."""

    def __init__(self, role: str, selectors_tried: int, strategy: Optional[str] = None):
        self.role = role
        self.selectors_tried = selectors_tried
        self.strategy = strategy
        super().__init__(
            f"Required {role} field not found after trying {selectors_tried} selectors"
        )


class SubmissionUnavailableError(AuthenticationError):
    """Raised when no method of the submission fallback chain succeeded."""
    pass


class DriverError(AuthenticationError):
    """
    Raised when the page automation driver fails.

    Signals an environment fault (closed page, crashed browser) rather than
    a target-application outcome, so it is never folded into an AuthResult.
    """
    pass


class ConfigurationError(AuthenticationError):
    """Raised when configuration loading or validation fails."""
    pass


# =============================================================================
# Value Types
# =============================================================================

@dataclass(frozen=True)
class Credentials:
    """
    Username/password pair.

    Both values are excluded from ``repr`` so an accidental log of the
    object never reveals them.
    """
    username: str = field(repr=False)
    password: str = field(repr=False)

    @property
    def complete(self) -> bool:
        return bool(self.username) and bool(self.password)

    def __repr__(self) -> str:
        return (
            f"Credentials(username={'<set>' if self.username else '<empty>'}, "
            f"password={'<set>' if self.password else '<empty>'})"
        )


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry settings.

    Attributes:
        max_attempts: Number of full passes over the candidate selectors
        min_delay_ms: Lower bound of the jittered delay between passes
        max_delay_ms: Upper bound of the jittered delay between passes
    """
    max_attempts: int = 3
    min_delay_ms: int = 2000
    max_delay_ms: int = 2000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.min_delay_ms < 0 or self.max_delay_ms < self.min_delay_ms:
            raise ValueError("delay bounds must satisfy 0 <= min_delay_ms <= max_delay_ms")

    @classmethod
    def immediate(cls, max_attempts: int = 1) -> "RetryPolicy":
        """Policy without any delay between attempts."""
        return cls(max_attempts=max_attempts, min_delay_ms=0, max_delay_ms=0)


@dataclass
class SelectorSet:
    """Ordered candidate selectors per field role (earlier entries win)."""

    username: List[str] = field(default_factory=list)
    password: List[str] = field(default_factory=list)
    submit: List[str] = field(default_factory=list)

    def for_role(self, role: FieldRole) -> List[str]:
        return list(getattr(self, FieldRole(role).value))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "SelectorSet":
        """
        Build from a ``{role: selector | [selectors]}`` mapping.

        A single string is accepted as a one-element list; blank entries
        are dropped.
        """
        data = data or {}
        kwargs: Dict[str, List[str]] = {}
        for role in FieldRole:
            raw = data.get(role.value)
            if raw is None:
                raw = data.get(f"{role.value}_field")
            if raw is None:
                kwargs[role.value] = []
            elif isinstance(raw, str):
                kwargs[role.value] = [raw] if raw.strip() else []
            else:
                kwargs[role.value] = [str(s) for s in raw if s and str(s).strip()]
        return cls(**kwargs)


@dataclass
class FieldHandle:
    """
    Resolved interactive element for one role.

    Only valid within the page lifetime that produced it; never persisted.

    Attributes:
        role: Field role the element was resolved for
        selector: Selector expression that matched
        element: Live Playwright element handle
        attempt: 1-based resolution attempt that produced the match
    """
    role: FieldRole
    selector: str
    element: ElementHandle = field(repr=False)
    attempt: int = 1


@dataclass
class AuthResult:
    """
    Authentication verdict.

    Only ``success``, ``strategy`` and ``error`` are stable; ``details`` is
    diagnostic and may change between releases.
    """
    success: bool
    strategy: StrategyKind
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def succeeded(cls, strategy: StrategyKind, **details: Any) -> "AuthResult":
        return cls(success=True, strategy=strategy, error=None, details=redact(details))

    @classmethod
    def failed(cls, strategy: StrategyKind, error: str, **details: Any) -> "AuthResult":
        return cls(success=False, strategy=strategy, error=error, details=redact(details))

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form for reporting layers."""
        return {
            "success": self.success,
            "strategy": self.strategy.value,
            "error": self.error,
            "details": self.details,
        }


# =============================================================================
# Redaction
# =============================================================================

def _is_sensitive(key: str) -> bool:
    lowered = key.lower().replace("-", "_")
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def _has_content(value: Any) -> bool:
    # None, empty strings and boolean flags stay visible
    return not (value is None or isinstance(value, bool) or (isinstance(value, str) and value == ""))


def _redact_entry(key: Any, value: Any) -> Any:
    if key in SELECTOR_MAP_KEYS and isinstance(value, Mapping):
        return dict(value)
    if isinstance(key, str) and _is_sensitive(key) and _has_content(value):
        return MASK
    return redact(value)


def redact(value: Any) -> Any:
    """
    Recursively mask values of sensitive keys.

    Args:
        value: Mapping, sequence or scalar

    Returns:
        A masked copy; scalars are returned unchanged
    """
    if isinstance(value, Mapping):
        return {k: _redact_entry(k, v) for k, v in value.items()}
    if isinstance(value, (list, tuple)) and not isinstance(value, (str, bytes)):
        return [redact(v) for v in value]
    return value


def dedupe(selectors: Sequence[Optional[str]]) -> List[str]:
    """Drop blanks and duplicates, keeping first occurrence order."""
    seen = set()
    ordered: List[str] = []
    for selector in selectors:
        if not selector or selector in seen:
            continue
        seen.add(selector)
        ordered.append(selector)
    return ordered


__all__ = [
    "MASK",
    "SELECTOR_MAP_KEYS",
    "StrategyKind",
    "FieldRole",
    "AuthState",
    "AuthenticationError",
    "FieldNotFoundError",
    "SubmissionUnavailableError",
    "DriverError",
    "ConfigurationError",
    "Credentials",
    "RetryPolicy",
    "SelectorSet",
    "FieldHandle",
    "AuthResult",
    "redact",
    "dedupe",
]
