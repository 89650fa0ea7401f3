"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration with environment variable override support, plus the
typed AuthConfig consumed by the authentication engine.

Features:
    - YAML configuration loading
    - Environment variable override (AUTH_USERNAME overrides auth.username)
    - Dot notation path access with defaults
    - Typed, validated AuthConfig

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from loguru import logger

from .models import ConfigurationError, Credentials, FieldRole, RetryPolicy, SelectorSet, StrategyKind


# Default configuration file path
DEFAULT_CONFIG_PATH = Path("config") / "auth.yaml"

DEFAULT_FALLBACK_STRATEGIES: Tuple[StrategyKind, ...] = (
    StrategyKind.FORM,
    StrategyKind.REACT,
    StrategyKind.VUE,
)

# Submit buttons are optional; one immediate pass is enough
DEFAULT_RETRY_POLICIES: Dict[FieldRole, RetryPolicy] = {
    FieldRole.USERNAME: RetryPolicy(max_attempts=3, min_delay_ms=2000, max_delay_ms=2000),
    FieldRole.PASSWORD: RetryPolicy(max_attempts=3, min_delay_ms=2000, max_delay_ms=2000),
    FieldRole.SUBMIT: RetryPolicy(max_attempts=1, min_delay_ms=0, max_delay_ms=0),
}


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (AUTH_USERNAME)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader(Path("config/auth.yaml"))
        >>> config.get("target.url", "http://localhost:3000")
        'https://app.example.com'

    Environment Variable Mapping:
        - target.url -> TARGET_URL
        - auth.username -> AUTH_USERNAME
        - auth.basic_auth.enabled -> AUTH_BASIC_AUTH_ENABLED
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )
        self._config = loaded
        logger.debug(f"Loaded configuration from: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "auth.username")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "auth", "timing")

        Returns:
            Section dictionary or empty dict if not found
        """
        value = self._config.get(section, {})
        return value if isinstance(value, dict) else {}

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value


# =============================================================================
# Typed Authentication Configuration
# =============================================================================

@dataclass(frozen=True)
class BasicAuthConfig:
    enabled: bool = False
    username: str = field(default="", repr=False)
    password: str = field(default="", repr=False)


@dataclass(frozen=True)
class TimingConfig:
    """
    Delay and timeout tuning.

    Attributes:
        jitter: Insert randomized human-like delays between actions
        settle_timeout_ms: Upper bound for the post-submit settle race
        framework_ready_timeout_ms: Upper bound for React/Vue readiness waits
        verify_settle_ms: Pause before running verification probes
        navigation_timeout_ms: Timeout for page navigations
    """
    jitter: bool = True
    settle_timeout_ms: int = 10000
    framework_ready_timeout_ms: int = 10000
    verify_settle_ms: int = 2000
    navigation_timeout_ms: int = 30000


@dataclass(frozen=True)
class AuthConfig:
    """Everything one ``authenticate()`` call needs."""

    target_url: str
    credentials: Credentials
    strategy: Optional[StrategyKind] = None
    login_url: Optional[str] = None
    selectors: SelectorSet = field(default_factory=SelectorSet)
    success_selectors: Tuple[str, ...] = ()
    error_selectors: Tuple[str, ...] = ()
    basic_auth: BasicAuthConfig = field(default_factory=BasicAuthConfig)
    bearer_token: Optional[str] = field(default=None, repr=False)
    api_key: Optional[str] = field(default=None, repr=False)
    retry: Dict[FieldRole, RetryPolicy] = field(default_factory=lambda: dict(DEFAULT_RETRY_POLICIES))
    fallback_strategies: Tuple[StrategyKind, ...] = DEFAULT_FALLBACK_STRATEGIES
    discover_login_page: bool = True
    check_existing_session: bool = True
    timing: TimingConfig = field(default_factory=TimingConfig)
    debug: bool = False
    screenshot_dir: Path = Path("screenshots")

    @property
    def has_token(self) -> bool:
        return bool(self.bearer_token or self.api_key)

    def retry_policy(self, role: FieldRole) -> RetryPolicy:
        return self.retry.get(role, DEFAULT_RETRY_POLICIES[role])

    def resolve_login_url(self, current_url: str = "") -> Optional[str]:
        """
        Absolute login URL, or None when none is configured.

        Relative login paths are appended to the target URL (or the current
        page URL when no target is configured).
        """
        if not self.login_url:
            return None
        if "://" in self.login_url:
            return self.login_url
        base = (self.target_url or current_url).rstrip("/")
        path = self.login_url if self.login_url.startswith("/") else "/" + self.login_url
        return base + path

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "AuthConfig":
        """
        Build from a ConfigLoader (environment overrides apply to scalars).

        Raises:
            ConfigurationError: On invalid values
        """
        data = {
            "target": {"url": loader.get("target.url", "")},
            "auth": dict(loader.get_section("auth")),
            "timing": dict(loader.get_section("timing")),
            "debug": dict(loader.get_section("debug")),
        }
        auth = data["auth"]
        for key in ("username", "password", "strategy", "login_url", "bearer_token", "api_key"):
            value = loader.get(f"auth.{key}", auth.get(key))
            if value is not None:
                auth[key] = value
        basic = dict(auth.get("basic_auth") or {})
        basic["enabled"] = loader.get("auth.basic_auth.enabled", bool(basic.get("enabled", False)))
        for key in ("username", "password"):
            value = loader.get(f"auth.basic_auth.{key}", basic.get(key))
            if value is not None:
                basic[key] = value
        auth["basic_auth"] = basic
        data["debug"]["enabled"] = loader.get("debug.enabled", bool(data["debug"].get("enabled", False)))
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthConfig":
        """
        Build from a plain nested mapping (the YAML layout).

        Raises:
            ConfigurationError: On invalid values
        """
        target = data.get("target") or {}
        auth = data.get("auth") or {}
        timing = data.get("timing") or {}
        debug = data.get("debug") or {}

        try:
            strategy = StrategyKind.parse(auth.get("strategy"))
        except ValueError as e:
            raise ConfigurationError(f"Unknown authentication strategy: {auth.get('strategy')}") from e

        try:
            fallback = tuple(
                StrategyKind.parse(name) for name in auth.get("fallback_strategies", [])
            ) or DEFAULT_FALLBACK_STRATEGIES
        except ValueError as e:
            raise ConfigurationError(f"Unknown fallback strategy: {e}") from e
        if None in fallback:
            raise ConfigurationError("fallback_strategies may not contain 'auto'")

        retry = dict(DEFAULT_RETRY_POLICIES)
        for role_name, policy in (auth.get("retry") or {}).items():
            try:
                role = FieldRole(role_name)
                retry[role] = RetryPolicy(
                    max_attempts=int(policy.get("max_attempts", retry[role].max_attempts)),
                    min_delay_ms=int(policy.get("min_delay_ms", retry[role].min_delay_ms)),
                    max_delay_ms=int(policy.get("max_delay_ms", policy.get("min_delay_ms", retry[role].max_delay_ms))),
                )
            except (ValueError, TypeError, AttributeError) as e:
                raise ConfigurationError(f"Invalid retry policy for '{role_name}': {e}") from e

        basic = auth.get("basic_auth") or {}

        try:
            timing_config = TimingConfig(
                jitter=_as_bool(timing.get("jitter", True)),
                settle_timeout_ms=int(timing.get("settle_timeout_ms", 10000)),
                framework_ready_timeout_ms=int(timing.get("framework_ready_timeout_ms", 10000)),
                verify_settle_ms=int(timing.get("verify_settle_ms", 2000)),
                navigation_timeout_ms=int(timing.get("navigation_timeout_ms", 30000)),
            )
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid timing configuration: {e}") from e

        return cls(
            target_url=str(target.get("url") or ""),
            credentials=Credentials(
                username=str(auth.get("username") or ""),
                password=str(auth.get("password") or ""),
            ),
            strategy=strategy,
            login_url=auth.get("login_url") or None,
            selectors=SelectorSet.from_mapping(auth.get("selectors")),
            success_selectors=tuple(_as_list(auth.get("success_selectors"))),
            error_selectors=tuple(_as_list(auth.get("error_selectors"))),
            basic_auth=BasicAuthConfig(
                enabled=_as_bool(basic.get("enabled", False)),
                username=str(basic.get("username") or ""),
                password=str(basic.get("password") or ""),
            ),
            bearer_token=auth.get("bearer_token") or None,
            api_key=auth.get("api_key") or None,
            retry=retry,
            fallback_strategies=fallback,
            discover_login_page=_as_bool(auth.get("discover_login_page", True)),
            check_existing_session=_as_bool(auth.get("check_existing_session", True)),
            timing=timing_config,
            debug=_as_bool(debug.get("enabled", False)),
            screenshot_dir=Path(debug.get("screenshot_dir") or "screenshots"),
        )


def load_auth_config(config_path: Optional[Path] = None) -> AuthConfig:
    """Load an AuthConfig from YAML plus environment overrides."""
    return AuthConfig.from_loader(ConfigLoader(config_path))


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "AuthConfig",
    "BasicAuthConfig",
    "TimingConfig",
    "DEFAULT_FALLBACK_STRATEGIES",
    "DEFAULT_RETRY_POLICIES",
    "load_auth_config",
]
