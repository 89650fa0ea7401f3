"""
Header-based login strategies (HTTP Basic, bearer token / API key) and the
OAuth placeholder.

Credentials and tokens go into extra HTTP headers; only the response status
is inspected.
"""

from __future__ import annotations

import base64
from typing import Dict, Optional

import allure
from playwright.async_api import Page, Response

from ..config_loader import AuthConfig
from ..framework.selector_resolver import ensure_page_open
from ..models import AuthResult, StrategyKind
from .base import LoginStrategy


class BasicAuthStrategy(LoginStrategy):
    """HTTP Basic authentication through an ``Authorization`` header."""

    kind = StrategyKind.BASIC

    async def execute_login(self, page: Page, config: AuthConfig) -> AuthResult:
        username = config.basic_auth.username or config.credentials.username
        password = config.basic_auth.password or config.credentials.password
        if not username or not password:
            self.log.error("❌ Basic auth credentials not provided")
            return AuthResult.failed(self.kind, "Basic auth credentials not provided")

        with allure.step("HTTP Basic authentication"):
            ensure_page_open(page)
            encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
            await page.set_extra_http_headers({"Authorization": f"Basic {encoded}"})

            url = config.resolve_login_url(page.url) or config.target_url or page.url
            response = await _navigate(page, url, config)
            status = response.status if response is not None else None

            if status == 401:
                self.log.error("❌ Basic authentication failed - 401 Unauthorized")
                await _clear_headers(page)
                return AuthResult.failed(
                    self.kind, "Basic authentication failed - 401 Unauthorized", status=status, url=url
                )

            self.log.info(f"✅ Basic authentication accepted (status {status})")
            return AuthResult.succeeded(self.kind, status=status, url=url)


class TokenAuthStrategy(LoginStrategy):
    """Bearer token or API key authentication."""

    kind = StrategyKind.TOKEN

    async def execute_login(self, page: Page, config: AuthConfig) -> AuthResult:
        headers: Dict[str, str]
        if config.bearer_token:
            headers = {"Authorization": f"Bearer {config.bearer_token}"}
            scheme = "bearer"
        elif config.api_key:
            headers = {"X-API-Key": config.api_key, "Authorization": f"ApiKey {config.api_key}"}
            scheme = "api_key"
        else:
            self.log.error("❌ No bearer token or API key configured")
            return AuthResult.failed(self.kind, "No bearer token or API key configured")

        with allure.step(f"Token authentication ({scheme})"):
            ensure_page_open(page)
            await page.set_extra_http_headers(headers)

            url = config.target_url or page.url
            response = await _navigate(page, url, config)
            status = response.status if response is not None else None

            if status in (401, 403):
                message = f"Token authentication failed - {status} {'Unauthorized' if status == 401 else 'Forbidden'}"
                self.log.error(f"❌ {message}")
                await _clear_headers(page)
                return AuthResult.failed(self.kind, message, status=status, scheme=scheme)

            self.log.info(f"✅ Token authentication accepted (status {status})")
            return AuthResult.succeeded(self.kind, status=status, scheme=scheme)


class OAuthStrategy(LoginStrategy):
    kind = StrategyKind.OAUTH

    async def execute_login(self, page: Page, config: AuthConfig) -> AuthResult:
        self.log.warning("⚠️ OAuth strategy is not implemented")
        return AuthResult.failed(self.kind, "OAuth strategy is not implemented")


async def _navigate(page: Page, url: str, config: AuthConfig) -> Optional[Response]:
    return await page.goto(url, wait_until="networkidle", timeout=config.timing.navigation_timeout_ms)


async def _clear_headers(page: Page) -> None:
    # Rejected credentials must not ride along on later requests
    await page.set_extra_http_headers({})


__all__ = [
    "BasicAuthStrategy",
    "TokenAuthStrategy",
    "OAuthStrategy",
]
