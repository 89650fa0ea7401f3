"""
================================================================================
Selector Resolver
================================================================================

Resolves one logical field role (username / password / submit) to a live
element handle.

    - Ordered candidate selectors, first visible + enabled match wins
    - Bounded retries with jittered delay between full passes
    - Optional readiness hook between passes (slow SPA rendering)
    - Required vs optional roles (error vs warning on exhaustion)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Sequence

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import ElementHandle, Page

from ..models import DriverError, FieldHandle, FieldRole, RetryPolicy
from .delays import DelayProvider


ReadinessHook = Callable[[], Awaitable[None]]


def ensure_page_open(page: Page) -> None:
    """
    Raise DriverError if the page has been closed.

    Closing the page is how callers cancel an in-flight authentication.
    """
    if page.is_closed():
        raise DriverError("Page was closed during authentication")


async def is_interactable(element: ElementHandle) -> bool:
    """Visible and enabled (hidden elements count as absent)."""
    return await element.is_visible() and await element.is_enabled()


async def query_first(
    page: Page,
    selectors: Sequence[str],
    visible_only: bool = True,
) -> Optional[ElementHandle]:
    """
    Single pass over ``selectors``; no retries, no logging.

    Selectors that raise (invalid syntax, detached nodes) are skipped.
    """
    for selector in selectors:
        try:
            element = await page.query_selector(selector)
            if element is None:
                continue
            if not visible_only or await element.is_visible():
                return element
        except PlaywrightError:
            ensure_page_open(page)
            continue
    return None


class SelectorResolver:
    """
    Field resolver with priority-ordered fallback selectors.

    Selectors are tried strictly in order on every pass; the first element
    that exists, is visible and is enabled is returned immediately. They are
    never raced against each other.

    Usage:
        >>> resolver = SelectorResolver(DelayProvider(enabled=False))
        >>> handle = await resolver.resolve(
        ...     page, ["#username", "input[type='email']"],
        ...     required=True, policy=RetryPolicy.immediate(),
        ...     role=FieldRole.USERNAME,
        ... )
    """

    def __init__(self, delays: Optional[DelayProvider] = None, log=None):
        """
        Args:
            delays: Delay provider for waits between passes
            log: Loguru logger (defaults to one bound to this component)
        """
        self.delays = delays or DelayProvider()
        self.log = log or logger.bind(component="SelectorResolver")

    async def resolve(
        self,
        page: Page,
        role_selectors: Sequence[str],
        required: bool,
        policy: RetryPolicy,
        role: FieldRole = FieldRole.USERNAME,
        readiness_hook: Optional[ReadinessHook] = None,
    ) -> Optional[FieldHandle]:
        """
        Resolve ``role`` to a FieldHandle.

        Args:
            page: Playwright page
            role_selectors: Candidate selectors, highest priority first
            required: Whether a miss should abort the caller's attempt
            policy: Retry policy (attempts and delay bounds)
            role: Field role (used for the handle and log context)
            readiness_hook: Awaited between passes (reactive UIs)

        Returns:
            FieldHandle, or None when nothing matched after all attempts

        Raises:
            DriverError: If the page is closed
        """
        role = FieldRole(role)
        with allure.step(f"Resolve {role.value} field"):
            for attempt in range(1, policy.max_attempts + 1):
                ensure_page_open(page)
                handle = await self._single_pass(page, role_selectors, role, attempt)
                if handle is not None:
                    return handle

                if attempt < policy.max_attempts:
                    self.log.info(
                        f"{role.value} field not found, retry {attempt}/{policy.max_attempts}..."
                    )
                    await self.delays.backoff(page, policy)
                    if readiness_hook is not None:
                        await readiness_hook()

            if required:
                self.log.error(
                    f"❌ {role.value} field not found after {policy.max_attempts} attempts "
                    f"({len(role_selectors)} selectors)"
                )
            else:
                self.log.warning(f"⚠️ {role.value} field not found (optional)")
            return None

    async def _single_pass(
        self,
        page: Page,
        role_selectors: Sequence[str],
        role: FieldRole,
        attempt: int,
    ) -> Optional[FieldHandle]:
        for index, selector in enumerate(role_selectors):
            try:
                element = await page.query_selector(selector)
                if element is None:
                    continue
                if not await is_interactable(element):
                    self.log.debug(
                        f"{role.value}: '{selector}' present but hidden or disabled "
                        f"(attempt {attempt})"
                    )
                    continue
            except PlaywrightError as e:
                ensure_page_open(page)
                self.log.debug(f"{role.value}: '{selector}' failed -> {str(e)[:80]}")
                continue

            self.log.info(
                f"✅ {role.value} field found: {selector} "
                f"(candidate {index + 1}/{len(role_selectors)}, attempt {attempt})"
            )
            return FieldHandle(role=role, selector=selector, element=element, attempt=attempt)
        return None


__all__ = [
    "SelectorResolver",
    "ReadinessHook",
    "ensure_page_open",
    "is_interactable",
    "query_first",
]
