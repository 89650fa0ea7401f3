"""
================================================================================
In-Memory Page Doubles
================================================================================

Deterministic stand-ins for Playwright's ``Page`` and ``ElementHandle``.

The fake DOM is a mapping ``selector -> FakeElement``: a selector matches
exactly the element registered under it. Navigation swaps the mapping for
the screen registered under the target URL, so multi-page login flows
(login form -> dashboard) can be modelled without a browser.

Usage:
    page = FakePage(
        url="https://app.test/login",
        screens={"https://app.test/login": login_screen},
    )
    page.elements["#username"].value

================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from autotest_auth.config_loader import AuthConfig


Screen = Callable[[], Dict[str, "FakeElement"]]

# Event-loop ticks a waiter polls before timing out
EVENT_POLL_TICKS = 20


@dataclass
class FakeRequest:
    method: str = "GET"


@dataclass
class FakeResponse:
    url: str
    status: int = 200
    method: str = "GET"

    @property
    def request(self) -> FakeRequest:
        return FakeRequest(self.method)


class FakeElement:
    """
    Element double recording every interaction in ``calls``.

    Args:
        visible: Reported by ``is_visible``
        enabled: Reported by ``is_enabled``
        value: Current input value
        text: Returned by ``text_content``
        failures: ``{method: n}`` - the first ``n`` calls of ``method`` raise
        always_fail: Methods that always raise
        ignore_typing: ``type`` leaves the value untouched (controlled inputs)
        on_click / on_enter / on_submit: Callbacks simulating app behaviour
    """

    def __init__(
        self,
        visible: bool = True,
        enabled: bool = True,
        value: str = "",
        text: str = "",
        failures: Optional[Dict[str, int]] = None,
        always_fail: Iterable[str] = (),
        ignore_typing: bool = False,
        on_click: Optional[Callable[[], None]] = None,
        on_enter: Optional[Callable[[], None]] = None,
        on_submit: Optional[Callable[[], None]] = None,
    ):
        self.visible = visible
        self.enabled = enabled
        self.value = value
        self.text = text
        self.failures = dict(failures or {})
        self.always_fail: Set[str] = set(always_fail)
        self.ignore_typing = ignore_typing
        self.on_click = on_click
        self.on_enter = on_enter
        self.on_submit = on_submit
        self.calls: List[str] = []
        self.typed_delays: List[int] = []

    def _check(self, method: str) -> None:
        if method in self.always_fail:
            raise PlaywrightError(f"{method} failed")
        if self.failures.get(method, 0) > 0:
            self.failures[method] -= 1
            raise PlaywrightError(f"{method} failed")

    async def is_visible(self) -> bool:
        return self.visible

    async def is_enabled(self) -> bool:
        return self.enabled

    async def scroll_into_view_if_needed(self, **kwargs: Any) -> None:
        self.calls.append("scroll")

    async def wait_for_element_state(self, state: str, timeout: Optional[float] = None) -> None:
        if state == "visible" and not self.visible:
            raise PlaywrightTimeoutError("element is not visible")

    async def click(self, force: bool = False, **kwargs: Any) -> None:
        self.calls.append("click:force" if force else "click")
        self._check("force_click" if force else "click")
        if self.on_click:
            self.on_click()

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if "submit()" in script:
            self.calls.append("submit")
            self._check("submit")
            if self.on_submit:
                self.on_submit()
        elif "click()" in script:
            self.calls.append("click:script")
            self._check("script_click")
            if self.on_click:
                self.on_click()
        elif "value = ''" in script:
            self.calls.append("clear:script")
            self.value = ""
        return None

    async def fill(self, value: str, **kwargs: Any) -> None:
        self.calls.append("fill")
        self._check("fill")
        self.value = value

    async def type(self, text: str, delay: float = 0, **kwargs: Any) -> None:
        self.calls.append("type")
        self._check("type")
        self.typed_delays.append(delay)
        if not self.ignore_typing:
            self.value += text

    async def press(self, key: str, **kwargs: Any) -> None:
        self.calls.append(f"press:{key}")
        self._check("press")
        if key in ("Delete", "Backspace"):
            self.value = ""
        if key == "Enter" and self.on_enter:
            self.on_enter()

    async def select_text(self, **kwargs: Any) -> None:
        self.calls.append("select_text")

    async def dispatch_event(self, type: str, event_init: Any = None) -> None:
        self.calls.append(f"event:{type}")

    async def input_value(self, **kwargs: Any) -> str:
        return self.value

    async def text_content(self) -> Optional[str]:
        return self.text


class FakePage:
    """
    Page double with screens, responses, navigation events and closing.

    Args:
        url: Initial URL
        elements: Initial DOM (``selector -> FakeElement``)
        screens: ``url -> factory`` returning a fresh DOM for that URL
        statuses: ``url -> status`` returned by ``goto``
        fingerprint: Result of the framework fingerprint evaluation
        framework_ready: Whether ``wait_for_function`` succeeds
        invalid_selectors: Selectors whose query raises
    """

    def __init__(
        self,
        url: str = "about:blank",
        elements: Optional[Dict[str, FakeElement]] = None,
        screens: Optional[Dict[str, Screen]] = None,
        statuses: Optional[Dict[str, int]] = None,
        fingerprint: Optional[Dict[str, bool]] = None,
        framework_ready: bool = True,
        invalid_selectors: Iterable[str] = (),
    ):
        self.url = url
        self.elements: Dict[str, FakeElement] = dict(elements or {})
        self.screens = dict(screens or {})
        self.statuses = dict(statuses or {})
        self.fingerprint = fingerprint or {"react": False, "vue": False}
        self.framework_ready = framework_ready
        self.invalid_selectors = set(invalid_selectors)
        self.main_frame = object()

        self.closed = False
        self.extra_headers: Dict[str, str] = {}
        self.sent_headers: List[Dict[str, str]] = []
        self.visited: List[str] = []
        self.queried: List[str] = []
        self.waited_ms: List[int] = []
        self.screenshots: List[str] = []
        self._events: List[Tuple[str, Any]] = []

    # -- helpers used by tests and element callbacks ---------------------------

    def navigate(self, url: str, status: int = 200) -> None:
        """Simulate an app-driven navigation (e.g. after a form post)."""
        self.url = url
        if url in self.screens:
            self.elements = self.screens[url]()
        self._events.append(("framenavigated", self.main_frame))
        self._events.append(("response", FakeResponse(url, status)))

    def emit_response(self, url: str, status: int = 200, method: str = "GET") -> None:
        self._events.append(("response", FakeResponse(url, status, method)))

    def close_now(self) -> None:
        self.closed = True

    # -- Page API --------------------------------------------------------------

    def is_closed(self) -> bool:
        return self.closed

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        self._ensure_open()
        self.queried.append(selector)
        if selector in self.invalid_selectors:
            raise PlaywrightError(f"Unexpected token in selector: {selector}")
        return self.elements.get(selector)

    async def goto(self, url: str, **kwargs: Any) -> FakeResponse:
        self._ensure_open()
        self.visited.append(url)
        self.sent_headers.append(dict(self.extra_headers))
        status = self.statuses.get(url, 200)
        self.navigate(url, status)
        return FakeResponse(url, status)

    async def set_extra_http_headers(self, headers: Dict[str, str]) -> None:
        self.extra_headers = dict(headers)

    async def wait_for_timeout(self, timeout: float) -> None:
        self.waited_ms.append(int(timeout))

    async def wait_for_load_state(self, state: str = "load", **kwargs: Any) -> None:
        self._ensure_open()

    async def wait_for_function(self, expression: str, **kwargs: Any) -> None:
        self._ensure_open()
        if not self.framework_ready:
            raise PlaywrightTimeoutError("Timeout exceeded waiting for function")

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self._ensure_open()
        return dict(self.fingerprint)

    async def wait_for_event(
        self,
        event: str,
        predicate: Optional[Callable[[Any], bool]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        for _ in range(EVENT_POLL_TICKS):
            for index, (name, payload) in enumerate(self._events):
                if name == event and (predicate is None or predicate(payload)):
                    del self._events[index]
                    return payload
            await asyncio.sleep(0)
        raise PlaywrightTimeoutError(f"Timeout waiting for event '{event}'")

    async def screenshot(self, path: Optional[str] = None, **kwargs: Any) -> bytes:
        if path:
            Path(path).write_bytes(b"\x89PNG")
            self.screenshots.append(path)
        return b"\x89PNG"

    def _ensure_open(self) -> None:
        if self.closed:
            raise PlaywrightError("Target page, context or browser has been closed")


def login_form(
    submit: bool = True,
    username: bool = True,
    password: bool = True,
    form: bool = True,
    on_submit: Optional[Callable[[], None]] = None,
) -> Dict[str, FakeElement]:
    """Classic login form registered under the first default selectors."""
    elements: Dict[str, FakeElement] = {}
    if username:
        elements["#username"] = FakeElement()
    if password:
        elements["#password"] = FakeElement(on_enter=on_submit)
        elements["input[type='password']"] = elements["#password"]
    if submit:
        elements["button[type='submit']"] = FakeElement(on_click=on_submit)
    if form:
        elements["form"] = FakeElement(on_submit=on_submit)
    return elements


def make_config(
    target_url: str = "https://app.test/login",
    strategy: Optional[str] = None,
    **auth: Any,
) -> AuthConfig:
    """AuthConfig with jitter off and two immediate resolution attempts."""
    immediate = {"max_attempts": 2, "min_delay_ms": 0, "max_delay_ms": 0}
    auth_section: Dict[str, Any] = {
        "username": "demo_user",
        "password": "demo_password",
        "strategy": strategy,
        "retry": {"username": immediate, "password": immediate},
    }
    auth_section.update(auth)
    return AuthConfig.from_dict({
        "target": {"url": target_url},
        "auth": auth_section,
        "timing": {"jitter": False, "settle_timeout_ms": 1000, "framework_ready_timeout_ms": 100},
    })


__all__ = [
    "FakeElement",
    "FakePage",
    "FakeRequest",
    "FakeResponse",
    "login_form",
    "make_config",
]
