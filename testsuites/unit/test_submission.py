import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from autotest_auth.framework.delays import DelayProvider
from autotest_auth.framework.submission import SubmissionDispatcher, is_auth_response
from autotest_auth.models import DriverError, FieldHandle, FieldRole, SubmissionUnavailableError
from testsuites.fakes import FakeElement, FakePage, FakeResponse


def _handle(element, role):
    return FieldHandle(role=role, selector=f"#{role.value}", element=element)


@pytest.fixture
def dispatcher():
    return SubmissionDispatcher(DelayProvider(enabled=False), settle_timeout_ms=1000)


@pytest.mark.asyncio
async def test_button_click_is_preferred(dispatcher):
    page = FakePage()
    button = FakeElement(on_click=lambda: page.navigate("https://app.test/dashboard"))
    password = FakeElement()
    form = FakeElement()
    page.elements["form"] = form

    method = await dispatcher.submit(
        page, _handle(button, FieldRole.SUBMIT), _handle(password, FieldRole.PASSWORD)
    )

    assert method == "button_click"
    assert "click" in button.calls
    assert "press:Enter" not in password.calls
    assert form.calls == []


@pytest.mark.asyncio
async def test_click_escalates_to_forced_then_script_click(dispatcher):
    button = FakeElement(always_fail=["click", "force_click"])

    method = await dispatcher.submit(FakePage(), _handle(button, FieldRole.SUBMIT), None)

    assert method == "button_click"
    assert [c for c in button.calls if c.startswith("click")] == ["click", "click:force", "click:script"]


@pytest.mark.asyncio
async def test_enter_key_is_tried_before_form_submit(dispatcher):
    page = FakePage()
    button = FakeElement(always_fail=["click", "force_click", "script_click"])
    password = FakeElement()
    form = FakeElement()
    page.elements["form"] = form

    method = await dispatcher.submit(
        page, _handle(button, FieldRole.SUBMIT), _handle(password, FieldRole.PASSWORD)
    )

    assert method == "enter_key"
    assert password.calls == ["press:Enter"]
    assert form.calls == []


@pytest.mark.asyncio
async def test_form_submit_only_when_button_and_password_absent(dispatcher):
    page = FakePage()
    form = FakeElement()
    page.elements["form"] = form

    method = await dispatcher.submit(page, None, None)

    assert method == "form_submit"
    assert form.calls == ["submit"]


@pytest.mark.asyncio
async def test_form_submit_after_enter_fails(dispatcher):
    page = FakePage()
    password = FakeElement(always_fail=["press"])
    form = FakeElement()
    page.elements["form"] = form

    method = await dispatcher.submit(page, None, _handle(password, FieldRole.PASSWORD))

    assert method == "form_submit"


@pytest.mark.asyncio
async def test_nothing_available_raises(dispatcher):
    with pytest.raises(SubmissionUnavailableError):
        await dispatcher.submit(FakePage(), None, None)


class ClosingButton(FakeElement):
    """Button whose click closes the page underneath the driver."""

    def __init__(self, page):
        super().__init__()
        self.page = page

    async def click(self, force=False, **kwargs):
        self.page.close_now()
        raise PlaywrightError("Target page, context or browser has been closed")


@pytest.mark.asyncio
async def test_closed_page_during_submit_raises_driver_error(dispatcher):
    page = FakePage()

    with pytest.raises(DriverError):
        await dispatcher.submit(page, _handle(ClosingButton(page), FieldRole.SUBMIT), None)


def test_auth_response_matcher():
    assert is_auth_response(FakeResponse("https://app.test/api/session", 200, method="POST"))
    assert is_auth_response(FakeResponse("https://app.test/home", 302))
    assert not is_auth_response(FakeResponse("https://app.test/static/js/login.js", 200))
    assert not is_auth_response(FakeResponse("https://app.test/static/app.js", 200))


class SilentNavigationPage(FakePage):
    """Page whose main frame never navigates."""

    async def wait_for_event(self, event, predicate=None, timeout=None):
        if event == "framenavigated":
            await asyncio.Event().wait()
        return await super().wait_for_event(event, predicate=predicate, timeout=timeout)


class BrokenEventsPage(FakePage):
    """Page whose event stream dies with a non-timeout driver error."""

    async def wait_for_event(self, event, predicate=None, timeout=None):
        raise PlaywrightError("Target page, context or browser has been closed")


@pytest.mark.asyncio
async def test_auth_response_ends_settle_wait(dispatcher):
    page = FakePage()
    waiters = dispatcher._arm_settle_signals(page)
    page.emit_response("https://app.test/api/login", 200, method="POST")

    signal = await dispatcher._wait_for_settle(waiters)

    assert signal == "response 200 https://app.test/api/login"


@pytest.mark.asyncio
async def test_redirect_response_ends_settle_wait(dispatcher):
    page = FakePage()
    waiters = dispatcher._arm_settle_signals(page)
    page.emit_response("https://app.test/home", 302)

    signal = await dispatcher._wait_for_settle(waiters)

    assert signal == "response 302 https://app.test/home"


@pytest.mark.asyncio
async def test_main_frame_navigation_ends_settle_wait(dispatcher):
    page = FakePage()
    waiters = dispatcher._arm_settle_signals(page)
    page.navigate("https://app.test/dashboard")

    signal = await dispatcher._wait_for_settle(waiters)

    assert signal == "navigation"


@pytest.mark.asyncio
async def test_loading_login_asset_does_not_end_settle_wait(dispatcher):
    page = FakePage()
    waiters = dispatcher._arm_settle_signals(page)
    page.emit_response("https://app.test/static/js/login.js", 200)
    page.navigate("https://app.test/dashboard")

    signal = await dispatcher._wait_for_settle(waiters)

    assert signal == "navigation"


@pytest.mark.asyncio
async def test_settle_timeout_returns_none(dispatcher):
    page = FakePage()
    waiters = dispatcher._arm_settle_signals(page)

    signal = await dispatcher._wait_for_settle(waiters)

    assert signal is None
    assert all(task.done() for task in waiters)


@pytest.mark.asyncio
async def test_submit_continues_after_settle_timeout(dispatcher):
    page = FakePage()
    page.elements["form"] = FakeElement()

    method = await dispatcher.submit(page, None, None)

    assert method == "form_submit"


@pytest.mark.asyncio
async def test_driver_error_while_settling_raises(dispatcher):
    page = BrokenEventsPage()
    waiters = dispatcher._arm_settle_signals(page)

    with pytest.raises(DriverError) as exc_info:
        await dispatcher._wait_for_settle(waiters)

    assert isinstance(exc_info.value.__cause__, PlaywrightError)


@pytest.mark.asyncio
async def test_pending_waiters_are_cancelled(dispatcher):
    page = SilentNavigationPage()
    waiters = dispatcher._arm_settle_signals(page)
    page.emit_response("https://app.test/api/login", 200, method="POST")

    signal = await dispatcher._wait_for_settle(waiters)

    assert signal == "response 200 https://app.test/api/login"
    assert waiters[0].cancelled()
