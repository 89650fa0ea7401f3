import pytest

from autotest_auth.framework.login_page import LoginPageLocator
from testsuites.fakes import FakeElement, FakePage, login_form, make_config


@pytest.mark.asyncio
async def test_open_login_url_joins_relative_path():
    page = FakePage(url="https://app.test/")
    config = make_config(target_url="https://app.test", login_url="/signin")

    assert await LoginPageLocator().open_login_url(page, config) is True
    assert page.visited == ["https://app.test/signin"]

    assert await LoginPageLocator().open_login_url(page, config) is False
    assert page.visited == ["https://app.test/signin"]


@pytest.mark.asyncio
async def test_discover_reports_present_form():
    page = FakePage(elements=login_form())

    assert await LoginPageLocator().discover(page, make_config()) == "present"
    assert page.visited == []


@pytest.mark.asyncio
async def test_discover_follows_login_link():
    page = FakePage(url="https://app.test/")
    page.screens["https://app.test/login"] = login_form
    page.elements["a[href*='login']"] = FakeElement(on_click=lambda: page.navigate("https://app.test/login"))

    assert await LoginPageLocator().discover(page, make_config(target_url="https://app.test/")) == "link"


@pytest.mark.asyncio
async def test_discover_tries_common_paths_in_order():
    page = FakePage(url="https://app.test/home")
    page.screens["https://app.test/auth/login"] = login_form

    found = await LoginPageLocator().discover(page, make_config(target_url="https://app.test/home"))

    assert found == "/auth/login"
    assert page.visited == ["https://app.test/login", "https://app.test/signin", "https://app.test/auth/login"]


@pytest.mark.asyncio
async def test_discover_miss_is_not_an_error():
    page = FakePage(url="https://app.test/home")

    assert await LoginPageLocator().discover(page, make_config(target_url="https://app.test/home")) is None


@pytest.mark.asyncio
async def test_csrf_token_detected_even_when_hidden():
    page = FakePage(elements={"input[name='csrf_token']": FakeElement(visible=False, value="t0k3n")})

    assert await LoginPageLocator().has_csrf_token(page) is True
    assert await LoginPageLocator().has_csrf_token(FakePage()) is False
