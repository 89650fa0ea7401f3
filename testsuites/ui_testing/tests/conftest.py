"""
================================================================================
Login Scenario Pytest Configuration
================================================================================

Fixtures building small in-memory web applications for end-to-end login
scenarios. Each app is a FakePage whose screens change the way a real
application's pages would after navigation or form submission.

================================================================================
"""

import os
from typing import Callable, Dict

import pytest

from autotest_auth.orchestrator import AuthenticationOrchestrator
from testsuites.fakes import FakeElement, FakePage, login_form

APP_URL = "https://app.test"
LOGIN_URL = f"{APP_URL}/login"
DASHBOARD_URL = f"{APP_URL}/dashboard"


@pytest.fixture
def demo_credentials() -> Dict[str, str]:
    """Placeholder credentials (see repository conftest)."""
    return {
        "username": os.environ.get("DEMO_USERNAME", "demo_user"),
        "password": os.environ.get("DEMO_PASSWORD", "demo_password"),
    }


@pytest.fixture
def orchestrator() -> AuthenticationOrchestrator:
    return AuthenticationOrchestrator()


@pytest.fixture
def dashboard_screen() -> Callable[[], Dict[str, FakeElement]]:
    def screen():
        return {
            ".navbar": FakeElement(text="Acme"),
            "a[href*='logout']": FakeElement(text="Logout"),
        }
    return screen


@pytest.fixture
def form_app(dashboard_screen) -> Callable[..., FakePage]:
    """
    Classic server-rendered login app.

    Args (of the returned factory):
        accept: Whether submitted credentials are accepted
        username_field: Whether the login form renders a username input
    """
    def build(accept: bool = True, username_field: bool = True) -> FakePage:
        page = FakePage(url="about:blank")

        def submit():
            if accept:
                page.navigate(DASHBOARD_URL, status=302)
            else:
                page.elements[".alert-danger"] = FakeElement(text="Invalid credentials")
                page.emit_response(f"{APP_URL}/api/login", 401, method="POST")

        page.screens[LOGIN_URL] = lambda: login_form(on_submit=submit, username=username_field)
        page.screens[DASHBOARD_URL] = dashboard_screen
        return page
    return build
