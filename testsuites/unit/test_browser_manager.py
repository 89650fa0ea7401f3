import pytest

from autotest_auth.browser_manager import BrowserManager, authenticate_target
from autotest_auth.models import AuthResult, StrategyKind
from testsuites.fakes import FakePage, make_config


class FakeContext:
    def __init__(self, options):
        self.options = options
        self.saved_to = None
        self.closed = False

    async def new_page(self):
        page = FakePage()
        page.context = self
        return page

    async def storage_state(self, path=None):
        self.saved_to = path

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self):
        self.contexts = []

    async def new_context(self, **options):
        context = FakeContext(options)
        self.contexts.append(context)
        return context

    async def close(self):
        pass


class StubOrchestrator:
    def __init__(self, success):
        self.success = success

    async def authenticate(self, page, config):
        if self.success:
            return AuthResult.succeeded(StrategyKind.FORM)
        return AuthResult.failed(StrategyKind.FORM, "Invalid credentials")


def _manager(tmp_path):
    manager = BrowserManager(auth_state_file=tmp_path / "state" / "auth.json")
    manager._browser = FakeBrowser()
    return manager


@pytest.mark.asyncio
async def test_context_gets_http_credentials_when_basic_auth_enabled(tmp_path):
    manager = _manager(tmp_path)

    await manager.new_context(make_config(basic_auth={"enabled": True, "username": "basic_user"}))
    await manager.new_context(make_config())

    with_basic, without_basic = manager.browser.contexts
    assert with_basic.options["http_credentials"] == {"username": "basic_user", "password": "demo_password"}
    assert "http_credentials" not in without_basic.options
    assert with_basic.options["ignore_https_errors"] is True


@pytest.mark.asyncio
async def test_new_context_requires_started_browser():
    with pytest.raises(RuntimeError):
        await BrowserManager().new_context()


@pytest.mark.asyncio
async def test_authenticate_target_saves_state_on_success(tmp_path):
    manager = _manager(tmp_path)

    result = await authenticate_target(
        make_config(), manager=manager, save_state=True, orchestrator=StubOrchestrator(True)
    )

    assert result.success is True
    assert manager.browser.contexts[0].saved_to == str(tmp_path / "state" / "auth.json")


@pytest.mark.asyncio
async def test_authenticate_target_does_not_save_failed_login(tmp_path):
    manager = _manager(tmp_path)

    result = await authenticate_target(
        make_config(), manager=manager, save_state=True, orchestrator=StubOrchestrator(False)
    )

    assert result.error == "Invalid credentials"
    assert manager.browser.contexts[0].saved_to is None
