import pytest

from autotest_auth.framework.detector import StrategyDetector, wait_for_framework
from autotest_auth.models import StrategyKind
from testsuites.fakes import FakeElement, FakePage, login_form, make_config


class ExplodingPage(FakePage):
    """Page on which any inspection fails."""

    async def query_selector(self, selector):
        raise AssertionError("explicit strategy must not inspect the page")

    async def evaluate(self, expression, arg=None):
        raise AssertionError("explicit strategy must not inspect the page")

    async def wait_for_function(self, expression, **kwargs):
        raise AssertionError("explicit strategy must not inspect the page")


@pytest.mark.parametrize("kind", list(StrategyKind))
@pytest.mark.asyncio
async def test_explicit_strategy_bypasses_detection(kind):
    detector = StrategyDetector()

    assert await detector.detect(ExplodingPage(), make_config(strategy=kind.value)) is kind


@pytest.mark.asyncio
async def test_override_bypasses_detection():
    detector = StrategyDetector()

    kind = await detector.detect(ExplodingPage(), make_config(), override=StrategyKind.VUE)
    assert kind is StrategyKind.VUE


@pytest.mark.parametrize("fingerprint,expected", [
    ({"react": True, "vue": True}, StrategyKind.REACT),
    ({"react": False, "vue": True}, StrategyKind.VUE),
    ({"react": False, "vue": False}, StrategyKind.FORM),
])
@pytest.mark.asyncio
async def test_fingerprints_with_password_field(fingerprint, expected):
    page = FakePage(elements=login_form(), fingerprint=fingerprint)

    assert await StrategyDetector().detect(page, make_config()) is expected


@pytest.mark.asyncio
async def test_fingerprint_without_password_field_is_not_reactive():
    page = FakePage(elements={"div#root": FakeElement()}, fingerprint={"react": True, "vue": False})

    assert await StrategyDetector().detect(page, make_config()) is StrategyKind.FORM


@pytest.mark.asyncio
async def test_basic_then_token_when_no_form():
    basic = make_config(basic_auth={"enabled": True})
    token = make_config(bearer_token="abc")

    assert await StrategyDetector().detect(FakePage(), basic) is StrategyKind.BASIC
    assert await StrategyDetector().detect(FakePage(), token) is StrategyKind.TOKEN


@pytest.mark.asyncio
async def test_readiness_timeout_is_ignored():
    page = FakePage(elements=login_form(), framework_ready=False)

    assert await wait_for_framework(page, StrategyKind.REACT, 100) is False
    assert await StrategyDetector().detect(page, make_config()) is StrategyKind.FORM


@pytest.mark.asyncio
async def test_driver_error_defaults_to_form():
    page = FakePage(elements=login_form())
    page.close_now()

    assert await StrategyDetector().detect(page, make_config(bearer_token="abc")) is StrategyKind.FORM
