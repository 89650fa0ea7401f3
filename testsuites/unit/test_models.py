import pytest

from autotest_auth.models import (
    MASK,
    AuthResult,
    Credentials,
    FieldNotFoundError,
    FieldRole,
    RetryPolicy,
    SelectorSet,
    StrategyKind,
    dedupe,
    redact,
)


def test_strategy_kind_parse_auto_and_names():
    assert StrategyKind.parse(None) is None
    assert StrategyKind.parse("") is None
    assert StrategyKind.parse("Auto") is None
    assert StrategyKind.parse(" REACT ") is StrategyKind.REACT
    assert StrategyKind.parse(StrategyKind.VUE) is StrategyKind.VUE

    with pytest.raises(ValueError):
        StrategyKind.parse("saml")


def test_strategy_kind_paradigm_flags():
    assert StrategyKind.REACT.is_reactive and StrategyKind.VUE.is_reactive
    assert not StrategyKind.FORM.is_reactive
    assert StrategyKind.FORM.is_interactive
    assert not StrategyKind.BASIC.is_interactive


def test_credentials_repr_never_shows_values():
    creds = Credentials(username="alice", password="s3cret")
    text = repr(creds)

    assert "alice" not in text and "s3cret" not in text
    assert "<set>" in text
    assert "<empty>" in repr(Credentials(username="", password=""))
    assert creds.complete
    assert not Credentials(username="alice", password="").complete


def test_retry_policy_validation():
    assert RetryPolicy().max_attempts == 3
    assert RetryPolicy.immediate(2) == RetryPolicy(2, 0, 0)

    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(min_delay_ms=500, max_delay_ms=100)


def test_selector_set_from_mapping_accepts_strings_lists_and_field_keys():
    selectors = SelectorSet.from_mapping({
        "username": "#login-email",
        "password_field": ["#pw", "", "  "],
    })

    assert selectors.for_role(FieldRole.USERNAME) == ["#login-email"]
    assert selectors.for_role(FieldRole.PASSWORD) == ["#pw"]
    assert selectors.for_role(FieldRole.SUBMIT) == []


def test_field_not_found_message_names_role_and_count():
    error = FieldNotFoundError("username", 13, "form")
    assert str(error) == "Required username field not found after trying 13 selectors"
    assert error.strategy == "form"


def test_redact_masks_sensitive_fields_recursively():
    payload = {
        "password": "p1",
        "nested": {"token": "tok", "keep": "value"},
        "items": [{"api_key": "k1"}, {"regular": "ok"}],
        "Authorization": "Bearer abc",
        "csrf_token_present": True,
        "token": None,
    }
    redacted = redact(payload)

    assert redacted["password"] == MASK
    assert redacted["nested"]["token"] == MASK
    assert redacted["nested"]["keep"] == "value"
    assert redacted["items"][0]["api_key"] == MASK
    assert redacted["items"][1]["regular"] == "ok"
    assert redacted["Authorization"] == MASK
    assert redacted["csrf_token_present"] is True
    assert redacted["token"] is None
    assert payload["password"] == "p1"


def test_redact_masks_integer_secrets():
    redacted = redact({"pin_password": 1, "api_key": 0, "token_present": False})

    assert redacted["pin_password"] == MASK
    assert redacted["api_key"] == MASK
    assert redacted["token_present"] is False


def test_redact_keeps_resolved_field_selectors():
    result = AuthResult.succeeded(
        StrategyKind.FORM,
        fields={"username": "#username", "password": "#password"},
        password="p1",
    )

    assert result.details["fields"] == {"username": "#username", "password": "#password"}
    assert result.details["password"] == MASK


def test_auth_result_details_are_redacted():
    result = AuthResult.failed(StrategyKind.TOKEN, "Token rejected", api_key="k1", status=401)

    assert result.success is False
    assert result.details == {"api_key": MASK, "status": 401}
    assert result.to_dict() == {
        "success": False,
        "strategy": "token",
        "error": "Token rejected",
        "details": {"api_key": MASK, "status": 401},
    }


def test_dedupe_keeps_first_position():
    assert dedupe(["#a", "#b", "#a", None, "", "#c"]) == ["#a", "#b", "#c"]
