import pytest

from xfpl.errors import (
    ApiError,
    AuthError,
    CliError,
    ConfigError,
    HttpError,
    NotFoundError,
    PartialFailureError,
    RateLimitError,
    UsageError,
    classify_api_error,
    exit_code,
)


@pytest.mark.parametrize(
    "cls, code",
    [
        (UsageError, 2),
        (NotFoundError, 3),
        (AuthError, 4),
        (ApiError, 5),
        (PartialFailureError, 6),
        (RateLimitError, 7),
        (ConfigError, 10),
    ],
)
def test_exit_codes(cls, code):
    err = cls("boom")
    assert exit_code(err) == code
    assert isinstance(err, CliError)
    assert str(err) == "boom"


def test_exit_code_for_plain_exception_and_none():
    assert exit_code(ValueError("x")) == 1
    assert exit_code(None) == 0


def test_http_error_message_contains_status():
    err = HttpError(404, "GET", "/entry/1/history/", "missing")
    assert "HTTP 404" in str(err)
    assert err.status_code == 404
    assert err.body == "missing"


def test_classify_not_found():
    original = HttpError(404, "GET", "/x")
    result = classify_api_error(original)
    assert isinstance(result, NotFoundError)
    assert exit_code(result) == 3
    assert result.__cause__ is original
    assert "resource not found" in str(result)


def test_classify_unauthorized():
    result = classify_api_error(HttpError(401))
    assert isinstance(result, AuthError)
    assert "check your API key" in str(result)
    assert "xfpl doctor" in str(result)


def test_classify_forbidden():
    result = classify_api_error(HttpError(403))
    assert isinstance(result, AuthError)
    assert "permission denied" in str(result)


def test_classify_rate_limit():
    result = classify_api_error(HttpError(429))
    assert isinstance(result, RateLimitError)
    assert exit_code(result) == 7


def test_classify_conflict_idempotent_is_noop():
    assert classify_api_error(HttpError(409), idempotent=True) is None


def test_classify_conflict_not_idempotent():
    result = classify_api_error(HttpError(409))
    assert isinstance(result, ApiError)
    assert "HTTP 409" in str(result)


def test_classify_other_errors_are_api_errors():
    original = RuntimeError("connection refused")
    result = classify_api_error(original)
    assert isinstance(result, ApiError)
    assert str(result) == "connection refused"
    assert result.__cause__ is original