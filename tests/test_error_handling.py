import httpx
import pytest
from postgrest.exceptions import APIError

from ttclub.error_handling import (
    ERROR_MESSAGES,
    determine_error_source,
    handle_error,
    with_error_handling,
)


def _api_error(code: str, message: str = "request failed") -> APIError:
    return APIError({"message": message, "code": code, "details": None, "hint": None})


@pytest.mark.parametrize(
    "error, expected",
    [
        (RuntimeError("User not authenticated"), ("AUTH", "NOT_AUTHENTICATED")),
        (RuntimeError("Session expired"), ("AUTH", "NOT_AUTHENTICATED")),
        (RuntimeError("permission denied for table profiles"), ("AUTH", "INSUFFICIENT_PERMISSIONS")),
        (RuntimeError("403 Forbidden"), ("AUTH", "INSUFFICIENT_PERMISSIONS")),
        (ValueError("validation failed"), ("DATA", "VALIDATION_ERROR")),
        (RuntimeError("failed to fetch"), ("GENERIC", "NETWORK_ERROR")),
        (RuntimeError("boom"), ("GENERIC", "UNKNOWN_ERROR")),
    ],
)
def test_classifies_by_message(error, expected):
    assert determine_error_source(error) == expected


def test_classifies_postgrest_codes():
    assert determine_error_source(_api_error("23505", "duplicate key")) == ("DATA", "VALIDATION_ERROR")
    assert determine_error_source(_api_error("28000", "invalid authorization")) == (
        "AUTH",
        "INSUFFICIENT_PERMISSIONS",
    )
    assert determine_error_source(_api_error("PGRST116", "no rows")) == ("GENERIC", "UNKNOWN_ERROR")


def test_classifies_httpx_errors():
    request = httpx.Request("GET", "https://example.supabase.co")
    assert determine_error_source(httpx.ReadTimeout("slow", request=request)) == ("GENERIC", "TIMEOUT_ERROR")
    assert determine_error_source(httpx.ConnectError("down", request=request)) == ("GENERIC", "NETWORK_ERROR")


def test_handle_error_logs_and_notifies(caplog, notifications):
    with caplog.at_level("ERROR", logger="ttclub.error_handling"):
        result = handle_error(RuntimeError("permission denied"))

    assert result.category == "AUTH"
    assert result.type == "INSUFFICIENT_PERMISSIONS"
    assert result.message == ERROR_MESSAGES["AUTH"]["INSUFFICIENT_PERMISSIONS"]
    assert notifications == [("Fehler", result.message)]
    assert "[AUTH] INSUFFICIENT_PERMISSIONS" in caplog.text


def test_handle_error_custom_message_and_quiet(caplog, notifications):
    with caplog.at_level("ERROR", logger="ttclub.error_handling"):
        result = handle_error(RuntimeError("boom"), log_error=False, show_toast=False, custom_message="Eigen")

    assert result.message == "Eigen"
    assert notifications == []
    assert caplog.text == ""


def test_with_error_handling_returns_data_or_error(notifications):
    assert with_error_handling(lambda: 42) == (42, None)

    def _fail():
        raise RuntimeError("network down")

    data, error = with_error_handling(_fail, toast_title="Netz")

    assert data is None
    assert isinstance(error, RuntimeError)
    assert notifications == [("Netz", ERROR_MESSAGES["GENERIC"]["NETWORK_ERROR"])]
