import httpx
import pytest

from ttclub.utils import supa
from ttclub.utils.supa import SupabaseConfigError, SupabaseConnectionError, first_row


@pytest.fixture
def supabase_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")


def test_first_row_basic():
    class Resp:
        def __init__(self, data):
            self.data = data
    assert first_row(Resp([{"a": 1}])) == {"a": 1}
    assert first_row(Resp({"a": 2})) == {"a": 2}
    assert first_row(Resp([])) is None
    assert first_row(None) is None


def test_missing_config(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    with pytest.raises(SupabaseConfigError):
        supa._create_supabase_client()  # pylint: disable=protected-access


def test_service_client_uses_service_key(monkeypatch, supabase_env):
    seen = {}

    def _fake_create(url, key, options=None):
        seen.update(url=url, key=key)
        return "client"

    monkeypatch.setattr(supa, "create_client", _fake_create)

    assert supa.get_service_client() == "client"
    assert seen == {"url": "https://example.supabase.co", "key": "service-key"}


def test_create_supabase_client_http_status_error(monkeypatch, supabase_env):
    request = httpx.Request("GET", "https://example.supabase.co")
    response = httpx.Response(404, request=request, text="Not Found")

    def _raise_http_status(*args, **kwargs):  # pragma: no cover - helper for test
        raise httpx.HTTPStatusError("not found", request=request, response=response)

    monkeypatch.setattr(supa, "create_client", _raise_http_status)

    with pytest.raises(SupabaseConfigError) as excinfo:
        supa._create_supabase_client()  # pylint: disable=protected-access

    assert "HTTP 404" in str(excinfo.value)


def test_create_supabase_client_connection_error(monkeypatch, supabase_env):
    request = httpx.Request("GET", "https://example.supabase.co")

    def _raise_connect(*args, **kwargs):
        raise httpx.ConnectError("offline", request=request)

    monkeypatch.setattr(supa, "create_client", _raise_connect)

    with pytest.raises(SupabaseConnectionError):
        supa._create_supabase_client()  # pylint: disable=protected-access
