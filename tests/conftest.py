"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest

from ttclub import config, error_handling


@pytest.fixture(autouse=True)
def club_env(tmp_path, monkeypatch):
    """Headless settings: no Streamlit secrets, Berlin time, temp data dir."""
    monkeypatch.setattr(config, "st", None)
    monkeypatch.setenv("TTCLUB_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("TTCLUB_APPDATA", str(tmp_path / "appdata"))
    return tmp_path


@pytest.fixture(autouse=True)
def notifications(monkeypatch) -> List[Tuple[str, str]]:
    """Collect user-facing error messages instead of rendering them."""
    shown: List[Tuple[str, str]] = []
    monkeypatch.setattr(error_handling, "_notify", lambda title, message: shown.append((title, message)))
    return shown


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data


class FakeQuery:
    """Records a PostgREST-style call chain and returns canned rows."""

    def __init__(self, table: str, rows: List[Dict[str, Any]], log: List[Tuple], error: Exception | None = None):
        self.table = table
        self.rows = rows
        self.log = log
        self.error = error
        self.calls: List[Tuple] = []

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._record("select", *args, **kwargs)

    def insert(self, payload):
        self.payload = payload
        return self._record("insert", payload)

    def update(self, payload):
        self.payload = payload
        return self._record("update", payload)

    def delete(self):
        return self._record("delete")

    def eq(self, column, value):
        return self._record("eq", column, value)

    def in_(self, column, values):
        return self._record("in_", column, list(values))

    def filter(self, column, operator, value):
        return self._record("filter", column, operator, value)

    def order(self, column, desc=False):
        return self._record("order", column, desc=desc)

    def limit(self, value):
        return self._record("limit", value)

    def range(self, start, end):
        return self._record("range", start, end)

    def execute(self):
        self.log.append((self.table, self.calls))
        if self.error is not None:
            raise self.error
        if getattr(self, "payload", None) is not None and not self.rows:
            payload = self.payload
            return FakeResponse(payload if isinstance(payload, list) else [payload])
        return FakeResponse(list(self.rows))


class FakeClient:
    """Minimal Supabase client stub keyed by table name."""

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]] | None = None, errors: Dict[str, Exception] | None = None):
        self.tables = tables or {}
        self.errors = errors or {}
        self.log: List[Tuple] = []
        self.queries: List[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        query = FakeQuery(name, self.tables.get(name, []), self.log, self.errors.get(name))
        self.queries.append(query)
        return query


@pytest.fixture
def fake_client_factory():
    return FakeClient
