"""Thin query-builder wrapper around the Supabase table API.

Every call returns a :class:`QueryResult`; backend failures are reported via
:func:`ttclub.error_handling.handle_error` and handed back in ``error`` instead
of being raised, so views can branch on the result without try/except.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import httpx
from postgrest.exceptions import APIError
from postgrest.utils import sanitize_param

from ttclub.db_tables import BOARD_DOCUMENTS
from ttclub.error_handling import handle_error
from ttclub.utils.supa import first_row

# friendly name -> PostgREST operator
FILTER_OPERATORS: Dict[str, str] = {
    "eq": "eq",
    "neq": "neq",
    "gt": "gt",
    "gte": "gte",
    "lt": "lt",
    "lte": "lte",
    "like": "like",
    "ilike": "ilike",
    "is": "is",
    "in": "in",
    "contains": "cs",
    "containedBy": "cd",
    "rangeLt": "sl",
    "rangeGt": "sr",
    "rangeGte": "nxl",
    "rangeLte": "nxr",
    "rangeAdjacent": "adj",
    "overlaps": "ov",
}

_BACKEND_ERRORS = (APIError, httpx.HTTPError)
# characters that force quoting inside a Postgres array literal
_ARRAY_SPECIAL_RE = re.compile(r'[,{}"\\\s]')

_LOAD_ERROR = "Die Daten konnten nicht geladen werden."
_SAVE_ERROR = "Die Daten konnten nicht gespeichert werden."
_UPDATE_ERROR = "Die Daten konnten nicht aktualisiert werden."
_DELETE_ERROR = "Die Daten konnten nicht gelöscht werden."
_DB_TITLE = "Datenbankfehler"


class QueryFilter(NamedTuple):
    column: str
    operator: str
    value: Any


class QueryResult(NamedTuple):
    data: Any
    error: Optional[Exception]

    @property
    def ok(self) -> bool:
        return self.error is None


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _array_element(value: Any) -> str:
    text = _scalar(value)
    if text and not _ARRAY_SPECIAL_RE.search(text):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _filter_value(operator: str, value: Any) -> str:
    if isinstance(value, dict):
        return json.dumps(value)
    if isinstance(value, (list, tuple, set)):
        if operator == "in":
            return "(" + ",".join(sanitize_param(_scalar(v)) for v in value) + ")"
        return "{" + ",".join(_array_element(v) for v in value) + "}"
    return _scalar(value)


class DatabaseService:
    """Generic CRUD access to Supabase tables."""

    def __init__(self, client: Any):
        self.client = client

    def _fail(self, error: Exception, message: str, title: str = _DB_TITLE) -> QueryResult:
        handle_error(error, toast_title=title, custom_message=message)
        return QueryResult(None, error)

    def select(
        self,
        table: str,
        filters: Optional[Iterable[QueryFilter]] = None,
        order_by: Optional[Sequence[Tuple[str, bool]]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        columns: str = "*",
    ) -> QueryResult:
        try:
            query = self.client.table(table).select(columns)

            for column, operator, value in filters or ():
                pg_operator = FILTER_OPERATORS.get(operator)
                if pg_operator is None:
                    raise ValueError(f"Unsupported filter operator: {operator}")
                query = query.filter(column, pg_operator, _filter_value(operator, value))

            for column, ascending in order_by or ():
                query = query.order(column, desc=not ascending)

            if limit:
                query = query.limit(limit)
                if offset:
                    query = query.range(offset, offset + limit - 1)

            res = query.execute()
        except _BACKEND_ERRORS as exc:
            return self._fail(exc, _LOAD_ERROR)
        return QueryResult(list(res.data or []), None)

    def insert(self, table: str, data: Dict[str, Any]) -> QueryResult:
        try:
            res = self.client.table(table).insert(data).execute()
        except _BACKEND_ERRORS as exc:
            return self._fail(exc, _SAVE_ERROR)
        return QueryResult(first_row(res), None)

    def insert_many(self, table: str, rows: List[Dict[str, Any]]) -> QueryResult:
        if not rows:
            return QueryResult([], None)
        try:
            res = self.client.table(table).insert(rows).execute()
        except _BACKEND_ERRORS as exc:
            return self._fail(exc, _SAVE_ERROR)
        return QueryResult(list(res.data or []), None)

    def update(self, table: str, row_id: str, data: Dict[str, Any]) -> QueryResult:
        try:
            res = self.client.table(table).update(data).eq("id", row_id).execute()
        except _BACKEND_ERRORS as exc:
            return self._fail(exc, _UPDATE_ERROR)
        return QueryResult(first_row(res), None)

    def delete(self, table: str, row_id: str) -> QueryResult:
        try:
            self.client.table(table).delete().eq("id", row_id).execute()
        except _BACKEND_ERRORS as exc:
            return self._fail(exc, _DELETE_ERROR)
        return QueryResult(None, None)

    def transaction(self, callback: Callable[[], Any]) -> QueryResult:
        """Run ``callback`` as one unit; PostgREST has no client transactions,
        so this only groups error reporting."""
        try:
            return QueryResult(callback(), None)
        except Exception as exc:
            return self._fail(
                exc,
                "Die Operation konnte nicht vollständig ausgeführt werden.",
                title="Transaktionsfehler",
            )


class DocumentNotFoundError(LookupError):
    pass


def fetch_board_documents(db: DatabaseService) -> QueryResult:
    return db.select(BOARD_DOCUMENTS, order_by=[("created_at", False)])


def create_board_document(db: DatabaseService, data: Dict[str, Any]) -> QueryResult:
    return db.insert(BOARD_DOCUMENTS, data)


def update_board_document(db: DatabaseService, document_id: str, data: Dict[str, Any]) -> QueryResult:
    return db.update(BOARD_DOCUMENTS, document_id, data)


def delete_board_document(db: DatabaseService, document_id: str) -> QueryResult:
    return db.delete(BOARD_DOCUMENTS, document_id)


def search_board_documents(db: DatabaseService, term: str) -> QueryResult:
    return db.select(
        BOARD_DOCUMENTS,
        filters=[QueryFilter("title", "ilike", f"%{term}%")],
        order_by=[("created_at", False)],
    )


def move_document(db: DatabaseService, document_id: str, new_author_id: str) -> QueryResult:
    """Reassign a board document to another author."""

    def _move():
        found = db.select(BOARD_DOCUMENTS, filters=[QueryFilter("id", "eq", document_id)])
        if found.error is not None:
            raise found.error
        if not found.data:
            raise DocumentNotFoundError("Dokument nicht gefunden")
        updated = db.update(BOARD_DOCUMENTS, document_id, {"author_id": new_author_id})
        if updated.error is not None:
            raise updated.error
        return found.data[0]

    return db.transaction(_move)


__all__ = [
    "FILTER_OPERATORS",
    "QueryFilter",
    "QueryResult",
    "DatabaseService",
    "DocumentNotFoundError",
    "fetch_board_documents",
    "create_board_document",
    "update_board_document",
    "delete_board_document",
    "search_board_documents",
    "move_document",
]
