import base64
import json
from collections import defaultdict
from typing import Any

import pytest

from app.clients.supabase import DatastoreError
from app.models.model import RcvDocuments


class FakeStore:
    """In-memory stand-in for SupabaseClient."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.rejected_folios: set = set()
        self.unreadable_tables: set[str] = set()
        self.unwritable_tables: set[str] = set()
        self.calls: list[tuple] = []
        self._next_id = 1

    def seed(self, table: str, **row) -> dict[str, Any]:
        row = {"id": self._next_id, **row}
        self._next_id += 1
        self.tables[table].append(row)
        return row

    def select_first(self, table, columns="*", filters=None, order=None):
        self.calls.append(("select", table, filters))
        if table in self.unreadable_tables:
            raise DatastoreError("connection refused", 503)

        rows = [
            r for r in self.tables[table]
            if all(r.get(k) == v for k, v in (filters or {}).items())
        ]
        if order:
            column, _, direction = order.partition(".")
            rows = sorted(rows, key=lambda r: r[column], reverse=direction == "desc")
        if not rows:
            return None
        if columns == "*":
            return dict(rows[0])
        return {c: rows[0].get(c) for c in columns.split(",")}

    def insert(self, table, rows):
        self.calls.append(("insert", table, rows))
        if table in self.unwritable_tables:
            raise DatastoreError("permission denied", 401)
        for row in rows:
            if row.get("numero_folio") in self.rejected_folios:
                raise DatastoreError('null value in column "rut_cliente" violates not-null constraint', 400)
        for row in rows:
            self.seed(table, **row)

    def update(self, table, values, filters):
        self.calls.append(("update", table, values, filters))
        for row in self.tables[table]:
            if all(row.get(k) == v for k, v in filters.items()):
                row.update(values)


class FakeRcvClient:
    def __init__(self, ventas=None, compras=None, error: Exception | None = None):
        self.documents = RcvDocuments(ventas=ventas or [], compras=compras or [])
        self.error = error
        self.requests: list[tuple[str, str]] = []
        self.closed = False

    def get_rcv(self, month, year):
        self.requests.append((month, year))
        if self.error:
            raise self.error
        return self.documents

    def close(self):
        self.closed = True


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def venta():
    return {
        "folio": 100,
        "razonSocial": "Constructora Andes SpA",
        "rutCliente": "76123456-7",
        "tipoDTE": 33,
        "montoTotal": 3800000,
        "fechaEmision": "2026-01-15T00:00:00",
        "estado": "Aceptado",
    }


@pytest.fixture
def compra():
    return {
        "folio": 5501,
        "razonSocial": "Servicios Cloud Ltda",
        "rutProveedor": "77654321-K",
        "tipoDTE": 33,
        "montoTotal": 190000,
        "fechaEmision": "2026-01-20T00:00:00",
    }


def http_event(
    method: str = "POST",
    body: Any = None,
    path: str = "/api/simple-rcv",
    base64_encoded: bool = False,
) -> dict:
    """API Gateway HTTP API (payload v2) event."""
    if isinstance(body, dict):
        body = json.dumps(body)
    if base64_encoded and body is not None:
        body = base64.b64encode(body.encode()).decode()
    return {
        "version": "2.0",
        "routeKey": "$default",
        "rawPath": path,
        "rawQueryString": "",
        "headers": {"content-type": "application/json", "host": "example.com"},
        "requestContext": {
            "accountId": "123456789012",
            "apiId": "api-id",
            "domainName": "example.com",
            "domainPrefix": "example",
            "http": {
                "method": method,
                "path": path,
                "protocol": "HTTP/1.1",
                "sourceIp": "127.0.0.1",
                "userAgent": "pytest",
            },
            "requestId": "request-id",
            "routeKey": "$default",
            "stage": "$default",
            "time": "19/Oct/2026:12:00:00 +0000",
            "timeEpoch": 1792411200000,
        },
        "body": body,
        "isBase64Encoded": base64_encoded,
    }


@pytest.fixture
def make_event():
    return http_event


@pytest.fixture
def make_rcv_client():
    return FakeRcvClient
