import os
from functools import lru_cache
from typing import Any

import httpx
import stamina
import structlog

from app.models.model import SupabaseConfig

logger = structlog.get_logger(__name__)

HTTP_TIMEOUT = 30.0


class DatastoreError(Exception):
    """PostgREST rejected a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _eq_filters(filters: dict[str, Any] | None) -> dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


class SupabaseClient:
    """Minimal row store over the Supabase PostgREST API."""

    def __init__(self, config: SupabaseConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self.client = httpx.Client(
            base_url=config.rest_url,
            timeout=HTTP_TIMEOUT,
            transport=transport,
            headers={
                "apikey": config.key,
                "Authorization": f"Bearer {config.key}",
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def _raise_for_status(response: httpx.Response, table: str) -> None:
        if not response.is_error:
            return
        message = response.text
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            message = body["message"]
        logger.error("datastore_request_failed", table=table, status_code=response.status_code, message=message)
        raise DatastoreError(message, response.status_code)

    @stamina.retry(on=httpx.TimeoutException, attempts=3)
    def select_first(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order: str | None = None,
    ) -> dict[str, Any] | None:
        """Return the first matching row, or None when nothing matches."""
        params = {"select": columns, **_eq_filters(filters), "limit": "1"}
        if order:
            params["order"] = order

        response = self.client.get(f"/{table}", params=params)
        self._raise_for_status(response, table)
        rows = response.json()
        return rows[0] if rows else None

    def insert(self, table: str, rows: list[dict[str, Any]]) -> None:
        response = self.client.post(f"/{table}", json=rows, headers={"Prefer": "return=minimal"})
        self._raise_for_status(response, table)

    def update(self, table: str, values: dict[str, Any], filters: dict[str, Any]) -> None:
        response = self.client.patch(
            f"/{table}",
            params=_eq_filters(filters),
            json=values,
            headers={"Prefer": "return=minimal"},
        )
        self._raise_for_status(response, table)


@lru_cache(maxsize=1)
def get_store() -> SupabaseClient:
    """Process-wide client, created on first use."""
    return SupabaseClient(SupabaseConfig.from_env(dict(os.environ)))
