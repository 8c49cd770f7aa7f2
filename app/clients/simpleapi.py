from typing import Any

import httpx
import stamina
import structlog

from app.models.model import RcvDocuments, SimpleApiConfig

logger = structlog.get_logger(__name__)

HTTP_TIMEOUT = 60.0

# Ambiente=1 selects the SII production environment
AMBIENTE_PRODUCCION = 1


def _nested_list(data: Any, outer: str, inner: str) -> list[Any]:
    """data[outer][inner] when it is a list, otherwise []."""
    section = data.get(outer) if isinstance(data, dict) else None
    items = section.get(inner) if isinstance(section, dict) else None
    return items if isinstance(items, list) else []


class RemoteAPIError(Exception):
    """SimpleAPI answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Error SimpleAPI: {status_code} - {body}")


class SimpleApiClient:
    """Fetches the RCV (sales and purchase register) from SimpleAPI."""

    def __init__(self, config: SimpleApiConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self.client = httpx.Client(
            timeout=HTTP_TIMEOUT,
            transport=transport,
            headers={
                "Authorization": config.api_key,
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        self.client.close()

    def build_payload(self) -> dict[str, Any]:
        return {
            "RutUsuario": self.config.rut_usuario,
            "PasswordSII": self.config.password_sii,
            "RutEmpresa": self.config.rut_empresa,
            "Ambiente": AMBIENTE_PRODUCCION,
        }

    def rcv_url(self, month: str, year: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/ventas/{month}/{year}"

    @stamina.retry(on=httpx.TimeoutException, attempts=3)
    def _post(self, url: str) -> httpx.Response:
        return self.client.post(url, json=self.build_payload())

    def get_rcv(self, month: str, year: str) -> RcvDocuments:
        """Return the sales and purchase documents for month/year."""
        url = self.rcv_url(month, year)
        logger.info("fetching_rcv", month=month, year=year)

        response = self._post(url)
        if response.is_error:
            logger.error("rcv_fetch_failed", status_code=response.status_code, body=response.text)
            raise RemoteAPIError(response.status_code, response.text)

        data = response.json()
        ventas = _nested_list(data, "ventas", "detalleVentas")
        compras = _nested_list(data, "compras", "detalleCompras")

        logger.info("rcv_fetched", ventas=len(ventas), compras=len(compras))
        return RcvDocuments(ventas=ventas, compras=compras)
