from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


ORIGIN_TAG = "SimpleAPI"
DEFAULT_UF = 38000.0


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class RemoteDocument(BaseModel):
    """One invoice as returned by SimpleAPI inside detalleVentas / detalleCompras."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    folio: int | str
    razon_social: str | None = Field(default=None, alias="razonSocial")
    rut_cliente: str | None = Field(default=None, alias="rutCliente")
    rut_proveedor: str | None = Field(default=None, alias="rutProveedor")
    tipo_dte: int | str | None = Field(default=None, alias="tipoDTE")
    monto_total: int = Field(alias="montoTotal")
    fecha_emision: str | None = Field(default=None, alias="fechaEmision")  # "2026-01-15T00:00:00"
    estado: str | None = None


class RcvDocuments(BaseModel):
    """Raw document arrays for one period, sales and purchases."""
    ventas: list[Any] = []
    compras: list[Any] = []


class SyncResult(BaseModel):
    """Counters for one reconciliation run over one invoice table."""
    nuevos: int = 0
    actualizados: int = 0
    errores: list[str] = []

    @property
    def estado(self) -> str:
        return "parcial" if self.errores else "exitoso"


class RateLookup(BaseModel):
    """Most recent UF value, or the fallback and why it was used."""
    value: float
    is_fallback: bool = False
    reason: str | None = None


# =============================================================================
# TABLE DESCRIPTORS
# =============================================================================

@dataclass(frozen=True)
class InvoiceTable:
    """Field mapping from a RemoteDocument to one invoice table."""
    name: str
    counterparty_column: str
    tax_id_column: str
    tax_id_field: str           # RemoteDocument attribute holding the counterparty RUT
    default_counterparty: str
    default_status: str
    folio_as_invoice_number: bool = False
    constant_columns: dict[str, Any] = field(default_factory=dict)


EMITIDAS = InvoiceTable(
    name="facturas_emitidas",
    counterparty_column="cliente",
    tax_id_column="rut_cliente",
    tax_id_field="rut_cliente",
    default_counterparty="Cliente",
    default_status="Emitida",
    folio_as_invoice_number=True,
)

RECIBIDAS = InvoiceTable(
    name="facturas_recibidas",
    counterparty_column="proveedor",
    tax_id_column="rut_proveedor",
    tax_id_field="rut_proveedor",
    default_counterparty="Proveedor",
    default_status="Recibida",
    constant_columns={"categoria": "Servicios"},
)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class SimpleApiConfig:
    """Configuration for the SimpleAPI RCV connection."""
    api_key: str
    rut_usuario: str
    password_sii: str
    rut_empresa: str
    base_url: str = "https://servicios.simpleapi.cl/api/RCV"

    @classmethod
    def from_env(cls, values: dict) -> "SimpleApiConfig":
        return cls(
            api_key=values.get("SIMPLEAPI_KEY", ""),
            rut_usuario=values.get("SII_RUT_USUARIO", ""),
            password_sii=values.get("SII_PASSWORD", ""),
            rut_empresa=values.get("SII_RUT_EMPRESA", ""),
            base_url=values.get("SIMPLEAPI_BASE_URL") or "https://servicios.simpleapi.cl/api/RCV",
        )

    def validate(self) -> bool:
        return all([self.api_key, self.rut_usuario, self.password_sii, self.rut_empresa])


@dataclass
class SupabaseConfig:
    """Configuration for the Supabase REST endpoint."""
    url: str
    key: str

    @classmethod
    def from_env(cls, values: dict) -> "SupabaseConfig":
        return cls(
            url=values.get("SUPABASE_URL", ""),
            key=values.get("SUPABASE_KEY", ""),
        )

    @property
    def rest_url(self) -> str:
        return f"{self.url.rstrip('/')}/rest/v1"
