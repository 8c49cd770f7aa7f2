from typing import Any

import httpx
import structlog

from app.clients.supabase import DatastoreError
from app.models.model import ORIGIN_TAG, InvoiceTable, RemoteDocument, SyncResult
from app.utils.utils import clp_to_uf, iso_date, utc_now_iso

logger = structlog.get_logger(__name__)


def build_invoice_row(doc: RemoteDocument, table: InvoiceTable, uf: float, synced_at: str) -> dict[str, Any]:
    """Map a SimpleAPI document to a row of the given invoice table."""
    row: dict[str, Any] = {"numero_folio": doc.folio}
    if table.folio_as_invoice_number:
        row["numero_factura"] = doc.folio
    row.update({
        table.counterparty_column: doc.razon_social or table.default_counterparty,
        table.tax_id_column: getattr(doc, table.tax_id_field),
        "fecha_emision": iso_date(doc.fecha_emision),
        "monto_clp": doc.monto_total,
        "monto_uf": clp_to_uf(doc.monto_total, uf),
        "estado": doc.estado or table.default_status,
        "origen": ORIGIN_TAG,
        "tipo_documento": doc.tipo_dte,
        **table.constant_columns,
        "actualizado_sii": synced_at,
    })
    return row


def find_existing(store, table: InvoiceTable, folio: Any) -> dict[str, Any] | None:
    # A failed lookup counts as "not found"; the insert that follows surfaces
    # any real datastore problem as a per-folio error.
    try:
        return store.select_first(
            table.name,
            columns="id",
            filters={"numero_folio": folio, "origen": ORIGIN_TAG},
        )
    except (DatastoreError, httpx.HTTPError) as e:
        logger.warning("invoice_lookup_failed", table=table.name, folio=folio, error=str(e))
        return None


def _folio_of(raw: Any) -> Any:
    return raw.get("folio") if isinstance(raw, dict) else None


def reconcile_documents(
    store,
    table: InvoiceTable,
    documents: list[Any],
    uf: float,
    now: str | None = None,
) -> SyncResult:
    """
    Upsert each document into table, one at a time and in order.
    Existing rows (same folio, same origin) only get their amounts and
    actualizado_sii refreshed. A failing document is recorded in errores
    and never stops the run.
    """
    result = SyncResult()
    synced_at = now or utc_now_iso()

    for raw in documents:
        folio = _folio_of(raw)
        try:
            doc = RemoteDocument.model_validate(raw)
            row = build_invoice_row(doc, table, uf, synced_at)

            existing = find_existing(store, table, doc.folio)
            if existing:
                store.update(
                    table.name,
                    {
                        "monto_clp": row["monto_clp"],
                        "monto_uf": row["monto_uf"],
                        "actualizado_sii": row["actualizado_sii"],
                    },
                    {"id": existing["id"]},
                )
                result.actualizados += 1
                logger.info("invoice_updated", table=table.name, folio=doc.folio)
            else:
                store.insert(table.name, [row])
                result.nuevos += 1
                logger.info("invoice_inserted", table=table.name, folio=doc.folio)

        except Exception as e:
            logger.error("invoice_sync_failed", table=table.name, folio=folio, error=str(e))
            result.errores.append(f"Folio {folio}: {e}")

    logger.info(
        "reconcile_complete",
        table=table.name,
        total=len(documents),
        nuevos=result.nuevos,
        actualizados=result.actualizados,
        errores=len(result.errores),
    )
    return result
