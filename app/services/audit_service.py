import httpx
import structlog

from app.clients.supabase import DatastoreError
from app.models.model import SyncResult

logger = structlog.get_logger(__name__)

SYNC_LOG_TABLE = "sii_sync_log"


def build_sync_log_entry(sync_type: str, periodo: str, result: SyncResult, user_email: str | None) -> dict:
    return {
        "tipo_sync": sync_type,
        "periodo": periodo,
        "documentos_nuevos": result.nuevos,
        "documentos_actualizados": result.actualizados,
        "errores": "; ".join(result.errores) if result.errores else None,
        "estado": result.estado,
        "usuario_email": user_email,
    }


def record_sync(store, sync_type: str, periodo: str, result: SyncResult, user_email: str | None) -> None:
    """Append one row to the sync log. A failed insert does not fail the sync."""
    entry = build_sync_log_entry(sync_type, periodo, result, user_email)
    try:
        store.insert(SYNC_LOG_TABLE, [entry])
    except (DatastoreError, httpx.HTTPError) as e:
        logger.error("sync_log_insert_failed", sync_type=sync_type, periodo=periodo, error=str(e))
        return
    logger.info("sync_logged", sync_type=sync_type, periodo=periodo, estado=entry["estado"])
