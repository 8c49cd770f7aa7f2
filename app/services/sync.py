import os
from typing import Any

import structlog

from app.models.model import EMITIDAS, RECIBIDAS, SimpleApiConfig, SyncResult
from app.services.audit_service import record_sync
from app.services.reconcile_service import reconcile_documents
from app.services.secrets_service import SecretsService
from app.services.uf_service import get_current_uf
from app.utils.utils import split_periodo

logger = structlog.get_logger(__name__)


def load_simpleapi_config() -> SimpleApiConfig:
    """
    Read SimpleAPI credentials from the environment, overlaid with the
    Secrets Manager secret named by SIMPLE_RCV_SECRET_NAME when it is set.
    """
    values: dict[str, Any] = dict(os.environ)
    secret_name = os.getenv("SIMPLE_RCV_SECRET_NAME")
    if secret_name:
        values.update(SecretsService().get_secret(secret_name))

    config = SimpleApiConfig.from_env(values)
    if not config.validate():
        logger.warning("simpleapi_credentials_incomplete")
    return config


def _side_summary(total: int, result: SyncResult) -> dict[str, Any]:
    return {
        "total": total,
        "nuevas": result.nuevos,
        "actualizadas": result.actualizados,
        "errores": result.errores,
    }


def sync_periodo(periodo: str, user_email: str | None, store, rcv_client) -> dict[str, Any]:
    """
    Run one RCV sync for periodo (YYYY-MM) and return the response body.
    RemoteAPIError from the fetch propagates; per-invoice failures do not.
    """
    year, month = split_periodo(periodo)
    logger.info("sync_starting", periodo=periodo, user_email=user_email)

    rate = get_current_uf(store)
    if rate.is_fallback:
        logger.warning("uf_fallback_used", uf=rate.value, reason=rate.reason)
    uf = rate.value

    documents = rcv_client.get_rcv(month, year)

    emitidas = SyncResult()
    if documents.ventas:
        emitidas = reconcile_documents(store, EMITIDAS, documents.ventas, uf)
        record_sync(store, EMITIDAS.name, periodo, emitidas, user_email)

    recibidas = SyncResult()
    if documents.compras:
        recibidas = reconcile_documents(store, RECIBIDAS, documents.compras, uf)
        record_sync(store, RECIBIDAS.name, periodo, recibidas, user_email)

    nuevas = emitidas.nuevos + recibidas.nuevos
    actualizadas = emitidas.actualizados + recibidas.actualizados
    logger.info("sync_complete", periodo=periodo, nuevas=nuevas, actualizadas=actualizadas)

    return {
        "success": True,
        "periodo": periodo,
        "uf_utilizada": uf,
        "emitidas": _side_summary(len(documents.ventas), emitidas),
        "recibidas": _side_summary(len(documents.compras), recibidas),
        "message": f"Sincronización completada: {nuevas} nuevas, {actualizadas} actualizadas",
    }
