import httpx
import structlog

from app.clients.supabase import DatastoreError
from app.models.model import DEFAULT_UF, RateLookup

logger = structlog.get_logger(__name__)

UF_TABLE = "uf_valores"


def get_current_uf(store) -> RateLookup:
    """
    Return the UF value with the most recent fecha.
    Falls back to DEFAULT_UF when the table is empty or unreadable; the
    caller decides whether the fallback is acceptable.
    """
    try:
        row = store.select_first(UF_TABLE, columns="valor", order="fecha.desc")
    except (DatastoreError, httpx.HTTPError) as e:
        logger.warning("uf_lookup_failed", error=str(e))
        return RateLookup(value=DEFAULT_UF, is_fallback=True, reason=f"uf lookup failed: {e}")

    if not row or not row.get("valor"):
        return RateLookup(value=DEFAULT_UF, is_fallback=True, reason=f"{UF_TABLE} has no value")

    return RateLookup(value=row["valor"])
