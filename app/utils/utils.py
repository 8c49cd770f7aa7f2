import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

PERIODO_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}")


def is_valid_periodo(periodo: object) -> bool:
    """True for strings shaped like YYYY-MM. The month range is not checked."""
    return isinstance(periodo, str) and bool(PERIODO_PATTERN.fullmatch(periodo))


def split_periodo(periodo: str) -> tuple[str, str]:
    """'2026-01' → ('2026', '01')."""
    year, month = periodo.split("-")
    return year, month


def iso_date(timestamp: str | None) -> str | None:
    """'2026-01-15T10:30:00' → '2026-01-15'."""
    if not timestamp:
        return None
    return timestamp.split("T")[0]


def clp_to_uf(amount: int | float, uf: float) -> float:
    """Convert CLP to UF rounded half-up to two decimals."""
    value = Decimal(str(amount)) / Decimal(str(uf))
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
