"""Act numbering, rounding and file name helpers."""

import re
import uuid
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from src.services.errors import InvalidInputError

VOLUME_PLACES = 3
MONEY_PLACES = 2

_FILE_NAME_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


class ActAmounts(NamedTuple):
    """Money figures of an act, each rounded to 2 decimals."""

    amount_wo_vat: Decimal
    vat_amount: Decimal
    amount_with_vat: Decimal


def to_decimal(value) -> Decimal:
    """Convert a numeric value (including floats read from SQLite) to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_away(value, places: int) -> Decimal:
    """Round to ``places`` decimals, halves away from zero (2.345 -> 2.35, -2.345 -> -2.35)."""
    return to_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def compute_act_amounts(total_volume: Decimal, price_per_m3: Decimal, vat_rate: Decimal) -> ActAmounts:
    """Price an act.

    Each figure is rounded independently, so amount_with_vat always equals
    amount_wo_vat + vat_amount exactly.
    """
    amount_wo_vat = round_half_away(to_decimal(total_volume) * to_decimal(price_per_m3), MONEY_PLACES)
    vat_amount = round_half_away(amount_wo_vat * to_decimal(vat_rate) / 100, MONEY_PLACES)
    amount_with_vat = round_half_away(amount_wo_vat + vat_amount, MONEY_PLACES)
    return ActAmounts(amount_wo_vat, vat_amount, amount_with_vat)


def is_budget_exceeded(budget_total: Decimal, paid_before: Decimal, amount_wo_vat: Decimal) -> bool:
    """True when a positive budget is overrun by this act. Informational only."""
    budget = to_decimal(budget_total)
    return budget > 0 and to_decimal(paid_before) + to_decimal(amount_wo_vat) > budget


def date_only(value: date | datetime | None) -> date | None:
    """Drop the time of day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_period(period_start: date | datetime | None, period_end: date | datetime | None) -> tuple[date, date]:
    """Validate a requested period and return it as calendar dates.

    Raises:
        InvalidInputError: If a bound is missing or start is after end
    """
    if period_start is None or period_end is None:
        raise InvalidInputError("period dates are required")
    start, end = date_only(period_start), date_only(period_end)
    same_day_reversed = (
        isinstance(period_start, datetime)
        and isinstance(period_end, datetime)
        and period_start > period_end
    )
    if start > end or same_day_reversed:
        raise InvalidInputError("period_start must be before or equal to period_end")
    return start, end


def build_act_number(prefix: str, contract_id: uuid.UUID, act_date: date) -> str:
    """Format ``{prefix}-{first 8 chars of contract id}-{YYYYMMDD}``.

    Not unique by construction: two contracts sharing an id prefix get the
    same number on the same day and the second insert fails on uq act_number.
    """
    short_id = str(contract_id).upper()[:8]
    return f"{prefix}-{short_id}-{act_date.strftime('%Y%m%d')}"


def sanitize_file_name(value: str) -> str:
    """Replace everything outside [A-Za-z0-9_-] with '-' and trim dashes."""
    return _FILE_NAME_DISALLOWED.sub("-", value or "").strip("-")


__all__ = [
    "ActAmounts",
    "MONEY_PLACES",
    "VOLUME_PLACES",
    "build_act_number",
    "compute_act_amounts",
    "date_only",
    "is_budget_exceeded",
    "normalize_period",
    "round_half_away",
    "sanitize_file_name",
    "to_decimal",
]
