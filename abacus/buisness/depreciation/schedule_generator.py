"""
Schedule Generator
Builds the straight-line year-by-year ledger for one asset.

Pure functions only. The generator accepts anything that exposes cost,
salvage_value, useful_life_years, date_placed_in_service and (optionally)
disposed_date: a NormalizedAsset, an Asset row, or a test double.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from abacus.buisness.depreciation.structs import ScheduleEntry

CENTS = Decimal("0.01")


def _to_cents(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_schedule(asset, as_of_year: Optional[int] = None) -> List[ScheduleEntry]:
    """
    Generate the depreciation schedule for an asset.

    The annual expense is computed once at full precision. Each year the
    running accumulated depreciation is rounded to cents and the published
    figures are derived from it, so every row satisfies
    ending == beginning - expense and accumulated == cost - ending exactly.
    The final year absorbs whatever is left so that it ends on salvage.

    Args:
        asset: Validated asset (cost > 0, 0 <= salvage <= cost, life >= 1)
        as_of_year: Optional cut-off; rows after this year are not returned

    Returns:
        List[ScheduleEntry]: Rows in ascending year order, truncated after the disposal year
    """
    cost = _to_cents(asset.cost)
    salvage = _to_cents(asset.salvage_value if asset.salvage_value is not None else 0)
    life = int(asset.useful_life_years)
    if life < 1:
        raise ValueError("useful_life_years must be at least 1")

    start_year = asset.date_placed_in_service.year
    annual_expense = (cost - salvage) / Decimal(life)

    disposed_date = getattr(asset, 'disposed_date', None)
    last_year = start_year + life - 1
    if disposed_date is not None:
        last_year = min(last_year, disposed_date.year)
    if as_of_year is not None:
        last_year = min(last_year, as_of_year)

    entries = []
    accumulated_exact = Decimal(0)
    accumulated = Decimal("0.00")
    beginning = cost

    for offset in range(life):
        year = start_year + offset
        if year > last_year:
            break

        if offset == life - 1:
            # Final year lands on salvage exactly
            expense = beginning - salvage
            accumulated = accumulated + expense
        else:
            accumulated_exact += annual_expense
            rounded = _to_cents(accumulated_exact)
            expense = rounded - accumulated
            accumulated = rounded

        ending = cost - accumulated
        entries.append(ScheduleEntry(
            year=year,
            beginning_book_value=beginning,
            depreciation_expense=expense,
            accumulated_depreciation=accumulated,
            ending_book_value=ending,
        ))
        beginning = ending

    return entries


def book_value_at(entries: Sequence, on_date: date) -> Optional[Decimal]:
    """
    Book value at a date: the beginning value of that date's year.

    Dates past the end of the schedule get the last ending value, dates
    before it get the first beginning value. An empty schedule has no
    book value.
    """
    if not entries:
        return None
    year = on_date.year
    for entry in entries:
        if entry.year == year:
            return entry.beginning_book_value
    if year > entries[-1].year:
        return entries[-1].ending_book_value
    return entries[0].beginning_book_value


def disposal_gain_loss(entries: Sequence, disposed_date: Optional[date],
                       disposed_value: Optional[Decimal]) -> Optional[Decimal]:
    """Proceeds minus book value at disposal. None until both a date and a value are recorded."""
    if disposed_date is None or disposed_value is None:
        return None
    book_value = book_value_at(entries, disposed_date)
    if book_value is None:
        return None
    return _to_cents(disposed_value) - book_value


def book_value_for_year(entries: Sequence, year: int, cost=None) -> Optional[Decimal]:
    """
    Book value at the end of a year.

    Before the schedule starts the asset is carried at cost (or the first
    beginning value if cost is not given). After it ends the last ending
    value holds.
    """
    if not entries:
        return _to_cents(cost) if cost is not None else None
    if year < entries[0].year:
        return _to_cents(cost) if cost is not None else entries[0].beginning_book_value
    for entry in entries:
        if entry.year == year:
            return entry.ending_book_value
    return entries[-1].ending_book_value


def expense_for_year(entries: Sequence, year: int) -> Decimal:
    """Depreciation expense booked in a year, zero when the schedule has no row for it."""
    for entry in entries:
        if entry.year == year:
            return entry.depreciation_expense
    return Decimal("0.00")
