"""
Depreciation Report Service
Aggregate views over the stored schedules.

Handles:
- Dashboard totals for one year
- Per-year depreciation totals across every asset
- Asset list with schedules for list views and exports

Everything is recomputed on demand from the stored (already truncated)
schedules; nothing here is cached or written.
"""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import selectinload

from abacus.buisness.assets.asset_context import AssetScheduleContext
from abacus.buisness.depreciation.schedule_generator import book_value_for_year, expense_for_year
from abacus.data.core.asset_info.asset import Asset

ZERO = Decimal("0.00")


@dataclass
class DashboardStats:
    """Portfolio totals for one year"""
    year: int
    total_assets: int
    total_cost: Decimal
    total_book_value: Decimal
    current_year_depreciation: Decimal

    def to_dict(self) -> Dict:
        """Convert DashboardStats to dictionary for serialization"""
        return {
            'year': self.year,
            'total_assets': self.total_assets,
            'total_cost': str(self.total_cost),
            'total_book_value': str(self.total_book_value),
            'current_year_depreciation': str(self.current_year_depreciation),
        }


@dataclass
class AnnualSummary:
    """Depreciation booked in one year across all assets"""
    year: int
    total_depreciation: Decimal
    asset_count: int

    def to_dict(self) -> Dict:
        return {
            'year': self.year,
            'total_depreciation': str(self.total_depreciation),
            'asset_count': self.asset_count,
        }


class DepreciationReportService:
    """
    Read-only aggregates.

    Shares the coordinator's session and lock so a report never reads a
    schedule that is halfway through being replaced.
    """

    def __init__(self, coordinator):
        self.session = coordinator.session
        self.lock = coordinator.lock

    def _load_assets(self) -> List[Asset]:
        return (
            self.session.query(Asset)
            .options(selectinload(Asset.schedule_entries), selectinload(Asset.category))
            .order_by(Asset.name, Asset.id)
            .all()
        )

    def get_dashboard_stats(self, current_year: int) -> DashboardStats:
        """
        Totals for the given year.

        An asset counts when it was not disposed before current_year. Its book
        value is the ending value of its current_year entry (cost if the
        schedule has not started yet, the last ending value once it is over).

        Args:
            current_year: Calendar year to report

        Returns:
            DashboardStats
        """
        with self.lock:
            total_assets = 0
            total_cost = ZERO
            total_book_value = ZERO
            current_year_depreciation = ZERO

            for asset in self._load_assets():
                if asset.disposed_date is not None and asset.disposed_date.year < current_year:
                    continue
                schedule = [row.to_schedule_entry() for row in asset.schedule_entries]
                total_assets += 1
                total_cost += asset.cost
                total_book_value += book_value_for_year(schedule, current_year, cost=asset.cost)
                current_year_depreciation += expense_for_year(schedule, current_year)

            return DashboardStats(
                year=current_year,
                total_assets=total_assets,
                total_cost=total_cost,
                total_book_value=total_book_value,
                current_year_depreciation=current_year_depreciation,
            )

    def get_annual_summary(self) -> List[AnnualSummary]:
        """
        Depreciation per year over every stored schedule, ordered by year.

        asset_count is the number of distinct assets with a schedule row in
        that year (rows with zero expense included).
        """
        with self.lock:
            totals = defaultdict(lambda: ZERO)
            assets_by_year = defaultdict(set)
            for asset in self._load_assets():
                for row in asset.schedule_entries:
                    totals[row.year] += row.depreciation_expense
                    assets_by_year[row.year].add(asset.id)

            return [
                AnnualSummary(year=year, total_depreciation=totals[year], asset_count=len(assets_by_year[year]))
                for year in sorted(totals)
            ]

    def list_assets_with_schedules(self) -> List[AssetScheduleContext]:
        """All assets ordered by name, each wrapped with its stored schedule"""
        with self.lock:
            return [AssetScheduleContext(asset) for asset in self._load_assets()]
