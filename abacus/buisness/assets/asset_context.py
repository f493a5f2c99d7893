"""
Asset Schedule Context
Read-side view of one asset together with its stored schedule.

Handles:
- Asset fields and category name
- The stored schedule as ScheduleEntry values
- Book value at disposal and gain/loss on disposal
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from abacus.buisness.core.exceptions import AssetNotFoundError
from abacus.buisness.depreciation.schedule_generator import (
    book_value_at,
    book_value_for_year,
    disposal_gain_loss,
)
from abacus.buisness.depreciation.structs import ScheduleEntry
from abacus.data.core.asset_info.asset import Asset
from abacus import db


class AssetScheduleContext:
    """
    Context wrapper for an asset and its depreciation schedule.

    Accepts an Asset instance or an asset ID. The schedule is read from the
    store, never regenerated here.
    """

    def __init__(self, asset: Union[Asset, int]):
        """
        Args:
            asset: Asset instance or asset ID

        Raises:
            AssetNotFoundError: if an ID is given and no asset has it
        """
        if isinstance(asset, int):
            self._asset = db.session.get(Asset, asset)
            if self._asset is None:
                raise AssetNotFoundError(asset)
        else:
            self._asset = asset
        self._schedule = None

    @property
    def asset(self) -> Asset:
        return self._asset

    @property
    def asset_id(self) -> int:
        return self._asset.id

    @property
    def schedule(self) -> List[ScheduleEntry]:
        """Stored schedule rows in year order (cached per context)"""
        if self._schedule is None:
            self._schedule = [row.to_schedule_entry() for row in self._asset.schedule_entries]
        return self._schedule

    @property
    def category_name(self) -> Optional[str]:
        category = self._asset.category
        return category.name if category is not None else None

    @property
    def is_disposed(self) -> bool:
        return self._asset.disposed_date is not None

    @property
    def book_value_at_disposal(self) -> Optional[Decimal]:
        if not self.is_disposed:
            return None
        return book_value_at(self.schedule, self._asset.disposed_date)

    @property
    def disposal_gain_loss(self) -> Optional[Decimal]:
        return disposal_gain_loss(self.schedule, self._asset.disposed_date, self._asset.disposed_value)

    def book_value_for_year(self, year: int) -> Optional[Decimal]:
        return book_value_for_year(self.schedule, year, cost=self._asset.cost)

    def to_dict(self, include_schedule: bool = True) -> Dict[str, Any]:
        """Asset fields plus category name, disposal figures and (optionally) the schedule"""
        data = self._asset.to_dict()
        data['category_name'] = self.category_name
        data['is_disposed'] = self.is_disposed
        book_value = self.book_value_at_disposal
        gain_loss = self.disposal_gain_loss
        data['book_value_at_disposal'] = str(book_value) if book_value is not None else None
        data['disposal_gain_loss'] = str(gain_loss) if gain_loss is not None else None
        if include_schedule:
            data['schedule'] = [entry.to_dict() for entry in self.schedule]
        return data
