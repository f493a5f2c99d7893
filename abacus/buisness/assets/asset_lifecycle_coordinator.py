"""
Asset Lifecycle Coordinator
Single entry point for every write that touches an asset or its schedule.

Handles:
- Create / update / dispose / reinstate / delete of assets
- Regenerating the depreciation schedule when a financial field changes
- Keeping the asset row and its schedule in one transaction

One coordinator is built per application. It holds the session and one
re-entrant lock; every mutation and every read served through it runs
under that lock so a read never sees half of a schedule replacement.
"""

import threading
from collections.abc import Mapping
from datetime import date
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from abacus.buisness.assets.category_manager import CategoryManager
from abacus.buisness.core.exceptions import (
    AssetNotFoundError,
    FieldValidationError,
    StorageError,
)
from abacus.buisness.depreciation.schedule_generator import generate_schedule
from abacus.buisness.depreciation.structs import NormalizedAsset
from abacus.buisness.depreciation.validation import validate_asset, validate_disposal
from abacus.data.core.asset_info.asset import Asset
from abacus.data.core.asset_info.category import Category
from abacus.data.core.asset_info.depreciation_entry import DepreciationEntry
from abacus.logger import get_logger

logger = get_logger("abacus.buisness.assets")

# Editable asset fields, in form order
ASSET_FIELDS = (
    'name',
    'description',
    'category_id',
    'date_placed_in_service',
    'cost',
    'salvage_value',
    'useful_life_years',
    'property_class',
    'notes',
    'disposed_date',
    'disposed_value',
)

# A change to any of these invalidates the stored schedule
SCHEDULE_FIELDS = frozenset({
    'cost',
    'salvage_value',
    'useful_life_years',
    'date_placed_in_service',
    'disposed_date',
})


class AssetLifecycleCoordinator:
    """
    Coordinates validation, schedule generation and storage for assets.

    Failure semantics:
    - Invalid input raises FieldValidationError before anything is written
    - A failed write is rolled back, the previous asset and schedule stay
      as they were, and StorageError is raised
    """

    def __init__(self, session, today_provider: Callable[[], date] = date.today, lock=None):
        """
        Args:
            session: SQLAlchemy session (normally db.session)
            today_provider: Returns the current date for the not-in-the-future rules
            lock: Optional shared lock; a new RLock is created when omitted
        """
        self.session = session
        self.today_provider = today_provider
        self.lock = lock if lock is not None else threading.RLock()
        self.categories = CategoryManager(session, self.lock)

    # Reads

    def get_asset(self, asset_id: int) -> Asset:
        """
        Get an asset by ID.

        Raises:
            AssetNotFoundError: if no asset has this ID
        """
        with self.lock:
            asset = self.session.get(Asset, asset_id)
            if asset is None:
                raise AssetNotFoundError(asset_id)
            return asset

    def list_assets(self) -> List[Asset]:
        with self.lock:
            return self.session.query(Asset).order_by(Asset.name, Asset.id).all()

    # Writes

    def create(self, candidate: Mapping) -> Asset:
        """
        Validate a candidate, store it and its full schedule.

        Args:
            candidate: Raw asset fields (see ASSET_FIELDS)

        Returns:
            Asset: The stored asset with schedule_entries populated

        Raises:
            FieldValidationError: if any field rule fails
            StorageError: if the write fails
        """
        with self.lock:
            normalized = self._validate(candidate)
            self._check_category(normalized.category_id)

            asset = Asset.from_dict(normalized.to_dict())
            entries = generate_schedule(normalized)
            try:
                self.session.add(asset)
                asset.schedule_entries = [DepreciationEntry.from_schedule_entry(e) for e in entries]
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail("creating asset", e)

            logger.info(f"Asset created: {asset.name} (ID: {asset.id}, {len(entries)} schedule years)")
            return asset

    def update(self, asset_id: int, candidate: Mapping) -> Asset:
        """
        Apply a partial or full edit to an asset.

        Keys present in candidate replace the stored values (None clears an
        optional field); missing keys keep the stored values. Clearing
        disposed_date also clears disposed_value unless the candidate sets
        it. The merged record is validated as a whole. The schedule is regenerated only
        when a field in SCHEDULE_FIELDS changed.

        Raises:
            AssetNotFoundError: if no asset has this ID
            FieldValidationError: if the merged record fails a rule
            StorageError: if the write fails
        """
        if not isinstance(candidate, Mapping):
            raise TypeError(f"asset candidate must be a mapping, got {type(candidate).__name__}")

        with self.lock:
            asset = self.get_asset(asset_id)
            merged = self._current_fields(asset)
            merged.update({key: value for key, value in candidate.items() if key in ASSET_FIELDS})
            # Clearing the disposal date clears the disposal, as reinstate does
            if 'disposed_date' in candidate and _is_cleared(candidate['disposed_date']) \
                    and 'disposed_value' not in candidate:
                merged['disposed_value'] = None

            normalized = self._validate(merged, asset_id=asset_id)
            self._check_category(normalized.category_id)

            try:
                changed = asset.apply_dict(normalized.to_dict())
                regenerate = bool(changed & SCHEDULE_FIELDS)
                if regenerate:
                    self._replace_schedule(asset, normalized)
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"updating asset {asset_id}", e)

            if changed:
                logger.info(f"Asset updated: {asset.name} (ID: {asset.id}) fields={sorted(changed)}"
                            f"{' schedule regenerated' if regenerate else ''}")
            else:
                logger.debug(f"Asset {asset_id} update had no changes")
            return asset

    def dispose(self, asset_id: int, disposed_date, disposed_value=None) -> Asset:
        """
        Record a disposal and truncate the schedule after the disposal year.

        The disposal year itself is kept in full (no partial-year proration).

        Raises:
            AssetNotFoundError: if no asset has this ID
            FieldValidationError: if the disposal date or value is invalid
            StorageError: if the write fails
        """
        with self.lock:
            asset = self.get_asset(asset_id)
            result = validate_disposal(disposed_date, disposed_value, asset.date_placed_in_service,
                                       self.today_provider())
            if not result.is_valid:
                logger.warning(f"Disposal of asset {asset_id} rejected: {result.errors}")
                raise FieldValidationError(result.errors)

            disposal = result.value
            try:
                asset.disposed_date = disposal.disposed_date
                asset.disposed_value = disposal.disposed_value
                self._replace_schedule(asset, self._normalized_from(asset))
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"disposing asset {asset_id}", e)

            logger.info(f"Asset disposed: {asset.name} (ID: {asset.id}) on {disposal.disposed_date.isoformat()}")
            return asset

    def reinstate(self, asset_id: int) -> Asset:
        """
        Clear the disposal and restore the full-life schedule.

        Raises:
            AssetNotFoundError: if no asset has this ID
            StorageError: if the write fails
        """
        with self.lock:
            asset = self.get_asset(asset_id)
            if not asset.is_disposed:
                logger.debug(f"Asset {asset_id} is not disposed; nothing to reinstate")
                return asset

            try:
                asset.disposed_date = None
                asset.disposed_value = None
                self._replace_schedule(asset, self._normalized_from(asset))
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"reinstating asset {asset_id}", e)

            logger.info(f"Asset reinstated: {asset.name} (ID: {asset.id})")
            return asset

    def delete(self, asset_id: int) -> int:
        """
        Delete an asset and its schedule in one transaction.

        Returns:
            int: The deleted asset's ID

        Raises:
            AssetNotFoundError: if no asset has this ID
            StorageError: if the write fails
        """
        with self.lock:
            asset = self.get_asset(asset_id)
            name = asset.name
            try:
                self.session.delete(asset)
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"deleting asset {asset_id}", e)

            logger.info(f"Asset deleted: {name} (ID: {asset_id})")
            return asset_id

    # Helpers

    def _validate(self, candidate: Mapping, asset_id: Optional[int] = None) -> NormalizedAsset:
        result = validate_asset(candidate, self.today_provider())
        if not result.is_valid:
            label = f"asset {asset_id}" if asset_id is not None else "new asset"
            logger.warning(f"Validation failed for {label}: {result.errors}")
            raise FieldValidationError(result.errors)
        return result.value

    def _check_category(self, category_id: Optional[int]):
        if category_id is not None and self.session.get(Category, category_id) is None:
            logger.warning(f"Asset references missing category {category_id}")
            raise FieldValidationError({'category_id': "Category not found"})

    def _replace_schedule(self, asset: Asset, source):
        """Delete the stored schedule and insert a freshly generated one."""
        entries = generate_schedule(source)
        asset.schedule_entries.clear()
        # Old rows must be gone before new rows reuse their (asset_id, year) keys
        self.session.flush()
        asset.schedule_entries.extend(DepreciationEntry.from_schedule_entry(e) for e in entries)

    def _fail(self, action: str, error: Exception):
        self.session.rollback()
        logger.error(f"Storage failure while {action}: {error}")
        raise StorageError(f"Storage failure while {action}") from error

    @staticmethod
    def _current_fields(asset: Asset) -> Dict:
        return {key: getattr(asset, key) for key in ASSET_FIELDS}

    @staticmethod
    def _normalized_from(asset: Asset) -> NormalizedAsset:
        return NormalizedAsset(
            name=asset.name,
            date_placed_in_service=asset.date_placed_in_service,
            cost=asset.cost,
            salvage_value=asset.salvage_value,
            useful_life_years=asset.useful_life_years,
            disposed_date=asset.disposed_date,
            disposed_value=asset.disposed_value,
        )


def _is_cleared(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
