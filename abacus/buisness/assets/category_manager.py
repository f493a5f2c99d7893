"""
Category Manager
Create, rename and delete asset categories while keeping asset references valid.
"""

from collections.abc import Mapping
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from abacus.buisness.core.exceptions import (
    CategoryNotFoundError,
    FieldValidationError,
    ReferentialIntegrityError,
    StorageError,
)
from abacus.buisness.depreciation.validation import validate_category
from abacus.data.core.asset_info.asset import Asset
from abacus.data.core.asset_info.category import Category
from abacus.logger import get_logger

logger = get_logger("abacus.buisness.categories")

CATEGORY_FIELDS = ('name', 'default_useful_life', 'default_property_class')


class CategoryManager:
    """
    Category operations sharing the coordinator's session and lock.

    A category cannot be deleted while assets point at it; use
    move_assets_and_delete to reassign (or uncategorize) them first.
    """

    def __init__(self, session, lock):
        self.session = session
        self.lock = lock

    def get(self, category_id: int) -> Category:
        with self.lock:
            category = self.session.get(Category, category_id)
            if category is None:
                raise CategoryNotFoundError(category_id)
            return category

    def list_with_counts(self) -> List[Tuple[Category, int]]:
        """
        All categories ordered by name, each with the number of assets using it.

        Returns:
            List of (Category, asset_count) tuples
        """
        with self.lock:
            rows = (
                self.session.query(Category, func.count(Asset.id))
                .outerjoin(Asset, Asset.category_id == Category.id)
                .group_by(Category.id)
                .order_by(Category.name)
                .all()
            )
            return [(category, count) for category, count in rows]

    def create(self, candidate: Mapping) -> Category:
        with self.lock:
            normalized = self._validate(candidate)
            self._check_unique_name(normalized.name)

            category = Category.from_dict(normalized.to_dict())
            try:
                self.session.add(category)
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail("creating category", e)

            logger.info(f"Category created: {category.name} (ID: {category.id})")
            return category

    def update(self, category_id: int, candidate: Mapping) -> Category:
        if not isinstance(candidate, Mapping):
            raise TypeError(f"category candidate must be a mapping, got {type(candidate).__name__}")

        with self.lock:
            category = self.get(category_id)
            merged = {key: getattr(category, key) for key in CATEGORY_FIELDS}
            merged.update({key: value for key, value in candidate.items() if key in CATEGORY_FIELDS})

            normalized = self._validate(merged)
            self._check_unique_name(normalized.name, exclude_id=category_id)

            try:
                changed = category.apply_dict(normalized.to_dict())
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"updating category {category_id}", e)

            if changed:
                logger.info(f"Category updated: {category.name} (ID: {category.id}) fields={sorted(changed)}")
            return category

    def delete(self, category_id: int) -> int:
        """
        Delete a category that no asset references.

        Raises:
            CategoryNotFoundError: if no category has this ID
            ReferentialIntegrityError: if any asset still uses the category
        """
        with self.lock:
            category = self.get(category_id)
            in_use = self._asset_count(category_id)
            if in_use > 0:
                logger.warning(f"Refused to delete category {category.name}: {in_use} asset(s) still use it")
                raise ReferentialIntegrityError(
                    f"Cannot delete category: {in_use} asset(s) are using this category. "
                    f"Please reassign them first."
                )

            name = category.name
            try:
                self.session.delete(category)
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"deleting category {category_id}", e)

            logger.info(f"Category deleted: {name} (ID: {category_id})")
            return category_id

    def move_assets_and_delete(self, category_id: int, target_category_id: Optional[int] = None) -> int:
        """
        Reassign every asset of a category, then delete it, in one transaction.

        Args:
            category_id: Category to delete
            target_category_id: Category receiving the assets; None leaves them uncategorized

        Returns:
            int: Number of assets moved
        """
        with self.lock:
            category = self.get(category_id)
            if target_category_id is not None:
                if target_category_id == category_id:
                    raise FieldValidationError(
                        {'target_category_id': "Target category must differ from the category being deleted"}
                    )
                if self.session.get(Category, target_category_id) is None:
                    raise FieldValidationError({'target_category_id': "Target category not found"})

            name = category.name
            try:
                moved = (
                    self.session.query(Asset)
                    .filter(Asset.category_id == category_id)
                    .update({Asset.category_id: target_category_id}, synchronize_session='fetch')
                )
                self.session.delete(category)
                self.session.commit()
            except SQLAlchemyError as e:
                self._fail(f"moving assets out of category {category_id}", e)

            logger.info(f"Category deleted: {name} (ID: {category_id}); "
                        f"moved {moved} asset(s) to {target_category_id or 'uncategorized'}")
            return moved

    def find_or_create_by_name(self, name: str) -> Tuple[Category, bool]:
        """
        Find a category by trimmed name or create it with no defaults.

        Returns:
            tuple: (category, created) where created is boolean
        """
        with self.lock:
            trimmed = name.strip() if isinstance(name, str) else name
            existing = self._find_by_name(trimmed) if trimmed else None
            if existing is not None:
                return existing, False
            return self.create({'name': trimmed}), True

    # Helpers

    def _validate(self, candidate: Mapping):
        result = validate_category(candidate)
        if not result.is_valid:
            logger.warning(f"Category validation failed: {result.errors}")
            raise FieldValidationError(result.errors)
        return result.value

    def _find_by_name(self, name: str) -> Optional[Category]:
        return self.session.query(Category).filter(Category.name == name).first()

    def _check_unique_name(self, name: str, exclude_id: Optional[int] = None):
        existing = self._find_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise FieldValidationError({'name': "A category with this name already exists"})

    def _asset_count(self, category_id: int) -> int:
        return self.session.query(func.count(Asset.id)).filter(Asset.category_id == category_id).scalar()

    def _fail(self, action: str, error: Exception):
        self.session.rollback()
        logger.error(f"Storage failure while {action}: {error}")
        raise StorageError(f"Storage failure while {action}") from error


def category_to_dict(category: Category, asset_count: Optional[int] = None) -> Dict:
    data = category.to_dict()
    if asset_count is not None:
        data['asset_count'] = asset_count
    return data
