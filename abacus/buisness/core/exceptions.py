"""
Business exceptions for the depreciation core.

Routes map these to HTTP responses:
- FieldValidationError -> 400
- ReferentialIntegrityError -> 409
- AssetNotFoundError / CategoryNotFoundError -> 404
- StorageError -> 500
"""

from typing import Dict, Optional


class FieldValidationError(ValueError):
    """Raised when a candidate record fails one or more field rules."""

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        if message is None:
            message = "Validation failed: " + "; ".join(
                f"{field}: {reason}" for field, reason in self.errors.items()
            )
        super().__init__(message)


class ReferentialIntegrityError(ValueError):
    """Raised when an operation would orphan records that reference another."""
    pass


class AssetNotFoundError(LookupError):
    """Raised when an asset id does not exist."""

    def __init__(self, asset_id):
        self.asset_id = asset_id
        super().__init__(f"Asset {asset_id} not found")


class CategoryNotFoundError(LookupError):
    """Raised when a category id does not exist."""

    def __init__(self, category_id):
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


class StorageError(RuntimeError):
    """Raised after a failed write has been rolled back."""
    pass
