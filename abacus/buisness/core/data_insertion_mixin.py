"""
Generic data insertion mixin for SQLAlchemy models
Provides from_dict and to_dict so the coordinator can move normalized
records in and out of rows without listing every column by hand.
"""

from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import inspect


class DataInsertionMixin:
    """
    Mixin that provides generic data insertion capabilities for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create model instance from dictionary
    - apply_dict(): Copy matching keys onto an existing instance
    - to_dict(): Convert model instance to a JSON-ready dictionary
    """

    # Columns a caller may never set through a dictionary
    PROTECTED_FIELDS = ('id', 'created_at', 'updated_at')

    @classmethod
    def _column_keys(cls):
        return {c.key for c in inspect(cls).columns}

    @classmethod
    def from_dict(cls, data_dict, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not added to the session)
        """
        skip = set(skip_fields or ()) | set(cls.PROTECTED_FIELDS)
        columns = cls._column_keys()
        filtered_data = {
            key: value for key, value in data_dict.items()
            if key in columns and key not in skip
        }
        return cls(**filtered_data)

    def apply_dict(self, data_dict, skip_fields=None):
        """
        Copy every matching key of data_dict onto this instance

        Returns:
            set: Names of the columns whose value actually changed
        """
        skip = set(skip_fields or ()) | set(self.PROTECTED_FIELDS)
        changed = set()
        for key in self._column_keys():
            if key in skip or key not in data_dict:
                continue
            if getattr(self, key) != data_dict[key]:
                setattr(self, key, data_dict[key])
                changed.add(key)
        return changed

    def to_dict(self, include_audit_fields=True):
        """
        Convert model instance to dictionary

        Dates become ISO strings and Decimals become strings so amounts
        keep their cents when rendered as JSON.

        Args:
            include_audit_fields (bool): Whether to include created_at / updated_at

        Returns:
            dict: Dictionary representation of the model
        """
        result = {}
        for column in inspect(self.__class__).columns:
            if not include_audit_fields and column.key in ('created_at', 'updated_at'):
                continue
            result[column.key] = _serialize(getattr(self, column.key))
        return result


def _serialize(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value
