"""
Depreciation Structs
Plain value types passed between the validation engine, the schedule
generator and the lifecycle coordinator. No database access.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class NormalizedAsset:
    """Asset fields after trimming, parsing and cent normalization"""
    name: str
    date_placed_in_service: date
    cost: Decimal
    salvage_value: Decimal
    useful_life_years: int
    description: Optional[str] = None
    category_id: Optional[int] = None
    property_class: Optional[str] = None
    notes: Optional[str] = None
    disposed_date: Optional[date] = None
    disposed_value: Optional[Decimal] = None

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'description': self.description,
            'category_id': self.category_id,
            'date_placed_in_service': self.date_placed_in_service,
            'cost': self.cost,
            'salvage_value': self.salvage_value,
            'useful_life_years': self.useful_life_years,
            'property_class': self.property_class,
            'notes': self.notes,
            'disposed_date': self.disposed_date,
            'disposed_value': self.disposed_value,
        }


@dataclass(frozen=True)
class NormalizedCategory:
    name: str
    default_useful_life: Optional[int] = None
    default_property_class: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'default_useful_life': self.default_useful_life,
            'default_property_class': self.default_property_class,
        }


@dataclass(frozen=True)
class NormalizedDisposal:
    disposed_date: date
    disposed_value: Optional[Decimal] = None


@dataclass(frozen=True)
class ScheduleEntry:
    """One year of a depreciation ledger, amounts in cents"""
    year: int
    beginning_book_value: Decimal
    depreciation_expense: Decimal
    accumulated_depreciation: Decimal
    ending_book_value: Decimal

    def to_dict(self) -> Dict:
        """Convert ScheduleEntry to dictionary for serialization"""
        return {
            'year': self.year,
            'beginning_book_value': str(self.beginning_book_value),
            'depreciation_expense': str(self.depreciation_expense),
            'accumulated_depreciation': str(self.accumulated_depreciation),
            'ending_book_value': str(self.ending_book_value),
        }


@dataclass
class ValidationResult(Generic[T]):
    """
    Outcome of a validation call.

    Exactly one of value / errors is meaningful: when errors is empty the
    candidate was accepted and value holds the normalized record.
    """
    value: Optional[T] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def ok(cls, value: T) -> 'ValidationResult[T]':
        return cls(value=value)

    @classmethod
    def failed(cls, errors: Dict[str, str]) -> 'ValidationResult[T]':
        return cls(value=None, errors=dict(errors))
