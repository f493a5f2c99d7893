"""
Validation Engine
Pure field-level and cross-field checks for assets, categories and disposals.

Every rule runs independently and every failure is collected into a
{field: reason} map, so a caller can surface all problems at once.
Nothing here touches the database or the clock: "today" is always passed in.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

from abacus.buisness.depreciation.structs import (
    NormalizedAsset,
    NormalizedCategory,
    NormalizedDisposal,
    ValidationResult,
)

# Property classes (recovery periods in years). Reference only, never used in the calculation.
VALID_PROPERTY_CLASSES = ("3", "5", "7", "10", "15", "20", "27.5", "39")

ASSET_NAME_MAX_LENGTH = 200
ASSET_DESCRIPTION_MAX_LENGTH = 500
ASSET_NOTES_MAX_LENGTH = 2000
CATEGORY_NAME_MAX_LENGTH = 100

DATE_FORMAT = "%Y-%m-%d"
CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest amount a float-backed Numeric column (SQLite) still stores to the cent
MAX_MONEY = Decimal("9999999999999.99")
MAX_USEFUL_LIFE_YEARS = 100


def validate_asset(candidate: Mapping, today: date) -> ValidationResult[NormalizedAsset]:
    """
    Validate a candidate asset.

    Args:
        candidate: Mapping of raw field values (form data, JSON body, import row)
        today: The caller's current date, used for the not-in-the-future rules

    Returns:
        ValidationResult holding a NormalizedAsset or a {field: reason} map
    """
    _require_mapping(candidate, "asset")
    errors: Dict[str, str] = {}

    name = _clean_text(candidate.get('name'), 'name', "Asset name", ASSET_NAME_MAX_LENGTH, errors, required=True)
    description = _clean_text(candidate.get('description'), 'description', "Description",
                              ASSET_DESCRIPTION_MAX_LENGTH, errors)
    notes = _clean_text(candidate.get('notes'), 'notes', "Notes", ASSET_NOTES_MAX_LENGTH, errors)
    category_id = _parse_reference(candidate.get('category_id'), 'category_id', errors)

    service_date = _parse_date(candidate.get('date_placed_in_service'), 'date_placed_in_service',
                               "Date placed in service", errors, required=True)
    if service_date is not None and service_date > today:
        errors['date_placed_in_service'] = "Date placed in service cannot be in the future"

    cost = _parse_money(candidate.get('cost'), 'cost', "Cost", errors, required=True)
    if cost is not None and cost <= ZERO:
        errors['cost'] = "Cost must be greater than 0"

    salvage_value = _parse_money(candidate.get('salvage_value'), 'salvage_value', "Salvage value", errors)
    if salvage_value is None and 'salvage_value' not in errors:
        salvage_value = ZERO
    if salvage_value is not None:
        if salvage_value < ZERO:
            errors['salvage_value'] = "Salvage value cannot be negative"
        elif cost is not None and 'cost' not in errors and salvage_value > cost:
            errors['salvage_value'] = "Salvage value cannot exceed cost"

    useful_life = _parse_whole_years(candidate.get('useful_life_years'), 'useful_life_years',
                                     "Useful life", errors, required=True)

    property_class = _parse_property_class(candidate.get('property_class'), 'property_class', errors)

    disposed_date = _parse_date(candidate.get('disposed_date'), 'disposed_date', "Disposal date", errors)
    disposed_value = _parse_money(candidate.get('disposed_value'), 'disposed_value', "Disposal value", errors)
    if disposed_date is not None:
        _check_disposal_date(disposed_date, service_date, today, errors)
    if disposed_value is not None:
        if disposed_value < ZERO:
            errors['disposed_value'] = "Disposal value cannot be negative"
        elif disposed_date is None and 'disposed_date' not in errors:
            errors['disposed_value'] = "Disposal value requires a disposal date"

    if errors:
        return ValidationResult.failed(errors)

    return ValidationResult.ok(NormalizedAsset(
        name=name,
        description=description,
        category_id=category_id,
        date_placed_in_service=service_date,
        cost=cost,
        salvage_value=salvage_value,
        useful_life_years=useful_life,
        property_class=property_class,
        notes=notes,
        disposed_date=disposed_date,
        disposed_value=disposed_value,
    ))


def validate_category(candidate: Mapping) -> ValidationResult[NormalizedCategory]:
    """Validate a candidate category. Name uniqueness is checked by the caller against the store."""
    _require_mapping(candidate, "category")
    errors: Dict[str, str] = {}

    name = _clean_text(candidate.get('name'), 'name', "Category name", CATEGORY_NAME_MAX_LENGTH, errors,
                       required=True)
    default_life = _parse_whole_years(candidate.get('default_useful_life'), 'default_useful_life',
                                      "Default useful life", errors)
    default_class = _parse_property_class(candidate.get('default_property_class'), 'default_property_class',
                                          errors)

    if errors:
        return ValidationResult.failed(errors)

    return ValidationResult.ok(NormalizedCategory(
        name=name,
        default_useful_life=default_life,
        default_property_class=default_class,
    ))


def validate_disposal(disposed_date: Any, disposed_value: Any, date_placed_in_service: date,
                      today: date) -> ValidationResult[NormalizedDisposal]:
    """
    Validate a disposal request against the asset's service date.

    Raises:
        TypeError: if date_placed_in_service is not a date (caller misuse, not bad input)
    """
    if not isinstance(date_placed_in_service, date):
        raise TypeError("date_placed_in_service must be a date")
    if isinstance(date_placed_in_service, datetime):
        date_placed_in_service = date_placed_in_service.date()

    errors: Dict[str, str] = {}
    parsed_date = _parse_date(disposed_date, 'disposed_date', "Disposal date", errors, required=True)
    if parsed_date is not None:
        _check_disposal_date(parsed_date, date_placed_in_service, today, errors)

    parsed_value = _parse_money(disposed_value, 'disposed_value', "Disposal value", errors)
    if parsed_value is not None and parsed_value < ZERO:
        errors['disposed_value'] = "Disposal value cannot be negative"

    if errors:
        return ValidationResult.failed(errors)
    return ValidationResult.ok(NormalizedDisposal(disposed_date=parsed_date, disposed_value=parsed_value))


# Field parsers. Each one records at most one reason for its field and
# returns None when the value is absent or unusable.

def _require_mapping(candidate, kind):
    if not isinstance(candidate, Mapping):
        raise TypeError(f"{kind} candidate must be a mapping, got {type(candidate).__name__}")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_text(value, field, label, max_length, errors, required=False) -> Optional[str]:
    if _is_blank(value):
        if required:
            errors[field] = f"{label} is required"
        return None
    if not isinstance(value, str):
        errors[field] = f"{label} must be text"
        return None
    text = value.strip()
    if len(text) > max_length:
        errors[field] = f"{label} must be {max_length} characters or less"
        return None
    return text


def _parse_date(value, field, label, errors, required=False) -> Optional[date]:
    if _is_blank(value):
        if required:
            errors[field] = f"{label} is required"
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), DATE_FORMAT).date()
        except ValueError:
            pass
    errors[field] = f"Invalid {label.lower()} (use YYYY-MM-DD)"
    return None


def _parse_money(value, field, label, errors, required=False) -> Optional[Decimal]:
    if _is_blank(value):
        if required:
            errors[field] = f"{label} is required"
        return None
    if isinstance(value, bool):
        errors[field] = f"{label} must be a number"
        return None
    try:
        amount = Decimal(value.strip()) if isinstance(value, str) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        errors[field] = f"{label} must be a number"
        return None
    if not amount.is_finite():
        errors[field] = f"{label} must be a number"
        return None
    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if abs(amount) > MAX_MONEY:
        errors[field] = f"{label} is too large"
        return None
    return amount


def _parse_whole_years(value, field, label, errors, required=False) -> Optional[int]:
    if _is_blank(value):
        if required:
            errors[field] = f"{label} is required"
        return None
    if isinstance(value, bool):
        errors[field] = f"{label} must be a whole number of years"
        return None
    if isinstance(value, int):
        years = value
    else:
        try:
            number = Decimal(value.strip()) if isinstance(value, str) else Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            errors[field] = f"{label} must be a whole number of years"
            return None
        if not number.is_finite() or number != number.to_integral_value():
            errors[field] = f"{label} must be a whole number of years"
            return None
        years = int(number)
    if years < 1:
        errors[field] = f"{label} must be at least 1 year"
        return None
    if years > MAX_USEFUL_LIFE_YEARS:
        errors[field] = f"{label} cannot exceed {MAX_USEFUL_LIFE_YEARS} years"
        return None
    return years


def _parse_property_class(value, field, errors) -> Optional[str]:
    if _is_blank(value):
        return None
    text = str(value).strip()
    if text not in VALID_PROPERTY_CLASSES:
        errors[field] = f"Invalid property class: {text}"
        return None
    return text


def _parse_reference(value, field, errors) -> Optional[int]:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        errors[field] = "Invalid reference"
        return None
    try:
        ref = int(value)
    except (TypeError, ValueError):
        errors[field] = "Invalid reference"
        return None
    if ref < 1 or (isinstance(value, float) and value != ref):
        errors[field] = "Invalid reference"
        return None
    return ref


def _check_disposal_date(disposed_date, service_date, today, errors):
    if disposed_date > today:
        errors['disposed_date'] = "Disposal date cannot be in the future"
    elif service_date is not None and disposed_date < service_date:
        errors['disposed_date'] = "Disposal date must be on or after the date placed in service"
