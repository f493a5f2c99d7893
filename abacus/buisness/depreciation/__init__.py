from .structs import (
    NormalizedAsset,
    NormalizedCategory,
    NormalizedDisposal,
    ScheduleEntry,
    ValidationResult,
)
from .validation import validate_asset, validate_category, validate_disposal, VALID_PROPERTY_CLASSES
from .schedule_generator import (
    generate_schedule,
    book_value_at,
    disposal_gain_loss,
    book_value_for_year,
    expense_for_year,
)
