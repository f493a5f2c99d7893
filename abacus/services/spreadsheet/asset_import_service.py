"""
Asset Import Service
Batch creation of assets from spreadsheet rows.

Handles:
- Reading the first sheet of an .xlsx upload with openpyxl
- Mapping positional columns onto asset fields
- Resolving the category column by name (find-or-create)
- Running each row through the lifecycle coordinator

A bad row is reported with its sheet row number and never stops the batch.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from openpyxl import load_workbook

from abacus.buisness.core.exceptions import FieldValidationError, StorageError
from abacus.buisness.depreciation.validation import validate_asset
from abacus.logger import get_logger

logger = get_logger("abacus.services.import")

# (header, field) in sheet column order
IMPORT_COLUMNS = (
    ("Asset Name", 'name'),
    ("Description", 'description'),
    ("Category", 'category'),
    ("Date Placed in Service", 'date_placed_in_service'),
    ("Cost", 'cost'),
    ("Salvage Value", 'salvage_value'),
    ("Useful Life (Years)", 'useful_life_years'),
    ("Property Class", 'property_class'),
    ("Notes", 'notes'),
)

SHEET_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")
DEFAULT_MAX_IMPORT_ROWS = 5000


@dataclass
class RowError:
    row: int
    field: Optional[str]
    message: str

    def to_dict(self) -> Dict:
        return {'row': self.row, 'field': self.field, 'message': self.message}


@dataclass
class ImportResult:
    """Outcome of one batch import"""
    imported: int = 0
    errors: List[RowError] = field(default_factory=list)
    asset_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'imported': self.imported,
            'errors': [error.to_dict() for error in self.errors],
            'asset_ids': list(self.asset_ids),
        }


class AssetImportService:
    """
    Imports asset rows through the lifecycle coordinator.

    Every row goes through the same validation and the same create path as
    a single asset entered by hand.
    """

    def __init__(self, coordinator, max_rows: int = DEFAULT_MAX_IMPORT_ROWS):
        self.coordinator = coordinator
        self.max_rows = max_rows

    def import_assets(self, rows: Iterable[Mapping[str, Any]], start_row: int = 1) -> ImportResult:
        """
        Import a sequence of row mappings.

        Args:
            rows: Mappings keyed by asset field name, plus an optional 'category' name
            start_row: Row number reported for the first mapping

        Returns:
            ImportResult with the imported count and per-row errors
        """
        return self._import_numbered(enumerate(rows, start=start_row))

    def import_workbook(self, stream) -> ImportResult:
        """
        Import the first sheet of an .xlsx workbook.

        Args:
            stream: Path or binary file-like object

        Raises:
            FieldValidationError: if the file is not a readable workbook or has too many rows
        """
        numbered_rows = read_workbook_rows(stream)
        if len(numbered_rows) > self.max_rows:
            logger.warning(f"Import rejected: {len(numbered_rows)} rows exceeds limit of {self.max_rows}")
            raise FieldValidationError({'file': f"Import is limited to {self.max_rows} rows"})
        return self._import_numbered(numbered_rows)

    def _import_numbered(self, numbered_rows: Iterable[Tuple[int, Mapping[str, Any]]]) -> ImportResult:
        result = ImportResult()
        today = self.coordinator.today_provider()

        for row_number, row in numbered_rows:
            candidate = {key: value for key, value in row.items() if key != 'category'}

            # Check the row before resolving its category so a bad row never creates one
            precheck = validate_asset(candidate, today)
            if not precheck.is_valid:
                result.errors.extend(RowError(row_number, name, reason) for name, reason in precheck.errors.items())
                continue

            category_name = row.get('category')
            if isinstance(category_name, str) and category_name.strip():
                try:
                    category, _ = self.coordinator.categories.find_or_create_by_name(category_name)
                except FieldValidationError as e:
                    result.errors.extend(RowError(row_number, 'category', reason) for reason in e.errors.values())
                    continue
                except StorageError as e:
                    result.errors.append(RowError(row_number, 'category', str(e)))
                    continue
                candidate['category_id'] = category.id

            try:
                asset = self.coordinator.create(candidate)
            except FieldValidationError as e:
                result.errors.extend(RowError(row_number, name, reason) for name, reason in e.errors.items())
                continue
            except StorageError as e:
                result.errors.append(RowError(row_number, None, str(e)))
                continue

            result.imported += 1
            result.asset_ids.append(asset.id)

        logger.info(f"Import finished: {result.imported} imported, {len(result.errors)} error(s)")
        return result


def read_workbook_rows(stream) -> List[Tuple[int, Dict[str, Any]]]:
    """
    Read the first sheet into (sheet row number, field mapping) pairs.

    The header row is skipped, as are rows with no values. Dates may be
    native date cells, YYYY-MM-DD or MM/DD/YYYY strings.

    Raises:
        FieldValidationError: if the stream is not a readable workbook
    """
    try:
        workbook = load_workbook(stream, data_only=True)
    except Exception as e:
        logger.warning(f"Could not read import workbook: {e}")
        raise FieldValidationError({'file': "File is not a readable .xlsx workbook"}) from e

    try:
        sheet = workbook.worksheets[0]
        numbered_rows = []
        for row_number, values in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
            if all(_is_empty(value) for value in values):
                continue
            mapping = {}
            for index, (_, name) in enumerate(IMPORT_COLUMNS):
                value = values[index] if index < len(values) else None
                mapping[name] = _cell_value(name, value)
            numbered_rows.append((row_number, mapping))
        return numbered_rows
    finally:
        workbook.close()


def _is_empty(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _cell_value(name: str, value):
    if _is_empty(value):
        return None
    if name == 'date_placed_in_service':
        return _sheet_date(value)
    if name == 'property_class' and isinstance(value, float) and value.is_integer():
        return str(int(value))
    if name in ('name', 'description', 'category', 'property_class', 'notes') and not isinstance(value, str):
        return str(value)
    return value


def _sheet_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in SHEET_DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        # Left as text so the validator reports it against the field
        return text
    return value
