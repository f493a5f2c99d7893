"""
Report Export Service
Builds .xlsx downloads with openpyxl.

Handles:
- Import template (header row plus one example row)
- Depreciation report: Assets, Depreciation Schedule and Annual Summary sheets
"""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from abacus.services.spreadsheet.asset_import_service import IMPORT_COLUMNS
from abacus.logger import get_logger

logger = get_logger("abacus.services.export")

MONEY_FORMAT = '#,##0.00'
DATE_FORMAT = 'yyyy-mm-dd'

ASSET_SHEET_HEADERS = (
    "Asset Name", "Category", "Cost", "Salvage Value", "Life (Yrs)",
    "Service Date", "Current Book Value", "Status",
)
SCHEDULE_SHEET_HEADERS = (
    "Asset Name", "Year", "Beginning Value", "Depreciation", "Accumulated", "Ending Value",
)
SUMMARY_SHEET_HEADERS = ("Year", "Total Depreciation", "Asset Count")

TEMPLATE_EXAMPLE_ROW = (
    "Office Computer", "Dell OptiPlex 7090", "Computer Equipment", "2024-01-15",
    1500.00, 100.00, 5, "5", "Main office",
)

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")


class ReportExportService:
    """Workbook builders over the report service's aggregates"""

    def __init__(self, report_service):
        self.report_service = report_service

    @staticmethod
    def build_template() -> bytes:
        """Import template workbook as bytes"""
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Assets"
        _write_header(sheet, [header for header, _ in IMPORT_COLUMNS])
        sheet.append(list(TEMPLATE_EXAMPLE_ROW))
        _autosize(sheet, len(IMPORT_COLUMNS))
        return _to_bytes(workbook)

    def build_report(self, current_year: int) -> bytes:
        """
        Depreciation report workbook as bytes.

        Args:
            current_year: Year used for the "Current Book Value" column
        """
        with self.report_service.lock:
            return self._build_report(current_year)

    def _build_report(self, current_year: int) -> bytes:
        contexts = self.report_service.list_assets_with_schedules()
        summary = self.report_service.get_annual_summary()

        workbook = Workbook()

        assets_sheet = workbook.active
        assets_sheet.title = "Assets"
        _write_header(assets_sheet, ASSET_SHEET_HEADERS)
        for context in contexts:
            asset = context.asset
            assets_sheet.append([
                asset.name,
                context.category_name,
                asset.cost,
                asset.salvage_value,
                asset.useful_life_years,
                asset.date_placed_in_service,
                context.book_value_for_year(current_year),
                "Disposed" if context.is_disposed else "Active",
            ])
        _format_columns(assets_sheet, money_columns=(3, 4, 7), date_columns=(6,))
        _autosize(assets_sheet, len(ASSET_SHEET_HEADERS))

        schedule_sheet = workbook.create_sheet("Depreciation Schedule")
        _write_header(schedule_sheet, SCHEDULE_SHEET_HEADERS)
        for context in contexts:
            for entry in context.schedule:
                schedule_sheet.append([
                    context.asset.name,
                    entry.year,
                    entry.beginning_book_value,
                    entry.depreciation_expense,
                    entry.accumulated_depreciation,
                    entry.ending_book_value,
                ])
        _format_columns(schedule_sheet, money_columns=(3, 4, 5, 6))
        _autosize(schedule_sheet, len(SCHEDULE_SHEET_HEADERS))

        summary_sheet = workbook.create_sheet("Annual Summary")
        _write_header(summary_sheet, SUMMARY_SHEET_HEADERS)
        for row in summary:
            summary_sheet.append([row.year, row.total_depreciation, row.asset_count])
        _format_columns(summary_sheet, money_columns=(2,))
        _autosize(summary_sheet, len(SUMMARY_SHEET_HEADERS))

        logger.info(f"Report exported: {len(contexts)} asset(s), {len(summary)} summary year(s)")
        return _to_bytes(workbook)


def _write_header(sheet, headers):
    sheet.append(list(headers))
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL


def _format_columns(sheet, money_columns=(), date_columns=()):
    for row in sheet.iter_rows(min_row=2):
        for cell in row:
            if cell.column in money_columns:
                cell.number_format = MONEY_FORMAT
            elif cell.column in date_columns:
                cell.number_format = DATE_FORMAT


def _autosize(sheet, column_count):
    for index in range(1, column_count + 1):
        letter = get_column_letter(index)
        longest = max((len(str(cell.value)) for cell in sheet[letter] if cell.value is not None), default=8)
        sheet.column_dimensions[letter].width = min(max(longest + 2, 10), 40)


def _to_bytes(workbook) -> bytes:
    output = BytesIO()
    workbook.save(output)
    return output.getvalue()
