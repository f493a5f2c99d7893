from .asset_import_service import AssetImportService, ImportResult, RowError, IMPORT_COLUMNS, read_workbook_rows
from .report_export_service import ReportExportService
