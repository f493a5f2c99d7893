"""
Spreadsheet routes
.xlsx import upload, template download and report download.
"""

from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file

from abacus.buisness.core.exceptions import FieldValidationError
from abacus.presentation.routes.api import get_coordinator
from abacus.services.reports.depreciation_report_service import DepreciationReportService
from abacus.services.spreadsheet.asset_import_service import AssetImportService
from abacus.services.spreadsheet.report_export_service import ReportExportService
from abacus.logger import get_logger

logger = get_logger("abacus.routes.spreadsheets")
bp = Blueprint('spreadsheets', __name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@bp.post('/import')
def import_assets():
    """Multipart upload with the workbook in the "file" field"""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        raise FieldValidationError({'file': "No file uploaded"})

    logger.info(f"Import started from {upload.filename}")
    service = AssetImportService(get_coordinator(), max_rows=current_app.config['MAX_IMPORT_ROWS'])
    result = service.import_workbook(BytesIO(upload.read()))
    return jsonify(result.to_dict())


@bp.get('/export/template')
def export_template():
    return send_file(
        BytesIO(ReportExportService.build_template()),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name='asset_import_template.xlsx',
    )


@bp.get('/export/report')
def export_report():
    coordinator = get_coordinator()
    year = request.args.get('year', type=int)
    if year is None:
        year = coordinator.today_provider().year
    data = ReportExportService(DepreciationReportService(coordinator)).build_report(year)
    return send_file(
        BytesIO(data),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f'depreciation_report_{year}.xlsx',
    )
