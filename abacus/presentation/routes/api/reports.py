"""
Report routes
Dashboard totals and the per-year depreciation summary.
"""

from flask import Blueprint, jsonify, request

from abacus.presentation.routes.api import get_coordinator
from abacus.services.reports.depreciation_report_service import DepreciationReportService

bp = Blueprint('reports', __name__)


@bp.get('/dashboard')
def dashboard():
    """?year=YYYY, defaults to the current year"""
    coordinator = get_coordinator()
    year = request.args.get('year', type=int)
    if year is None:
        year = coordinator.today_provider().year
    stats = DepreciationReportService(coordinator).get_dashboard_stats(year)
    return jsonify(stats.to_dict())


@bp.get('/reports/annual-summary')
def annual_summary():
    rows = DepreciationReportService(get_coordinator()).get_annual_summary()
    return jsonify([row.to_dict() for row in rows])
