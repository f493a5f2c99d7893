"""
Asset routes
Create, edit, dispose, reinstate and delete assets; every response carries the schedule.
"""

from flask import Blueprint, jsonify

from abacus.presentation.routes.api import asset_payload, get_coordinator, json_body
from abacus.services.reports.depreciation_report_service import DepreciationReportService
from abacus.logger import get_logger

logger = get_logger("abacus.routes.assets")
bp = Blueprint('assets', __name__)


@bp.get('/assets')
def list_assets():
    """All assets with their schedules"""
    coordinator = get_coordinator()
    with coordinator.lock:
        contexts = DepreciationReportService(coordinator).list_assets_with_schedules()
        payload = [context.to_dict() for context in contexts]
    logger.debug(f"Assets list returned {len(payload)} assets")
    return jsonify(payload)


@bp.post('/assets')
def create_asset():
    asset = get_coordinator().create(json_body())
    return jsonify(asset_payload(asset)), 201


@bp.get('/assets/<int:asset_id>')
def get_asset(asset_id):
    """Asset, schedule, category name and disposal gain/loss"""
    asset = get_coordinator().get_asset(asset_id)
    return jsonify(asset_payload(asset))


@bp.put('/assets/<int:asset_id>')
def update_asset(asset_id):
    asset = get_coordinator().update(asset_id, json_body())
    return jsonify(asset_payload(asset))


@bp.post('/assets/<int:asset_id>/dispose')
def dispose_asset(asset_id):
    data = json_body()
    asset = get_coordinator().dispose(asset_id, data.get('disposed_date'), data.get('disposed_value'))
    return jsonify(asset_payload(asset))


@bp.post('/assets/<int:asset_id>/reinstate')
def reinstate_asset(asset_id):
    asset = get_coordinator().reinstate(asset_id)
    return jsonify(asset_payload(asset))


@bp.delete('/assets/<int:asset_id>')
def delete_asset(asset_id):
    deleted_id = get_coordinator().delete(asset_id)
    return jsonify({'deleted': deleted_id})
