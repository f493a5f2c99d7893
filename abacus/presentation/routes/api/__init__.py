"""
JSON API blueprints

Each module defines one blueprint; init_app in the parent package
registers them under /api.
"""

from flask import current_app, request

from abacus.buisness.assets.asset_context import AssetScheduleContext
from abacus.buisness.core.exceptions import FieldValidationError


def get_coordinator():
    """The application's AssetLifecycleCoordinator"""
    return current_app.extensions['abacus']


def json_body():
    """Request body as a dict; anything else is a 400"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise FieldValidationError({'body': "Request body must be a JSON object"})
    return data


def asset_payload(asset):
    """Asset with its schedule, read under the coordinator's lock"""
    with get_coordinator().lock:
        return AssetScheduleContext(asset).to_dict()
