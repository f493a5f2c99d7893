"""
Category routes
"""

from flask import Blueprint, jsonify

from abacus.buisness.assets.category_manager import category_to_dict
from abacus.presentation.routes.api import get_coordinator, json_body

bp = Blueprint('categories', __name__)


@bp.get('/categories')
def list_categories():
    """Categories ordered by name, each with its asset count"""
    rows = get_coordinator().categories.list_with_counts()
    return jsonify([category_to_dict(category, count) for category, count in rows])


@bp.post('/categories')
def create_category():
    category = get_coordinator().categories.create(json_body())
    return jsonify(category_to_dict(category)), 201


@bp.put('/categories/<int:category_id>')
def update_category(category_id):
    category = get_coordinator().categories.update(category_id, json_body())
    return jsonify(category_to_dict(category))


@bp.delete('/categories/<int:category_id>')
def delete_category(category_id):
    deleted_id = get_coordinator().categories.delete(category_id)
    return jsonify({'deleted': deleted_id})


@bp.post('/categories/<int:category_id>/move-and-delete')
def move_assets_and_delete(category_id):
    """Body: {"target_category_id": id or null}"""
    data = json_body()
    moved = get_coordinator().categories.move_assets_and_delete(category_id, data.get('target_category_id'))
    return jsonify({'deleted': category_id, 'moved': moved})
