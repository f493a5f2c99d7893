"""
Error handlers
Turns business exceptions into JSON responses. No error stops the process.
"""

from flask import jsonify

from abacus.buisness.core.exceptions import (
    AssetNotFoundError,
    CategoryNotFoundError,
    FieldValidationError,
    ReferentialIntegrityError,
    StorageError,
)
from abacus.logger import get_logger

logger = get_logger("abacus.routes.errors")


def register_error_handlers(app):
    """Register JSON handlers for the business exceptions"""

    @app.errorhandler(FieldValidationError)
    def handle_field_validation(error):
        return jsonify({'errors': error.errors}), 400

    @app.errorhandler(ReferentialIntegrityError)
    def handle_referential_integrity(error):
        return jsonify({'error': str(error)}), 409

    @app.errorhandler(AssetNotFoundError)
    @app.errorhandler(CategoryNotFoundError)
    def handle_not_found(error):
        return jsonify({'error': str(error)}), 404

    @app.errorhandler(StorageError)
    def handle_storage(error):
        logger.error(f"Request failed with storage error: {error}")
        return jsonify({'error': "The change could not be saved"}), 500
