"""
Routes package for the depreciation ledger
JSON API blueprints live in presentation.routes.api and are mounted under /api.
"""

from abacus.logger import get_logger

logger = get_logger("abacus.routes")


def init_app(app):
    """Initialize all route blueprints and error handlers with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .api import assets, categories, reports, spreadsheets
    from .errors import register_error_handlers

    app.register_blueprint(assets.bp, url_prefix='/api')
    app.register_blueprint(categories.bp, url_prefix='/api')
    app.register_blueprint(reports.bp, url_prefix='/api')
    app.register_blueprint(spreadsheets.bp, url_prefix='/api')

    register_error_handlers(app)

    logger.info("All route blueprints registered successfully")
