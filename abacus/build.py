#!/usr/bin/env python3
"""
Build orchestrator for the depreciation ledger
Creates the tables and optionally loads the sample data set
"""

from abacus import create_app, db
from abacus.logger import get_logger

logger = get_logger("abacus.build")


def build_models():
    """Create every table registered on db.metadata"""
    logger.info("Creating database tables...")
    db.create_all()
    logger.info(f"Tables ready: {', '.join(sorted(db.metadata.tables))}")


def build_database(enable_debug_data=True, app=None):
    """
    Main build orchestrator

    Args:
        enable_debug_data (bool): Whether to insert the sample categories and assets
        app (Flask, optional): Application to build against; a new one is created when omitted

    Returns:
        dict: Debug data summary (empty when debug data is disabled)
    """
    if app is None:
        app = create_app()

    with app.app_context():
        logger.info(f"Starting database build (debug data: {enable_debug_data})")
        build_models()

        summary = {}
        if enable_debug_data:
            from abacus.debug.debug_data_manager import insert_debug_data
            logger.info("Inserting debug data...")
            summary = insert_debug_data(app.extensions['abacus'])

        logger.info("Database build completed successfully")
        return summary
