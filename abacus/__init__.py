from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from datetime import date
import os
import secrets
from abacus.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()


def create_app(config_overrides=None, today_provider=date.today):
    """
    Application factory.

    Args:
        config_overrides (dict, optional): Values applied over the environment configuration
        today_provider (callable): Returns the current date for validation rules

    Returns:
        Flask: Configured application with the lifecycle coordinator on app.extensions['abacus']
    """
    from pathlib import Path

    app = Flask(__name__)

    # Get singleton logger
    logger = get_logger("abacus")
    logger.info("Initializing Flask application")

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')
    if not app.config['SECRET_KEY']:
        logger.warning("SECRET_KEY not set in environment, generating one for this process")
        app.config['SECRET_KEY'] = secrets.token_hex(32)

    # Prefer an explicit DATABASE_URL env var; if not provided, store the
    # SQLite database inside the project's `instance/` directory.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        base_dir = Path(__file__).parent.parent
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'abacus.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['MAX_IMPORT_ROWS'] = int(os.environ.get('MAX_IMPORT_ROWS', '5000'))
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_CONTENT_LENGTH', str(16 * 1024 * 1024)))
    app.json.sort_keys = False

    if config_overrides:
        app.config.update(config_overrides)

    logger.debug(f"Database configured: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from abacus.data.core.asset_info.category import Category
    from abacus.data.core.asset_info.asset import Asset
    from abacus.data.core.asset_info.depreciation_entry import DepreciationEntry

    logger.debug("Models imported and registered")

    # One coordinator per application: the session handle plus the write lock
    from abacus.buisness.assets.asset_lifecycle_coordinator import AssetLifecycleCoordinator
    app.extensions['abacus'] = AssetLifecycleCoordinator(db.session, today_provider=today_provider)

    # Register blueprints
    from abacus.presentation.routes import init_app as init_routes
    init_routes(app)

    logger.info("Flask application initialization complete")

    return app
