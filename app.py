#!/usr/bin/env python3
"""
Run script for the Abacus depreciation ledger
"""

from dotenv import load_dotenv

# Load environment variables from .env file before the app reads them
load_dotenv()

import argparse
import os
import sys

from abacus import create_app
from abacus.build import build_database
from abacus.logger import get_logger

app = create_app()
logger = get_logger("abacus.run")


def parse_arguments():
    """Parse command line arguments for the build step"""
    parser = argparse.ArgumentParser(description='Abacus depreciation ledger')
    parser.add_argument('--build-only', action='store_true',
                        help='Create database tables and exit without starting the web server')
    parser.add_argument('--enable-debug-data', action='store_true', default=True,
                        help='Insert sample categories and assets (default: enabled if flag not present)')
    parser.add_argument('--no-debug-data', action='store_false', dest='enable_debug_data',
                        help='Disable sample data insertion')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_arguments()

    logger.debug("Starting Abacus...")

    build_database(
        enable_debug_data=args.enable_debug_data and not args.build_only,
        app=app,
    )

    if args.build_only:
        logger.debug("Build completed. Exiting without starting web server.")
        sys.exit(0)

    # FLASK_DEBUG: Enable/disable debug mode (default: False)
    debug_mode = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes', 'on')

    # FLASK_HOST: Server host (default: 127.0.0.1)
    host = os.environ.get('FLASK_HOST', '127.0.0.1')

    # FLASK_PORT: Server port (default: 5000)
    port = int(os.environ.get('FLASK_PORT', '5000'))

    if debug_mode:
        logger.warning("DEBUG MODE ENABLED - Do not use in production!")

    logger.info(f"Starting server on {host}:{port} (debug={debug_mode})")
    app.run(debug=debug_mode, host=host, port=port)
