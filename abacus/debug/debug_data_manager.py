#!/usr/bin/env python3
"""
Debug Data Manager
Loads the sample data set through the lifecycle coordinator

Handles:
- Loading the debug data JSON file
- Checking if data is already present
- Creating categories, assets and disposals with the same rules as user input
- Fail-fast error handling
"""

from pathlib import Path
import json
from abacus.data.core.asset_info.asset import Asset
from abacus.logger import get_logger

logger = get_logger("abacus.debug_data_manager")

DEBUG_DATA_FILE = Path(__file__).parent / 'data' / 'depreciation.json'


def insert_debug_data(coordinator, data_file=DEBUG_DATA_FILE):
    """
    Insert the sample categories and assets

    Args:
        coordinator: AssetLifecycleCoordinator for the target database
        data_file (Path): JSON file with "Categories" and "Assets" lists

    Returns:
        dict: Summary of inserted data

    Raises:
        Exception: If any insertion fails (fail-fast)
    """
    debug_data = _load_debug_data_file(data_file)
    if not debug_data:
        logger.info(f"No debug data file found at {data_file}, skipping")
        return {'status': 'skipped', 'reason': 'file_not_found'}

    if _check_debug_data_present(coordinator, debug_data):
        logger.info("Debug data already present, skipping")
        return {'status': 'skipped', 'reason': 'data_present'}

    categories = {}
    for category_data in debug_data.get('Categories', []):
        category, _ = coordinator.categories.find_or_create_by_name(category_data['name'])
        coordinator.categories.update(category.id, category_data)
        categories[category.name] = category.id
    logger.info(f"Inserted {len(categories)} debug categories")

    inserted_assets = 0
    for asset_data in debug_data.get('Assets', []):
        candidate = {key: value for key, value in asset_data.items() if key not in ('category', 'disposal')}
        if asset_data.get('category'):
            candidate['category_id'] = categories[asset_data['category']]

        asset = coordinator.create(candidate)
        disposal = asset_data.get('disposal')
        if disposal:
            coordinator.dispose(asset.id, disposal['disposed_date'], disposal.get('disposed_value'))
        inserted_assets += 1
    logger.info(f"Inserted {inserted_assets} debug assets")

    return {'status': 'inserted', 'categories': len(categories), 'assets': inserted_assets}


def _load_debug_data_file(data_file):
    """
    Load the debug data JSON file

    Returns:
        dict: Debug data or None if the file doesn't exist
    """
    data_file = Path(data_file)
    if not data_file.exists():
        return None

    try:
        with open(data_file, 'r') as f:
            data = json.load(f)
        logger.debug(f"Loaded debug data file: {data_file}")
        return data
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {data_file}: {e}")
        raise


def _check_debug_data_present(coordinator, debug_data):
    """True if any sample asset already exists (checked by name)"""
    for asset_data in debug_data.get('Assets', []):
        if coordinator.session.query(Asset).filter_by(name=asset_data['name']).first():
            return True
    return False
