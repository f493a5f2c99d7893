"""
Core models package for the depreciation ledger
"""

from .asset_info.category import Category
from .asset_info.asset import Asset
from .asset_info.depreciation_entry import DepreciationEntry

__all__ = [
    'Category',
    'Asset',
    'DepreciationEntry',
]
