"""
Assets business layer.

The lifecycle coordinator owns every asset and category write; the
schedule context is the read-side view used by routes and reports.
"""

from .asset_lifecycle_coordinator import AssetLifecycleCoordinator, ASSET_FIELDS, SCHEDULE_FIELDS
from .category_manager import CategoryManager
from .asset_context import AssetScheduleContext
