"""
Listing aggregation: pagination strategies and the per-probe aggregate.
"""

from .models import Item, Page
from .aggregator import Aggregate, ZERO_TIME, fold_page
from .lister import Lister, ObjectLister, VersionLister, create_lister

__all__ = [
    "Item",
    "Page",
    "Aggregate",
    "ZERO_TIME",
    "fold_page",
    "Lister",
    "ObjectLister",
    "VersionLister",
    "create_lister",
]
