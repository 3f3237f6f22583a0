# Daybook - Core Library
"""
Exports for the CLI, the API and other consumers.
"""

from .analysis import Analysis, Trend, build_analysis
from .categories import Category, CategoryCatalog, Color, DuplicateCategory
from .timeline import (
    Block,
    BlockManager,
    CurrentBlock,
    CurrentBlockStore,
    DayStore,
    Reconciler,
    storage_key,
)

__all__ = [
    "Analysis",
    "Block",
    "BlockManager",
    "Category",
    "CategoryCatalog",
    "Color",
    "CurrentBlock",
    "CurrentBlockStore",
    "DayStore",
    "DuplicateCategory",
    "Reconciler",
    "Trend",
    "build_analysis",
    "storage_key",
]

__version__ = "1.0.0"
