"""
Test fixtures for deterministic testing.

This module provides:
- MemoryDayStore / MemoryCurrentBlockStore: filesystem-free stores with the
  same contract as DayStore / CurrentBlockStore
- clock: timestamps in a fixed UTC offset
"""

from .clock import DAY, NEXT_DAY, TZ, at
from .memory_store import MemoryCurrentBlockStore, MemoryDayStore

__all__ = ["DAY", "NEXT_DAY", "TZ", "MemoryCurrentBlockStore", "MemoryDayStore", "at"]
