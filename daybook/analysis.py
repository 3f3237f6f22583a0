"""
Analysis - where the time went over a date range.

Reads the day records of the dates that have one and sums block durations per
category:
- trends: seconds per (day, category), one entry for every catalog category
- percentages: share of the whole range per category id
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta

from daybook.categories import Category, CategoryCatalog
from daybook.timeline.day_store import DayStore

logger = logging.getLogger(__name__)


@dataclass
class Trend:
    day: date
    category_id: int
    seconds: int

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "block_type_id": self.category_id,
            "time_spent": self.seconds,
        }


@dataclass
class Analysis:
    start: date
    end: date
    percentages: dict[int, float] = field(default_factory=dict)
    trends: list[Trend] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)

    @property
    def total_seconds(self) -> int:
        return sum(trend.seconds for trend in self.trends)

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "percentages": {str(k): v for k, v in self.percentages.items()},
            "trends": [trend.to_dict() for trend in self.trends],
            "blocktypes": [category.to_dict() for category in self.categories],
        }


def build_analysis(store: DayStore, catalog: CategoryCatalog, start: date, end: date) -> Analysis:
    """
    Aggregate block durations for every date in [start, end].

    Blocks whose category is not in the catalog are counted under their own
    id in percentages but get no trend rows.
    """
    if end < start:
        raise ValueError(f"Analysis end {end.isoformat()} is before start {start.isoformat()}")

    categories = sorted(catalog.load(), key=lambda c: c.id)
    totals: dict[int, int] = defaultdict(int)
    trends = []
    recorded = set(store.dates())

    day = start
    while day <= end:
        per_category: dict[int, int] = defaultdict(int)
        blocks = store.read(day) if day in recorded else []
        for block in blocks:
            per_category[block.category_id] += int(block.duration.total_seconds())
        for category in categories:
            seconds = per_category[category.id]
            trends.append(Trend(day=day, category_id=category.id, seconds=seconds))
        for category_id, seconds in per_category.items():
            totals[category_id] += seconds
        day += timedelta(days=1)

    grand_total = sum(totals.values())
    percentages = {category.id: 0.0 for category in categories}
    if grand_total:
        for category_id, seconds in totals.items():
            percentages[category_id] = seconds / grand_total

    logger.debug(
        f"Analysis {start.isoformat()}..{end.isoformat()}: "
        f"{grand_total}s over {len(totals)} categories"
    )
    return Analysis(
        start=start, end=end, percentages=percentages, trends=trends, categories=categories
    )
