"""
morexport/aggregators/call_count_aggregator.py
Folds per-destination daily call counts into per-day summaries keyed by
a coarser label (country, or destination).

NOTE ON ORDER:
  Output order is first-seen key order, not sorted order. It decides the
  line order of the exported file, so it is part of the output contract.
  The dict insertion order carries it; merging never moves an entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Tuple

logger = logging.getLogger(__name__)


@dataclass
class DailyCallCount:
    """Running call total for one (day, label) key."""
    day:    str
    label:  str
    calls:  int = 0


class CallCountAccumulator:
    """Keyed running totals, iterated in first-seen order."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], DailyCallCount] = {}

    def fold(self, day: str, label: str, calls: int) -> DailyCallCount:
        """Add `calls` to the (day, label) total, creating it at the end if new."""
        key   = (day, label)
        entry = self._entries.get(key)
        if entry is None:
            entry = DailyCallCount(day=day, label=label)
            self._entries[key] = entry
        entry.calls += calls
        return entry

    def summaries(self) -> List[DailyCallCount]:
        return list(self._entries.values())

    def __iter__(self) -> Iterator[DailyCallCount]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def fold_all(items: Iterable[Tuple[str, str, int]]) -> List[DailyCallCount]:
    """Fold (day, label, calls) triples; returns summaries in first-seen order."""
    acc = CallCountAccumulator()
    for day, label, calls in items:
        acc.fold(day, label, calls)
    logger.debug(f"Folded into {len(acc)} daily summaries")
    return acc.summaries()
