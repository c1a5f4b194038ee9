# services/cache_stats.py
from collections import Counter
from typing import Dict, Any


class CacheStats:
    """Hit/miss counters per namespace plus lifecycle event counters."""

    def __init__(self):
        self.hits: Counter = Counter()
        self.misses: Counter = Counter()
        self.events: Counter = Counter()

    def hit(self, namespace: str) -> None:
        self.hits[namespace] += 1

    def miss(self, namespace: str) -> None:
        self.misses[namespace] += 1

    def record(self, event: str, count: int = 1) -> None:
        if count:
            self.events[event] += count

    def snapshot(self) -> Dict[str, Any]:
        hits = dict(self.hits)
        misses = dict(self.misses)
        total_hits = sum(hits.values())
        total_misses = sum(misses.values())
        totals = {
            "hits": total_hits,
            "misses": total_misses,
            "hit_ratio": round((total_hits / max(1, total_hits + total_misses)) * 100, 2)
        }
        return {"hits": hits, "misses": misses, "totals": totals, "events": dict(self.events)}
