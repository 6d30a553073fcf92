"""
Mood Aggregation Engine.

Computes statistics and day-bucketed trends over a user's mood history
within a lookback window. The engine is read-only over a snapshot of the
store: a record written while an aggregation is running may or may not be
included, which is accepted eventual-consistency behavior.

Tie-break for most-frequent and dominant emotions: among emotions with the
highest count, the one whose first record comes earliest in chronological
order wins. Records are therefore always aggregated in ascending
timestamp order.
"""

import logging
import math
import statistics
from collections import Counter, OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .models import MoodRecord, MoodStats, MoodTrend, utc_now
from .store import MoodStore

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 30

# Standard deviation (in intensity points) treated as fully unstable
MAX_MEANINGFUL_STD_DEV = 3.0


def round_half_up(value: float, places: int = 0) -> float:
    """Round with halves going up, matching the dashboard's rounding."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def stability_score(intensities: Sequence[int]) -> int:
    """
    Score (0-100) of how consistent reported intensities are.

    Fewer than two readings is treated as stable (100). Otherwise the
    population standard deviation is normalized against
    MAX_MEANINGFUL_STD_DEV and inverted, floored at 0.
    """
    if len(intensities) < 2:
        return 100

    std_dev = statistics.pstdev(intensities)
    raw = 100 - (std_dev / MAX_MEANINGFUL_STD_DEV) * 100
    return max(0, int(round_half_up(raw)))


def most_frequent_emotion(records: Iterable[MoodRecord]) -> Optional[str]:
    """Most common emotion, first-seen wins ties; None for no records."""
    counts = Counter(r.emotion for r in records)
    if not counts:
        return None
    # Counter keeps first-insertion order and max() keeps the first maximum
    return max(counts, key=counts.get)


def _average_intensity(records: Sequence[MoodRecord]) -> float:
    if not records:
        return 0
    return round_half_up(sum(r.intensity for r in records) / len(records), 2)


def _chronological(records: Iterable[MoodRecord]) -> List[MoodRecord]:
    return sorted(records, key=lambda r: r.timestamp)


def compute_stats(records: Iterable[MoodRecord]) -> MoodStats:
    """Build MoodStats for a set of records. Empty input yields zero values."""
    ordered = _chronological(records)

    emotion_frequency: Dict[str, int] = dict(Counter(r.emotion for r in ordered))
    sentiment_distribution: Dict[str, int] = dict(
        Counter(r.ai_analysis.sentiment if r.ai_analysis else "neutral" for r in ordered)
    )

    return MoodStats(
        total_moods=len(ordered),
        emotion_frequency=emotion_frequency,
        average_intensity=_average_intensity(ordered),
        sentiment_distribution=sentiment_distribution,
        most_frequent_emotion=most_frequent_emotion(ordered),
        mood_stability=stability_score([r.intensity for r in ordered]),
    )


def compute_trends(records: Iterable[MoodRecord]) -> List[MoodTrend]:
    """
    Bucket records by UTC calendar date.

    Returns one MoodTrend per day that has at least one record, in
    ascending date order. Days without records are omitted.
    """
    buckets: "OrderedDict[str, List[MoodRecord]]" = OrderedDict()
    for record in _chronological(records):
        day = record.timestamp.astimezone(timezone.utc).date().isoformat()
        buckets.setdefault(day, []).append(record)

    return [
        MoodTrend(
            date=day,
            avg_intensity=_average_intensity(day_records),
            dominant_emotion=most_frequent_emotion(day_records),
            mood_count=len(day_records),
        )
        for day, day_records in buckets.items()
    ]


class MoodAnalytics:
    """
    Reads a user's records from the store and aggregates them.

    Args:
        store: The mood store to query
        clock: Returns the current UTC time (injectable for tests)
    """

    def __init__(self, store: MoodStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def _window(self, user_id: str, days: int) -> List[MoodRecord]:
        if days < 1:
            raise ValueError("Lookback window must be at least one day")
        start = self.clock() - timedelta(days=days)
        return self.store.find_by_user_and_date_range(user_id, start, ascending=True)

    def get_stats(self, user_id: str, days: int = DEFAULT_LOOKBACK_DAYS) -> MoodStats:
        records = self._window(user_id, days)
        stats = compute_stats(records)
        logger.info(
            f"[ANALYTICS] Stats for {user_id} over {days}d: "
            f"n={stats.total_moods}, avg={stats.average_intensity}, "
            f"stability={stats.mood_stability}"
        )
        return stats

    def get_trends(self, user_id: str, days: int = DEFAULT_LOOKBACK_DAYS) -> List[MoodTrend]:
        records = self._window(user_id, days)
        trends = compute_trends(records)
        logger.info(f"[ANALYTICS] Trends for {user_id} over {days}d: {len(trends)} day(s)")
        return trends
