#!/usr/bin/env python3
"""
Seed the mood store with sample check-ins for local development.

Writes a few weeks of plausible mood records for one user into the
configured SQLite database, so the stats and trends endpoints have
something to show.

Usage:
    python scripts/seed_moods.py --user demo-user
    python scripts/seed_moods.py --user demo-user --days 14 --per-day 3
    python scripts/seed_moods.py --db /tmp/moods.db --seed 42
"""
import sys
import random
import argparse
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Base directory (project root)
BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR / "src"))
sys.path.insert(0, str(BASE_DIR))

from mood_analytics import AIAnalysisResult, MoodCreate, MoodMetadata, MoodService, SqliteMoodStore  # noqa: E402
from mood_analytics.models import utc_now  # noqa: E402

# Load environment variables
load_dotenv()

# (emotion, sentiment, intensity range)
MOOD_PROFILES = [
    ("happy", "positive", (6, 9)),
    ("calm", "neutral", (4, 7)),
    ("excited", "positive", (7, 10)),
    ("confident", "positive", (6, 8)),
    ("neutral", "neutral", (4, 6)),
    ("sad", "negative", (3, 7)),
    ("anxious", "negative", (4, 8)),
    ("frustrated", "negative", (5, 8)),
    ("lonely", "negative", (3, 6)),
]
PROFILE_WEIGHTS = [5, 5, 2, 2, 4, 3, 3, 2, 1]

WEATHER = ["sunny", "cloudy", "rainy", "windy"]
ACTIVITIES = ["work", "exercise", "reading", "friends", "family", "music", "cooking", "walk"]
TRIGGERS = ["deadline", "sleep", "news", "traffic", "conversation"]


def sample_mood(rng: random.Random, offset: timedelta) -> MoodCreate:
    """Build one random check-in, `offset` before now."""
    emotion, sentiment, (low, high) = rng.choices(MOOD_PROFILES, weights=PROFILE_WEIGHTS)[0]
    confidence = round(rng.uniform(0.55, 0.95), 2)

    return MoodCreate(
        emotion=emotion,
        intensity=rng.randint(low, high),
        notes=f"Feeling {emotion} today.",
        timestamp=utc_now() - offset,
        ai_analysis=AIAnalysisResult(
            detected_emotion=emotion,
            confidence=confidence,
            sentiment=sentiment,
            keywords=rng.sample(ACTIVITIES, 2),
            suggestions=[],
            risk_level="low",
        ),
        metadata=MoodMetadata(
            weather=rng.choice(WEATHER),
            activities=rng.sample(ACTIVITIES, rng.randint(1, 3)),
            triggers=rng.sample(TRIGGERS, rng.randint(0, 2)),
        ),
    )


def seed(db_path: str, user_id: str, days: int, per_day: int, rng: random.Random) -> int:
    store = SqliteMoodStore(db_path)
    service = MoodService(store)
    count = 0

    for day in range(days):
        for _ in range(per_day):
            offset = timedelta(days=day, hours=rng.randint(0, 23), minutes=rng.randint(0, 59))
            service.create(user_id, sample_mood(rng, offset))
            count += 1

    store.close()
    return count


def main():
    from server.mood_api.config import get_settings

    parser = argparse.ArgumentParser(description="Seed the mood store with sample check-ins")
    parser.add_argument("--user", default="demo-user", help="Owner of the seeded records (default: demo-user)")
    parser.add_argument("--days", type=int, default=30, help="Days of history to generate (default: 30)")
    parser.add_argument("--per-day", type=int, default=2, help="Check-ins per day (default: 2)")
    parser.add_argument("--db", help="SQLite database path (default: MOODTRACK_DATABASE_PATH)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible data")
    args = parser.parse_args()

    db_path = args.db or get_settings().database_path
    if db_path == ":memory:":
        parser.error("Seeding needs a database file, not the in-memory store")

    print("=" * 60)
    print("Mood Tracker Seed Script")
    print("=" * 60)
    print(f"\nDatabase: {db_path}")
    print(f"User:     {args.user}\n")

    count = seed(db_path, args.user, args.days, args.per_day, random.Random(args.seed))

    print(f"Complete! Inserted {count} mood records over {args.days} days.")
    print("=" * 60)


if __name__ == "__main__":
    main()
