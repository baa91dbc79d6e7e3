"""
Priority Model for Adaptive Selection.

Scores how urgently an item should be studied. The score is a base of
1.0 plus weighted terms:

    + 1.8 × miss rate (Laplace-smoothed, miss / (attempts + 2))
    + 1.2 × recent mistake (last result miss within 2 days)
    + 0.8 × overdue fraction (past target review interval, capped 1.5)
    + 0.5 × category miss rate
    + 0.4 × category gap to the layer target rate
    + 0.45 free-response boost (writing while writing needs work)
    + 0.35 new item
    - 0.7 × streak decay (consecutive correct / 5, capped 1)
    - 0.5 same-day penalty

floored at 0.1 so every item keeps a nonzero chance.

The weights are heuristic and tunable; they are class attributes so a
subclass or instance can override them.
"""

from __future__ import annotations

from datetime import date

from strata.core.categories import FREE_RESPONSE_CATEGORY, target_rate
from strata.core.models import AppState, Item, MasteryRecord

NEVER_ANSWERED_DAYS = 9999
MAX_INTERVAL_DAYS = 14


def target_interval(consecutive_correct: int) -> int:
    """
    Target review interval in days for a correct streak.

    0 → 1, 1 → 2, 2 → 4, then 7 growing by 2 per extra correct, capped at 14.
    """
    if consecutive_correct <= 0:
        return 1
    if consecutive_correct == 1:
        return 2
    if consecutive_correct == 2:
        return 4
    return min(MAX_INTERVAL_DAYS, 7 + (consecutive_correct - 3) * 2)


def days_since(last_answered: str | None, today: date) -> int:
    """Whole days between a YYYY-MM-DD string and today (never negative)."""
    if not last_answered:
        return NEVER_ANSWERED_DAYS
    delta = today - date.fromisoformat(last_answered)
    return max(0, delta.days)


def is_weak(record: MasteryRecord | None) -> bool:
    """Weak: last answer missed, miss rate ≥ 34%, or repeated misses without a recovery streak."""
    if record is None:
        return False
    return (
        record.last_result == "miss"
        or record.miss_rate >= 0.34
        or (record.miss >= 2 and record.consecutive_correct < 2)
    )


def is_overdue(record: MasteryRecord | None, today: date) -> bool:
    if record is None or not record.last_answered:
        return False
    return days_since(record.last_answered, today) > target_interval(record.consecutive_correct)


def needs_free_response_boost(state: AppState) -> bool:
    """
    Free-response practice is boosted until it has at least 12 attempts
    with a miss rate under 35% and a correct rate of at least 75%.
    """
    stats = state.category_stats.get(FREE_RESPONSE_CATEGORY)
    if stats is None:
        return True
    if stats.attempts < 12:
        return True
    return stats.miss_rate >= 0.35 or stats.correct_rate < 0.75


class PriorityModel:
    """
    Computes study priority for items against one ledger snapshot.

    The free-response boost condition depends only on aggregate stats, so
    it is evaluated once per model instance.
    """

    BASE = 1.0
    FLOOR = 0.1

    WEIGHT_MISS_RATE = 1.8
    WEIGHT_RECENT_MISTAKE = 1.2
    WEIGHT_OVERDUE = 0.8
    WEIGHT_CATEGORY_MISS_RATE = 0.5
    WEIGHT_CATEGORY_GAP = 0.4
    FREE_RESPONSE_BOOST = 0.45
    NEW_ITEM_BOOST = 0.35
    WEIGHT_STREAK_DECAY = 0.7
    SAME_DAY_PENALTY = 0.5

    RECENT_MISTAKE_DAYS = 2
    MAX_OVERDUE_FRACTION = 1.5
    STREAK_SATURATION = 5

    def __init__(self, state: AppState, today: date):
        self.state = state
        self.today = today
        self.free_response_boost = needs_free_response_boost(state)

    def priority(self, item: Item) -> float:
        """Priority score for an item (always ≥ FLOOR)."""
        record = self.state.history.get(item.id)
        correct = record.correct if record else 0
        miss = record.miss if record else 0
        streak = record.consecutive_correct if record else 0
        last_answered = record.last_answered if record else None

        miss_rate = miss / (correct + miss + 2)
        days = days_since(last_answered, self.today)
        interval = target_interval(streak)

        overdue = min(self.MAX_OVERDUE_FRACTION, max(0.0, (days - interval) / max(1, interval)))
        recent_mistake = 1.0 if record and record.last_result == "miss" and days <= self.RECENT_MISTAKE_DAYS else 0.0
        streak_decay = min(streak / self.STREAK_SATURATION, 1.0)
        same_day = 1.0 if last_answered == self.today.isoformat() else 0.0

        free_response = (
            self.FREE_RESPONSE_BOOST
            if self.free_response_boost and item.category is FREE_RESPONSE_CATEGORY
            else 0.0
        )
        new_item = self.NEW_ITEM_BOOST if record is None else 0.0

        stats = self.state.category_stats.get(item.category)
        category_miss_rate = 0.0
        category_gap = 0.0
        if stats is not None and stats.attempts > 0:
            target = target_rate(item.category)
            category_miss_rate = stats.miss_rate
            category_gap = max(0.0, (target - stats.correct_rate) / target)

        score = (
            self.BASE
            + self.WEIGHT_MISS_RATE * miss_rate
            + self.WEIGHT_RECENT_MISTAKE * recent_mistake
            + self.WEIGHT_OVERDUE * overdue
            + self.WEIGHT_CATEGORY_MISS_RATE * category_miss_rate
            + self.WEIGHT_CATEGORY_GAP * category_gap
            + free_response
            + new_item
            - self.WEIGHT_STREAK_DECAY * streak_decay
            - self.SAME_DAY_PENALTY * same_day
        )
        return max(self.FLOOR, score)

    def is_weak(self, item: Item) -> bool:
        return is_weak(self.state.history.get(item.id))

    def is_overdue(self, item: Item) -> bool:
        return is_overdue(self.state.history.get(item.id), self.today)

    def is_unseen(self, item: Item) -> bool:
        return item.id not in self.state.history
