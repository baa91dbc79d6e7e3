"""
Mastery Ledger.

Owns the per-item mastery records and per-category stats of one
profile. The only mutation entry points are record_answer and
toggle_bookmark; both build the new values first and then swap them in,
so a caller never observes a half-applied update.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from loguru import logger

from strata.core.categories import ALL_CATEGORIES, Category, Layer
from strata.core.models import AnswerRecord, AppState, CategoryStats, MasteryRecord


@dataclass(frozen=True)
class LedgerDelta:
    """What a single record_answer changed."""

    item_id: str
    category: Category
    before: MasteryRecord | None
    after: MasteryRecord
    category_before: CategoryStats
    category_after: CategoryStats

    @property
    def created(self) -> bool:
        return self.before is None

    @property
    def first_correct(self) -> bool:
        return self.after.correct == 1 and (self.before is None or self.before.correct == 0)


class MasteryLedger:
    """
    Read/write view over the mastery part of an AppState.

    The ledger mutates the state it wraps. Callers who need to keep the
    previous snapshot hand in a copy (see StudyService.record_answer).
    """

    def __init__(self, state: AppState):
        self.state = state

    # =========================================================================
    # Mutation
    # =========================================================================

    def record_answer(self, record: AnswerRecord, today: date) -> LedgerDelta:
        """
        Fold one answer into the item record and its category stats.

        Unknown item ids are not an error: a fresh zero record is created.
        """
        before = self.state.history.get(record.item_id)
        updated = before.model_copy() if before is not None else MasteryRecord()

        if record.correct:
            updated.correct += 1
            updated.consecutive_correct += 1
            updated.last_result = "correct"
        else:
            updated.miss += 1
            updated.consecutive_correct = 0
            updated.last_result = "miss"
            if record.error_type is not None:
                updated.last_error_type = record.error_type
        updated.last_answered = today.isoformat()

        stats_before = self.state.stats_for(record.category)
        stats_after = stats_before.model_copy()
        if record.correct:
            stats_after.correct += 1
        else:
            stats_after.miss += 1

        self.state.history[record.item_id] = updated
        self.state.category_stats[record.category] = stats_after

        logger.debug(
            f"Recorded {'correct' if record.correct else 'miss'} for {record.item_id} "
            f"(streak {updated.consecutive_correct}, {record.category.value} "
            f"{stats_after.correct}/{stats_after.attempts})"
        )

        return LedgerDelta(
            item_id=record.item_id,
            category=record.category,
            before=before,
            after=updated,
            category_before=stats_before,
            category_after=stats_after,
        )

    def toggle_bookmark(self, item_id: str) -> None:
        """Flip the bookmark flag. No-op when the item was never answered."""
        current = self.state.history.get(item_id)
        if current is None:
            return
        self.state.history[item_id] = current.model_copy(update={"bookmarked": not current.bookmarked})

    # =========================================================================
    # Accessors
    # =========================================================================

    def get(self, item_id: str) -> MasteryRecord | None:
        return self.state.history.get(item_id)

    def category_stats(self, category: Category) -> CategoryStats:
        return self.state.stats_for(category)

    def category_rate(self, category: Category) -> float:
        """Correct rate for a category; 0 when never attempted."""
        return self.state.stats_for(category).correct_rate

    def category_rates(self) -> dict[Category, float]:
        return {category: self.category_rate(category) for category in ALL_CATEGORIES}

    def layer_rate(self, layer: Layer) -> float:
        correct = sum(self.state.stats_for(c).correct for c in layer.categories)
        attempts = sum(self.state.stats_for(c).attempts for c in layer.categories)
        return correct / attempts if attempts else 0.0

    def bookmarked_ids(self) -> list[str]:
        return [item_id for item_id, rec in self.state.history.items() if rec.bookmarked]

    def missed_ids(self) -> list[str]:
        return [item_id for item_id, rec in self.state.history.items() if rec.miss > 0]

    @property
    def total_correct(self) -> int:
        return sum(rec.correct for rec in self.state.history.values())

    @property
    def max_streak(self) -> int:
        return max((rec.consecutive_correct for rec in self.state.history.values()), default=0)
