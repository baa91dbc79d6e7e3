"""
Field report insights: which layers need work.

Also builds the kanji specimen collection (see kanji_specimens).

Layer priority blends the gap to the layer's target rate, its miss
density and its exam weight:

    (gap × 120 + miss_rate × 80) × points + missed_items × 8 + (12 if points ≥ 20)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from strata.core.categories import FREE_RESPONSE_CATEGORY, LAYERS, Category, Layer
from strata.core.models import AppState, Item


@dataclass(frozen=True)
class LayerInsight:
    layer: Layer
    attempts: int
    correct: int
    miss: int
    missed_items: int
    rate: float
    gap: float
    priority: float


def layer_insights(state: AppState, catalog: Sequence[Item]) -> list[LayerInsight]:
    """Layers with any activity, most urgent first."""
    category_by_id = {item.id: item.category for item in catalog}
    missed_by_category: dict[Category, int] = {}
    for item_id, record in state.history.items():
        category = category_by_id.get(item_id)
        if category is not None and record.miss > 0:
            missed_by_category[category] = missed_by_category.get(category, 0) + 1

    insights = []
    for layer in LAYERS:
        correct = sum(state.stats_for(c).correct for c in layer.categories)
        miss = sum(state.stats_for(c).miss for c in layer.categories)
        attempts = correct + miss
        missed_items = sum(missed_by_category.get(c, 0) for c in layer.categories)
        if attempts == 0 and missed_items == 0:
            continue

        rate = correct / attempts if attempts else 0.0
        miss_rate = miss / attempts if attempts else 0.0
        gap = max(0.0, layer.target_rate - rate)
        priority = (
            (gap * 120 + miss_rate * 80) * layer.points
            + missed_items * 8
            + (12 if layer.points >= 20 else 0)
        )
        insights.append(
            LayerInsight(
                layer=layer,
                attempts=attempts,
                correct=correct,
                miss=miss,
                missed_items=missed_items,
                rate=rate,
                gap=gap,
                priority=priority,
            )
        )

    return sorted(insights, key=lambda i: i.priority, reverse=True)


def weakest_layer(insights: Sequence[LayerInsight]) -> LayerInsight | None:
    attempted = [i for i in insights if i.attempts > 0]
    if not attempted:
        return None
    return min(attempted, key=lambda i: i.rate)


def overall_rate(state: AppState) -> float:
    correct = sum(rec.correct for rec in state.history.values())
    attempts = sum(rec.attempts for rec in state.history.values())
    return correct / attempts if attempts else 0.0


# =============================================================================
# Kanji Specimens
# =============================================================================


class SpecimenStatus(str, Enum):
    GOLD = "gold"  # answered correctly at least once
    SILVER = "silver"  # attempted, never correct
    GRAY = "gray"  # never attempted


_STATUS_ORDER = {SpecimenStatus.GOLD: 0, SpecimenStatus.SILVER: 1, SpecimenStatus.GRAY: 2}


@dataclass(frozen=True)
class KanjiSpecimen:
    kanji: str
    item_ids: tuple[str, ...]
    status: SpecimenStatus
    correct: int
    miss: int
    example: str


def kanji_specimens(state: AppState, catalog: Sequence[Item]) -> list[KanjiSpecimen]:
    """
    One specimen per distinct answer among free-response items.

    A specimen pools the history of every item sharing that answer.
    Sorted gold, silver, gray, then by kanji.
    """
    grouped: dict[str, list[Item]] = {}
    for item in catalog:
        if item.category is FREE_RESPONSE_CATEGORY:
            grouped.setdefault(item.answer, []).append(item)

    specimens = []
    for kanji, items in grouped.items():
        records = [state.history[item.id] for item in items if item.id in state.history]
        correct = sum(record.correct for record in records)
        miss = sum(record.miss for record in records)
        if correct > 0:
            status = SpecimenStatus.GOLD
        elif records:
            status = SpecimenStatus.SILVER
        else:
            status = SpecimenStatus.GRAY
        specimens.append(
            KanjiSpecimen(
                kanji=kanji,
                item_ids=tuple(item.id for item in items),
                status=status,
                correct=correct,
                miss=miss,
                example=items[0].context or items[0].prompt,
            )
        )

    return sorted(specimens, key=lambda s: (_STATUS_ORDER[s.status], s.kanji))


def gold_specimen_count(state: AppState, catalog: Sequence[Item]) -> int:
    return sum(1 for s in kanji_specimens(state, catalog) if s.status is SpecimenStatus.GOLD)
