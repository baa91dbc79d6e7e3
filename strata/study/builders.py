"""
Session Set Builders.

One builder per quiz mode, each returning the ordered item list for a
session. Builders read the ledger but never mutate it.

Randomness is split into two streams:
- selection_rng: which items get picked (weighted and uniform draws)
- shuffle_rng: presentation order of the final list
so tests can pin one while varying the other.

Daily mix (7 items):
    3 general + 2 weak + 1 overdue + 1 surprise slots, slot order shuffled.
    Each slot draws with weight max(0.05, priority ** exponent) from its
    own pool, then the unseen pool, then the whole catalog. At most 3
    items per category.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from loguru import logger

from strata.core.categories import Category, QuizMode, layer_for_depth
from strata.core.models import AppState, Item
from strata.study.priority import PriorityModel
from strata.study.sampler import WeightedSampler


class DailySlot(str, Enum):
    """Kind of pick inside the daily mix."""

    GENERAL = "general"
    WEAK = "weak"
    OVERDUE = "overdue"
    SURPRISE = "surprise"


# Priority exponent per slot. Below 1 flattens the distribution (more
# variety), above 1 sharpens it toward high-priority items.
SLOT_EXPONENTS: dict[DailySlot, float] = {
    DailySlot.GENERAL: 0.75,
    DailySlot.WEAK: 1.1,
    DailySlot.OVERDUE: 1.2,
    DailySlot.SURPRISE: 0.55,
}

SHORT_EXAM_BLUEPRINT: tuple[tuple[Category, int], ...] = (
    (Category.WRITING, 4),
    (Category.READING, 2),
    (Category.COMPOUND_STRUCTURE, 2),
    (Category.THREE_CHAR_COMPOUND, 2),
    (Category.ANTONYM_SYNONYM, 2),
    (Category.ON_KUN, 2),
    (Category.HOMOPHONE, 1),
    (Category.JUKUGO_MAKING, 1),
    (Category.OKURIGANA, 1),
    (Category.STROKE_COUNT, 1),
    (Category.RADICAL, 1),
)

FULL_EXAM_BLUEPRINT: tuple[tuple[Category, int], ...] = (
    (Category.WRITING, 10),
    (Category.READING, 10),
    (Category.ON_KUN, 5),
    (Category.HOMOPHONE, 5),
    (Category.ANTONYM_SYNONYM, 5),
    (Category.COMPOUND_STRUCTURE, 5),
    (Category.THREE_CHAR_COMPOUND, 5),
    (Category.JUKUGO_MAKING, 3),
    (Category.RADICAL, 1),
    (Category.STROKE_COUNT, 1),
)


@dataclass
class BuilderConfig:
    """Session sizes and selection limits."""

    daily_count: int = 7
    daily_slots: dict[DailySlot, int] = field(
        default_factory=lambda: {
            DailySlot.GENERAL: 3,
            DailySlot.WEAK: 2,
            DailySlot.OVERDUE: 1,
            DailySlot.SURPRISE: 1,
        }
    )
    max_per_category: int = 3
    trial_count: int = 3
    trial_categories: tuple[Category, ...] = (
        Category.RADICAL,
        Category.STROKE_COUNT,
        Category.READING,
    )
    repair_count: int = 10
    layer_count: int = 10
    category_count: int = 10
    exam_short_count: int = 20
    exam_full_count: int = 50
    exam_short_blueprint: tuple[tuple[Category, int], ...] = SHORT_EXAM_BLUEPRINT
    exam_full_blueprint: tuple[tuple[Category, int], ...] = FULL_EXAM_BLUEPRINT


class SetBuilder:
    """
    Builds the item list for one session of any mode.

    Args:
        catalog: Full item catalog
        state: Current profile snapshot (read only)
        today: Local calendar date used for recency terms
        selection_rng: Random source for picking items
        shuffle_rng: Random source for presentation order
        config: Sizes and limits (defaults if None)
    """

    def __init__(
        self,
        catalog: Sequence[Item],
        state: AppState,
        today: date,
        selection_rng: random.Random | None = None,
        shuffle_rng: random.Random | None = None,
        config: BuilderConfig | None = None,
    ):
        self.catalog = list(catalog)
        self.state = state
        self.today = today
        self.selection_rng = selection_rng or random.Random()
        self.shuffle_rng = shuffle_rng or random.Random()
        self.config = config or BuilderConfig()
        self.sampler = WeightedSampler(self.selection_rng)
        self.priority_model = PriorityModel(state, today)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def build(
        self,
        mode: QuizMode,
        depth: int | None = None,
        category: Category | None = None,
    ) -> list[Item]:
        """
        Build the item list for a mode.

        Args:
            mode: Quiz mode
            depth: Layer depth for LAYER mode (defaults to 1)
            category: Target category for CATEGORY mode (required)

        Returns:
            Ordered items; only REPAIR (or an empty catalog) yields []
        """
        if mode is QuizMode.DAILY:
            items = self.build_daily()
        elif mode is QuizMode.TRIAL:
            items = self.build_trial()
        elif mode is QuizMode.REPAIR:
            items = self.build_repair()
        elif mode is QuizMode.LAYER:
            items = self.build_layer(depth if depth is not None else 1)
        elif mode is QuizMode.CATEGORY:
            if category is None:
                raise ValueError("CATEGORY mode requires a category")
            items = self.build_category(category)
        elif mode is QuizMode.EXAM_SHORT:
            items = self.build_exam(self.config.exam_short_blueprint, self.config.exam_short_count)
        elif mode is QuizMode.EXAM_FULL:
            items = self.build_exam(self.config.exam_full_blueprint, self.config.exam_full_count)
        else:
            raise ValueError(f"Unsupported quiz mode: {mode!r}")

        logger.info(f"Built {mode.value} set: {len(items)} items")
        return items

    # =========================================================================
    # Daily Mix
    # =========================================================================

    def plan_daily_slots(self) -> list[DailySlot]:
        """Slot kinds for the daily mix, padded with GENERAL and shuffled."""
        slots = [slot for slot, count in self.config.daily_slots.items() for _ in range(count)]
        while len(slots) < self.config.daily_count:
            slots.append(DailySlot.GENERAL)
        self.selection_rng.shuffle(slots)
        return slots[: self.config.daily_count]

    def build_daily(self) -> list[Item]:
        model = self.priority_model
        weak_pool = [item for item in self.catalog if model.is_weak(item)]
        overdue_pool = [item for item in self.catalog if model.is_overdue(item)]
        unseen_pool = [item for item in self.catalog if model.is_unseen(item)]
        designated = {
            DailySlot.GENERAL: self.catalog,
            DailySlot.WEAK: weak_pool,
            DailySlot.OVERDUE: overdue_pool,
            DailySlot.SURPRISE: self.catalog,
        }

        picked: list[Item] = []
        used_ids: set[str] = set()
        category_counts: dict[Category, int] = {}

        def take(pool: Iterable[Item], slot: DailySlot) -> Item | None:
            item = self._pick_weighted(pool, used_ids, category_counts, slot)
            if item is not None:
                picked.append(item)
                used_ids.add(item.id)
                category_counts[item.category] = category_counts.get(item.category, 0) + 1
            return item

        for slot in self.plan_daily_slots():
            if take(designated[slot], slot) is not None:
                continue
            logger.debug(f"Daily slot {slot.value} fell back from its designated pool")
            if unseen_pool and take(unseen_pool, DailySlot.GENERAL) is not None:
                continue
            take(self.catalog, DailySlot.GENERAL)

        while len(picked) < self.config.daily_count:
            if take(self.catalog, DailySlot.GENERAL) is None:
                break

        self.shuffle_rng.shuffle(picked)
        return picked[: self.config.daily_count]

    def _pick_weighted(
        self,
        pool: Iterable[Item],
        used_ids: set[str],
        category_counts: dict[Category, int],
        slot: DailySlot,
    ) -> Item | None:
        cap = self.config.max_per_category
        candidates = [
            item
            for item in pool
            if item.id not in used_ids and category_counts.get(item.category, 0) < cap
        ]
        exponent = SLOT_EXPONENTS[slot]
        return self.sampler.sample(
            candidates,
            lambda item: self.priority_model.priority(item) ** exponent,
        )

    # =========================================================================
    # Trial / Repair
    # =========================================================================

    def build_trial(self) -> list[Item]:
        """A few uniform picks from the easiest categories."""
        pool = [item for item in self.catalog if item.category in self.config.trial_categories]
        return self._draw_uniform(pool, self.config.trial_count)

    def rank_repair_candidates(self) -> list[Item]:
        """Every missed item, highest miss rate first (stable for ties)."""
        missed = [
            item
            for item in self.catalog
            if (record := self.state.history.get(item.id)) is not None and record.miss > 0
        ]
        return sorted(missed, key=lambda item: self.state.history[item.id].miss_rate, reverse=True)

    def build_repair(self) -> list[Item]:
        chosen = self.rank_repair_candidates()[: self.config.repair_count]
        self.shuffle_rng.shuffle(chosen)
        return chosen

    # =========================================================================
    # Layer / Category Drills
    # =========================================================================

    def build_layer(self, depth: int) -> list[Item]:
        """
        Ten items from one layer, with every category in the layer
        represented at least once when it has items.
        """
        count = self.config.layer_count
        layer = layer_for_depth(depth)
        in_layer = [item for item in self.catalog if layer and item.category in layer.categories]
        if not in_layer:
            logger.debug(f"No items for depth {depth}; using whole catalog")
            return self._draw_uniform(self.catalog, count)

        picked: list[Item] = []
        for category in layer.categories:
            one = self.sampler.choice([item for item in in_layer if item.category is category])
            if one is not None:
                picked.append(one)

        used_ids = {item.id for item in picked}
        rest = [item for item in in_layer if item.id not in used_ids]
        picked.extend(self._draw_uniform(rest, max(0, count - len(picked)), shuffle=False))

        self.shuffle_rng.shuffle(picked)
        return picked[:count]

    def build_category(self, category: Category) -> list[Item]:
        """Priority-weighted drill inside a single category."""
        count = self.config.category_count
        pool = [item for item in self.catalog if item.category is category]
        if not pool:
            logger.debug(f"No items for category {category.value}; using whole catalog")
            return self._draw_uniform(self.catalog, count)

        picked: list[Item] = []
        remaining = list(pool)
        exponent = SLOT_EXPONENTS[DailySlot.GENERAL]
        while remaining and len(picked) < count:
            item = self.sampler.sample(
                remaining,
                lambda candidate: self.priority_model.priority(candidate) ** exponent,
            )
            picked.append(item)
            remaining.remove(item)

        self.shuffle_rng.shuffle(picked)
        return picked

    # =========================================================================
    # Exams
    # =========================================================================

    def build_exam(self, blueprint: Sequence[tuple[Category, int]], count: int) -> list[Item]:
        """Fill each category quota by uniform draw, then shuffle and truncate."""
        by_category: dict[Category, list[Item]] = {}
        for item in self.catalog:
            by_category.setdefault(item.category, []).append(item)

        picked: list[Item] = []
        used_ids: set[str] = set()
        for category, quota in blueprint:
            pool = [item for item in by_category.get(category, []) if item.id not in used_ids]
            chosen = self._draw_uniform(pool, quota, shuffle=False)
            picked.extend(chosen)
            used_ids.update(item.id for item in chosen)

        self.shuffle_rng.shuffle(picked)
        return picked[:count]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _draw_uniform(self, pool: Sequence[Item], count: int, shuffle: bool = True) -> list[Item]:
        """Up to `count` distinct items drawn uniformly from the pool."""
        chosen = self.selection_rng.sample(list(pool), min(count, len(pool)))
        if shuffle:
            self.shuffle_rng.shuffle(chosen)
        return chosen
