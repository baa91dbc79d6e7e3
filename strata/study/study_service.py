"""
Study Service: one profile's study loop.

Ties the pieces together:
- loads the profile snapshot from the state store
- builds sessions for any quiz mode
- records answers (ledger + rewards) and saves synchronously
- exposes mastery read accessors for progress displays

Every mutation works on a deep copy of the current snapshot, saves it,
and only then replaces the in-memory state. A failed save therefore
leaves the service exactly as it was.
"""

from __future__ import annotations

import json
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date

from loguru import logger

from strata.config import Settings
from strata.core.categories import Category, QuizMode
from strata.core.models import AnswerRecord, AppState, ExamResult
from strata.delivery.catalog import ItemCatalog
from strata.delivery.state_store import StateStore, normalize_state
from strata.study.builders import BuilderConfig, SetBuilder
from strata.study.insights import KanjiSpecimen, LayerInsight, kanji_specimens, layer_insights
from strata.study.ledger import LedgerDelta, MasteryLedger
from strata.study.rewards import RewardSummary, apply_answer_rewards, refresh_profile, score_exam
from strata.study.session import SessionDriver, SessionState

MAX_PROFILE_NAME = 12


@dataclass(frozen=True)
class AnswerOutcome:
    delta: LedgerDelta
    rewards: RewardSummary


class StudyService:
    """
    Facade over catalog, ledger, builders and persistence.

    Args:
        catalog: Loaded question bank
        store: Persistence for the profile snapshot
        selection_rng: Random source for item selection
        shuffle_rng: Random source for presentation order
        builder_config: Session sizes and limits
        clock: Returns today's local date
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        store: StateStore,
        selection_rng: random.Random | None = None,
        shuffle_rng: random.Random | None = None,
        builder_config: BuilderConfig | None = None,
        clock: Callable[[], date] = date.today,
    ):
        self.catalog = catalog
        self.store = store
        self.selection_rng = selection_rng or random.Random()
        self.shuffle_rng = shuffle_rng or random.Random()
        self.builder_config = builder_config or BuilderConfig()
        self.clock = clock
        self.state: AppState = store.load()

    @classmethod
    def from_settings(cls, settings: Settings) -> StudyService:
        catalog = ItemCatalog.load(settings.catalog_path)
        store = StateStore(settings.resolved_db_path, storage_key=settings.storage_key)
        return cls(
            catalog,
            store,
            selection_rng=random.Random(settings.random_seed),
            shuffle_rng=random.Random(settings.shuffle_seed),
        )

    @property
    def ledger(self) -> MasteryLedger:
        """Read view over the current snapshot."""
        return MasteryLedger(self.state)

    def _commit(self, next_state: AppState) -> None:
        self.store.save(next_state)
        self.state = next_state

    # =========================================================================
    # Sessions
    # =========================================================================

    def builder(self) -> SetBuilder:
        return SetBuilder(
            self.catalog.items,
            self.state,
            self.clock(),
            selection_rng=self.selection_rng,
            shuffle_rng=self.shuffle_rng,
            config=self.builder_config,
        )

    def start_session(
        self,
        mode: QuizMode | str,
        depth: int | None = None,
        category: Category | str | None = None,
    ) -> SessionDriver:
        """
        Start a session of the given mode.

        Raises:
            ValueError: For an unknown mode or category name
        """
        mode = QuizMode(mode)
        if category is not None:
            category = Category(category)
        driver = SessionDriver(self.builder())
        driver.start(mode, depth=depth, category=category)
        return driver

    # =========================================================================
    # Mutations
    # =========================================================================

    def record_answer(self, record: AnswerRecord) -> AnswerOutcome:
        """Apply one answer to the ledger and rewards, then persist."""
        today = self.clock()
        working = self.state.model_copy(deep=True)
        delta = MasteryLedger(working).record_answer(record, today)
        rewards = apply_answer_rewards(working, delta, record, today, self.catalog.items)
        self._commit(working)

        if rewards.minerals or rewards.new_badges:
            logger.info(f"Rewards for {record.item_id}: minerals={rewards.minerals} badges={rewards.new_badges}")
        return AnswerOutcome(delta=delta, rewards=rewards)

    def submit(self, driver: SessionDriver, record: AnswerRecord) -> AnswerOutcome:
        """
        Record an answer, then advance the session driver.

        The driver only advances once the answer is saved, so a failed
        save leaves both the profile and the session where they were.

        Raises:
            RuntimeError: If the session is not active
        """
        if driver.state is not SessionState.ACTIVE:
            raise RuntimeError(f"Cannot submit an answer while session is {driver.state.value}")
        outcome = self.record_answer(record)
        driver.submit(record)
        return outcome

    def toggle_bookmark(self, item_id: str) -> None:
        working = self.state.model_copy(deep=True)
        MasteryLedger(working).toggle_bookmark(item_id)
        self._commit(working)

    def record_exam(self, answers: Iterable[AnswerRecord], duration: int) -> ExamResult:
        """Score a finished exam, append it to history and refresh title/badges."""
        result = score_exam(answers, self.catalog.by_id, self.clock(), duration)
        working = self.state.model_copy(deep=True)
        working.exam_results.append(result)
        refresh_profile(working, self.catalog.items)
        self._commit(working)
        logger.info(f"Exam recorded: {result.score}/{result.total}")
        return result

    def set_profile_name(self, name: str) -> str:
        normalized = name.strip()[:MAX_PROFILE_NAME]
        working = self.state.model_copy(deep=True)
        working.profile.name = normalized
        self._commit(working)
        return normalized

    def reset(self) -> None:
        self.state = self.store.reset()

    # =========================================================================
    # Backup
    # =========================================================================

    def export_json(self) -> str:
        return StateStore.dump(self.state)

    def import_json(self, raw: str) -> AppState:
        """
        Replace the profile with a backup blob.

        Raises:
            ValueError: If the blob is not a JSON object or fails validation
        """
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("Backup must be a JSON object")
        imported = normalize_state(data)
        self._commit(imported)
        logger.info(f"Imported backup with {len(imported.history)} item records")
        return imported

    # =========================================================================
    # Read Accessors
    # =========================================================================

    def category_rate(self, category: Category) -> float:
        return self.ledger.category_rate(category)

    def category_rates(self) -> dict[Category, float]:
        return self.ledger.category_rates()

    def layer_insights(self) -> list[LayerInsight]:
        return layer_insights(self.state, self.catalog.items)

    def kanji_specimens(self) -> list[KanjiSpecimen]:
        return kanji_specimens(self.state, self.catalog.items)
