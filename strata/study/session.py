"""
Session Driver.

Steps through the item list of one quiz run:

    LOADING --start()--> ACTIVE --submit() x N--> COMPLETE

An empty item list goes straight to COMPLETE. Abandoning a session just
drops the driver; answers already forwarded to the ledger stay recorded.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from strata.core.categories import Category, QuizMode
from strata.core.models import AnswerRecord, Item
from strata.study.builders import SetBuilder


class SessionState(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SessionProgress:
    current: int  # 1-based position
    total: int


class SessionDriver:
    """
    Orchestrates one quiz run.

    Args:
        builder: SetBuilder used to produce the item list on start()
    """

    def __init__(self, builder: SetBuilder):
        self.builder = builder
        self.state = SessionState.LOADING
        self.mode: QuizMode | None = None
        self.items: tuple[Item, ...] = ()
        self.position = 0
        self.answers: list[AnswerRecord] = []
        self._item_started = time.monotonic()

    def start(
        self,
        mode: QuizMode,
        depth: int | None = None,
        category: Category | None = None,
    ) -> tuple[Item, ...]:
        """Build the item list and reset progress."""
        self.mode = mode
        self.items = tuple(self.builder.build(mode, depth=depth, category=category))
        self.position = 0
        self.answers = []
        self.state = SessionState.ACTIVE if self.items else SessionState.COMPLETE
        self._item_started = time.monotonic()

        if not self.items:
            logger.info(f"{mode.value} session has no items; completed immediately")
        return self.items

    def submit(self, record: AnswerRecord) -> SessionState:
        """
        Append an answer and advance.

        Raises:
            RuntimeError: If the session is not active
        """
        if self.state is not SessionState.ACTIVE:
            raise RuntimeError(f"Cannot submit an answer while session is {self.state.value}")

        self.answers.append(record)
        if self.position + 1 < len(self.items):
            self.position += 1
            self._item_started = time.monotonic()
        else:
            self.state = SessionState.COMPLETE
            logger.debug(f"Session complete: {self.correct_count}/{len(self.answers)} correct")
        return self.state

    def current_item(self) -> Item | None:
        if self.state is not SessionState.ACTIVE:
            return None
        return self.items[self.position]

    @property
    def progress(self) -> SessionProgress:
        return SessionProgress(current=self.position + 1, total=len(self.items))

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    @property
    def correct_count(self) -> int:
        return sum(1 for answer in self.answers if answer.correct)

    def elapsed(self) -> int:
        """Whole seconds since the current item was presented."""
        return round(time.monotonic() - self._item_started)
