"""
Domain Models.

Items are loaded once from the catalog and never change. Mastery
records, category stats and the rest of the persisted profile are
pydantic models so a stored blob is validated and normalized on load.
Answer records are plain frozen dataclasses: they only live for one
session before being folded into the ledger.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from strata.core.categories import ALL_CATEGORIES, Category

CURRENT_STATE_VERSION = 3

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _is_calendar_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class SelfScore(str, Enum):
    """Self-assessment for free-response answers."""

    PERFECT = "perfect"
    CLOSE = "close"
    MISS = "miss"


class ErrorType(str, Enum):
    """Classification of a free-response miss."""

    MIMICRY = "mimicry"  # confused with a look-alike character
    CRYSTAL_DEFECT = "crystal_defect"  # stroke or dot added/missing
    WEATHERING = "weathering"  # hook/sweep/stop wrong
    MISIDENTIFY = "misidentify"  # wrong radical
    LAYER_SHIFT = "layer_shift"  # okurigana boundary wrong


class Title(str, Enum):
    TRAINEE = "trainee"
    SURVEYOR = "surveyor"
    ASSISTANT = "assistant"
    RESEARCHER = "researcher"
    DOCTOR = "doctor"
    PROFESSOR = "professor"


# =============================================================================
# Catalog
# =============================================================================


class Choice(BaseModel):
    """One multiple-choice label."""

    model_config = ConfigDict(frozen=True)

    label: str
    desc: str | None = None


class Item(BaseModel):
    """A quiz question. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Globally unique item identifier")
    category: Category = Field(..., alias="tag")
    prompt: str = Field("", alias="question", description="Question text")
    context: str = Field("", description="Sentence the target appears in")
    target: str = ""
    answer: str
    choices: tuple[Choice, ...] | None = Field(
        None, description="None means free-response (handwriting)"
    )
    hint: str | None = None
    explanation: str | None = None
    difficulty: Literal[1, 2, 3] = 1
    points: int = Field(1, ge=0)
    source: str = Field("", description="Generation provenance, not used for scheduling")

    @property
    def is_free_response(self) -> bool:
        return self.choices is None


# =============================================================================
# Ledger State
# =============================================================================


class MasteryRecord(BaseModel):
    """Running correctness tally for one item."""

    model_config = ConfigDict(populate_by_name=True)

    correct: int = 0
    miss: int = 0
    last_answered: str = Field("", alias="lastAnswered")  # YYYY-MM-DD
    last_result: Literal["correct", "miss"] = Field("miss", alias="lastResult")
    consecutive_correct: int = Field(0, alias="consecutiveCorrect")
    last_error_type: ErrorType | None = Field(None, alias="lastErrorType")
    bookmarked: bool = False

    @field_validator("last_answered")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if value and (not _ISO_DATE.fullmatch(value) or not _is_calendar_date(value)):
            raise ValueError(f"lastAnswered must be YYYY-MM-DD, got {value!r}")
        return value

    @property
    def attempts(self) -> int:
        return self.correct + self.miss

    @property
    def miss_rate(self) -> float:
        """Plain miss rate, 0 for an untouched record."""
        return self.miss / max(1, self.attempts)

    @property
    def last_answered_date(self) -> date | None:
        if not self.last_answered:
            return None
        return date.fromisoformat(self.last_answered)


class CategoryStats(BaseModel):
    correct: int = 0
    miss: int = 0

    @property
    def attempts(self) -> int:
        return self.correct + self.miss

    @property
    def correct_rate(self) -> float:
        return self.correct / self.attempts if self.attempts else 0.0

    @property
    def miss_rate(self) -> float:
        return self.miss / self.attempts if self.attempts else 0.0


def _empty_category_stats() -> dict[Category, CategoryStats]:
    return {category: CategoryStats() for category in ALL_CATEGORIES}


class ExamResult(BaseModel):
    date: str
    score: int
    breakdown: dict[Category, int] = Field(default_factory=dict)
    duration: int = 0  # seconds
    total: int | None = None


class Profile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    created_at: str = Field(default_factory=lambda: date.today().isoformat(), alias="createdAt")
    streak: int = 0
    last_study_date: str = Field("", alias="lastStudyDate")
    title: Title = Title.TRAINEE


class AppState(BaseModel):
    """
    Full persisted snapshot for one profile.

    Missing sections are filled with defaults on validation, so older
    blobs load into the current shape. Category stats are always
    complete for all eleven categories.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: int = CURRENT_STATE_VERSION
    profile: Profile = Field(default_factory=Profile)
    history: dict[str, MasteryRecord] = Field(default_factory=dict)
    category_stats: dict[Category, CategoryStats] = Field(
        default_factory=_empty_category_stats, alias="tagStats"
    )
    exam_results: list[ExamResult] = Field(default_factory=list, alias="examResults")
    minerals: dict[str, int] = Field(default_factory=dict)
    badges: list[str] = Field(default_factory=list)

    @field_validator("category_stats", mode="before")
    @classmethod
    def _drop_unknown_categories(cls, value):
        """Retired category tags are ignored instead of failing the whole snapshot."""
        if not isinstance(value, dict):
            return value
        known = {category.value for category in ALL_CATEGORIES}
        return {key: stats for key, stats in value.items() if key in known}

    def model_post_init(self, __context) -> None:
        for category in ALL_CATEGORIES:
            self.category_stats.setdefault(category, CategoryStats())

    def stats_for(self, category: Category) -> CategoryStats:
        return self.category_stats.setdefault(category, CategoryStats())


# =============================================================================
# Session Records
# =============================================================================


@dataclass(frozen=True)
class AnswerRecord:
    """One answered item. Immutable once created."""

    item_id: str
    category: Category
    correct: bool
    self_score: SelfScore | None = None
    error_type: ErrorType | None = None  # only meaningful when self_score is MISS
    time_spent: int = 0  # seconds
