"""
Rewards: minerals, day streak, titles and badges.

Pure functions over the mastery ledger and exam history, re-evaluated
after every answer. They mutate the AppState handed to them, which the
service always passes as a working copy.

Minerals:
- quartz: first correct answer on an item
- pyrite: an item's streak reaches exactly 3
- fossil: a previously missed item's streak reaches exactly 3
- milestone minerals: every Nth correct answer in their category
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from strata.core.categories import ALL_CATEGORIES, Category
from strata.core.models import AnswerRecord, AppState, ExamResult, Item, SelfScore, Title
from strata.study.insights import gold_specimen_count
from strata.study.ledger import LedgerDelta


@dataclass(frozen=True)
class Mineral:
    type: str
    name: str
    rank: int
    reward_category: Category | None = None
    reward_every: int | None = None
    require_perfect_writing: bool = False


MINERALS: tuple[Mineral, ...] = (
    Mineral("quartz", "石英", 1),
    Mineral("pyrite", "黄鉄鉱", 2),
    Mineral("fossil", "化石", 3),
    Mineral("calcite", "方解石", 1, Category.STROKE_COUNT, 10),
    Mineral("fluorite", "蛍石", 2, Category.RADICAL, 10),
    Mineral("garnet", "ざくろ石", 2, Category.OKURIGANA, 10),
    Mineral("magnetite", "磁鉄鉱", 2, Category.JUKUGO_MAKING, 10),
    Mineral("olivine", "かんらん石", 3, Category.HOMOPHONE, 10),
    Mineral("apatite", "燐灰石", 2, Category.READING, 15),
    Mineral("chalcopyrite", "黄銅鉱", 3, Category.ON_KUN, 10),
    Mineral("zircon", "ジルコン", 3, Category.ANTONYM_SYNONYM, 10),
    Mineral("corundum", "コランダム", 4, Category.COMPOUND_STRUCTURE, 10),
    Mineral("topaz", "トパーズ", 4, Category.THREE_CHAR_COMPOUND, 10),
    Mineral("jadeite", "ひすい輝石", 4, Category.WRITING, 5, require_perfect_writing=True),
    Mineral("crystal_core", "結晶核", 5, Category.WRITING, 20, require_perfect_writing=True),
)

MINERAL_BY_TYPE: dict[str, Mineral] = {m.type: m for m in MINERALS}

STREAK_MINERAL_AT = 3
SPECIMEN_BADGE_AT = 50

BADGE_IDS: tuple[str, ...] = (
    "first_correct",
    "streak_3",
    "streak_10",
    "writing_master",
    "all_tags",
    "exam_pass",
    "specimen_50",
    "daily_7",
)


@dataclass
class RewardSummary:
    """What one answer earned."""

    minerals: list[str] = field(default_factory=list)
    new_badges: list[str] = field(default_factory=list)
    title: Title = Title.TRAINEE
    title_changed: bool = False


def empty_minerals() -> dict[str, int]:
    return {m.type: 0 for m in MINERALS}


# =============================================================================
# Minerals
# =============================================================================


def award_minerals(state: AppState, delta: LedgerDelta, record: AnswerRecord) -> list[str]:
    """Add minerals earned by one answer; returns the awarded types."""
    if not record.correct:
        return []

    awarded: list[str] = []
    after = delta.after
    if after.correct == 1:
        awarded.append("quartz")
    if after.consecutive_correct == STREAK_MINERAL_AT:
        awarded.append("pyrite")
        if after.miss > 0:
            awarded.append("fossil")

    correct_in_category = delta.category_after.correct
    for mineral in MINERALS:
        if mineral.reward_category is None or not mineral.reward_every:
            continue
        if mineral.reward_category is not record.category:
            continue
        if mineral.require_perfect_writing and record.self_score is not SelfScore.PERFECT:
            continue
        if correct_in_category > 0 and correct_in_category % mineral.reward_every == 0:
            awarded.append(mineral.type)

    for mineral_type in awarded:
        state.minerals[mineral_type] = state.minerals.get(mineral_type, 0) + 1
    return awarded


# =============================================================================
# Profile
# =============================================================================


def update_day_streak(state: AppState, today: date) -> None:
    """Extend the study-day streak on the first answer of a day."""
    profile = state.profile
    today_str = today.isoformat()
    if profile.last_study_date == today_str:
        return
    yesterday = (today - timedelta(days=1)).isoformat()
    if profile.last_study_date == yesterday:
        profile.streak += 1
    else:
        profile.streak = 1
    profile.last_study_date = today_str


def compute_title(state: AppState) -> Title:
    best_exam = max((exam.score for exam in state.exam_results), default=0)
    if best_exam >= 170:
        return Title.PROFESSOR
    if best_exam >= 140:
        return Title.DOCTOR
    if best_exam >= 120:
        return Title.RESEARCHER

    stats = [state.stats_for(category) for category in ALL_CATEGORIES]
    attempted = [s for s in stats if s.attempts > 0]
    if attempted and all(s.correct_rate >= 0.5 for s in attempted):
        return Title.ASSISTANT

    if sum(s.correct for s in stats) >= 100:
        return Title.SURVEYOR
    return Title.TRAINEE


def _exam_passed(exam: ExamResult) -> bool:
    if exam.total:
        return exam.score / exam.total >= 0.7
    return exam.score >= 70


def check_badges(state: AppState, catalog: Sequence[Item] = ()) -> list[str]:
    """
    Badge ids earned so far, in order of first award.

    The specimen badge needs the catalog; without one it is never awarded.
    """
    badges = list(state.badges)

    def add(badge_id: str) -> None:
        if badge_id not in badges:
            badges.append(badge_id)

    history = state.history.values()
    if sum(rec.correct for rec in history) >= 1:
        add("first_correct")

    max_streak = max((rec.consecutive_correct for rec in history), default=0)
    if max_streak >= 3:
        add("streak_3")
    if max_streak >= 10:
        add("streak_10")

    if state.stats_for(Category.WRITING).correct >= 30:
        add("writing_master")
    if all(state.stats_for(category).correct > 0 for category in ALL_CATEGORIES):
        add("all_tags")
    if any(_exam_passed(exam) for exam in state.exam_results):
        add("exam_pass")
    if catalog and gold_specimen_count(state, catalog) >= SPECIMEN_BADGE_AT:
        add("specimen_50")
    if state.profile.streak >= 7:
        add("daily_7")
    return badges


def refresh_profile(state: AppState, catalog: Sequence[Item] = ()) -> RewardSummary:
    """Re-evaluate badges and title; records newly earned ones."""
    previous_badges = set(state.badges)
    previous_title = state.profile.title

    state.badges = check_badges(state, catalog)
    state.profile.title = compute_title(state)

    return RewardSummary(
        new_badges=[b for b in state.badges if b not in previous_badges],
        title=state.profile.title,
        title_changed=state.profile.title is not previous_title,
    )


def apply_answer_rewards(
    state: AppState,
    delta: LedgerDelta,
    record: AnswerRecord,
    today: date,
    catalog: Sequence[Item] = (),
) -> RewardSummary:
    """All reward bookkeeping that follows one recorded answer."""
    minerals = award_minerals(state, delta, record)
    update_day_streak(state, today)
    summary = refresh_profile(state, catalog)
    summary.minerals = minerals
    return summary


# =============================================================================
# Exams
# =============================================================================


def score_exam(
    answers: Iterable[AnswerRecord],
    items: Mapping[str, Item],
    today: date,
    duration: int,
    total: int | None = None,
) -> ExamResult:
    """
    Turn exam answers into a scored result.

    Score is the sum of item points over correct answers; the breakdown
    holds the same sum per category. When total is None it defaults to
    the points available across all answered items.
    """
    breakdown = {category: 0 for category in ALL_CATEGORIES}
    score = 0
    available = 0
    for answer in answers:
        item = items.get(answer.item_id)
        points = item.points if item is not None else 0
        available += points
        if answer.correct:
            score += points
            breakdown[answer.category] += points

    return ExamResult(
        date=today.isoformat(),
        score=score,
        breakdown=breakdown,
        duration=duration,
        total=total if total is not None else available,
    )
