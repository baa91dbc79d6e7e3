"""
Category and Layer Catalog.

Eleven fixed question categories grouped into seven "layers" (depths).
Each layer carries a target mastery rate used by the priority model
and by the field report, plus its share of the 200-point exam.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Category(str, Enum):
    """Question category tag."""

    RADICAL = "radical"
    STROKE_COUNT = "stroke_count"
    OKURIGANA = "okurigana"
    JUKUGO_MAKING = "jukugo_making"
    HOMOPHONE = "homophone"
    READING = "reading"
    ON_KUN = "on_kun"
    ANTONYM_SYNONYM = "antonym_synonym"
    COMPOUND_STRUCTURE = "compound_structure"
    THREE_CHAR_COMPOUND = "three_char_compound"
    WRITING = "writing"  # free-response, self-assessed

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @property
    def is_free_response(self) -> bool:
        return self is FREE_RESPONSE_CATEGORY


class QuizMode(str, Enum):
    """Session mode requested by the caller."""

    DAILY = "daily"  # 7 items, weighted slots
    TRIAL = "trial"  # 3 easy items
    REPAIR = "repair"  # up to 10 missed items
    LAYER = "layer"  # 10 items from one depth
    CATEGORY = "category"  # 10 items from one category
    EXAM_SHORT = "exam_short"  # 20 items
    EXAM_FULL = "exam_full"  # 50 items

    @property
    def is_exam(self) -> bool:
        return self in (QuizMode.EXAM_SHORT, QuizMode.EXAM_FULL)


FREE_RESPONSE_CATEGORY = Category.WRITING

ALL_CATEGORIES: tuple[Category, ...] = tuple(Category)

CATEGORY_LABELS: dict[Category, str] = {
    Category.RADICAL: "部首",
    Category.STROKE_COUNT: "画数",
    Category.OKURIGANA: "送りがな",
    Category.JUKUGO_MAKING: "熟語作り",
    Category.HOMOPHONE: "同音異義語",
    Category.READING: "読み",
    Category.ON_KUN: "音訓",
    Category.ANTONYM_SYNONYM: "対義語・類義語",
    Category.COMPOUND_STRUCTURE: "熟語の構成",
    Category.THREE_CHAR_COMPOUND: "三字熟語",
    Category.WRITING: "書き取り",
}


@dataclass(frozen=True)
class Layer:
    """A depth grouping of categories with its mastery target."""

    depth: int
    name: str
    categories: tuple[Category, ...]
    points: int
    percent: int
    target_rate: float


LAYERS: tuple[Layer, ...] = (
    Layer(1, "表土・腐植層", (Category.RADICAL, Category.STROKE_COUNT), 20, 10, 0.94),
    Layer(2, "未固結堆積層", (Category.OKURIGANA, Category.JUKUGO_MAKING), 22, 11, 0.90),
    Layer(3, "固結堆積岩層", (Category.HOMOPHONE,), 18, 9, 0.90),
    Layer(4, "炭酸塩・水成層", (Category.READING, Category.ON_KUN), 40, 20, 0.83),
    Layer(5, "熱水鉱床帯", (Category.ANTONYM_SYNONYM,), 20, 10, 0.85),
    Layer(
        6,
        "変成・火成岩帯",
        (Category.COMPOUND_STRUCTURE, Category.THREE_CHAR_COMPOUND),
        40,
        20,
        0.89,
    ),
    Layer(7, "深成岩・マグマ帯", (Category.WRITING,), 40, 20, 0.85),
)

MAX_LAYER_DEPTH = LAYERS[-1].depth

TOTAL_POINTS = 200
PASSING_SCORE = 140

# Older saved data used an 11-depth model
LEGACY_DEPTH_TO_CANONICAL: dict[int, int] = {
    1: 1,
    2: 1,
    3: 2,
    4: 2,
    5: 3,
    6: 5,
    7: 4,
    8: 6,
    9: 6,
    10: 7,
    11: 7,
}

_CANONICAL_BY_DEPTH: dict[int, Layer] = {layer.depth: layer for layer in LAYERS}

LAYER_BY_CATEGORY: dict[Category, Layer] = {
    category: layer for layer in LAYERS for category in layer.categories
}


def layer_for_depth(depth: int) -> Layer | None:
    """
    Resolve a depth to its layer.

    Canonical depths (1..7) win over legacy ones; legacy depths 8..11
    are normalized. Unknown depths return None.
    """
    if depth in _CANONICAL_BY_DEPTH:
        return _CANONICAL_BY_DEPTH[depth]
    canonical = LEGACY_DEPTH_TO_CANONICAL.get(depth)
    if canonical is None:
        return None
    return _CANONICAL_BY_DEPTH[canonical]


def target_rate(category: Category) -> float:
    """Target mastery rate for a category, from its layer."""
    return LAYER_BY_CATEGORY[category].target_rate
