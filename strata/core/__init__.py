"""
Core Module - Shared domain models.

Components:
- categories: Category / QuizMode enums and the layer catalog
- models: Item, mastery ledger state, answer records
"""

from strata.core.categories import (
    ALL_CATEGORIES,
    FREE_RESPONSE_CATEGORY,
    LAYER_BY_CATEGORY,
    LAYERS,
    Category,
    Layer,
    QuizMode,
    layer_for_depth,
)
from strata.core.models import (
    AnswerRecord,
    AppState,
    CategoryStats,
    ErrorType,
    ExamResult,
    Item,
    MasteryRecord,
    SelfScore,
    Title,
)

__all__ = [
    "ALL_CATEGORIES",
    "FREE_RESPONSE_CATEGORY",
    "LAYER_BY_CATEGORY",
    "LAYERS",
    "AnswerRecord",
    "AppState",
    "Category",
    "CategoryStats",
    "ErrorType",
    "ExamResult",
    "Item",
    "Layer",
    "MasteryRecord",
    "QuizMode",
    "SelfScore",
    "Title",
    "layer_for_depth",
]
