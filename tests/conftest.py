"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import date
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from strata.core.categories import ALL_CATEGORIES, Category
from strata.core.models import AnswerRecord, AppState, Item, MasteryRecord
from strata.delivery.state_store import create_initial_state

TODAY = date(2024, 1, 10)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_item(item_id: str, category: Category = Category.READING, points: int = 1) -> Item:
    """Build a minimal multiple-choice item."""
    return Item(
        id=item_id,
        category=category,
        prompt=f"Question {item_id}",
        answer="a",
        choices=({"label": "a"}, {"label": "b"}),
        points=points,
    )


def make_record(
    correct: int = 0,
    miss: int = 0,
    streak: int = 0,
    last_answered: str = "",
    last_result: str = "miss",
) -> MasteryRecord:
    return MasteryRecord(
        correct=correct,
        miss=miss,
        consecutive_correct=streak,
        last_answered=last_answered,
        last_result=last_result,
    )


def answer(item: Item, correct: bool, **kwargs) -> AnswerRecord:
    return AnswerRecord(item_id=item.id, category=item.category, correct=correct, **kwargs)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def empty_state() -> AppState:
    return create_initial_state()


@pytest.fixture
def full_catalog() -> list[Item]:
    """Twelve items in every category (enough for the full exam)."""
    return [
        make_item(f"{category.value}-{i:02d}", category, points=2 if category is Category.WRITING else 1)
        for category in ALL_CATEGORIES
        for i in range(12)
    ]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
