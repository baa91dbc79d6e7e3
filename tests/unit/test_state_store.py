"""
Unit tests for StateStore.

Tests:
- Save/load persistence
- Fallback to defaults for missing, corrupt, invalid or newer blobs
- Normalization of older snapshots
"""

import json

import pytest
from pydantic import ValidationError

from strata.core.categories import ALL_CATEGORIES, Category
from strata.core.models import CURRENT_STATE_VERSION, CategoryStats
from strata.delivery.state_store import StateStore, create_initial_state, normalize_state
from strata.study.rewards import MINERALS
from tests.conftest import make_record


@pytest.fixture
def store(tmp_path):
    s = StateStore(tmp_path / "state.db")
    yield s
    s.close()


class TestStateStore:
    def test_missing_blob_gives_defaults(self, store):
        state = store.load()
        assert state.version == CURRENT_STATE_VERSION
        assert state.history == {}
        assert set(state.category_stats) == set(ALL_CATEGORIES)
        assert set(state.minerals) == {m.type for m in MINERALS}

    def test_save_then_load(self, store):
        state = create_initial_state()
        state.history["r1"] = make_record(correct=2, miss=1, streak=1, last_answered="2024-01-09")
        state.category_stats[Category.READING] = CategoryStats(correct=2, miss=1)
        state.profile.name = "たろう"
        store.save(state)

        loaded = store.load()
        assert loaded.history["r1"].correct == 2
        assert loaded.history["r1"].last_answered == "2024-01-09"
        assert loaded.category_stats[Category.READING].miss == 1
        assert loaded.profile.name == "たろう"

    def test_persists_across_connections(self, tmp_path):
        first = StateStore(tmp_path / "state.db")
        state = create_initial_state()
        state.badges = ["first_correct"]
        first.save(state)
        first.close()

        second = StateStore(tmp_path / "state.db")
        assert second.load().badges == ["first_correct"]
        second.close()

    def test_blob_uses_stored_field_names(self, store):
        state = create_initial_state()
        state.history["r1"] = make_record(correct=1, streak=1, last_result="correct")
        store.save(state)

        data = json.loads(store.get_raw())
        assert "tagStats" in data
        assert "examResults" in data
        assert data["history"]["r1"]["consecutiveCorrect"] == 1

    def test_corrupt_json_gives_defaults(self, store):
        store.put_raw("{not json")
        assert store.load().history == {}

    def test_non_object_gives_defaults(self, store):
        store.put_raw("[1, 2, 3]")
        assert store.load().history == {}

    def test_invalid_shape_gives_defaults(self, store):
        store.put_raw(json.dumps({"version": 3, "history": {"r1": {"correct": "lots"}}}))
        assert store.load().history == {}

    def test_newer_version_discarded(self, store):
        store.put_raw(json.dumps({"version": CURRENT_STATE_VERSION + 1, "history": {"r1": {"correct": 5}}}))
        assert store.load().history == {}

    def test_reset(self, store):
        state = create_initial_state()
        state.history["r1"] = make_record(correct=1)
        store.save(state)

        fresh = store.reset()
        assert fresh.history == {}
        assert store.load().history == {}

    def test_separate_storage_keys(self, tmp_path):
        a = StateStore(tmp_path / "state.db", storage_key="a")
        b = StateStore(tmp_path / "state.db", storage_key="b")
        state = create_initial_state()
        state.profile.name = "a-only"
        a.save(state)

        assert b.load().profile.name == ""
        a.close()
        b.close()


class TestNormalizeState:
    def test_older_version_filled_in(self):
        state = normalize_state({"version": 1, "history": {"r1": {"correct": 1, "lastAnswered": "2024-01-01"}}})
        assert state.version == CURRENT_STATE_VERSION
        assert state.history["r1"].miss == 0
        assert state.history["r1"].consecutive_correct == 0
        assert state.history["r1"].bookmarked is False
        assert set(state.category_stats) == set(ALL_CATEGORIES)
        assert state.exam_results == []

    def test_partial_category_stats_completed(self):
        state = normalize_state({"tagStats": {"reading": {"correct": 4, "miss": 1}}})
        assert state.category_stats[Category.READING].correct == 4
        assert state.category_stats[Category.WRITING].attempts == 0

    def test_existing_minerals_kept(self):
        state = normalize_state({"minerals": {"quartz": 7}})
        assert state.minerals["quartz"] == 7
        assert state.minerals["pyrite"] == 0

    def test_unknown_category_keys_dropped(self):
        state = normalize_state(
            {
                "history": {"r1": {"correct": 2, "lastAnswered": "2024-01-01"}},
                "tagStats": {"reading": {"correct": 2}, "kanji_legacy": {"correct": 9, "miss": 1}},
                "badges": ["first_correct"],
            }
        )
        assert state.history["r1"].correct == 2
        assert state.category_stats[Category.READING].correct == 2
        assert "kanji_legacy" not in state.category_stats
        assert set(state.category_stats) == set(ALL_CATEGORIES)
        assert state.badges == ["first_correct"]

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-01", "20240110", "2024-01-10T08:00:00"])
    def test_bad_answer_date_rejected(self, value):
        with pytest.raises(ValidationError):
            normalize_state({"history": {"r1": {"correct": 1, "lastAnswered": value}}})


class TestLoadNormalization:
    def test_bad_answer_date_gives_defaults(self, store):
        store.put_raw(json.dumps({"history": {"reading-00": {"correct": 1, "lastAnswered": "yesterday"}}}))
        assert store.load().history == {}

    def test_retired_category_keeps_profile(self, store):
        store.put_raw(
            json.dumps(
                {
                    "version": 2,
                    "history": {"reading-00": {"correct": 1, "lastAnswered": "2024-01-09"}},
                    "tagStats": {"kanji_legacy": {"correct": 3}},
                }
            )
        )
        loaded = store.load()
        assert loaded.history["reading-00"].correct == 1
        assert loaded.version == CURRENT_STATE_VERSION
