"""
Unit tests for StudyService.

Tests:
- Answers are persisted before the in-memory state changes
- Failed saves leave the service untouched
- Exam recording, profile name, backup import/export
- Session only advances after a successful save
"""

import json
import random

import pytest
from pydantic import ValidationError

from strata.core.categories import Category, QuizMode
from strata.delivery.catalog import ItemCatalog
from strata.delivery.state_store import StateStore
from strata.study.session import SessionState
from strata.study.study_service import StudyService
from tests.conftest import TODAY, answer


@pytest.fixture
def store(tmp_path):
    s = StateStore(tmp_path / "state.db")
    yield s
    s.close()


@pytest.fixture
def service(full_catalog, store):
    return StudyService(
        ItemCatalog(full_catalog),
        store,
        selection_rng=random.Random(3),
        shuffle_rng=random.Random(4),
        clock=lambda: TODAY,
    )


class FailingStore(StateStore):
    def save(self, state):
        raise OSError("disk full")


class TestAnswers:
    def test_answer_persisted(self, service, store, full_catalog):
        item = full_catalog[0]
        outcome = service.record_answer(answer(item, True))

        assert outcome.rewards.minerals == ["quartz"]
        assert service.ledger.get(item.id).correct == 1
        assert store.load().history[item.id].correct == 1
        assert store.load().profile.streak == 1

    def test_failed_save_leaves_state_unchanged(self, full_catalog, tmp_path):
        failing = FailingStore(tmp_path / "state.db")
        service = StudyService(ItemCatalog(full_catalog), failing, clock=lambda: TODAY)

        with pytest.raises(OSError):
            service.record_answer(answer(full_catalog[0], True))

        assert service.state.history == {}
        assert service.state.minerals["quartz"] == 0
        failing.close()

    def test_full_session_flow(self, service):
        driver = service.start_session("daily")
        assert len(driver.items) == 7

        for item in driver.items:
            service.submit(driver, answer(item, False))

        assert driver.state is SessionState.COMPLETE
        assert len(service.ledger.missed_ids()) == 7

        repair = service.start_session(QuizMode.REPAIR)
        assert {i.id for i in repair.items} == {i.id for i in driver.items}

    def test_submit_on_finished_session_records_nothing(self, service):
        driver = service.start_session(QuizMode.TRIAL)
        for item in driver.items:
            service.submit(driver, answer(item, True))

        with pytest.raises(RuntimeError):
            service.submit(driver, answer(driver.items[0], True))
        assert service.ledger.get(driver.items[0].id).correct == 1

    def test_unknown_mode_rejected(self, service):
        with pytest.raises(ValueError):
            service.start_session("marathon")

    def test_category_by_name(self, service):
        driver = service.start_session("category", category="radical")
        assert {i.category for i in driver.items} == {Category.RADICAL}

    def test_bookmark_persisted(self, service, store, full_catalog):
        item = full_catalog[0]
        service.record_answer(answer(item, False))
        service.toggle_bookmark(item.id)
        assert store.load().history[item.id].bookmarked is True


class TestExamAndProfile:
    def test_record_exam(self, service, store):
        driver = service.start_session(QuizMode.EXAM_SHORT)
        answers = [answer(item, True) for item in driver.items]

        result = service.record_exam(answers, duration=900)

        # 4 writing items at 2 points, 16 others at 1
        assert result.score == 24
        assert result.total == 24
        assert store.load().exam_results[0].score == 24
        assert "exam_pass" in service.state.badges

    def test_profile_name_trimmed(self, service, store):
        saved = service.set_profile_name("   とても長い名前のユーザーさんです  ")
        assert saved == "とても長い名前のユーザー"
        assert len(saved) == 12
        assert store.load().profile.name == saved

    def test_reset(self, service, store, full_catalog):
        service.record_answer(answer(full_catalog[0], True))
        service.reset()
        assert service.state.history == {}
        assert store.load().history == {}


class TestBackup:
    def test_export_then_import(self, service, full_catalog):
        service.record_answer(answer(full_catalog[0], True))
        backup = service.export_json()

        service.reset()
        service.import_json(backup)

        assert service.ledger.get(full_catalog[0].id).correct == 1

    def test_import_rejects_non_object(self, service):
        with pytest.raises(ValueError):
            service.import_json("[]")

    def test_import_rejects_bad_shape(self, service):
        with pytest.raises(ValidationError):
            service.import_json(json.dumps({"history": {"x": {"miss": "many"}}}))

    def test_rates(self, service, full_catalog):
        reading = [i for i in full_catalog if i.category is Category.READING]
        service.record_answer(answer(reading[0], True))
        service.record_answer(answer(reading[1], False))
        assert service.category_rate(Category.READING) == pytest.approx(0.5)
        assert service.category_rates()[Category.WRITING] == 0.0
        assert service.layer_insights()[0].layer.depth == 4

    def test_import_rejects_bad_answer_date(self, service, full_catalog):
        service.record_answer(answer(full_catalog[0], True))
        blob = json.dumps({"history": {"reading-00": {"correct": 1, "lastAnswered": "yesterday"}}})

        with pytest.raises(ValidationError):
            service.import_json(blob)

        # Current profile untouched and still usable for weighted sessions
        assert service.ledger.get(full_catalog[0].id).correct == 1
        assert len(service.start_session(QuizMode.DAILY).items) == 7


class TestSubmitOrdering:
    def test_failed_save_does_not_advance_session(self, full_catalog, tmp_path):
        failing = FailingStore(tmp_path / "state.db")
        service = StudyService(ItemCatalog(full_catalog), failing, clock=lambda: TODAY)
        driver = service.start_session(QuizMode.TRIAL)
        first = driver.current_item()

        with pytest.raises(OSError):
            service.submit(driver, answer(first, True))

        assert driver.position == 0
        assert driver.answers == []
        assert driver.current_item() == first
        assert service.state.history == {}
        failing.close()

    def test_inactive_session_rejected_before_recording(self, service, full_catalog):
        driver = service.start_session(QuizMode.REPAIR)
        assert driver.is_complete

        with pytest.raises(RuntimeError):
            service.submit(driver, answer(full_catalog[0], True))
        assert service.ledger.get(full_catalog[0].id) is None


class TestSpecimens:
    def test_kanji_specimens_exposed(self, service, full_catalog):
        writing = next(i for i in full_catalog if i.category is Category.WRITING)
        service.record_answer(answer(writing, True))

        specimens = service.kanji_specimens()
        # Every catalog item shares the answer "a"
        assert len(specimens) == 1
        assert specimens[0].status.value == "gold"
