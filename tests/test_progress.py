import datetime

import pytest

from jp_lessons import db, lessons, vocabulary, progress, scheduler
from jp_lessons.db import VocabReview
from jp_lessons.errors import VocabEntryNotFound
from jp_lessons.scheduler import NullScheduler, SM2Scheduler, sm2_schedule


NOW = datetime.datetime(2026, 10, 19, 9, 0, 0)


@pytest.fixture(autouse=True)
def setup_db(tmp_path):
    db.init_db(f"sqlite:///{tmp_path / 'test_progress.db'}")
    yield
    db.close_db()


@pytest.fixture
def session():
    s = db.get_session()
    yield s
    s.close()


@pytest.fixture
def entries(session):
    lesson = lessons.create_lesson(session, "Lesson 1", "lesson1", "Greetings", locked=False)
    return vocabulary.add_vocab_to_lesson(session, lesson.id, [
        {"word": w, "reading": w, "meaning": w} for w in ["はい", "いいえ", "すみません"]
    ])


def test_progress_percentage():
    assert progress.progress_percentage(45, 50) == 90
    assert progress.progress_percentage(1, 3) == 33
    assert progress.progress_percentage(2, 3) == 67
    assert progress.progress_percentage(1, 8) == 13  # 12.5 rounds up
    assert progress.progress_percentage(0, 0) == 0
    assert progress.progress_percentage(3, 3) == 100


def test_fresh_lesson_progress(session, entries):
    view = progress.get_lesson_progress(session, "lesson1", "tester", now=NOW)
    assert view.total == 3
    assert view.completed == 0
    assert view.due_for_review == 0
    assert view.progress == 0
    assert view.locked is False


def test_progress_for_unknown_slug(session):
    assert progress.get_lesson_progress(session, "nonexistent-slug", "tester") is None


def test_record_review_counts_completion(session, entries):
    progress.record_review(session, "tester", entries[0].id, 5, now=NOW)
    progress.record_review(session, "tester", entries[1].id, 1, now=NOW)  # wrong answer
    progress.record_review(session, "someone_else", entries[2].id, 5, now=NOW)

    view = progress.get_lesson_progress(session, "lesson1", "tester", now=NOW)
    assert view.completed == 1
    assert view.progress == 33


def test_null_scheduler_never_due(session, entries):
    for entry in entries:
        progress.record_review(session, "tester", entry.id, 4, now=NOW)
    later = NOW + datetime.timedelta(days=365)
    view = progress.get_lesson_progress(session, "lesson1", "tester", now=later)
    assert view.completed == 3
    assert view.due_for_review == 0


def test_sm2_scheduler_reports_due_cards(session, entries):
    sm2 = SM2Scheduler()
    progress.record_review(session, "tester", entries[0].id, 5, scheduler=sm2, now=NOW)
    progress.record_review(session, "tester", entries[1].id, 4, scheduler=sm2, now=NOW)

    # First correct answer schedules one day out
    same_day = progress.get_lesson_progress(session, "lesson1", "tester", scheduler=sm2, now=NOW)
    assert same_day.due_for_review == 0
    next_day = progress.get_lesson_progress(
        session, "lesson1", "tester", scheduler=sm2, now=NOW + datetime.timedelta(days=1)
    )
    assert next_day.due_for_review == 2
    assert next_day.completed == 2


def test_sm2_review_state_advances(session, entries):
    sm2 = SM2Scheduler()
    progress.record_review(session, "tester", entries[0].id, 5, scheduler=sm2, now=NOW)
    review = progress.record_review(session, "tester", entries[0].id, 5, scheduler=sm2, now=NOW)
    assert review.repetitions == 2
    assert review.interval == 6
    assert review.success_count == 2
    assert review.next_review == NOW + datetime.timedelta(days=6)
    assert session.query(VocabReview).count() == 1


def test_record_review_unknown_entry(session):
    with pytest.raises(VocabEntryNotFound):
        progress.record_review(session, "tester", "missing", 5)


def test_record_review_after_vocab_deleted(session, entries):
    vocabulary.delete_all_vocab_for_lesson(session, entries[0].lesson_id)
    with pytest.raises(VocabEntryNotFound):
        progress.record_review(session, "tester", entries[0].id, 5, now=NOW)
    assert session.query(VocabReview).count() == 0


def test_progress_overview_covers_every_lesson(session, entries):
    lessons.create_lesson(session, "Lesson 2", "lesson2", "Shopping")
    progress.record_review(session, "tester", entries[0].id, 5, now=NOW)
    overview = progress.get_progress_overview(session, "tester", now=NOW)
    assert [(p.slug, p.completed, p.total) for p in overview] == [("lesson1", 1, 3), ("lesson2", 0, 0)]
    assert overview[1].locked is True


def test_reviews_go_with_the_vocab(session, entries):
    progress.record_review(session, "tester", entries[0].id, 5, now=NOW)
    vocabulary.delete_vocab_entry(session, entries[0].id)
    assert session.query(VocabReview).count() == 0


# ── SM-2 ──────────────────────────────────────────────────────────

def test_sm2_first_reviews():
    interval, ef, reps, due = sm2_schedule(1, 2.5, 0, 5, NOW)
    assert (interval, reps) == (1, 1)
    assert ef == pytest.approx(2.6)
    assert due == NOW + datetime.timedelta(days=1)

    interval, ef, reps, _ = sm2_schedule(interval, ef, reps, 5, NOW)
    assert (interval, reps) == (6, 2)


def test_sm2_third_review_uses_ease():
    interval, ef, reps, _ = sm2_schedule(6, 2.5, 2, 4, NOW)
    assert reps == 3
    assert interval == 15  # ceil(6 * 2.5)


def test_sm2_lapse_resets():
    interval, ef, reps, _ = sm2_schedule(15, 2.5, 3, 1, NOW)
    assert (interval, reps) == (1, 0)
    assert ef == pytest.approx(1.96)


def test_sm2_ease_floor():
    _, ef, _, _ = sm2_schedule(1, 1.3, 0, 0, NOW)
    assert ef == 1.3


def test_null_scheduler_apply_is_noop():
    review = VocabReview(user="u", vocab_id="v", interval=1, ease_factor=2.5, repetitions=0, next_review=NOW)
    NullScheduler().apply(review, 5, NOW)
    assert review.interval == 1
    assert review.next_review == NOW


def test_base_scheduler_is_abstract():
    with pytest.raises(NotImplementedError):
        scheduler.ReviewScheduler().next_due(None, None)
