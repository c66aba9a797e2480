import pytest

from jp_lessons import db, lessons, vocabulary
from jp_lessons.db import VocabEntry
from jp_lessons.errors import ConstraintViolation, LessonNotFound, VocabEntryNotFound
from jp_lessons.structured import VocabRow


@pytest.fixture(autouse=True)
def setup_db(tmp_path):
    db.init_db(f"sqlite:///{tmp_path / 'test_vocab.db'}")
    yield
    db.close_db()


@pytest.fixture
def session():
    s = db.get_session()
    yield s
    s.close()


@pytest.fixture
def lesson2(session):
    return lessons.create_lesson(session, "Lesson 2", "lesson2", "Shopping", locked=False)


LESSON2_VOCAB = [
    {"word": "わたしは", "reading": "watashi wa", "meaning": "I am", "type": "noun"},
    {"word": "あなたは", "reading": "anata wa", "meaning": "You are", "type": "noun"},
]


def _orders(session, lesson_id):
    rows = session.query(VocabEntry).filter_by(lesson_id=lesson_id).all()
    return {row.word: row.order for row in rows}


def test_lesson2_scenario(session, lesson2):
    created = vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    assert [e.order for e in created] == [1, 2]

    views = vocabulary.get_vocab_by_lesson_slug(session, "lesson2")
    assert [v.word for v in views] == ["わたしは", "あなたは"]
    assert [v.order for v in views] == [1, 2]
    assert views[0].reading == "watashi wa"
    assert views[0].meaning == "I am"


def test_auto_order_follows_submission_sequence(session, lesson2):
    batch = [VocabRow(word=w, reading=w, meaning=w) for w in ["a", "b", "c", "d", "e"]]
    vocabulary.add_vocab_to_lesson(session, lesson2.id, batch)
    assert _orders(session, lesson2.id) == {"a": 1, "b": 2, "c": 3, "d": 4, "e": 5}


def test_explicit_orders_are_kept(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, [
        {"word": "x", "reading": "x", "meaning": "x", "order": 10},
        {"word": "y", "reading": "y", "meaning": "y"},
    ])
    assert _orders(session, lesson2.id) == {"x": 10, "y": 2}


def test_batch_numbering_collides_with_existing_rows(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    with pytest.raises(ConstraintViolation):
        vocabulary.add_vocab_to_lesson(session, lesson2.id, [{"word": "z", "reading": "z", "meaning": "z"}])
    assert vocabulary.count_vocab_for_lesson(session, lesson2.id) == 2


def test_continue_numbering_appends_after_existing(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    vocabulary.add_vocab_to_lesson(
        session, lesson2.id,
        [{"word": "z", "reading": "z", "meaning": "z"}, {"word": "w", "reading": "w", "meaning": "w"}],
        continue_numbering=True,
    )
    assert _orders(session, lesson2.id) == {"わたしは": 1, "あなたは": 2, "z": 3, "w": 4}


def test_add_to_missing_lesson(session):
    with pytest.raises(ConstraintViolation):
        vocabulary.add_vocab_to_lesson(session, "no-such-lesson", LESSON2_VOCAB)
    assert session.query(VocabEntry).count() == 0


def test_failed_batch_inserts_nothing(session, lesson2):
    batch = [
        {"word": "ok", "reading": "ok", "meaning": "ok"},
        {"word": "dup", "reading": "dup", "meaning": "dup", "order": 1},
        {"word": "late", "reading": "late", "meaning": "late"},
    ]
    with pytest.raises(ConstraintViolation):
        vocabulary.add_vocab_to_lesson(session, lesson2.id, batch)
    assert vocabulary.count_vocab_for_lesson(session, lesson2.id) == 0


def test_round_trip_meaning_and_category(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, [
        {"word": "たべる", "reading": "taberu", "meaning": "to eat", "type": "verb"},
        {"word": "これ", "reading": "kore", "meaning": "this", "type": "noun", "category": "pointing"},
    ])
    views = vocabulary.get_vocab_by_lesson_slug(session, "lesson2")
    assert views[0].meaning == "to eat"
    assert views[0].type == "verb"
    assert views[0].category == "verb"
    assert views[1].category == "pointing"


def test_read_is_sorted_regardless_of_insert_order(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, [
        {"word": "c", "reading": "c", "meaning": "c", "order": 30},
        {"word": "a", "reading": "a", "meaning": "a", "order": 5},
        {"word": "b", "reading": "b", "meaning": "b", "order": 17},
    ])
    assert [v.word for v in vocabulary.get_vocab_by_lesson_slug(session, "lesson2")] == ["a", "b", "c"]


def test_get_vocab_for_unknown_slug_is_empty(session):
    assert vocabulary.get_vocab_by_lesson_slug(session, "nonexistent-slug") == []


def test_delete_vocab_entry(session, lesson2):
    created = vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    vocabulary.delete_vocab_entry(session, created[0].id)
    assert [v.word for v in vocabulary.get_vocab_by_lesson_slug(session, "lesson2")] == ["あなたは"]


def test_delete_missing_vocab_entry(session):
    with pytest.raises(VocabEntryNotFound):
        vocabulary.delete_vocab_entry(session, "missing")


def test_delete_entry_after_delete_all_raises(session, lesson2):
    created = vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    vocabulary.delete_all_vocab_for_lesson(session, lesson2.id)
    with pytest.raises(VocabEntryNotFound):
        vocabulary.delete_vocab_entry(session, created[0].id)


def test_delete_entry_removed_by_another_session_raises(session, lesson2):
    created = vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    other = db.get_session()
    vocabulary.delete_all_vocab_for_lesson(other, lesson2.id)
    other.close()
    with pytest.raises(VocabEntryNotFound):
        vocabulary.delete_vocab_entry(session, created[0].id)


def test_add_to_deleted_lesson(session, lesson2):
    lesson_id = lesson2.id
    lessons.delete_lesson(session, "lesson2")
    with pytest.raises(ConstraintViolation):
        vocabulary.add_vocab_to_lesson(session, lesson_id, LESSON2_VOCAB)
    assert session.query(VocabEntry).count() == 0


def test_delete_all_vocab_is_idempotent(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    assert vocabulary.delete_all_vocab_for_lesson(session, lesson2.id) == 2
    assert vocabulary.delete_all_vocab_for_lesson(session, lesson2.id) == 0
    assert vocabulary.count_vocab_for_lesson(session, lesson2.id) == 0


def test_find_vocab_by_word(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, LESSON2_VOCAB)
    found = vocabulary.find_vocab_by_word(session, "あなたは")
    assert found is not None
    assert found.definition == "You are"
    assert vocabulary.find_vocab_by_word(session, "いぬ") is None


def test_update_vocab_order_makes_dense_sequence(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, [
        {"word": "a", "reading": "a", "meaning": "a", "order": 1},
        {"word": "b", "reading": "b", "meaning": "b", "order": 4},
        {"word": "c", "reading": "c", "meaning": "c", "order": 9},
        {"word": "d", "reading": "d", "meaning": "d", "order": 10},
    ])
    assert vocabulary.update_vocab_order(session, "lesson2") == 3
    assert _orders(session, lesson2.id) == {"a": 1, "b": 2, "c": 3, "d": 4}


def test_update_vocab_order_shifts_into_occupied_slots(session, lesson2):
    # 2 -> 1 while 3 -> 2 would collide without parking the rows first
    vocabulary.add_vocab_to_lesson(session, lesson2.id, [
        {"word": "a", "reading": "a", "meaning": "a", "order": 2},
        {"word": "b", "reading": "b", "meaning": "b", "order": 3},
        {"word": "c", "reading": "c", "meaning": "c", "order": 4},
    ])
    assert vocabulary.update_vocab_order(session, "lesson2") == 3
    assert _orders(session, lesson2.id) == {"a": 1, "b": 2, "c": 3}


def test_update_vocab_order_is_idempotent(session, lesson2):
    vocabulary.add_vocab_to_lesson(session, lesson2.id, [
        {"word": "a", "reading": "a", "meaning": "a", "order": 3},
        {"word": "b", "reading": "b", "meaning": "b", "order": 7},
    ])
    assert vocabulary.update_vocab_order(session, "lesson2") == 2
    before = _orders(session, lesson2.id)
    assert vocabulary.update_vocab_order(session, "lesson2") == 0
    assert _orders(session, lesson2.id) == before


def test_update_vocab_order_unknown_slug(session):
    with pytest.raises(LessonNotFound):
        vocabulary.update_vocab_order(session, "missing")
