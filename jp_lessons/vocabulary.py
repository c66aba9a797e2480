"""Vocabulary repository.

Every lesson owns an ordered set of flashcards. ``order`` is unique within a
lesson and defines the study sequence; gaps are tolerated until the lesson is
renumbered with :func:`update_vocab_order`.
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .db import Lesson, VocabEntry, VocabReview, transaction, retry_unavailable
from .errors import ConstraintViolation, VocabEntryNotFound
from .lessons import get_lesson_by_slug, require_lesson
from .structured import VocabRow, VocabView

logger = logging.getLogger(__name__)

VocabInput = Union[VocabRow, Mapping[str, Any]]


def _max_order(session: Session, lesson_id: str) -> int:
    return session.query(func.max(VocabEntry.order)).filter(VocabEntry.lesson_id == lesson_id).scalar() or 0


def _delete_reviews_for_entries(session: Session, *criteria: Any) -> None:
    entry_ids = select(VocabEntry.id).where(*criteria)
    session.query(VocabReview).filter(VocabReview.vocab_id.in_(entry_ids)).delete(synchronize_session="fetch")


@retry_unavailable
def add_vocab_to_lesson(
    session: Session,
    lesson_id: str,
    entries: Iterable[VocabInput],
    continue_numbering: bool = False,
) -> List[VocabEntry]:
    """Insert a batch of vocabulary for a lesson in a single transaction.

    Entries without an explicit ``order`` are numbered ``index + 1`` within
    the batch. With ``continue_numbering`` the numbering starts after the
    highest order the lesson already has, so appending never collides.
    """
    rows = [VocabRow.coerce(e) for e in entries]
    created: List[VocabEntry] = []
    with transaction(session):
        if session.get(Lesson, lesson_id, populate_existing=True) is None:
            raise ConstraintViolation(f'Lesson "{lesson_id}" does not exist')
        offset = _max_order(session, lesson_id) if continue_numbering else 0
        for index, row in enumerate(rows):
            entry = VocabEntry(
                word=row.word,
                reading=row.reading,
                definition=row.meaning,
                type=row.type,
                category=row.category,
                order=row.order if row.order is not None else offset + index + 1,
                lesson_id=lesson_id,
            )
            session.add(entry)
            created.append(entry)
    logger.info("Added %d vocabulary entries to lesson %s", len(created), lesson_id)
    return created


@retry_unavailable
def delete_vocab_entry(session: Session, entry_id: str) -> None:
    entry = session.get(VocabEntry, entry_id, populate_existing=True)
    if entry is None:
        raise VocabEntryNotFound(entry_id)
    with transaction(session):
        _delete_reviews_for_entries(session, VocabEntry.id == entry_id)
        session.delete(entry)


@retry_unavailable
def delete_all_vocab_for_lesson(session: Session, lesson_id: str) -> int:
    """Delete every vocabulary entry of a lesson. Returns the number removed."""
    with transaction(session):
        _delete_reviews_for_entries(session, VocabEntry.lesson_id == lesson_id)
        deleted = session.query(VocabEntry).filter_by(lesson_id=lesson_id).delete(synchronize_session="fetch")
    logger.debug("Deleted %d vocabulary entries from lesson %s", deleted, lesson_id)
    return deleted


@retry_unavailable
def count_vocab_for_lesson(session: Session, lesson_id: str) -> int:
    return session.query(VocabEntry).filter_by(lesson_id=lesson_id).count()


@retry_unavailable
def find_vocab_by_word(session: Session, word: str) -> Optional[VocabEntry]:
    # Words are not unique across lessons; this is simply the first hit.
    return session.query(VocabEntry).filter_by(word=word).first()


def to_view(entry: VocabEntry) -> VocabView:
    return VocabView(
        id=entry.id,
        word=entry.word,
        reading=entry.reading,
        meaning=entry.definition,
        type=entry.type,
        category=entry.category or entry.type,
        order=entry.order,
    )


@retry_unavailable
def get_vocab_by_lesson_slug(session: Session, slug: str) -> List[VocabView]:
    """Vocabulary of a lesson, sorted by ``order``, shaped for the flashcard pages.

    An unknown slug yields an empty list.
    """
    lesson = get_lesson_by_slug(session, slug)
    if lesson is None:
        logger.warning('Lesson with slug "%s" not found', slug)
        return []
    entries = (
        session.query(VocabEntry)
        .filter_by(lesson_id=lesson.id)
        .order_by(VocabEntry.order.asc(), VocabEntry.id.asc())
        .all()
    )
    return [to_view(e) for e in entries]


@retry_unavailable
def update_vocab_order(session: Session, slug: str) -> int:
    """Renumber a lesson's vocabulary to 1..N, keeping the current sequence.

    Only entries whose order changes are touched. Returns how many entries
    were renumbered, so a second run reports 0.
    """
    lesson = require_lesson(session, slug)
    entries = (
        session.query(VocabEntry)
        .filter_by(lesson_id=lesson.id)
        .order_by(VocabEntry.order.asc(), VocabEntry.id.asc())
        .all()
    )
    changes = [(entry, target) for target, entry in enumerate(entries, start=1) if entry.order != target]
    if not changes:
        logger.info("Vocabulary order for %s is already sequential", slug)
        return 0

    # Park changed rows below every existing order first, otherwise the
    # (lesson_id, order) unique constraint trips halfway through the shift.
    floor = min([0] + [entry.order for entry in entries])
    with transaction(session):
        for entry, target in changes:
            entry.order = floor - target
        session.flush()
        for entry, target in changes:
            entry.order = target
    for entry, target in changes:
        logger.debug("Renumbered %s to %d", entry.word, target)
    logger.info("Renumbered %d of %d vocabulary entries for %s", len(changes), len(entries), slug)
    return len(changes)
