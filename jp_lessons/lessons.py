"""Lesson repository: create, look up, list, lock and cascade-delete lessons."""
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .db import Lesson, VocabEntry, KanjiEntry, VocabReview, transaction, retry_unavailable
from .errors import ConstraintViolation, LessonNotFound

logger = logging.getLogger(__name__)


def _next_lesson_number(session: Session) -> int:
    current = session.query(func.max(Lesson.number)).scalar()
    return (current or 0) + 1


@retry_unavailable
def create_lesson(
    session: Session,
    title: str,
    slug: str,
    description: str,
    locked: bool = True,
    number: Optional[int] = None,
) -> Lesson:
    """Persist a new lesson. Raises ConstraintViolation if the slug is taken."""
    with transaction(session):
        if session.query(Lesson).filter_by(slug=slug).first() is not None:
            raise ConstraintViolation(f'Lesson slug "{slug}" already exists')
        if number is None:
            number = _next_lesson_number(session)
        lesson = Lesson(title=title, slug=slug, description=description, locked=locked, number=number)
        session.add(lesson)
    logger.info("Created lesson %s (%s) with ID %s", lesson.title, slug, lesson.id)
    return lesson


@retry_unavailable
def get_lessons(session: Session) -> List[Lesson]:
    return session.query(Lesson).order_by(Lesson.number.asc(), Lesson.title.asc()).all()


@retry_unavailable
def get_lesson_by_slug(session: Session, slug: str) -> Optional[Lesson]:
    """Exact-match lookup. None means the lesson does not exist."""
    return session.query(Lesson).filter_by(slug=slug).first()


def require_lesson(session: Session, slug: str) -> Lesson:
    lesson = get_lesson_by_slug(session, slug)
    if lesson is None:
        raise LessonNotFound(slug)
    return lesson


def _delete_children(session: Session, lesson_id: str) -> None:
    vocab_ids = select(VocabEntry.id).where(VocabEntry.lesson_id == lesson_id)
    session.query(VocabReview).filter(VocabReview.vocab_id.in_(vocab_ids)).delete(synchronize_session="fetch")
    session.query(VocabEntry).filter_by(lesson_id=lesson_id).delete(synchronize_session="fetch")
    session.query(KanjiEntry).filter_by(lesson_id=lesson_id).delete(synchronize_session="fetch")


@retry_unavailable
def delete_lesson(session: Session, slug: str) -> bool:
    """Delete a lesson together with its vocabulary, kanji and review state.

    Children go first, then the lesson row, all in one transaction. A missing
    slug is not an error: it is logged and False is returned.
    """
    lesson = get_lesson_by_slug(session, slug)
    if lesson is None:
        logger.info('Lesson with slug "%s" not found, nothing to delete', slug)
        return False
    with transaction(session):
        _delete_children(session, lesson.id)
        session.delete(lesson)
    logger.info("Deleted lesson: %s", lesson.title)
    return True


@retry_unavailable
def set_lesson_locked(session: Session, slug: str, locked: bool) -> Lesson:
    """Explicitly lock or unlock a lesson. Nothing else changes the flag."""
    lesson = require_lesson(session, slug)
    with transaction(session):
        lesson.locked = locked
    logger.info("Lesson %s is now %s", slug, "locked" if locked else "unlocked")
    return lesson
