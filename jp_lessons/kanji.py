"""Kanji repository. Kanji have no display order; they live and die with their lesson."""
import logging
from typing import Any, Iterable, List, Mapping, Union

from sqlalchemy.orm import Session

from .db import Lesson, KanjiEntry, transaction, retry_unavailable
from .errors import ConstraintViolation
from .lessons import get_lesson_by_slug
from .structured import KanjiRow, KanjiView

logger = logging.getLogger(__name__)


@retry_unavailable
def add_kanji_to_lesson(
    session: Session, lesson_id: str, entries: Iterable[Union[KanjiRow, Mapping[str, Any]]]
) -> List[KanjiEntry]:
    rows = [KanjiRow.coerce(e) for e in entries]
    created: List[KanjiEntry] = []
    with transaction(session):
        if session.get(Lesson, lesson_id, populate_existing=True) is None:
            raise ConstraintViolation(f'Lesson "{lesson_id}" does not exist')
        for row in rows:
            entry = KanjiEntry(
                kanji=row.kanji,
                definition=row.meaning,
                onyomi=list(row.onyomi),
                kunyomi=list(row.kunyomi),
                lesson_id=lesson_id,
            )
            session.add(entry)
            created.append(entry)
    logger.info("Added %d kanji entries to lesson %s", len(created), lesson_id)
    return created


@retry_unavailable
def delete_all_kanji_for_lesson(session: Session, lesson_id: str) -> int:
    with transaction(session):
        deleted = session.query(KanjiEntry).filter_by(lesson_id=lesson_id).delete(synchronize_session="fetch")
    return deleted


@retry_unavailable
def get_kanji_by_lesson_slug(session: Session, slug: str) -> List[KanjiView]:
    """Kanji of a lesson sorted by character, not by the order they were added.

    An unknown slug yields an empty list.
    """
    lesson = get_lesson_by_slug(session, slug)
    if lesson is None:
        logger.warning('Lesson with slug "%s" not found', slug)
        return []
    entries = session.query(KanjiEntry).filter_by(lesson_id=lesson.id).order_by(KanjiEntry.kanji.asc()).all()
    return [
        KanjiView(id=e.id, kanji=e.kanji, meaning=e.definition, onyomi=list(e.onyomi), kunyomi=list(e.kunyomi))
        for e in entries
    ]
