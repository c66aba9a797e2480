"""Administrative procedures: author, re-author, delete and renumber lessons.

These orchestrate the repositories inside one transaction each, so a failure
part-way through never leaves a lesson without its vocabulary or the other
way round.
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from sqlalchemy.orm import Session

from .db import Lesson, transaction, retry_unavailable
from .errors import LessonStoreError
from .kanji import add_kanji_to_lesson, delete_all_kanji_for_lesson
from .lessons import create_lesson, delete_lesson, require_lesson
from .structured import KanjiRow, LessonPayload, VocabRow
from .vocabulary import add_vocab_to_lesson, delete_all_vocab_for_lesson, update_vocab_order

logger = logging.getLogger(__name__)


@retry_unavailable
def add_lesson(session: Session, payload: LessonPayload, replace: bool = False) -> Lesson:
    """Create a lesson with its vocabulary and kanji.

    With ``replace`` an existing lesson with the same slug is deleted first.
    """
    with transaction(session):
        if replace:
            delete_lesson(session, payload.slug)
        lesson = create_lesson(
            session, payload.title, payload.slug, payload.description, payload.locked, payload.number
        )
        if payload.vocab:
            add_vocab_to_lesson(session, lesson.id, payload.vocab)
        if payload.kanji:
            add_kanji_to_lesson(session, lesson.id, payload.kanji)
    logger.info(
        "Lesson %s has %d vocabulary and %d kanji entries", payload.slug, len(payload.vocab), len(payload.kanji)
    )
    return lesson


@retry_unavailable
def update_lesson(
    session: Session,
    slug: str,
    vocab: Sequence[Union[VocabRow, Mapping[str, Any]]],
    kanji: Optional[Sequence[Union[KanjiRow, Mapping[str, Any]]]] = None,
    locked: Optional[bool] = None,
) -> Lesson:
    """Replace a lesson's vocabulary (and kanji, when given).

    The lesson must already exist; LessonNotFound is raised otherwise. An
    empty vocabulary batch leaves the current vocabulary alone. Explicit
    ``order`` values in the batch are kept.
    """
    lesson = require_lesson(session, slug)
    with transaction(session):
        if vocab:
            delete_all_vocab_for_lesson(session, lesson.id)
            add_vocab_to_lesson(session, lesson.id, vocab)
            logger.info('Updated %d vocabulary entries for "%s"', len(vocab), lesson.title)
        else:
            logger.info('No vocabulary supplied for "%s", keeping the current set', lesson.title)
        if kanji is not None:
            delete_all_kanji_for_lesson(session, lesson.id)
            add_kanji_to_lesson(session, lesson.id, kanji)
            logger.info('Updated %d kanji entries for "%s"', len(kanji), lesson.title)
        if locked is not None:
            lesson.locked = locked
    return lesson


def renumber_vocabulary(session: Session, slug: str) -> int:
    return update_vocab_order(session, slug)


def add_all_lessons(
    session: Session, payloads: Iterable[LessonPayload], replace: bool = False
) -> List[Lesson]:
    """Add every payload, logging and skipping the ones that fail."""
    created: List[Lesson] = []
    for payload in payloads:
        try:
            created.append(add_lesson(session, payload, replace=replace))
        except LessonStoreError as exc:
            logger.error("Error adding lesson %s: %s", payload.slug, exc)
    return created
