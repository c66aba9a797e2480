"""Per-lesson progress for the dashboard, and recording of flashcard reviews."""
import datetime
import logging
import math
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .db import Lesson, VocabEntry, VocabReview, transaction, retry_unavailable, utcnow
from .errors import VocabEntryNotFound
from .lessons import get_lesson_by_slug, get_lessons
from .scheduler import NullScheduler, ReviewScheduler
from .structured import LessonProgress

logger = logging.getLogger(__name__)


def progress_percentage(completed: int, total: int) -> int:
    """completed / total as a whole percentage, halves rounded up. 0 for an empty lesson."""
    if total <= 0:
        return 0
    return int(math.floor(completed / total * 100 + 0.5))


def _build_progress(
    session: Session,
    lesson: Lesson,
    user: str,
    scheduler: ReviewScheduler,
    now: datetime.datetime,
) -> LessonProgress:
    entries = session.query(VocabEntry).filter_by(lesson_id=lesson.id).all()
    reviews: Dict[str, VocabReview] = {
        review.vocab_id: review
        for review in session.query(VocabReview)
        .join(VocabEntry, VocabReview.vocab_id == VocabEntry.id)
        .filter(VocabEntry.lesson_id == lesson.id, VocabReview.user == user)
    }
    completed = sum(1 for review in reviews.values() if review.success_count > 0)
    due = 0
    for entry in entries:
        next_due = scheduler.next_due(entry, reviews.get(entry.id))
        if next_due is not None and next_due <= now:
            due += 1
    return LessonProgress(
        slug=lesson.slug,
        title=lesson.title,
        number=lesson.number,
        locked=lesson.locked,
        completed=completed,
        total=len(entries),
        due_for_review=due,
        progress=progress_percentage(completed, len(entries)),
    )


@retry_unavailable
def get_lesson_progress(
    session: Session,
    slug: str,
    user: str = "default_user",
    scheduler: Optional[ReviewScheduler] = None,
    now: Optional[datetime.datetime] = None,
) -> Optional[LessonProgress]:
    lesson = get_lesson_by_slug(session, slug)
    if lesson is None:
        logger.info('Lesson with slug "%s" not found', slug)
        return None
    return _build_progress(session, lesson, user, scheduler or NullScheduler(), now or utcnow())


@retry_unavailable
def get_progress_overview(
    session: Session,
    user: str = "default_user",
    scheduler: Optional[ReviewScheduler] = None,
    now: Optional[datetime.datetime] = None,
) -> List[LessonProgress]:
    """Progress of every lesson, in lesson order."""
    scheduler = scheduler or NullScheduler()
    now = now or utcnow()
    return [_build_progress(session, lesson, user, scheduler, now) for lesson in get_lessons(session)]


@retry_unavailable
def record_review(
    session: Session,
    user: str,
    vocab_id: str,
    quality: int,
    scheduler: Optional[ReviewScheduler] = None,
    now: Optional[datetime.datetime] = None,
) -> VocabReview:
    """Store the outcome of one flashcard answer (quality 0-5) for a user."""
    if session.get(VocabEntry, vocab_id, populate_existing=True) is None:
        raise VocabEntryNotFound(vocab_id)
    scheduler = scheduler or NullScheduler()
    now = now or utcnow()
    with transaction(session):
        review = session.query(VocabReview).filter_by(user=user, vocab_id=vocab_id).first()
        if review is None:
            review = VocabReview(
                user=user, vocab_id=vocab_id, next_review=now,
                interval=1, ease_factor=2.5, repetitions=0, success_count=0,
            )
            session.add(review)
        scheduler.apply(review, quality, now)
        review.last_reviewed = now
        if quality >= 3:
            review.success_count += 1
    return review
