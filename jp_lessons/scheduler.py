import datetime
import math
from typing import Optional, Tuple

from .db import VocabEntry, VocabReview


def sm2_schedule(
    interval: int,
    ease_factor: float,
    repetitions: int,
    quality: int,
    now: datetime.datetime,
) -> Tuple[int, float, int, datetime.datetime]:
    """
    SM-2 (SuperMemo 2) scheduling algorithm.

    Maintains three pieces of state per card:
      - interval    – current inter-repetition interval in days
      - ease_factor – E-Factor (minimum 1.3, default 2.5)
      - repetitions – how many consecutive correct reviews (n)

    Quality grades (0-5):
      0 – complete blackout
      3 – correct answer with serious difficulty
      5 – perfect, instant recall

    A grade below 3 is a lapse: repetitions reset to 0 and interval to 1.
    Otherwise the interval goes 1 day, 6 days, then previous × E-Factor
    (ceiling).

    Returns:
        (new_interval, new_ease_factor, new_repetitions, next_review)
    """
    quality = max(0, min(5, quality))

    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    if new_ef < 1.3:
        new_ef = 1.3

    if quality < 3:
        new_reps = 0
        new_interval = 1
    else:
        new_reps = repetitions + 1
        if new_reps == 1:
            new_interval = 1
        elif new_reps == 2:
            new_interval = 6
        else:
            new_interval = math.ceil(interval * new_ef)

    next_review = now + datetime.timedelta(days=new_interval)
    return new_interval, new_ef, new_reps, next_review


class ReviewScheduler:
    """Decides when a vocabulary card is next due for a user.

    ``review`` is None for a card the user has never answered.
    """

    def next_due(self, entry: VocabEntry, review: Optional[VocabReview]) -> Optional[datetime.datetime]:
        raise NotImplementedError

    def apply(self, review: VocabReview, quality: int, now: datetime.datetime) -> None:
        """Advance the review state after an answer graded 0-5."""
        raise NotImplementedError


class NullScheduler(ReviewScheduler):
    """Nothing is ever due. Used until a real scheduler is configured."""

    def next_due(self, entry: VocabEntry, review: Optional[VocabReview]) -> Optional[datetime.datetime]:
        return None

    def apply(self, review: VocabReview, quality: int, now: datetime.datetime) -> None:
        return None


class SM2Scheduler(ReviewScheduler):

    def next_due(self, entry: VocabEntry, review: Optional[VocabReview]) -> Optional[datetime.datetime]:
        # Unlearned cards are new, not due
        if review is None or review.success_count <= 0:
            return None
        return review.next_review

    def apply(self, review: VocabReview, quality: int, now: datetime.datetime) -> None:
        new_interval, new_ease, new_reps, next_review = sm2_schedule(
            review.interval, review.ease_factor, review.repetitions, quality, now
        )
        review.interval = new_interval
        review.ease_factor = new_ease
        review.repetitions = new_reps
        review.next_review = next_review
