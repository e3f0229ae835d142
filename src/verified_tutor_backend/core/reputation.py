'''
Tutor reputation rollups.

Everything here is a pure function of its arguments: no counters are kept
between calls, so the same snapshot always yields the same stats.
'''
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from .lessons import LessonSnapshot
from .rounding import round_one_decimal
from ..models.stats import TutorStats


def verified_hours(lessons: Iterable[LessonSnapshot]) -> float:
    """Sum of verified lesson durations in hours, rounded once at the end."""
    total = sum((lesson.duration_hours for lesson in lessons if lesson.is_verified), Decimal(0))
    return round_one_decimal(total)


def average_rating(ratings: Iterable[int]) -> float:
    """Mean of the given ratings; 0 when there are none."""
    ratings = list(ratings)
    if not ratings:
        return 0.0
    return round_one_decimal(Decimal(sum(ratings)) / Decimal(len(ratings)))


def compute_tutor_stats(
    lessons: Iterable[LessonSnapshot],
    public_ratings: Iterable[int],
    active_students_count: int,
    as_of: Optional[datetime] = None
) -> TutorStats:
    """
    Builds the TutorStats rollup for one tutor.

    `lessons` is every lesson of the tutor in any status; `public_ratings`
    only the ratings of testimonials flagged public. With `as_of`, lessons
    starting after that instant are left out.
    """
    lessons = [lesson for lesson in lessons if as_of is None or lesson.scheduled_start_at <= as_of]
    verified = [lesson for lesson in lessons if lesson.is_verified]
    return TutorStats(
        total_verified_hours=verified_hours(verified),
        verified_lessons=len(verified),
        active_students_count=active_students_count,
        average_rating=average_rating(public_ratings),
        total_lessons=len(lessons),
    )
