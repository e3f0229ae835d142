'''
Calendar-day histogram of verified lessons.
'''
from collections import Counter
from typing import Iterable
from zoneinfo import ZoneInfo

from .lessons import LessonSnapshot


def build_heatmap(lessons: Iterable[LessonSnapshot], year: int, tz: ZoneInfo) -> dict[str, int]:
    """
    Counts verified lessons per ISO date of `year` in the tutor's civil calendar.

    Dates without lessons are absent from the result. Counts are raw; any
    intensity bucketing belongs to the display layer.
    """
    counts: Counter[str] = Counter()
    for lesson in lessons:
        if not lesson.is_verified:
            continue
        local_start = lesson.scheduled_start_at.astimezone(tz)
        if local_start.year != year:
            continue
        counts[local_start.date().isoformat()] += 1
    return dict(sorted(counts.items()))
