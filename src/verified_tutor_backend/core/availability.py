'''
Weekly availability overlap matcher.
'''
from datetime import time
from typing import Iterable, Protocol

from ..models.availability import TimeWindow

DAYS_OF_WEEK = range(7)  # 0 = Sunday


class WeeklySlot(Protocol):
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool


def _windows_by_day(slots: Iterable[WeeklySlot]) -> dict[int, list[TimeWindow]]:
    by_day: dict[int, list[TimeWindow]] = {day: [] for day in DAYS_OF_WEEK}
    for slot in slots:
        if not slot.is_available:
            continue
        if slot.start_time >= slot.end_time:
            continue
        by_day.setdefault(slot.day_of_week, []).append(TimeWindow(start=slot.start_time, end=slot.end_time))
    return by_day


def intersect(first: TimeWindow, second: TimeWindow) -> TimeWindow | None:
    """Half-open intersection; windows that only touch do not overlap."""
    if first.start < second.end and second.start < first.end:
        return TimeWindow(start=max(first.start, second.start), end=min(first.end, second.end))
    return None


def compute_overlap(
    tutor_slots: Iterable[WeeklySlot],
    parent_slots: Iterable[WeeklySlot]
) -> dict[int, list[TimeWindow]]:
    """
    For every day of the week, returns the windows covered by both a tutor
    slot and a parent slot.

    Every tutor/parent pair on the same day is intersected independently, so
    overlapping slots of one owner are not merged and every pairwise window is
    reported, duplicates included. Days with nothing in common map to an
    empty list.
    """
    tutor_by_day = _windows_by_day(tutor_slots)
    parent_by_day = _windows_by_day(parent_slots)

    overlap: dict[int, list[TimeWindow]] = {}
    for day in DAYS_OF_WEEK:
        found: list[TimeWindow] = []
        for tutor_window in tutor_by_day.get(day, []):
            for parent_window in parent_by_day.get(day, []):
                window = intersect(tutor_window, parent_window)
                if window is not None:
                    found.append(window)
        overlap[day] = sorted(found, key=lambda w: (w.start, w.end))
    return overlap
