"""
This file contains custom, application-specific exceptions.

Every lesson transition either succeeds or raises one of these. The
`status_code` is only read by the HTTP binding in main.py.
"""
from fastapi import status


class LessonVerificationError(Exception):
    """Base class for all typed lesson / reputation errors."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidTimeRange(LessonVerificationError):
    """Raised when a lesson or availability slot ends at or before its start."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ForbiddenRelationship(LessonVerificationError):
    """Raised when a student does not belong to the tutor scheduling the lesson."""
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(LessonVerificationError):
    """Raised when a lesson status change is not allowed from its current status."""
    status_code = status.HTTP_409_CONFLICT


class AlreadyConfirmed(LessonVerificationError):
    """Raised when the parent verdict for a lesson has already been recorded."""
    status_code = status.HTTP_409_CONFLICT


class NotFound(LessonVerificationError):
    """Raised when a lesson, confirmation, or user does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
