"""Typed rejections raised by the attendance services.

Every class maps to one expected, user-facing outcome. The application
factory renders them into the JSON error envelope, so routes never need to
catch them one by one.
"""
from typing import Any, Dict, List, Optional


class AttendanceError(Exception):
    """Base class for expected attendance outcomes."""

    code = 'ATTENDANCE_ERROR'
    status_code = 400
    default_message = 'Attendance request rejected'

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message or self.default_message
        self.details = details or []
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)


class InputValidationError(AttendanceError):
    code = 'INVALID_INPUT'
    default_message = 'Validation failed'


# Session registry

class ConflictError(AttendanceError):
    code = 'ACTIVE_SESSION_EXISTS'
    default_message = 'There is already an active session for this course'


class SessionCodeUnavailable(ConflictError):
    """Every drawn code belonged to another active session."""

    code = 'SESSION_CODE_UNAVAILABLE'
    status_code = 503
    default_message = 'Could not allocate a free session code, please try again'


class NotFoundError(AttendanceError):
    code = 'NOT_FOUND'
    status_code = 404
    default_message = 'Not found'


class AlreadyExpiredError(AttendanceError):
    code = 'SESSION_ALREADY_EXPIRED'
    default_message = 'Session has already expired'


# Submission pipeline gates

class SessionNotFound(AttendanceError):
    """Unknown, ended and expired codes all look the same to students."""

    code = 'SESSION_NOT_FOUND'
    status_code = 404
    default_message = 'Invalid session code or session has expired'


class StudentNotFound(AttendanceError):
    code = 'STUDENT_NOT_FOUND'
    status_code = 404
    default_message = 'Student not found in the system'


class NotEnrolled(AttendanceError):
    code = 'NOT_ENROLLED'
    status_code = 403
    default_message = 'You are not enrolled in this course'


class LevelMismatch(AttendanceError):
    code = 'LEVEL_MISMATCH'
    default_message = 'Level mismatch: You are not eligible for this course level'


class AlreadySubmitted(AttendanceError):
    code = 'ALREADY_SUBMITTED'
    default_message = 'Attendance already submitted for this session'


class DeviceAlreadyUsed(AttendanceError):
    code = 'DEVICE_ALREADY_USED'
    default_message = 'Device already used for attendance in this session'


class SessionExpired(AttendanceError):
    code = 'SESSION_EXPIRED'
    default_message = 'Session has expired'


class OutOfRange(AttendanceError):
    code = 'OUT_OF_RANGE'
    default_message = 'Location validation failed'
