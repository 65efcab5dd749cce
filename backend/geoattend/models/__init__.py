# File: backend/geoattend/models/__init__.py
"""Models package with all models."""
from .base import BaseModel
from .teacher import Teacher, TeacherRole
from .course import Course
from .student import Student
from .enrollment import CourseStudent
from .attendance_session import AttendanceSession
from .attendance import AttendanceRecord, AttendanceStatus
from .device import DeviceFingerprint
from .audit_log import AuditLog

__all__ = [
    'BaseModel', 'Teacher', 'TeacherRole', 'Course', 'Student',
    'CourseStudent', 'AttendanceSession', 'AttendanceRecord',
    'AttendanceStatus', 'DeviceFingerprint', 'AuditLog'
]
