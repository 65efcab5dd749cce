# File: backend/geoattend/models/attendance.py
"""Attendance ledger entries."""
from enum import Enum
from geoattend import db
from geoattend.models.base import BaseModel
from geoattend.utils.helpers import isoformat

class AttendanceStatus(Enum):
    """Outcome stored for a submission."""
    PRESENT = 'present'
    ABSENT = 'absent'
    REJECTED = 'rejected'
    MANUAL_PRESENT = 'manual_present'

PRESENT_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.MANUAL_PRESENT)

class AttendanceRecord(BaseModel):
    """Immutable result of one accepted submission (or manual override)."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'matric_no_submitted', name='uq_record_session_matric'),
        db.UniqueConstraint('session_id', 'device_fingerprint', name='uq_record_session_device'),
    )

    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=True, index=True)
    matric_no_submitted = db.Column(db.String(50), nullable=False)
    device_fingerprint = db.Column(db.String(128), nullable=False)

    # Where the submission came from
    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)
    accuracy = db.Column(db.Float, nullable=True)
    distance_from_location = db.Column(db.Float, nullable=True)

    status = db.Column(db.Enum(AttendanceStatus), nullable=False, default=AttendanceStatus.PRESENT)
    reason = db.Column(db.String(255), nullable=True)
    submitted_at = db.Column(db.DateTime, nullable=False)
    receipt_signature = db.Column(db.String(64), nullable=False)

    student = db.relationship('Student')

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'session_id': self.session_id,
            'course_id': self.course_id,
            'student': {
                'id': self.student.id,
                'name': self.student.name,
                'matric_no': self.student.matric_no
            } if self.student else None,
            'matric_no': self.matric_no_submitted,
            'status': self.status.value,
            'reason': self.reason,
            'lat': self.lat,
            'lng': self.lng,
            'accuracy': self.accuracy,
            'distance_from_location': self.distance_from_location,
            'submitted_at': isoformat(self.submitted_at),
            'receipt_signature': self.receipt_signature
        }

    def __repr__(self):
        return f'<AttendanceRecord {self.session_id}-{self.matric_no_submitted}>'
