# File: backend/geoattend/models/attendance_session.py
"""Attendance session: one time-boxed, location-bound window for a course."""
import secrets
from datetime import datetime
from typing import Optional
from geoattend import db
from geoattend.models.base import BaseModel
from geoattend.utils import clock
from geoattend.utils.helpers import isoformat

class AttendanceSession(BaseModel):
    """Open attendance window identified by a 4-digit code."""

    __tablename__ = 'attendance_sessions'
    __table_args__ = (
        db.CheckConstraint('expiry_ts > start_ts', name='ck_session_expiry_after_start'),
        db.CheckConstraint('radius_m > 0', name='ck_session_radius_positive'),
        db.Index('ix_session_code_active', 'session_code', 'is_active'),
    )

    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False, index=True)
    session_code = db.Column(db.String(4), nullable=False)
    start_ts = db.Column(db.DateTime, nullable=False)
    expiry_ts = db.Column(db.DateTime, nullable=False, index=True)
    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)
    radius_m = db.Column(db.Float, nullable=False, default=100)
    nonce = db.Column(db.String(64), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    teacher = db.relationship('Teacher')
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    @staticmethod
    def generate_code() -> str:
        """Random code in 1000-9999."""
        return str(1000 + secrets.randbelow(9000))

    @staticmethod
    def generate_nonce() -> str:
        return secrets.token_hex(16)

    def is_expired(self, at: Optional[datetime] = None) -> bool:
        """Expired once ``now >= expiry_ts``."""
        return (at or clock.now()) >= self.expiry_ts

    def is_open(self, at: Optional[datetime] = None) -> bool:
        """Accepting submissions: active and not yet expired."""
        return self.is_active and not self.is_expired(at)

    @property
    def state(self) -> str:
        if self.is_open():
            return 'active'
        return 'expired' if self.is_active else 'ended'

    def to_dict(self, include_nonce: bool = False):
        """Convert to dictionary."""
        exclude = [] if include_nonce else ['nonce']
        data = super().to_dict(exclude=exclude)
        data['state'] = self.state
        data['is_expired'] = self.is_expired()
        return data

    def summary(self) -> dict:
        return {
            'id': self.id,
            'session_code': self.session_code,
            'course': self.course.summary() if self.course else None,
            'start_time': isoformat(self.start_ts),
            'expiry_time': isoformat(self.expiry_ts),
            'location': {'lat': self.lat, 'lng': self.lng},
            'radius_meters': self.radius_m,
            'state': self.state
        }

    def __repr__(self):
        return f'<AttendanceSession {self.session_code} course={self.course_id}>'
