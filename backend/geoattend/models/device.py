# File: backend/geoattend/models/device.py
"""Device fingerprint tracking for forensic review."""
from geoattend import db
from geoattend.models.base import BaseModel
from geoattend.utils import clock

class DeviceFingerprint(BaseModel):
    """Last known owner and metadata of a device fingerprint."""

    __tablename__ = 'device_fingerprints'

    device_fingerprint = db.Column(db.String(128), unique=True, nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=True)
    first_seen = db.Column(db.DateTime, default=lambda: clock.now(), nullable=False)
    last_seen = db.Column(db.DateTime, default=lambda: clock.now(), nullable=False)
    meta = db.Column(db.JSON, default=dict)

    def __repr__(self):
        return f'<DeviceFingerprint {self.device_fingerprint[:8]}>'
