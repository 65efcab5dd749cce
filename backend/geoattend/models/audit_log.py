# File: backend/geoattend/models/audit_log.py
"""Audit trail of teacher actions."""
from geoattend import db
from geoattend.models.base import BaseModel

class AuditLog(BaseModel):
    """One teacher action and the request that triggered it."""

    __tablename__ = 'audit_logs'

    actor_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False, index=True)
    action = db.Column(db.String(64), nullable=False, index=True)
    payload = db.Column(db.JSON, default=dict)

    @classmethod
    def record(cls, actor_id: int, action: str, payload: dict) -> 'AuditLog':
        return cls(actor_id=actor_id, action=action, payload=payload).save()

    def __repr__(self):
        return f'<AuditLog {self.action} by {self.actor_id}>'
