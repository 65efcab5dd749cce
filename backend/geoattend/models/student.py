# File: backend/geoattend/models/student.py
"""Student model keyed by matriculation number."""
from sqlalchemy.orm import validates
from geoattend import db
from geoattend.models.base import BaseModel
from geoattend.utils.helpers import normalize_matric_no

class Student(BaseModel):
    """Registered student; independent of any course or session."""

    __tablename__ = 'students'

    matric_no = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    level = db.Column(db.Integer, nullable=True)

    enrollments = db.relationship('CourseStudent', backref='student', lazy='dynamic')

    @validates('matric_no')
    def _normalize_matric_no(self, key, value):
        return normalize_matric_no(value)

    @validates('email')
    def _normalize_email(self, key, value):
        return value.strip().lower()

    @classmethod
    def find_by_matric(cls, matric_no: str):
        """Look a student up by any spelling of their matric number."""
        return cls.query.filter_by(matric_no=normalize_matric_no(matric_no)).first()

    def __repr__(self):
        return f'<Student {self.matric_no}>'
