# File: backend/geoattend/models/course.py
"""Course model."""
from geoattend import db
from geoattend.models.base import BaseModel

class Course(BaseModel):
    """Course taught by one teacher."""

    __tablename__ = 'courses'
    __table_args__ = (
        db.UniqueConstraint('teacher_id', 'course_code', name='uq_course_teacher_code'),
    )

    teacher_id = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False, index=True)
    course_code = db.Column(db.String(20), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    level = db.Column(db.Integer, nullable=True)  # 100-600, optional

    enrollments = db.relationship('CourseStudent', backref='course', lazy='dynamic')
    sessions = db.relationship('AttendanceSession', backref='course', lazy='dynamic')

    def summary(self) -> dict:
        return {
            'id': self.id,
            'course_code': self.course_code,
            'title': self.title,
            'level': self.level
        }

    def __repr__(self):
        return f'<Course {self.course_code}>'
