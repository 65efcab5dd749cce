# File: backend/geoattend/models/enrollment.py
"""Course enrollment link."""
from geoattend import db
from geoattend.models.base import BaseModel

class CourseStudent(BaseModel):
    """A student's membership of a course."""

    __tablename__ = 'course_students'
    __table_args__ = (
        db.UniqueConstraint('course_id', 'student_id', name='uq_course_student'),
    )

    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    added_by = db.Column(db.Integer, db.ForeignKey('teachers.id'), nullable=False)

    def __repr__(self):
        return f'<CourseStudent {self.course_id}-{self.student_id}>'
