"""Teacher model for authentication and session ownership."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from geoattend import db
from geoattend.models.base import BaseModel

class TeacherRole(Enum):
    """Teacher roles enumeration."""
    TEACHER = 'teacher'
    ADMIN = 'admin'

class Teacher(BaseModel):
    """Lecturer who owns courses and opens attendance sessions."""

    __tablename__ = 'teachers'

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(TeacherRole), nullable=False, default=TeacherRole.TEACHER)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    courses = db.relationship('Course', backref='teacher', lazy='dynamic')

    def set_password(self, password: str) -> None:
        """Set teacher password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        exclude = (exclude or []) + ['password_hash']

        result = super().to_dict(exclude=exclude)
        result['role'] = self.role.value if self.role else None

        return result

    def __repr__(self) -> str:
        return f'<Teacher {self.email}>'
