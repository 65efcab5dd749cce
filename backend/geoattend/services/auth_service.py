# File: backend/geoattend/services/auth_service.py
"""Teacher authentication."""
import re
from typing import Optional, Tuple
from flask_jwt_extended import create_access_token
from geoattend import db
from geoattend.models.teacher import Teacher
from geoattend.utils import clock

class AuthService:
    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email) is not None

    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate a teacher and return an access token."""
        if not email or not password:
            return None, "Email and password are required"

        if not AuthService.validate_email(email):
            return None, "Invalid email format"

        teacher = Teacher.query.filter_by(email=email.lower().strip()).first()

        if not teacher or not teacher.check_password(password):
            return None, "Invalid email or password"

        if not teacher.is_active:
            return None, "Account is deactivated"

        teacher.last_login = clock.now()
        db.session.commit()

        return {
            "access_token": create_access_token(identity=str(teacher.id)),
            "teacher": teacher.to_dict()
        }, None
