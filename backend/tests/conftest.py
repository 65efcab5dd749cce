"""Shared fixtures for the attendance test suite."""
import math
from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from geoattend import create_app, db
from geoattend import models  # noqa: F401
from geoattend.models.course import Course
from geoattend.models.enrollment import CourseStudent
from geoattend.models.student import Student
from geoattend.models.teacher import Teacher
from geoattend.services.geo_service import GeoService
from geoattend.services.session_service import SessionService
from geoattend.utils import clock

CENTER = (6.5244, 3.3792)


def offset_north(lat: float, meters: float) -> float:
    """Latitude ``meters`` due north of ``lat`` on the haversine sphere."""
    return lat + math.degrees(meters / GeoService.EARTH_RADIUS_M)


class FrozenClock:
    """Stand-in for ``clock.now`` that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def frozen_clock(monkeypatch):
    frozen = FrozenClock(datetime(2026, 3, 2, 9, 0, 0))
    monkeypatch.setattr(clock, 'now', frozen)
    return frozen


@pytest.fixture
def make_teacher(app):
    def _make(name='Dr. Adaeze Okafor', email='lecturer@university.edu', password='teacher123'):
        teacher = Teacher(name=name, email=email)
        teacher.set_password(password)
        return teacher.save()
    return _make


@pytest.fixture
def make_course(app):
    def _make(teacher, course_code='CS103', title='Introduction to Programming', level=None):
        return Course(
            teacher_id=teacher.id, course_code=course_code, title=title, level=level
        ).save()
    return _make


@pytest.fixture
def make_student(app):
    def _make(matric_no, name, course=None, level=None):
        student = Student(
            matric_no=matric_no,
            name=name,
            email=f"{name.split()[0].lower()}@student.university.edu",
            level=level
        ).save()
        if course is not None:
            CourseStudent(
                course_id=course.id, student_id=student.id, added_by=course.teacher_id
            ).save()
        return student
    return _make


@pytest.fixture
def make_session(app):
    def _make(course, lat=CENTER[0], lng=CENTER[1], radius_m=100, duration_minutes=60):
        return SessionService.start_session(
            course_id=course.id,
            teacher_id=course.teacher_id,
            lat=lat,
            lng=lng,
            radius_m=radius_m,
            duration_minutes=duration_minutes
        )
    return _make


@pytest.fixture
def teacher(make_teacher):
    return make_teacher()


@pytest.fixture
def course(make_course, teacher):
    return make_course(teacher)


@pytest.fixture
def student(make_student, course):
    return make_student('CSC/2021/001', 'Tunde Bakare', course=course)


@pytest.fixture
def auth_headers(app):
    def _headers(teacher):
        token = create_access_token(identity=str(teacher.id))
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def center():
    return CENTER


@pytest.fixture
def north_of():
    return offset_north
