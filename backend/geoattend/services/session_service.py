# File: backend/geoattend/services/session_service.py
"""Attendance session lifecycle."""
from datetime import timedelta
from typing import Dict, List, Optional
from flask import current_app
from sqlalchemy import func
from geoattend import db
from geoattend.exceptions import (
    AlreadyExpiredError, ConflictError, NotFoundError, SessionCodeUnavailable, SessionNotFound
)
from geoattend.models.attendance import AttendanceRecord, AttendanceStatus, PRESENT_STATUSES
from geoattend.models.attendance_session import AttendanceSession
from geoattend.models.course import Course
from geoattend.utils import clock
from geoattend.utils.helpers import isoformat

class SessionService:
    """Session registry: start, resolve by code, end early.

    A session is Active while ``is_active`` is set and ``expiry_ts`` lies in
    the future. It becomes Expired when time passes ``expiry_ts`` and Ended
    when the owning teacher stops it; both are terminal.
    """

    @staticmethod
    def get_owned_course(course_id: int, teacher_id: int) -> Course:
        course = Course.query.filter_by(id=course_id, teacher_id=teacher_id).first()
        if not course:
            raise NotFoundError("Course not found")
        return course

    @staticmethod
    def get_owned_session(session_id: int, teacher_id: int) -> AttendanceSession:
        session = AttendanceSession.query.filter_by(id=session_id, teacher_id=teacher_id).first()
        if not session:
            raise NotFoundError("Session not found")
        return session

    @staticmethod
    def find_active_for_course(course_id: int) -> Optional[AttendanceSession]:
        return AttendanceSession.query.filter(
            AttendanceSession.course_id == course_id,
            AttendanceSession.is_active.is_(True),
            AttendanceSession.expiry_ts > clock.now()
        ).first()

    @staticmethod
    def generate_unique_code() -> str:
        """Draw codes until one is unused by every currently active session."""
        now = clock.now()
        attempts = current_app.config.get('SESSION_CODE_MAX_ATTEMPTS', 20)

        for _ in range(attempts):
            code = AttendanceSession.generate_code()
            taken = db.session.query(AttendanceSession.id).filter(
                AttendanceSession.session_code == code,
                AttendanceSession.is_active.is_(True),
                AttendanceSession.expiry_ts > now
            ).first()
            if not taken:
                return code

        current_app.logger.error('No free session code after %d attempts', attempts)
        raise SessionCodeUnavailable()

    @staticmethod
    def start_session(
        course_id: int,
        teacher_id: int,
        lat: float,
        lng: float,
        radius_m: float,
        duration_minutes: int
    ) -> AttendanceSession:
        """Open a new session for a course owned by ``teacher_id``."""
        if radius_m <= 0:
            raise ValueError("radius_m must be positive")
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")

        course = SessionService.get_owned_course(course_id, teacher_id)

        active = SessionService.find_active_for_course(course.id)
        if active:
            raise ConflictError(
                active_session={
                    'session_code': active.session_code,
                    'expires_at': isoformat(active.expiry_ts)
                }
            )

        start = clock.now()
        session = AttendanceSession(
            course_id=course.id,
            teacher_id=teacher_id,
            session_code=SessionService.generate_unique_code(),
            start_ts=start,
            expiry_ts=start + timedelta(minutes=duration_minutes),
            lat=lat,
            lng=lng,
            radius_m=radius_m,
            nonce=AttendanceSession.generate_nonce(),
            is_active=True
        )
        session.save()

        current_app.logger.info(
            'Session %s started for course %s (code %s, radius %sm, %s min)',
            session.id, course.course_code, session.session_code, radius_m, duration_minutes
        )
        return session

    @staticmethod
    def resolve_by_code(code: str) -> AttendanceSession:
        """Open session for ``code``; unknown and closed codes fail alike."""
        session = AttendanceSession.query.filter(
            AttendanceSession.session_code == code,
            AttendanceSession.is_active.is_(True),
            AttendanceSession.expiry_ts > clock.now()
        ).order_by(AttendanceSession.start_ts.desc()).first()

        if not session:
            raise SessionNotFound(details=[
                "Please check the session code provided by your lecturer",
                "Session may have expired or not yet started",
                "Contact your lecturer if you believe this is an error",
            ])
        return session

    @staticmethod
    def end_early(session_id: int, teacher_id: int) -> AttendanceSession:
        session = SessionService.get_owned_session(session_id, teacher_id)

        if not session.is_active or session.is_expired():
            raise AlreadyExpiredError()

        session.update(expiry_ts=clock.now(), is_active=False)

        current_app.logger.info('Session %s ended early by teacher %s', session.id, teacher_id)
        return session

    @staticmethod
    def list_for_course(course_id: int, teacher_id: int, status: str = 'all') -> Dict:
        """Sessions of an owned course, newest first, with submission counts."""
        course = SessionService.get_owned_course(course_id, teacher_id)
        now = clock.now()

        query = AttendanceSession.query.filter_by(course_id=course.id)
        if status == 'active':
            query = query.filter(
                AttendanceSession.is_active.is_(True),
                AttendanceSession.expiry_ts > now
            )
        elif status == 'expired':
            query = query.filter(
                db.or_(AttendanceSession.is_active.is_(False), AttendanceSession.expiry_ts <= now)
            )

        sessions = []
        for session in query.order_by(AttendanceSession.start_ts.desc()).all():
            data = session.to_dict()
            data['attendance_stats'] = SessionService.count_submissions(session.id)
            sessions.append(data)

        return {'course': course.summary(), 'sessions': sessions}

    @staticmethod
    def count_submissions(session_id: int) -> Dict[str, int]:
        rows = db.session.query(
            AttendanceRecord.status, func.count(AttendanceRecord.id)
        ).filter(
            AttendanceRecord.session_id == session_id
        ).group_by(AttendanceRecord.status).all()

        counts = {status: total for status, total in rows}
        return {
            'total_submissions': sum(counts.values()),
            'present_count': sum(counts.get(status, 0) for status in PRESENT_STATUSES),
            'absent_count': counts.get(AttendanceStatus.ABSENT, 0),
            'rejected_count': counts.get(AttendanceStatus.REJECTED, 0)
        }

    @staticmethod
    def get_detail(session_id: int, teacher_id: int) -> Dict:
        """Session, its ledger entries and summary statistics."""
        session = SessionService.get_owned_session(session_id, teacher_id)
        records: List[AttendanceRecord] = session.records.order_by(
            AttendanceRecord.submitted_at.desc()
        ).all()

        stats = SessionService.count_submissions(session.id)
        total = stats['total_submissions']
        stats['attendance_rate'] = round(stats['present_count'] / total * 100) if total else 0

        data = session.to_dict()
        data['course'] = session.course.summary()
        return {
            'session': data,
            'attendance': [record.to_dict() for record in records],
            'statistics': stats
        }

    @staticmethod
    def get_live(session_id: int, teacher_id: int, window_seconds: int = 30) -> Dict:
        """Submissions of the last ``window_seconds`` plus running totals."""
        session = SessionService.get_owned_session(session_id, teacher_id)
        now = clock.now()

        recent = session.records.filter(
            AttendanceRecord.submitted_at >= now - timedelta(seconds=window_seconds)
        ).order_by(AttendanceRecord.submitted_at.desc()).all()

        stats = SessionService.count_submissions(session.id)
        return {
            'session_info': {
                'session_code': session.session_code,
                'is_active': session.is_open(now),
                'expires_at': isoformat(session.expiry_ts)
            },
            'recent_submissions': [record.to_dict() for record in recent],
            'live_stats': {
                'total_submissions': stats['total_submissions'],
                'present_count': stats['present_count'],
                'last_updated': now.isoformat()
            }
        }
