# File: backend/geoattend/services/submission_service.py
"""Attendance submission pipeline."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from flask import current_app
from geoattend import db
from geoattend.exceptions import AttendanceError, OutOfRange, SessionExpired, StudentNotFound
from geoattend.models.attendance import AttendanceRecord
from geoattend.models.attendance_session import AttendanceSession
from geoattend.models.student import Student
from geoattend.services.eligibility_service import EligibilityService
from geoattend.services.fingerprint_service import FingerprintService
from geoattend.services.geo_service import GeoService
from geoattend.services.ledger_service import LedgerService
from geoattend.services.session_service import SessionService
from geoattend.utils import clock
from geoattend.utils.helpers import isoformat, normalize_matric_no

# Checklist keys in gate order
CHECKS = (
    'session_found',
    'student_found',
    'level_synced',
    'student_enrolled',
    'level_match',
    'first_submission',
    'device_fingerprint_derived',
    'device_unique',
    'session_active',
    'location_valid',
    'recorded',
)

@dataclass
class SubmissionRequest:
    """Boundary-validated submission."""
    matric_no: str
    session_code: str
    lat: float
    lng: float
    accuracy: Optional[float] = None
    device_info: Dict[str, Any] = field(default_factory=dict)
    level: Optional[int] = None
    user_agent: str = ''
    ip: Optional[str] = None

@dataclass
class SubmissionResult:
    """Outcome of a successful pipeline run."""
    record: AttendanceRecord
    session: AttendanceSession
    student: Student
    checks: Dict[str, bool]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'record': {
                'session_id': self.session.id,
                'student_name': self.student.name,
                'matric_no': self.student.matric_no,
                'course': self.session.course.title,
                'course_code': self.session.course.course_code,
                'session_code': self.session.session_code,
                'lecturer': self.session.teacher.name if self.session.teacher else None,
                'status': self.record.status.value,
                'submitted_at': isoformat(self.record.submitted_at),
                'receipt_signature': self.record.receipt_signature,
            },
            'validation_passed': dict(self.checks),
        }

class SubmissionService:
    """
    Decides whether a student's attendance submission is accepted.

    Gates run in order and the first failure ends the run with a typed
    rejection. Nothing is written to the ledger before the final commit,
    so a rejected attempt (including one that is out of range) leaves no
    record behind.

    1. resolve session by code
    2. resolve student by matric number
    3. sync the student's level (side effect, never fails)
    4. enrollment
    5. level match (only when both levels are known)
    6. no earlier record for this student in the session
    7. derive the device fingerprint
    8. no earlier record for this device in the session
    9. session still open at this instant
    10. inside the geofence
    11. commit record, receipt and device tracking

    Replaying an accepted request fails at gate 6 by design.
    """

    @classmethod
    def submit(cls, request: SubmissionRequest) -> SubmissionResult:
        matric_no = normalize_matric_no(request.matric_no)
        checks = {name: False for name in CHECKS}

        try:
            session = SessionService.resolve_by_code(request.session_code)
            checks['session_found'] = True

            student = Student.find_by_matric(matric_no)
            if not student:
                raise StudentNotFound(details=[
                    "Your matriculation number is not registered in this system",
                    "Please contact your lecturer to be added to the course",
                    "Ensure you entered your matriculation number correctly",
                ])
            checks['student_found'] = True

            cls._sync_level(student, request.level)
            checks['level_synced'] = True

            EligibilityService.check_enrollment(student, session)
            checks['student_enrolled'] = True

            EligibilityService.check_level(student.level, session.course.level)
            checks['level_match'] = True

            LedgerService.ensure_not_submitted(session, matric_no)
            checks['first_submission'] = True

            fingerprint = FingerprintService.derive(
                request.device_info, user_agent=request.user_agent, ip=request.ip
            )
            checks['device_fingerprint_derived'] = True

            LedgerService.ensure_device_unused(session, fingerprint)
            checks['device_unique'] = True

            cls._recheck_open(session)
            checks['session_active'] = True

            location = cls._check_location(session, request.lat, request.lng)
            checks['location_valid'] = True

            record = LedgerService.commit_submission(
                session=session,
                student=student,
                matric_no=matric_no,
                fingerprint=fingerprint,
                lat=request.lat,
                lng=request.lng,
                accuracy=request.accuracy,
                distance=location['distance'],
                device_meta=cls._device_meta(request)
            )
            checks['recorded'] = True

        except AttendanceError as e:
            current_app.logger.info(
                'Attendance rejected: %s (code=%s, matric=%s)',
                e.code, request.session_code, matric_no
            )
            raise

        current_app.logger.info(
            'Attendance accepted for %s in session %s (%.1fm from anchor)',
            matric_no, session.id, location['distance']
        )
        return SubmissionResult(record=record, session=session, student=student, checks=checks)

    @staticmethod
    def _sync_level(student: Student, level: Optional[int]) -> None:
        if level is None or student.level == level:
            return
        student.level = level
        db.session.commit()

    @staticmethod
    def _recheck_open(session: AttendanceSession) -> None:
        """Re-read the session so a concurrent early end is seen."""
        db.session.refresh(session)
        if not session.is_open(clock.now()):
            raise SessionExpired(details=[
                f"Session expired at: {isoformat(session.expiry_ts)}",
                "Please ask your lecturer to start a new session",
                "Attendance can only be submitted during active sessions",
            ])

    @staticmethod
    def _check_location(session: AttendanceSession, lat: float, lng: float) -> Dict:
        location = GeoService.verify_location(lat, lng, session)
        if location['is_inside']:
            return location

        actual = round(location['distance'])
        raise OutOfRange(
            details=[
                "You are too far from the session location",
                f"Required radius: {session.radius_m} meters",
                f"Your distance: {actual} meters",
                "Please move closer to the session location and try again",
            ],
            location_info={
                'required_radius': session.radius_m,
                'actual_distance': actual,
                'session_location': location['session_location'],
                'your_location': {'lat': lat, 'lng': lng}
            }
        )

    @staticmethod
    def _device_meta(request: SubmissionRequest) -> Dict[str, Any]:
        meta = {'user_agent': request.user_agent, 'ip': request.ip}
        meta.update(request.device_info)
        return meta
