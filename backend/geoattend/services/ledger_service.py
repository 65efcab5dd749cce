# File: backend/geoattend/services/ledger_service.py
"""Attendance ledger: uniqueness checks and writes."""
from typing import Dict, Optional
from flask import current_app
from sqlalchemy.exc import IntegrityError
from geoattend import db
from geoattend.exceptions import AlreadySubmitted, DeviceAlreadyUsed, StudentNotFound
from geoattend.models.attendance import AttendanceRecord, AttendanceStatus
from geoattend.models.attendance_session import AttendanceSession
from geoattend.models.device import DeviceFingerprint
from geoattend.models.student import Student
from geoattend.services.fingerprint_service import FingerprintService
from geoattend.services.receipt_service import ReceiptService
from geoattend.utils import clock
from geoattend.utils.helpers import isoformat, normalize_matric_no

class LedgerService:
    """Append-only store of accepted submissions.

    The pre-insert checks give fast, informative rejections. The unique
    constraints on ``attendance_records`` are what actually hold under
    concurrent submissions; a constraint violation on insert is mapped back
    to the same rejection the pre-check would have produced.
    """

    @staticmethod
    def find_by_matric(session_id: int, matric_no: str) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter_by(
            session_id=session_id, matric_no_submitted=matric_no
        ).first()

    @staticmethod
    def find_by_device(session_id: int, fingerprint: str) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter_by(
            session_id=session_id, device_fingerprint=fingerprint
        ).first()

    @staticmethod
    def ensure_not_submitted(session: AttendanceSession, matric_no: str) -> None:
        existing = LedgerService.find_by_matric(session.id, matric_no)
        if not existing:
            return

        raise AlreadySubmitted(
            details=[
                "You have already marked your attendance for this session",
                f"Previous submission status: {existing.status.value}",
                f"Submitted at: {isoformat(existing.submitted_at)}",
            ],
            existing_record={
                'status': existing.status.value,
                'submitted_at': isoformat(existing.submitted_at),
                'course': session.course.title,
                'session_code': session.session_code
            }
        )

    @staticmethod
    def ensure_device_unused(session: AttendanceSession, fingerprint: str) -> None:
        existing = LedgerService.find_by_device(session.id, fingerprint)
        if not existing:
            return

        previous = existing.student
        previous_name = previous.name if previous else None
        previous_matric = previous.matric_no if previous else existing.matric_no_submitted

        current_app.logger.warning(
            'Device %s... reused in session %s (first used by %s)',
            fingerprint[:8], session.id, previous_matric
        )

        if not current_app.config.get('EXPOSE_DEVICE_CONFLICT_IDENTITY', True):
            raise DeviceAlreadyUsed(details=[
                "This device has already been used to submit attendance for this session",
                "Each device can only be used once per session to prevent fraud",
                "The conflict has been recorded for your lecturer to review",
            ])

        raise DeviceAlreadyUsed(
            details=[
                "This device has already been used to submit attendance for this session",
                f"Previously used by: {previous_name} ({previous_matric})",
                f"Submitted at: {isoformat(existing.submitted_at)}",
                "Each device can only be used once per session to prevent fraud",
            ],
            security_info={
                'device_fingerprint': fingerprint[:8] + '...',
                'previous_user': previous_name,
                'previous_matric': previous_matric,
                'submission_time': isoformat(existing.submitted_at)
            }
        )

    @staticmethod
    def _insert(record: AttendanceRecord, session: AttendanceSession) -> AttendanceRecord:
        """Insert and commit, translating a uniqueness race into a rejection."""
        matric_no = record.matric_no_submitted
        fingerprint = record.device_fingerprint

        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning(
                'Concurrent submission for session %s (%s) hit a unique constraint',
                session.id, matric_no
            )
            LedgerService.ensure_not_submitted(session, matric_no)
            LedgerService.ensure_device_unused(session, fingerprint)
            raise
        return record

    @staticmethod
    def commit_submission(
        session: AttendanceSession,
        student: Student,
        matric_no: str,
        fingerprint: str,
        lat: float,
        lng: float,
        accuracy: Optional[float],
        distance: float,
        device_meta: Dict
    ) -> AttendanceRecord:
        """Write a ``present`` record with its receipt, then track the device."""
        submitted_at = clock.now()
        record = AttendanceRecord(
            session_id=session.id,
            course_id=session.course_id,
            student_id=student.id,
            matric_no_submitted=matric_no,
            device_fingerprint=fingerprint,
            lat=lat,
            lng=lng,
            accuracy=accuracy,
            distance_from_location=distance,
            status=AttendanceStatus.PRESENT,
            reason='submitted online',
            submitted_at=submitted_at,
            receipt_signature=ReceiptService.sign(
                session.id, matric_no, clock.to_millis(submitted_at), session.nonce
            )
        )
        LedgerService._insert(record, session)
        LedgerService.track_device(fingerprint, student.id, device_meta)
        return record

    @staticmethod
    def record_manual(
        session: AttendanceSession,
        matric_no: str,
        reason: Optional[str] = None
    ) -> AttendanceRecord:
        """Teacher override: mark a student present without the submission gates.

        Still subject to one record per student per session.
        """
        matric_no = normalize_matric_no(matric_no)
        student = Student.find_by_matric(matric_no)
        if not student:
            raise StudentNotFound()

        LedgerService.ensure_not_submitted(session, matric_no)

        submitted_at = clock.now()
        record = AttendanceRecord(
            session_id=session.id,
            course_id=session.course_id,
            student_id=student.id,
            matric_no_submitted=matric_no,
            device_fingerprint=FingerprintService.manual_key(session, matric_no),
            lat=session.lat,
            lng=session.lng,
            distance_from_location=0.0,
            status=AttendanceStatus.MANUAL_PRESENT,
            reason=reason or 'marked present by lecturer',
            submitted_at=submitted_at,
            receipt_signature=ReceiptService.sign(
                session.id, matric_no, clock.to_millis(submitted_at), session.nonce
            )
        )
        LedgerService._insert(record, session)

        current_app.logger.info(
            'Manual attendance for %s in session %s', matric_no, session.id
        )
        return record

    @staticmethod
    def track_device(fingerprint: str, student_id: int, meta: Dict) -> DeviceFingerprint:
        """Upsert the last-seen owner and metadata of a device."""
        now = clock.now()
        device = DeviceFingerprint.query.filter_by(device_fingerprint=fingerprint).first()
        if device is None:
            device = DeviceFingerprint(device_fingerprint=fingerprint, first_seen=now)
            db.session.add(device)

        device.student_id = student_id
        device.last_seen = now
        device.meta = meta

        try:
            db.session.commit()
        except IntegrityError:
            # Another request inserted the same fingerprint first
            db.session.rollback()
            device = DeviceFingerprint.query.filter_by(device_fingerprint=fingerprint).one()
            device.student_id = student_id
            device.last_seen = now
            device.meta = meta
            db.session.commit()
        return device

    @staticmethod
    def verify_receipt(session_id: int, matric_no: str, signature: str) -> Dict:
        """Check a presented receipt against the stored submission."""
        matric_no = normalize_matric_no(matric_no)
        record = LedgerService.find_by_matric(session_id, matric_no)
        if record is None:
            return {'valid': False}

        valid = ReceiptService.verify(
            signature,
            record.session_id,
            record.matric_no_submitted,
            clock.to_millis(record.submitted_at),
            record.session.nonce
        )
        result = {'valid': valid}
        if valid:
            result.update({
                'status': record.status.value,
                'submitted_at': isoformat(record.submitted_at),
                'session_code': record.session.session_code
            })
        return result
