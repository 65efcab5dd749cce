# File: backend/geoattend/api/sessions.py
"""Teacher-facing attendance session endpoints."""
from flask import Blueprint, current_app, g, request
from geoattend.exceptions import InputValidationError
from geoattend.services.ledger_service import LedgerService
from geoattend.services.session_service import SessionService
from geoattend.utils.decorators import audit_action, teacher_required
from geoattend.utils.helpers import success_response
from geoattend.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

@sessions_bp.route('/course/<int:course_id>', methods=['POST'])
@teacher_required
@audit_action('session_started')
def start_session(course_id):
    """Open a new attendance session for one of the teacher's courses."""
    result = Validator.validate_session_start(request.get_json(silent=True), current_app.config)
    if not result['is_valid']:
        raise InputValidationError(details=result['errors'])

    data = result['data']
    session = SessionService.start_session(
        course_id=course_id,
        teacher_id=g.teacher.id,
        lat=data['lat'],
        lng=data['lng'],
        radius_m=data['radius_m'],
        duration_minutes=data['duration_minutes']
    )

    summary = session.summary()
    summary['duration_minutes'] = data['duration_minutes']
    return success_response(
        data={'session': summary},
        message='Attendance session started successfully',
        status_code=201
    )

@sessions_bp.route('/course/<int:course_id>', methods=['GET'])
@teacher_required
def list_sessions(course_id):
    """List a course's sessions (status: active, expired or all)."""
    status = request.args.get('status', 'all')
    if status not in ('active', 'expired', 'all'):
        raise InputValidationError(details=["status must be one of active, expired, all"])

    return success_response(data=SessionService.list_for_course(course_id, g.teacher.id, status))

@sessions_bp.route('/<int:session_id>', methods=['GET'])
@teacher_required
def get_session(session_id):
    return success_response(data=SessionService.get_detail(session_id, g.teacher.id))

@sessions_bp.route('/<int:session_id>/end', methods=['PATCH'])
@teacher_required
@audit_action('session_ended')
def end_session(session_id):
    """End a session before its expiry."""
    session = SessionService.end_early(session_id, g.teacher.id)
    return success_response(
        data={'session': session.summary()},
        message='Session ended successfully'
    )

@sessions_bp.route('/<int:session_id>/live', methods=['GET'])
@teacher_required
def live_attendance(session_id):
    return success_response(data=SessionService.get_live(session_id, g.teacher.id))

@sessions_bp.route('/<int:session_id>/manual-attendance', methods=['POST'])
@teacher_required
@audit_action('manual_attendance')
def manual_attendance(session_id):
    """Mark a student present by hand; bypasses location and device checks."""
    data = request.get_json(silent=True) or {}

    matric_no = data.get('matric_no')
    if not isinstance(matric_no, str) or not matric_no.strip():
        raise InputValidationError(details=["matric_no is required"])

    reason = data.get('reason')
    if reason is not None and (not isinstance(reason, str) or len(reason) > 255):
        raise InputValidationError(details=["reason must be a string of at most 255 characters"])

    session = SessionService.get_owned_session(session_id, g.teacher.id)
    record = LedgerService.record_manual(session, matric_no, reason)

    return success_response(
        data={'record': record.to_dict()},
        message='Attendance recorded manually',
        status_code=201
    )
