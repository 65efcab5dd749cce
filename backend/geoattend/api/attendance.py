# File: backend/geoattend/api/attendance.py
"""Public attendance submission API."""
from flask import Blueprint, current_app, request
from geoattend import limiter
from geoattend.exceptions import InputValidationError
from geoattend.services.ledger_service import LedgerService
from geoattend.services.submission_service import SubmissionRequest, SubmissionService
from geoattend.utils.helpers import success_response
from geoattend.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

def submit_rate_limit():
    return current_app.config.get('ATTENDANCE_SUBMIT_RATE_LIMIT', '3 per minute')

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/submit', methods=['POST'])
@limiter.limit(submit_rate_limit)
def submit():
    """Submit attendance with a session code, location and device signals."""
    result = Validator.validate_submission(request.get_json(silent=True))
    if not result['is_valid']:
        raise InputValidationError(details=result['errors'])

    data = result['data']
    outcome = SubmissionService.submit(SubmissionRequest(
        matric_no=data['matric_no'],
        session_code=data['session_code'],
        lat=data['lat'],
        lng=data['lng'],
        accuracy=data['accuracy'],
        device_info=data['device_info'],
        level=data['level'],
        user_agent=request.headers.get('User-Agent', ''),
        ip=request.remote_addr
    ))

    body = outcome.to_dict()
    body['success'] = True
    return success_response(
        data=body,
        message='Attendance submitted successfully',
        status_code=201
    )

@attendance_bp.route('/receipts/verify', methods=['POST'])
def verify_receipt():
    """Check that a receipt matches a stored submission."""
    data = request.get_json(silent=True) or {}

    errors = []
    session_id = Validator.parse_int(data.get('session_id'))
    if session_id is None:
        errors.append("session_id must be an integer")
    matric_no = data.get('matric_no')
    if not isinstance(matric_no, str) or not matric_no.strip():
        errors.append("matric_no is required")
    receipt = data.get('receipt')
    if not isinstance(receipt, str) or not receipt:
        errors.append("receipt is required")
    if errors:
        raise InputValidationError(details=errors)

    return success_response(data=LedgerService.verify_receipt(session_id, matric_no, receipt))
