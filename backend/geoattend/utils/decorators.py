# File: backend/geoattend/utils/decorators.py
"""Custom decorators for authorization and auditing."""
from functools import wraps
from flask import current_app, g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from geoattend import db
from geoattend.models.audit_log import AuditLog
from geoattend.models.teacher import Teacher
from geoattend.utils.helpers import error_response

def teacher_required(f):
    """Require a valid JWT belonging to an active teacher.

    The teacher is exposed to the view as ``g.teacher``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        identity = get_jwt_identity()

        teacher = db.session.get(Teacher, int(identity)) if str(identity).isdigit() else None

        if not teacher:
            return error_response("Teacher not found", 404)

        if not teacher.is_active:
            return error_response("Account is deactivated", 403)

        g.teacher = teacher
        return f(*args, **kwargs)
    return decorated_function

def audit_action(action: str):
    """Record ``action`` in the audit log once the view succeeded."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            rv = f(*args, **kwargs)
            response = current_app.make_response(rv)

            teacher = g.get('teacher')
            if teacher is not None and response.status_code < 400:
                try:
                    AuditLog.record(
                        actor_id=teacher.id,
                        action=action,
                        payload={
                            'method': request.method,
                            'path': request.path,
                            'view_args': request.view_args,
                            'body': request.get_json(silent=True),
                            'ip': request.remote_addr,
                            'user_agent': request.headers.get('User-Agent'),
                        }
                    )
                except Exception:
                    db.session.rollback()
                    current_app.logger.exception('Audit logging failed for %s', action)

            return response
        return decorated_function
    return decorator
