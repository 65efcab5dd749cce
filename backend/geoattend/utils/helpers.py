"""Helper functions for the application."""
from flask import jsonify
from typing import Any

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code

def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400, **extra):
    """Return consistent error response.

    Extra keyword arguments (``code``, ``details``, gate specific payloads)
    are merged into the body.
    """
    response = {
        'error': True,
        'message': message,
        'status_code': status_code
    }
    response.update(extra)
    return jsonify(response), status_code

def normalize_matric_no(matric_no: str) -> str:
    """Canonical form used for every matric lookup and uniqueness key."""
    return matric_no.strip().upper()

def isoformat(value):
    """ISO string for a datetime, ``None`` passes through."""
    return value.isoformat() if value is not None else None
