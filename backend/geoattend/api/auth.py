# File: backend/geoattend/api/auth.py
"""Teacher authentication API."""
from flask import Blueprint, request
from geoattend import limiter
from geoattend.services.auth_service import AuthService
from geoattend.utils.helpers import success_response, error_response

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Teacher login with email and password."""
    data = request.get_json(silent=True)

    if not data:
        return error_response("Request body must be JSON", 400)

    email = str(data.get("email", "")).strip()
    password = str(data.get("password", ""))

    result, error = AuthService.login(email, password)

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Login successful")
