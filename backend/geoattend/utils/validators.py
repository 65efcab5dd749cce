"""Validation utilities for request payloads."""
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from geoattend.utils.helpers import normalize_matric_no

SESSION_CODE_PATTERN = re.compile(r'^[0-9]{4}$')

class Validator:
    """Validation helper class."""

    DEVICE_INFO_FIELDS = (
        'platform',
        'browser',
        'screen_resolution',
        'timezone',
        'user_agent',
        'language',
        'device_fingerprint',
        'os',
        'device_type',
    )
    LEVELS = (100, 200, 300, 400, 500, 600)
    MAX_FINGERPRINT_LENGTH = 128

    @staticmethod
    def parse_float(value: Any) -> Optional[float]:
        """Return a finite float or ``None`` (booleans are rejected)."""
        if isinstance(value, bool) or value is None:
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number

    @staticmethod
    def parse_int(value: Any) -> Optional[int]:
        """Return an integer or ``None``; floats with a fraction are rejected."""
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        if isinstance(value, str) and re.fullmatch(r'-?[0-9]+', value.strip()):
            return int(value.strip())
        return None

    @staticmethod
    def validate_range(
        value: Any,
        field: str,
        minimum: float,
        maximum: float,
        errors: List[str],
        integer: bool = False
    ):
        """Parse ``value`` and check ``minimum <= value <= maximum``."""
        parsed = Validator.parse_int(value) if integer else Validator.parse_float(value)
        if parsed is None or parsed < minimum or parsed > maximum:
            kind = 'an integer' if integer else 'a number'
            errors.append(f"{field} must be {kind} between {minimum} and {maximum}")
            return None
        return parsed

    @staticmethod
    def validate_session_code(code: Any) -> Tuple[Optional[str], Optional[str]]:
        """Session codes are exactly four ASCII digits."""
        if isinstance(code, int) and not isinstance(code, bool):
            code = str(code)
        if not isinstance(code, str) or not SESSION_CODE_PATTERN.match(code.strip()):
            return None, "Session code must be exactly 4 digits"
        return code.strip(), None

    @staticmethod
    def validate_device_info(device_info: Any) -> Tuple[Dict, List[str]]:
        """Only the recognized sub-fields are accepted."""
        if device_info is None:
            return {}, []
        if not isinstance(device_info, dict):
            return {}, ["Device info must be an object"]

        invalid = [key for key in device_info if key not in Validator.DEVICE_INFO_FIELDS]
        if invalid:
            return {}, [f"Invalid device_info fields: {', '.join(sorted(invalid))}"]

        fingerprint = device_info.get('device_fingerprint')
        if fingerprint is not None and (
            not isinstance(fingerprint, str) or len(fingerprint) > Validator.MAX_FINGERPRINT_LENGTH
        ):
            return {}, [
                f"device_fingerprint must be a string of at most "
                f"{Validator.MAX_FINGERPRINT_LENGTH} characters"
            ]
        return dict(device_info), []

    @staticmethod
    def validate_submission(data: Any) -> Dict[str, Any]:
        """Validate an attendance submission body.

        Returns ``is_valid``, ``errors`` and the cleaned ``data`` the
        submission pipeline consumes.
        """
        if not isinstance(data, dict):
            return {"is_valid": False, "errors": ["Request body must be JSON"], "data": None}

        errors: List[str] = []
        cleaned: Dict[str, Any] = {}

        matric_no = data.get('matric_no')
        if not isinstance(matric_no, str) or not matric_no.strip():
            errors.append("Invalid matriculation number format")
        else:
            cleaned['matric_no'] = normalize_matric_no(matric_no)

        code, code_error = Validator.validate_session_code(data.get('session_code'))
        if code_error:
            errors.append(code_error)
        cleaned['session_code'] = code

        cleaned['lat'] = Validator.validate_range(data.get('lat'), 'lat', -90, 90, errors)
        cleaned['lng'] = Validator.validate_range(data.get('lng'), 'lng', -180, 180, errors)

        cleaned['accuracy'] = None
        if data.get('accuracy') is not None:
            cleaned['accuracy'] = Validator.validate_range(
                data['accuracy'], 'accuracy', 0, 10000, errors
            )

        device_info, device_errors = Validator.validate_device_info(data.get('device_info'))
        errors.extend(device_errors)
        cleaned['device_info'] = device_info

        cleaned['level'] = None
        if data.get('level') is not None:
            level = Validator.parse_int(data['level'])
            if level not in Validator.LEVELS:
                errors.append(
                    "Level must be between 100 and 600 in increments of 100"
                )
            else:
                cleaned['level'] = level

        return {
            "is_valid": len(errors) == 0,
            "errors": errors,
            "data": cleaned if not errors else None
        }

    @staticmethod
    def validate_session_start(data: Any, config) -> Dict[str, Any]:
        """Validate the body of a start-session request."""
        if not isinstance(data, dict):
            return {"is_valid": False, "errors": ["Request body must be JSON"], "data": None}

        errors: List[str] = []
        cleaned: Dict[str, Any] = {
            'lat': Validator.validate_range(data.get('lat'), 'lat', -90, 90, errors),
            'lng': Validator.validate_range(data.get('lng'), 'lng', -180, 180, errors),
        }

        radius_min, radius_max = config['SESSION_RADIUS_RANGE']
        radius = data.get('radius_m')
        cleaned['radius_m'] = config['DEFAULT_SESSION_RADIUS_M'] if radius is None else \
            Validator.validate_range(radius, 'radius_m', radius_min, radius_max, errors, integer=True)

        duration_min, duration_max = config['SESSION_DURATION_RANGE']
        duration = data.get('duration_minutes')
        cleaned['duration_minutes'] = config['DEFAULT_SESSION_DURATION_MINUTES'] if duration is None else \
            Validator.validate_range(
                duration, 'duration_minutes', duration_min, duration_max, errors, integer=True
            )

        return {
            "is_valid": len(errors) == 0,
            "errors": errors,
            "data": cleaned if not errors else None
        }
