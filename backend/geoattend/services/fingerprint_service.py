# File: backend/geoattend/services/fingerprint_service.py
"""Device fingerprint derivation."""
import hashlib
import json
from typing import Dict, Optional

class FingerprintService:
    """Turns client device signals into a per-session duplication key.

    A fingerprint is only ever compared for equality inside one session; it
    is never treated as proof of identity.
    """

    @staticmethod
    def derive(
        device_info: Optional[Dict] = None,
        user_agent: str = '',
        ip: Optional[str] = None
    ) -> str:
        """Prefer the client-supplied fingerprint, else hash request metadata."""
        device_info = device_info or {}

        supplied = device_info.get('device_fingerprint')
        if isinstance(supplied, str) and supplied.strip():
            return supplied.strip()

        attributes = dict(device_info)
        attributes['ip'] = ip
        return FingerprintService.hash_signals(user_agent, attributes)

    @staticmethod
    def hash_signals(user_agent: str, attributes: Optional[Dict] = None) -> str:
        """SHA-256 over a key-sorted JSON rendering of the signals."""
        payload = {'userAgent': user_agent or ''}
        payload.update(attributes or {})
        data = json.dumps(payload, sort_keys=True, separators=(',', ':'), default=str)
        return hashlib.sha256(data.encode('utf-8')).hexdigest()

    @staticmethod
    def manual_key(session, matric_no: str) -> str:
        """Placeholder fingerprint for records a teacher enters by hand.

        Keyed on the session nonce, which clients never see, so a submitted
        fingerprint cannot collide with it on purpose.
        """
        data = f"manual|{session.nonce}|{matric_no}"
        return hashlib.sha256(data.encode('utf-8')).hexdigest()
