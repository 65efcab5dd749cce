# File: backend/geoattend/services/receipt_service.py
"""Submission receipts."""
import hashlib
import hmac

class ReceiptService:
    """Binds an accepted submission to its session and instant."""

    DELIMITER = ':'

    @staticmethod
    def sign(session_id, matric_no: str, timestamp_ms: int, nonce: str) -> str:
        """SHA-256 hex digest of ``session:matric:timestamp:nonce``."""
        data = ReceiptService.DELIMITER.join(
            [str(session_id), matric_no, str(timestamp_ms), nonce]
        )
        return hashlib.sha256(data.encode('utf-8')).hexdigest()

    @staticmethod
    def verify(signature: str, session_id, matric_no: str, timestamp_ms: int, nonce: str) -> bool:
        expected = ReceiptService.sign(session_id, matric_no, timestamp_ms, nonce)
        return hmac.compare_digest(expected, signature or '')
