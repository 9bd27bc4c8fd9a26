"""
TOTP Two-Factor Manager - Authenticator-app codes via pyotp.
"""

import binascii
import logging
import pyotp
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

STEP_SECONDS = 30
DIGITS = 6
VALID_WINDOW = 1  # accept previous, current and next step


class TOTPManager:
    """
    Generates secrets, provisioning URIs, and verifies codes.

    Verification tolerates one 30-second step of clock drift either way.
    Only one secret is stored per account, so generating a new one
    invalidates the previous enrollment.
    """

    def __init__(self, interval: int = STEP_SECONDS, digits: int = DIGITS, valid_window: int = VALID_WINDOW):
        self._interval = interval
        self._digits = digits
        self._valid_window = valid_window

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self._digits, interval=self._interval)

    def generate_secret(self) -> str:
        """Generate a new base32 secret."""
        return pyotp.random_base32()

    def build_enrollment_uri(self, account_label: str, issuer: str, secret: str) -> str:
        """
        Build an otpauth:// URI for QR enrollment.

        Args:
            account_label: Shown in the authenticator (usually the email)
            issuer: Application name
            secret: Base32 secret
        """
        return self._totp(secret).provisioning_uri(name=account_label, issuer_name=issuer)

    def current_code(self, secret: str, at: Optional[datetime] = None) -> str:
        """Code for the step containing `at` (now if omitted)."""
        totp = self._totp(secret)
        return totp.at(at) if at is not None else totp.now()

    def verify(self, code: str, secret: str, at: Optional[datetime] = None) -> bool:
        """
        Verify a submitted code.

        Args:
            code: Code from the authenticator app
            secret: Stored base32 secret
            at: Verification time (now if omitted)

        Returns:
            True if the code matches a step within the window
        """
        if not code or not secret:
            return False
        try:
            return self._totp(secret).verify(code, for_time=at, valid_window=self._valid_window)
        except (binascii.Error, ValueError, TypeError):
            logger.warning("Stored two-factor secret is not valid base32")
            return False
