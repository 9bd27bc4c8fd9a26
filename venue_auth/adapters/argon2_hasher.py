"""
Argon2 Password Hasher - argon2id hashing via argon2-cffi.
"""

import logging
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

logger = logging.getLogger(__name__)

MEMORY_COST_KIB = 2 ** 16   # 64 MiB
TIME_COST = 3
PARALLELISM = 1


class Argon2PasswordHasher:
    """
    One-way password hasher.

    Cost parameters are fixed; the digest embeds them together with the salt,
    so verification needs nothing but the digest.
    """

    def __init__(
        self,
        memory_cost: int = MEMORY_COST_KIB,
        time_cost: int = TIME_COST,
        parallelism: int = PARALLELISM,
    ):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password."""
        return self._hasher.hash(plaintext)

    def verify(self, digest: str, plaintext: str) -> bool:
        """
        Verify a password against a digest.

        Returns:
            True on match. False on mismatch or a malformed digest.
        """
        if not digest:
            return False
        try:
            return self._hasher.verify(digest, plaintext)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError):
            logger.warning("Stored password digest could not be verified")
            return False

    def needs_rehash(self, digest: str) -> bool:
        """Check if a digest was produced with different cost parameters."""
        try:
            return self._hasher.check_needs_rehash(digest)
        except InvalidHashError:
            return True
