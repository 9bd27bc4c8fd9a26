"""
Credential Store Port - Interface for persisting credential records and roles.

Implementations:
- MemoryCredentialStore: In-memory store (testing only)
- RedisCredentialStore: Redis-backed store
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Iterable
from venue_auth.domain.credential import CredentialRecord
from venue_auth.domain.role import Role


class CredentialStorePort(ABC):
    """
    Port: Async credential and role storage.

    Uniqueness (email, role name per scope) is the store's job. Writes that
    would break it raise ConflictError atomically; callers must not
    pre-check and assume no interleaving.
    """

    @abstractmethod
    async def create_user(self, record: CredentialRecord) -> CredentialRecord:
        """
        Store a new credential record.

        Args:
            record: Record with password hash already set

        Returns:
            Stored record

        Raises:
            ConflictError: Email already in use
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[CredentialRecord]:
        """
        Get a record by user ID.

        Returns:
            Record if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[CredentialRecord]:
        """
        Get a record by email (case-insensitive).

        Returns:
            Record if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_user_by_verification_token(self, token: str) -> Optional[CredentialRecord]:
        """Get the record holding an email-verification token."""
        pass

    @abstractmethod
    async def get_user_by_reset_token(self, token: str) -> Optional[CredentialRecord]:
        """Get the record holding a password-reset token (expired or not)."""
        pass

    @abstractmethod
    async def update_user(self, record: CredentialRecord) -> bool:
        """
        Replace a stored record.

        Returns:
            True if updated, False if not found

        Raises:
            ConflictError: Email changed to one already in use
        """
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        """
        Delete a record.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def create_role(self, role: Role) -> Role:
        """
        Store a new role.

        Raises:
            ConflictError: Name already used within the role's scope
        """
        pass

    @abstractmethod
    async def get_role(self, role_id: str) -> Optional[Role]:
        """Get a role by ID, None if not found."""
        pass

    @abstractmethod
    async def get_roles(self, role_ids: Iterable[str]) -> List[Role]:
        """
        Get several roles at once.

        Missing IDs are skipped.
        """
        pass

    @abstractmethod
    async def list_roles(self, business_id: Optional[str] = None) -> List[Role]:
        """
        List roles.

        Args:
            business_id: Optional scope filter

        Returns:
            Roles ordered by name
        """
        pass

    @abstractmethod
    async def update_role(self, role: Role) -> bool:
        """
        Replace a stored role.

        Returns:
            True if updated, False if not found

        Raises:
            ConflictError: Renamed onto an existing name in the same scope
        """
        pass

    @abstractmethod
    async def delete_role(self, role_id: str) -> bool:
        """
        Delete a role.

        Returns:
            True if deleted, False if not found
        """
        pass
