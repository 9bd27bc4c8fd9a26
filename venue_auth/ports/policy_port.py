"""
Authorization Port - Route-level access decisions.

A route declares a requirement set: role names and/or account types, and
optionally the resource category it guards. The guard compares it with the
request principal.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Union
from venue_auth.domain.principal import Principal, AccountType
from venue_auth.domain.role import ResourceCategory

Requirement = Union[str, AccountType]


class AuthorizationPort(ABC):
    """Port: Authorization guard."""

    @abstractmethod
    def authorize(
        self,
        principal: Optional[Principal],
        required_roles: Optional[Iterable[Requirement]],
        resource: Optional[ResourceCategory] = None,
    ) -> bool:
        """
        Decide whether principal may access a route.

        Args:
            principal: Request principal, or None if unauthenticated
            required_roles: Role names and/or account types; empty means
                authentication only
            resource: Resource category the route guards, if declared

        Returns:
            True when allowed

        Raises:
            UnauthorizedError: Principal missing or incomplete
            ForbiddenError: Principal lacks the required role/account type
        """
        pass
