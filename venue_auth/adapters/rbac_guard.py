"""
RBAC Guard - Role and account-type based route authorization.

Routes declare a requirement set of role names and/or account types.
A principal passes if it is an admin, holds a role with a required name,
or has a required account type.
"""

import logging
from typing import Dict, Iterable, Optional, Set
from venue_auth.errors import ForbiddenError, UnauthorizedError
from venue_auth.ports.policy_port import AuthorizationPort, Requirement
from venue_auth.domain.principal import Principal, AccountType
from venue_auth.domain.role import ResourceCategory, Role

logger = logging.getLogger(__name__)


def _normalize(required_roles: Optional[Iterable[Requirement]]) -> Set[str]:
    names = set()
    for requirement in required_roles or ():
        names.add(requirement.value if isinstance(requirement, AccountType) else str(requirement))
    return names


class RBACGuard(AuthorizationPort):
    """
    Role-Based Access Control guard.

    Decision order:
    1. No requirements: allow (authentication only)
    2. Missing principal, roles or account type: UnauthorizedError
    3. Admin: allow
    4. Role-name match or account-type match: allow
    5. Otherwise: ForbiddenError naming the principal

    Permission sub-check: alongside the role-name match, the guard computes
    whether each matching role carries permissions per resource category.
    By default only the reservations result is logged and none of them gate
    the decision. With strict_permissions=True a role-name match also needs
    a non-empty permission set for the route's declared resource category.
    """

    def __init__(self, strict_permissions: bool = False):
        """
        Initialize RBAC guard.

        Args:
            strict_permissions: Require category permissions on role-name matches
        """
        self._strict = strict_permissions

    def authorize(
        self,
        principal: Optional[Principal],
        required_roles: Optional[Iterable[Requirement]],
        resource: Optional[ResourceCategory] = None,
    ) -> bool:
        """Evaluate the route requirement set."""
        required = _normalize(required_roles)
        if not required:
            return True

        if principal is None or principal.roles is None or principal.account_type is None:
            raise UnauthorizedError("You are not authorized to access this resource")

        if principal.is_admin:
            return True

        matching_roles = [role for role in principal.roles if role.name in required]
        has_role = self._role_match(matching_roles, resource)
        has_account_type = principal.account_type.value in required

        if not (has_role or has_account_type):
            logger.info(
                "Denied user %s: needs one of %s", principal.user_id, sorted(required)
            )
            raise ForbiddenError(
                f"{principal.display_name}, you do not have permission to access this resource!"
            )

        return True

    def _role_match(self, matching_roles: Iterable[Role], resource: Optional[ResourceCategory]) -> bool:
        matching_roles = list(matching_roles)
        if not matching_roles:
            return False

        if self._strict and resource is not None:
            return any(role.allows(resource) for role in matching_roles)

        coverage = self.permission_coverage(matching_roles)
        if not coverage[ResourceCategory.RESERVATIONS]:
            logger.debug(
                "Role-name match without reservations permissions: %s",
                [role.name for role in matching_roles],
            )
        return True

    @staticmethod
    def permission_coverage(roles: Iterable[Role]) -> Dict[ResourceCategory, bool]:
        """Which categories any of the roles grants at least one action on."""
        roles = list(roles)
        return {
            category: any(role.allows(category) for role in roles)
            for category in ResourceCategory
        }
