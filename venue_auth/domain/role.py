"""
Role Domain Model - Named permission bundles scoped to a business.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, FrozenSet, Mapping, Optional, Iterable
from enum import Enum
import uuid

from venue_auth.errors import BadRequestError


class ResourceCategory(Enum):
    """Resource areas a role can grant actions on."""
    RESERVATIONS = "reservations"
    FLOOR_PLANS = "floorPlans"
    GUESTS = "guests"
    SETTINGS = "settings"


class PermissionAction(Enum):
    """Actions allowed on a resource category."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


PermissionMap = Dict[ResourceCategory, FrozenSet[PermissionAction]]


def parse_permissions(raw: Optional[Mapping[str, Iterable[str]]]) -> PermissionMap:
    """
    Parse a wire-format permission mapping.

    Args:
        raw: e.g. {"reservations": ["create", "read"], "guests": ["read"]}

    Returns:
        Enum-keyed permission map

    Raises:
        BadRequestError: Unknown category or action
    """
    permissions: PermissionMap = {}
    for category_name, actions in (raw or {}).items():
        try:
            category = ResourceCategory(category_name)
        except ValueError:
            raise BadRequestError(f"Unknown permission category: {category_name}")

        if isinstance(actions, str):
            raise BadRequestError(f"Permissions for {category_name} must be a list")

        parsed = set()
        for action in actions:
            try:
                parsed.add(PermissionAction(action))
            except ValueError:
                raise BadRequestError(f"Unknown permission action: {action}")
        permissions[category] = frozenset(parsed)

    return permissions


@dataclass
class Role:
    """
    Role entity.

    Domain rules:
    - name is unique within its business scope (None = global scope)
    - permissions are enum-typed, never free-form strings
    """
    role_id: str
    name: str
    permissions: PermissionMap = field(default_factory=dict)
    business_id: Optional[str] = None
    created_by: Optional[str] = None

    @classmethod
    def create(
        cls,
        name: str,
        permissions: Optional[PermissionMap] = None,
        business_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> "Role":
        """Create a new role with a generated ID."""
        return cls(
            role_id=str(uuid.uuid4()),
            name=cls.clean_name(name),
            permissions=dict(permissions or {}),
            business_id=business_id,
            created_by=created_by,
        )

    @staticmethod
    def clean_name(name: Optional[str]) -> str:
        """Strip a role name, rejecting empty ones."""
        if not name or not name.strip():
            raise BadRequestError("Role name is required")
        return name.strip()

    @property
    def scope(self) -> Optional[str]:
        """Uniqueness scope of the role name."""
        return self.business_id

    def allows(self, category: ResourceCategory, action: Optional[PermissionAction] = None) -> bool:
        """
        Check if the role grants anything (or a specific action) on a category.

        Args:
            category: Resource category
            action: Specific action, or None for "any action"
        """
        actions = self.permissions.get(category, frozenset())
        if action is None:
            return len(actions) > 0
        return action in actions

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        return {
            "role_id": self.role_id,
            "name": self.name,
            "permissions": {
                category.value: sorted(action.value for action in actions)
                for category, actions in self.permissions.items()
            },
            "business_id": self.business_id,
            "created_by": self.created_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        """Deserialize from dict."""
        return cls(
            role_id=data["role_id"],
            name=data["name"],
            permissions=parse_permissions(data.get("permissions")),
            business_id=data.get("business_id"),
            created_by=data.get("created_by"),
        )
