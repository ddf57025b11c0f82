import enum
import re
from typing import Any, Iterable, Optional


class UserRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    CLIENT = "client"


class RouteAccess(str, enum.Enum):
    LOADING = "loading"
    LOGIN = "login"
    UNAUTHORIZED = "unauthorized"
    ALLOWED = "allowed"


# Older accounts were created with "super admin" spellings of the owner role.
ROLE_SYNONYMS = {
    "super_admin": UserRole.OWNER.value,
    "superadmin": UserRole.OWNER.value,
    "super_administrator": UserRole.OWNER.value,
    "superadministrator": UserRole.OWNER.value,
}

ROLE_LABELS = (
    (UserRole.OWNER, "Owner"),
    (UserRole.ADMIN, "Admin"),
    (UserRole.MEMBER, "Member"),
    (UserRole.CLIENT, "Client"),
)

_SEPARATORS = re.compile(r"[\s-]+")


def normalize_role(role: Any) -> Any:
    if isinstance(role, UserRole):
        return role.value

    if isinstance(role, str):
        trimmed = role.strip().lower()
        normalized = _SEPARATORS.sub("_", trimmed)
        return ROLE_SYNONYMS.get(normalized) or ROLE_SYNONYMS.get(trimmed) or normalized

    return "" if role is None else role


def matches_role(role: Any, expected_role: Any) -> bool:
    """True when ``role`` is ``expected_role`` or a suffixed variant such as ``admin_finance``."""
    normalized = normalize_role(role)
    expected = normalize_role(expected_role)

    if not normalized or not expected:
        return False
    if not isinstance(normalized, str) or not isinstance(expected, str):
        return False

    if normalized == expected:
        return True

    return (
        normalized.startswith(f"{expected}-")
        or normalized.startswith(f"{expected}_")
        or normalized.startswith(f"{expected} ")
    )


def get_role_label(role: Any) -> str:
    for candidate, label in ROLE_LABELS:
        if matches_role(role, candidate):
            return label
    return ""


def is_owner_role(role: Any) -> bool:
    return matches_role(role, UserRole.OWNER)


def has_privileged_access(role: Any) -> bool:
    return matches_role(role, UserRole.ADMIN) or matches_role(role, UserRole.OWNER)


def is_role_allowed(role: Any, allowed_roles: Optional[Iterable[Any]] = None) -> bool:
    if allowed_roles is None or isinstance(allowed_roles, (str, bytes)):
        return True
    allowed = list(allowed_roles)
    if not allowed:
        return True
    return any(matches_role(role, expected) for expected in allowed)


def get_privileged_base_path(role: Any) -> str:
    return "/owner" if is_owner_role(role) else "/admin"


def resolve_privileged_path(path: Any, role: Any) -> Any:
    """Rewrite an ``/admin`` route into the owner's area when the viewer is an owner."""
    if not isinstance(path, str):
        return path

    if not path.startswith("/admin"):
        return path

    return get_privileged_base_path(role) + path[len("/admin"):]


def get_default_route_for_role(role: Any) -> str:
    if matches_role(role, UserRole.OWNER):
        return "/owner/dashboard"
    if matches_role(role, UserRole.ADMIN):
        return "/admin/dashboard"
    if matches_role(role, UserRole.CLIENT):
        return "/client/home"
    return "/user/dashboard"


def resolve_route_access(user: Any, allowed_roles: Optional[Iterable[Any]] = None, loading: bool = False) -> RouteAccess:
    """Decide what a guarded route should do for the current session."""
    if loading:
        return RouteAccess.LOADING

    if not user:
        return RouteAccess.LOGIN

    role = user.get("role") if isinstance(user, dict) else getattr(user, "role", None)
    if not is_role_allowed(role, allowed_roles):
        return RouteAccess.UNAUTHORIZED

    return RouteAccess.ALLOWED
