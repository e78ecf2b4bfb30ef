"""
Role to permission table.

Every route names exactly one permission; a caller may use the route when
the role carried by their token grants it.  ``user`` can read the
directory, ``admin`` can also change it.
"""

from typing import Dict, FrozenSet, Tuple

ROLES: Tuple[str, ...] = ("user", "admin")

READ_PERMISSIONS = frozenset({"getClinics", "getDoctors", "getHealthServices"})
MANAGE_PERMISSIONS = frozenset({"manageClinics", "manageDoctors", "manageHealthServices"})

ROLE_RIGHTS: Dict[str, FrozenSet[str]] = {
    "user": READ_PERMISSIONS,
    "admin": READ_PERMISSIONS | MANAGE_PERMISSIONS,
}


def role_has_permission(role: str, permission: str) -> bool:
    """Return ``True`` when ``role`` is known and grants ``permission``."""
    return permission in ROLE_RIGHTS.get(role, frozenset())
