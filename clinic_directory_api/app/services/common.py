"""Helpers shared by the entity services."""

from ..core.errors import ValidationError


def require_name(value: str) -> str:
    """Return ``value`` stripped, or raise if nothing is left."""
    name = (value or "").strip()
    if not name:
        raise ValidationError("Name must not be empty")
    return name


def unbound_peer(service: str, peer: str) -> RuntimeError:
    return RuntimeError(f"{service} has no {peer} peer; build it with build_services()")
