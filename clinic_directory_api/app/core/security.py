"""
Bearer token authentication and permission checks.

Tokens are JWT shaped strings (``header.payload.signature``) signed
with HMAC‑SHA256 using ``settings.secret_key``.  The payload carries the
subject (``sub``), the caller's ``role`` and an expiration timestamp
(``exp``).  There is no user table: whoever holds a valid token acts
with the role written into it, so tokens are issued by operators with
``create_token.py``.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .roles import ROLES, role_has_permission


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    subject: str,
    role: str,
    expires_delta: Optional[int] = None,
    secret_key: Optional[str] = None,
) -> str:
    """Create a signed token for ``subject`` acting as ``role``.

    Parameters
    ----------
    subject : str
        Free‑form identity of the caller (e.g. an e‑mail address).
    role : str
        One of :data:`~.roles.ROLES`.
    expires_delta : Optional[int]
        Lifetime in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.
    secret_key : Optional[str]
        Signing key; defaults to ``settings.secret_key``.

    Raises
    ------
    ValueError
        If ``role`` is not a known role.
    """
    if role not in ROLES:
        raise ValueError(f"Unknown role '{role}'")
    if expires_delta is None:
        expires_delta = settings.access_token_expire_minutes * 60
    payload = {"sub": subject, "role": role, "exp": int(time.time()) + expires_delta}
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature = _sign(signing_input, secret_key or settings.secret_key)
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(signature)}"


def decode_access_token(token: str, secret_key: Optional[str] = None) -> Optional[Dict[str, object]]:
    """Verify a token and return its payload, or ``None`` if it is invalid or expired."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, secret_key or settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict) or data.get("exp") is None:
            return None
        if int(data["exp"]) < int(time.time()):
            return None
    except (ValueError, TypeError, UnicodeDecodeError):
        return None
    return data


security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, object]:
    """Dependency returning the decoded token payload of the caller.

    Raises HTTP 401 when the header is missing, the token does not verify
    or it names a role this service does not know.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or payload.get("role") not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


# ---------------------------------------------------------------------------
# Role-based access control (RBAC) helpers
# ---------------------------------------------------------------------------

def require_permission(permission: str) -> Callable[..., Dict[str, object]]:
    """Dependency factory rejecting callers whose role lacks ``permission``.

    Use in endpoints as ``Depends(require_permission("manageClinics"))``.
    """

    def _permission_dependency(
        current_user: Dict[str, object] = Depends(get_current_user),
    ) -> Dict[str, object]:
        if not role_has_permission(str(current_user.get("role")), permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )
        return current_user

    return _permission_dependency
