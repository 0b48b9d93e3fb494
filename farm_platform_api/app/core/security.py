"""
Bearer token helpers.

Tokens are issued by the platform's auth service; this API only needs
to turn a token into a username.  The format is a compact JSON Web
Token signed with HMAC-SHA256 using ``settings.secret_key``: the
subject (``sub``) claim carries the username and ``exp`` the expiry
as a UNIX timestamp.  ``create_access_token`` mints compatible tokens
for local development and tests.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .exceptions import Unauthorized

logger = logging.getLogger(__name__)


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[int] = None,
    secret_key: Optional[str] = None,
) -> str:
    """Create a signed token with the given claims.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"sub": "alice"}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.  A negative value
        produces an already expired token.
    secret_key : Optional[str]
        Signing secret; defaults to ``settings.secret_key``.

    Returns
    -------
    str
        ``header.payload.signature``, each part base64url encoded.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta if expires_delta is not None else settings.access_token_expire_minutes * 60
    to_encode["exp"] = int(time.time()) + exp_seconds
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature = _sign(signing_input, secret_key or settings.secret_key)
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(signature)}"


def decode_access_token(token: str, secret_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Verify and decode a token.

    Returns the payload dictionary when the signature matches and the
    token has not expired, otherwise ``None``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, secret_key or settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        # Constant-time comparison
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


class TokenService:
    """Resolve bearer tokens into usernames."""

    def __init__(self, secret_key: Optional[str] = None) -> None:
        self.secret_key = secret_key or settings.secret_key

    def verify_username(self, token: str) -> str:
        """Return the username the token was issued to.

        Raises ``Unauthorized`` for an empty, malformed, badly signed or
        expired token, or one without a subject.
        """
        if not token:
            raise Unauthorized("Bearer token not found")
        payload = decode_access_token(token, self.secret_key)
        if not payload:
            raise Unauthorized("Invalid or expired token")
        username = payload.get("sub")
        if not username or not isinstance(username, str):
            raise Unauthorized("Token has no subject")
        return username


security = HTTPBearer(auto_error=False)


def get_bearer_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Dependency returning the raw token from ``Authorization: Bearer``.

    Requests without the header, or with another scheme, fail with
    HTTP 401 before reaching any service.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token not found in Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_token_service() -> TokenService:
    return TokenService()


def get_current_username(
    token: str = Depends(get_bearer_token),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Dependency resolving the bearer token into a username."""
    return tokens.verify_username(token)
