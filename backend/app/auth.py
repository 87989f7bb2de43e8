"""
Bearer token authentication.

Tokens are issued by the upstream auth service; this module only decodes
them. The payload carries the identity id as `uid` and, for
administrators, `is_admin: true`.
"""

from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt

from app.config import JWT_SECRET, JWT_ALGORITHM
from app.errors import Unauthenticated, AdminRequired

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT, raising Unauthenticated on any failure."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("登录已过期")
    except jwt.PyJWTError:
        raise Unauthenticated()


def _payload(credentials):
    if credentials is None:
        raise Unauthenticated()
    payload = decode_token(credentials.credentials)
    uid = payload.get("uid")
    if not isinstance(uid, int) or isinstance(uid, bool):
        raise Unauthenticated()
    return payload


def get_current_uid(credentials: HTTPAuthorizationCredentials = Security(bearer_scheme)) -> int:
    """FastAPI dependency returning the caller's identity id."""
    return _payload(credentials)["uid"]


def require_admin(credentials: HTTPAuthorizationCredentials = Security(bearer_scheme)) -> int:
    """FastAPI dependency for administrative routes."""
    payload = _payload(credentials)
    if payload.get("is_admin") is not True:
        raise AdminRequired()
    return payload["uid"]
