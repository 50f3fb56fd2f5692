from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from core.security import ROLE_ADMIN, ROLE_TEACHER, Identity, decode_token, identity_from_payload
from services.preferences import PreferenceStore


bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(request: Request, creds: HTTPAuthorizationCredentials | None) -> str | None:
    if creds is not None and creds.credentials:
        return creds.credentials
    cookie_token = request.cookies.get("access_token")
    return cookie_token or None


def get_current_identity(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    cached = getattr(request.state, "identity", None)
    if isinstance(cached, Identity):
        return cached

    token = _extract_token(request, creds)
    if not token:
        raise HTTPException(status_code=401, detail="NOT_AUTHENTICATED")
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    identity = identity_from_payload(payload)
    request.state.identity = identity
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    # The role comes from the identity provider's user metadata; we trust it as given.
    if identity.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="NOT_AUTHORIZED")
    return identity


def require_staff(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.role not in {ROLE_ADMIN, ROLE_TEACHER}:
        raise HTTPException(status_code=403, detail="NOT_AUTHORIZED")
    return identity


def get_preferences(request: Request) -> PreferenceStore:
    return request.app.state.preferences
