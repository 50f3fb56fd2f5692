from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_current_identity
from core.security import Identity
from schemas.auth import IdentityOut


router = APIRouter()


@router.get("/me", response_model=IdentityOut)
def me(identity: Identity = Depends(get_current_identity)) -> IdentityOut:
    # Sign-in itself happens against Supabase Auth; this only reflects the verified token.
    return IdentityOut(
        user_id=identity.user_id,
        email=identity.email,
        role=identity.role,
        full_name=identity.full_name,
    )
