from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from synergy_types.auth import Identity, UserGet
from synergy_backend.business_logic.auth import get_user
from synergy_backend.database import get_db
from synergy_backend.permissions.auth import get_current_identity

users_router = APIRouter()


@users_router.get("/me", response_model=UserGet)
async def get_me(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Session = Depends(get_db),
):
    return await get_user(identity.id, db)
