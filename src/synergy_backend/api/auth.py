from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from synergy_types.auth import LoginResponse, UserGet, UserLogin, UserRegister
from synergy_backend.business_logic.auth import login_user, register_user
from synergy_backend.database import get_db

auth_router = APIRouter()


@auth_router.post("/register", response_model=UserGet, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister, db: Session = Depends(get_db)):
    """Create an account. E-mail addresses are unique."""
    return await register_user(payload, db)


@auth_router.post("/login", response_model=LoginResponse)
async def login(payload: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Exchange e-mail and password for a bearer token."""
    return await login_user(payload, db, request.app.state.token_service)
