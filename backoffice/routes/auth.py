# backoffice/routes/auth.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.security import get_bearer_token, get_current_user
from backoffice.dependencies import get_db
from backoffice.schemas.auth import LoginRequest, LoginResponse, SessionInfo
from backoffice.services.auth_service import AuthService, CurrentUser

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("")
async def auth_page():
    """Where unauthenticated browsers are sent."""
    return {
        "message": "Sign in to continue",
        "login": "/auth/login",
    }


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    token, session = await AuthService(db).login(credentials.email, credentials.password)
    return LoginResponse(access_token=token, expires_at=session.expires_at, user_id=session.user_id)


@router.post("/logout")
async def logout(token: Optional[str] = Depends(get_bearer_token), db: AsyncSession = Depends(get_db)):
    revoked = await AuthService(db).logout(token)
    return {"success": True, "revoked": revoked}


@router.get("/session", response_model=SessionInfo)
async def current_session(current_user: CurrentUser = Depends(get_current_user)):
    return SessionInfo(
        user_id=current_user.user_id,
        email=current_user.email,
        is_admin=current_user.is_admin,
        admin_id=current_user.admin_id,
        admin_code=current_user.admin_code,
    )
