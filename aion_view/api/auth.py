"""
Aion View - Auth API
Login, logout e troca de senha dos usuários do dashboard
"""
from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core import settings
from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import LoginRequest, LoginResponse, ChangePasswordRequest
from aion_view.services import accounts
from .deps import get_current_user, limiter, security

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Login com bloqueio após MAX_LOGIN_ATTEMPTS senhas erradas.

    401 credenciais inválidas, 403 usuário inativo, 423 conta bloqueada.
    """
    user, token = await accounts.authenticate(
        db,
        body.email,
        body.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    return LoginResponse(
        access_token=token,
        token_type="bearer",
        user=user.to_dict()
    )


@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Encerra a sessão do token atual"""
    await accounts.logout(db, credentials.credentials)
    return {"success": True}


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    """Retorna dados do usuário atual"""
    return user.to_dict()


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await accounts.change_password(db, user, body.current_password, body.new_password)
    return {"success": True, "message": "Senha alterada com sucesso"}
