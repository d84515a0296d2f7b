"""
Aion View - Users API
Administração de usuários (apenas admin)
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import UserCreate, UserUpdate
from aion_view.services import accounts, cache_service
from .deps import require_admin

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    users = await accounts.list_users(db)
    return [u.to_dict() for u in users]


@router.get("/sectors/list")
async def list_sectors(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Setores já vinculados a algum usuário"""
    return await accounts.list_sectors(db)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    user = await accounts.get_user(db, user_id)
    return user.to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    data = body.model_dump()
    data["sectors"] = [s.model_dump() for s in body.sectors]
    user = await accounts.create_user(db, **data)
    await cache_service.clear_cache(db, "investments")
    return user.to_dict()


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    changes = body.model_dump(exclude_unset=True)
    if body.sectors is not None:
        changes["sectors"] = [s.model_dump() for s in body.sectors]
    user = await accounts.update_user(db, user_id, **changes)
    await cache_service.clear_cache(db, "investments")
    return user.to_dict()


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    await accounts.delete_user(db, user_id, current_user_id=admin.id)
    await cache_service.clear_cache(db, "investments")
    return {"success": True}


@router.post("/{user_id}/unlock")
async def unlock_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Zera tentativas de login e remove o bloqueio"""
    user = await accounts.get_user(db, user_id)
    user = await accounts.unlock_user(db, user.email)
    return user.to_dict()
