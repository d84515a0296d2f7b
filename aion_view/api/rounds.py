"""
Aion View - Rounds API
Rondas semanais por setor
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import RoundCreate, RoundUpdate
from aion_view.services import cache_service, rounds as round_service
from .deps import get_current_user

router = APIRouter(prefix="/ecm/rounds", tags=["Rounds"])


@router.get("")
async def list_rounds(
    sector_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Rondas (mais recentes primeiro)"""
    async def produce():
        return [r.to_dict() for r in await round_service.list_rounds(db, sector_id=sector_id)]

    key = cache_service.generate_cache_key("rounds:list", {"sector_id": sector_id})
    return await cache_service.cached(db, key, produce)


@router.get("/history")
async def rounds_history(
    sector_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    return [r.to_dict() for r in await round_service.history(db, sector_id)]


@router.get("/summary")
async def rounds_summary(db: AsyncSession = Depends(get_db)):
    """OS abertas/fechadas por setor"""
    return await round_service.sector_summary(db)


@router.get("/weekly-summary")
async def weekly_summary(
    week_start: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db)
):
    return await round_service.weekly_summary(db, week_start)


@router.get("/os/available")
async def available_work_orders(
    setor: Optional[str] = None,
    situacao: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """OS corretivas abertas disponíveis para vincular a uma ronda"""
    async def produce():
        orders = await round_service.available_work_orders(db, sector=setor, status=situacao)
        return [o.to_dict() for o in orders]

    key = cache_service.generate_cache_key("rounds:os-available", {"setor": setor, "situacao": situacao})
    return await cache_service.cached(db, key, produce)


@router.get("/{round_id}")
async def get_round(round_id: str, db: AsyncSession = Depends(get_db)):
    round_ = await round_service.get_round(db, round_id)
    return round_.to_dict()


@router.get("/{round_id}/ai-summary")
async def round_ai_summary(round_id: str, db: AsyncSession = Depends(get_db)):
    """Resumo executivo (IA quando configurada, senão regras)"""
    return await round_service.round_ai_summary(db, round_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_round(
    body: RoundCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    round_ = await round_service.create_round(db, body.model_dump())
    await cache_service.clear_cache(db, "rounds")
    await cache_service.clear_cache(db, "investments")
    return round_.to_dict()


@router.patch("/{round_id}")
async def update_round(
    round_id: str,
    body: RoundUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    round_ = await round_service.update_round(db, round_id, body.model_dump(exclude_unset=True))
    await cache_service.clear_cache(db, "rounds")
    await cache_service.clear_cache(db, "investments")
    return round_.to_dict()


@router.delete("/{round_id}")
async def delete_round(
    round_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await round_service.delete_round(db, round_id)
    await cache_service.clear_cache(db, "rounds")
    await cache_service.clear_cache(db, "investments")
    return {"success": True}
