"""
Aion View - Investments API
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import InvestmentCreate, InvestmentUpdate
from aion_view.services import cache_service, purchases
from .deps import get_current_user

router = APIRouter(prefix="/ecm/investments", tags=["Investments"])


@router.get("")
async def list_investments(
    sector_id: Optional[int] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    async def produce():
        return [i.to_dict() for i in await purchases.list_investments(db, sector_id, status)]

    key = cache_service.generate_cache_key("investments:list", {"sector_id": sector_id, "status": status})
    return await cache_service.cached(db, key, produce)


@router.get("/sectors/list")
async def list_sectors(db: AsyncSession = Depends(get_db)):
    """Setores conhecidos pelo sistema"""
    async def produce():
        return {"sectors": await purchases.list_sectors(db)}

    key = cache_service.generate_cache_key("investments:sectors")
    return await cache_service.cached(db, key, produce)


@router.get("/from-round/{round_id}")
async def investments_from_round(round_id: str, db: AsyncSession = Depends(get_db)):
    return [i.to_dict() for i in await purchases.investments_from_round(db, round_id)]


@router.get("/{investment_id}")
async def get_investment(investment_id: str, db: AsyncSession = Depends(get_db)):
    return (await purchases.get_investment(db, investment_id)).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_investment(
    body: InvestmentCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    investment = await purchases.create_investment(db, body.model_dump())
    await cache_service.clear_cache(db, "investments")
    return investment.to_dict()


@router.patch("/{investment_id}")
async def update_investment(
    investment_id: str,
    body: InvestmentUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    investment = await purchases.update_investment(db, investment_id, body.model_dump(exclude_unset=True))
    await cache_service.clear_cache(db, "investments")
    return investment.to_dict()


@router.delete("/{investment_id}")
async def delete_investment(
    investment_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await purchases.delete_investment(db, investment_id)
    await cache_service.clear_cache(db, "investments")
    return {"success": True}
