"""
Aion View - Maintenance Contracts API
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import ContractCreate, ContractUpdate
from aion_view.services import cache_service, purchases
from .deps import get_current_user

router = APIRouter(prefix="/ecm/contracts", tags=["Contracts"])


async def _invalidate(db: AsyncSession):
    await cache_service.clear_cache(db, "contracts")
    await cache_service.clear_cache(db, "indicators")


@router.get("")
async def list_contracts(
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_db)
):
    async def produce():
        return [c.to_dict() for c in await purchases.list_contracts(db, active)]

    key = cache_service.generate_cache_key("contracts:list", {"active": active})
    return await cache_service.cached(db, key, produce)


@router.get("/{contract_id}")
async def get_contract(contract_id: str, db: AsyncSession = Depends(get_db)):
    return (await purchases.get_contract(db, contract_id)).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contract(
    body: ContractCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    contract = await purchases.create_contract(db, body.model_dump())
    await _invalidate(db)
    return contract.to_dict()


@router.patch("/{contract_id}")
async def update_contract(
    contract_id: str,
    body: ContractUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    contract = await purchases.update_contract(db, contract_id, body.model_dump(exclude_unset=True))
    await _invalidate(db)
    return contract.to_dict()


@router.delete("/{contract_id}")
async def delete_contract(
    contract_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await purchases.delete_contract(db, contract_id)
    await _invalidate(db)
    return {"success": True}
