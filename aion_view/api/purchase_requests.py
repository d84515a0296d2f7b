"""
Aion View - Purchase Requests API
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import PurchaseRequestCreate, PurchaseRequestUpdate
from aion_view.services import cache_service, purchases
from .deps import get_current_user

router = APIRouter(prefix="/ecm/purchase-requests", tags=["Purchase Requests"])


@router.get("")
async def list_purchase_requests(
    sector_id: Optional[int] = None,
    status: Optional[str] = None,
    round_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    items = await purchases.list_purchase_requests(db, sector_id, status, round_id)
    return [i.to_dict() for i in items]


@router.get("/{request_id}")
async def get_purchase_request(
    request_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    return (await purchases.get_purchase_request(db, request_id)).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_purchase_request(
    body: PurchaseRequestCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    request = await purchases.create_purchase_request(db, body.model_dump(), requested_by_id=user.id)
    await cache_service.clear_cache(db, "investments")
    return request.to_dict()


@router.patch("/{request_id}")
async def update_purchase_request(
    request_id: str,
    body: PurchaseRequestUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    request = await purchases.update_purchase_request(
        db, request_id, body.model_dump(exclude_unset=True)
    )
    await cache_service.clear_cache(db, "investments")
    return request.to_dict()


@router.delete("/{request_id}")
async def delete_purchase_request(
    request_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await purchases.delete_purchase_request(db, request_id)
    await cache_service.clear_cache(db, "investments")
    return {"success": True}
