"""
Aion View - Work Orders API
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.services import equipment as equipment_service

router = APIRouter(prefix="/ecm/os", tags=["Work Orders"])


@router.get("")
async def list_work_orders(
    status: Optional[str] = None,
    sector: Optional[str] = None,
    equipment_id: Optional[int] = None,
    year: Optional[int] = None,
    maintenance_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    orders = await equipment_service.list_work_orders(
        db,
        status=status,
        sector=sector,
        equipment_id=equipment_id,
        year=year,
        maintenance_type=maintenance_type,
    )
    return [o.to_dict() for o in orders]
