"""
Aion View - Indicators API
Indicador de custo de manutenção sobre o valor de substituição do parque
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.services import cache_service, equipment as equipment_service

router = APIRouter(prefix="/ecm/indicators", tags=["Indicators"])


@router.get("/maintenance-cost")
async def maintenance_cost(
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    year = year or datetime.now().year
    key = cache_service.generate_cache_key("indicators:maintenance-cost", {"year": year})
    return await cache_service.cached(
        db, key, lambda: equipment_service.maintenance_cost_indicator(db, year)
    )


@router.get("/maintenance-cost/evolution")
async def maintenance_cost_evolution(
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Evolução mensal (OS acumuladas + 1/12 dos contratos vigentes)"""
    year = year or datetime.now().year
    key = cache_service.generate_cache_key("indicators:maintenance-cost-evolution", {"year": year})
    return await cache_service.cached(
        db, key, lambda: equipment_service.maintenance_cost_evolution(db, year)
    )
