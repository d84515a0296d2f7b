"""
Aion View - Critical Equipment API
Flags de críticos/monitorados e KPIs de disponibilidade
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import FlagUpdate, UptimeKpiInput
from aion_view.services import cache_service, equipment as equipment_service, uptime_kpi
from .deps import get_current_user

router = APIRouter(prefix="/ecm/critical", tags=["Critical Equipment"])


@router.get("/flags")
async def get_flags(db: AsyncSession = Depends(get_db)):
    return await equipment_service.get_flags(db)


@router.patch("/{equipment_id}/critical")
async def set_critical(
    equipment_id: int,
    body: FlagUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await equipment_service.set_flag(db, equipment_id, critical=body.value)
    await cache_service.clear_cache(db, "critical")
    await cache_service.clear_cache(db, "lifecycle")
    return await equipment_service.get_flags(db)


@router.patch("/{equipment_id}/monitored")
async def set_monitored(
    equipment_id: int,
    body: FlagUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await equipment_service.set_flag(db, equipment_id, monitored=body.value)
    await cache_service.clear_cache(db, "critical")
    await cache_service.clear_cache(db, "lifecycle")
    return await equipment_service.get_flags(db)


@router.get("/kpi")
async def critical_kpi(
    year: Optional[int] = None,
    month: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Disponibilidade média dos críticos no mês e metas de SLA"""
    now = datetime.now()
    year = year or now.year
    month = month or now.month
    key = cache_service.generate_cache_key("critical:kpi", {"year": year, "month": month})
    return await cache_service.cached(
        db, key, lambda: equipment_service.critical_kpi(db, year, month)
    )


@router.get("/equipamentos")
async def critical_equipment(
    year: Optional[int] = None,
    sector: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Críticos ativos com valor gasto em OS e uptime médio do ano"""
    year = year or datetime.now().year
    key = cache_service.generate_cache_key("critical:equipamentos", {"year": year, "sector": sector})
    return await cache_service.cached(
        db, key, lambda: equipment_service.critical_equipment(db, year, sector)
    )


@router.get("/equipamentos/{equipment_id}/uptime")
async def equipment_uptime(
    equipment_id: int,
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    kpis = await uptime_kpi.get_equipment_uptime_kpis(db, equipment_id, year)
    return [k.to_dict() for k in kpis]


@router.post("/equipamentos/{equipment_id}/uptime", status_code=status.HTTP_201_CREATED)
async def save_equipment_uptime(
    equipment_id: int,
    body: UptimeKpiInput,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Registra (ou corrige) a disponibilidade do mês"""
    equipment = await equipment_service.get_equipment(db, equipment_id)
    kpi = uptime_kpi.kpi_from_availability(
        equipment_id=equipment.id,
        year=body.year,
        month=body.month,
        availability=body.uptime_percent,
        tag=equipment.tag,
        equipment=equipment.name,
    )
    await uptime_kpi.save_equipment_uptime_kpi(db, kpi)
    await cache_service.clear_cache(db, "critical")
    await cache_service.clear_cache(db, "lifecycle")
    return kpi.to_dict()


@router.get("/uptime/aggregated")
async def aggregated_uptime(
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Disponibilidade agregada mês a mês (ponderada por horas)"""
    ids = await equipment_service.critical_ids(db)
    aggregated = await uptime_kpi.get_aggregated_uptime_kpi(db, ids, year)
    return [a.to_dict() for a in aggregated]
