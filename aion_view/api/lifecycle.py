"""
Aion View - Lifecycle API
Inventário, cronograma de EOL/EOS e disponibilidade mês a mês
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.database import get_db
from aion_view.models import User
from aion_view.schemas import ReplaceUpdate, InspectUpdate, SubstitutionCostUpdate
from aion_view.services import cache_service, equipment as equipment_service, reports
from .deps import get_current_user

router = APIRouter(prefix="/ecm/lifecycle", tags=["Lifecycle"])


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@router.get("/inventario")
async def list_inventory(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    sector: Optional[str] = None,
    search: Optional[str] = None,
    criticality: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Inventário paginado com filtros"""
    filters = {"sector": sector, "search": search, "criticality": criticality, "status": status}
    key = cache_service.generate_cache_key(
        "lifecycle:inventario", {"page": page, "page_size": page_size, **filters}
    )
    return await cache_service.cached(
        db, key, lambda: equipment_service.list_inventory(db, page=page, page_size=page_size, **filters)
    )


@router.get("/inventario/export")
async def export_inventory(
    format: str = Query("csv", pattern="^(csv|pdf)$"),
    sector: Optional[str] = None,
    search: Optional[str] = None,
    criticality: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Exporta o inventário filtrado em CSV (Excel) ou PDF"""
    rows = await equipment_service.inventory_rows(
        db, sector=sector, search=search, criticality=criticality, status=status
    )
    stamp = datetime.now().strftime("%Y%m%d")

    if format == "pdf":
        return Response(
            content=reports.inventory_to_pdf(rows),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="inventario_{stamp}.pdf"'}
        )

    return Response(
        content=reports.inventory_to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="inventario_{stamp}.csv"'}
    )


@router.get("/cronograma")
async def lifecycle_schedule(
    data_inicio: Optional[datetime] = None,
    data_fim: Optional[datetime] = None,
    sector: Optional[str] = None,
    force_refresh: bool = False,
    db: AsyncSession = Depends(get_db)
):
    """Marcos de End of Life / End of Service no período (ano corrente por padrão)"""
    year = datetime.now().year
    start = _naive_utc(data_inicio) or datetime(year, 1, 1)
    end = _naive_utc(data_fim) or datetime(year, 12, 31, 23, 59, 59)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="data_fim deve ser posterior a data_inicio"
        )

    key = cache_service.generate_cache_key(
        "lifecycle:cronograma", {"start": start, "end": end, "sector": sector}
    )
    if force_refresh:
        await cache_service.delete_cache(db, key)

    return await cache_service.cached(
        db, key, lambda: equipment_service.lifecycle_schedule(db, start, end, sector)
    )


@router.get("/mes-a-mes")
async def monthly_availability(
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Disponibilidade média de cada mês do ano"""
    year = year or datetime.now().year
    key = cache_service.generate_cache_key("lifecycle:mes-a-mes", {"year": year})
    return await cache_service.cached(
        db, key, lambda: equipment_service.monthly_availability(db, year)
    )


@router.patch("/{equipment_id}/replace")
async def mark_replacement(
    equipment_id: int,
    body: ReplaceUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    equipment = await equipment_service.update_equipment_fields(
        db, equipment_id, needs_replacement=body.needs_replacement
    )
    await cache_service.clear_cache(db, "lifecycle")
    return equipment.to_dict()


@router.patch("/{equipment_id}/inspect")
async def mark_inspection(
    equipment_id: int,
    body: InspectUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    equipment = await equipment_service.update_equipment_fields(
        db, equipment_id, needs_inspection=body.needs_inspection
    )
    await cache_service.clear_cache(db, "lifecycle")
    return equipment.to_dict()


@router.patch("/{equipment_id}/substitution-cost")
async def update_substitution_cost(
    equipment_id: int,
    body: SubstitutionCostUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Valor de substituição (aceita "4.500,00")"""
    equipment = await equipment_service.update_equipment_fields(
        db, equipment_id, replacement_cost=body.replacement_cost
    )
    await cache_service.clear_cache(db, "lifecycle")
    await cache_service.clear_cache(db, "critical")
    await cache_service.clear_cache(db, "indicators")
    return equipment.to_dict()
