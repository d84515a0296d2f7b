"""
Aion View - Equipment Service
Inventário, ciclo de vida (EOL/EOS), flags de criticidade e KPIs dos críticos
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core.errors import NotFoundError, ValidationError
from aion_view.models import (
    Equipment,
    EquipmentFlag,
    EquipmentKpiMonthly,
    MaintenanceContract,
    WorkOrder
)
from aion_view.services import maintenance_cost, uptime_kpi

logger = logging.getLogger(__name__)

# Metas de SLA exibidas no painel de críticos
SLA_SERVICE_TARGET = 96.2
SLA_SOLUTION_TARGET = 94.7


# ============================================
# INVENTÁRIO
# ============================================

def _inventory_query(
    sector: Optional[str] = None,
    search: Optional[str] = None,
    criticality: Optional[str] = None,
    status: Optional[str] = None
):
    query = select(Equipment)
    if sector:
        query = query.where(Equipment.sector == sector)
    if criticality:
        query = query.where(Equipment.criticality == criticality)
    if status:
        query = query.where(Equipment.status == status)
    if search:
        term = f"%{search.lower()}%"
        query = query.where(or_(
            func.lower(Equipment.name).like(term),
            func.lower(Equipment.tag).like(term),
            func.lower(Equipment.model).like(term),
            func.lower(Equipment.manufacturer).like(term),
        ))
    return query


async def list_inventory(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 50,
    **filters
) -> dict:
    """Página do inventário: {items, total, page, page_size}"""
    query = _inventory_query(**filters)
    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    result = await db.execute(
        query.order_by(Equipment.id).offset((page - 1) * page_size).limit(page_size)
    )
    return {
        "items": [e.to_dict() for e in result.scalars().all()],
        "total": total or 0,
        "page": page,
        "page_size": page_size,
    }


async def inventory_rows(db: AsyncSession, **filters) -> List[dict]:
    """Inventário completo (sem paginação) para exportação"""
    result = await db.execute(_inventory_query(**filters).order_by(Equipment.id))
    return [e.to_dict() for e in result.scalars().all()]


async def get_equipment(db: AsyncSession, equipment_id: int) -> Equipment:
    equipment = await db.get(Equipment, equipment_id)
    if not equipment:
        raise NotFoundError(f"Equipamento {equipment_id} não encontrado")
    return equipment


async def update_equipment_fields(db: AsyncSession, equipment_id: int, **fields) -> Equipment:
    """Marcações do ciclo de vida (needs_replacement, needs_inspection, replacement_cost)"""
    equipment = await get_equipment(db, equipment_id)

    if "replacement_cost" in fields:
        value = maintenance_cost.parse_brazilian_currency(fields.pop("replacement_cost"))
        if value < 0:
            raise ValidationError("Valor de substituição não pode ser negativo")
        equipment.replacement_cost = value

    for key, value in fields.items():
        setattr(equipment, key, value)

    await db.commit()
    await db.refresh(equipment)
    return equipment


async def lifecycle_schedule(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    sector: Optional[str] = None
) -> List[dict]:
    """Marcos de End of Life / End of Service entre as datas, em ordem cronológica"""
    query = select(Equipment).where(or_(
        Equipment.end_of_life.between(start, end),
        Equipment.end_of_service.between(start, end),
    ))
    if sector:
        query = query.where(Equipment.sector == sector)

    result = await db.execute(query)
    milestones = []
    for equipment in result.scalars().all():
        for kind, moment in (("EOL", equipment.end_of_life), ("EOS", equipment.end_of_service)):
            if moment and start <= moment <= end:
                milestones.append({
                    "equipment_id": equipment.id,
                    "tag": equipment.tag,
                    "equipment": equipment.name,
                    "sector": equipment.sector,
                    "milestone": kind,
                    "date": moment.isoformat(),
                    "replacement_cost": float(equipment.replacement_cost or 0),
                })

    milestones.sort(key=lambda m: (m["date"], m["equipment_id"]))
    return milestones


async def monthly_availability(db: AsyncSession, year: int) -> List[dict]:
    """Disponibilidade média mês a mês de todos os equipamentos com KPI"""
    result = await db.execute(
        select(
            EquipmentKpiMonthly.month,
            func.avg(EquipmentKpiMonthly.availability),
            func.count(EquipmentKpiMonthly.id),
        )
        .where(EquipmentKpiMonthly.year == year)
        .group_by(EquipmentKpiMonthly.month)
        .order_by(EquipmentKpiMonthly.month)
    )
    return [
        {"year": year, "month": month, "availability": float(avg), "equipment_count": count}
        for month, avg, count in result.all()
    ]


# ============================================
# FLAGS (críticos / monitorados)
# ============================================

async def get_flags(db: AsyncSession) -> dict:
    result = await db.execute(
        select(EquipmentFlag).where(
            or_(EquipmentFlag.critical_flag.is_(True), EquipmentFlag.monitored_flag.is_(True))
        )
    )
    critical: Dict[str, bool] = {}
    monitored: Dict[str, bool] = {}
    for flag in result.scalars().all():
        if flag.critical_flag:
            critical[str(flag.equipment_id)] = True
        if flag.monitored_flag:
            monitored[str(flag.equipment_id)] = True
    return {"critical_flags": critical, "monitored_flags": monitored}


async def set_flag(
    db: AsyncSession,
    equipment_id: int,
    critical: Optional[bool] = None,
    monitored: Optional[bool] = None
) -> EquipmentFlag:
    await get_equipment(db, equipment_id)

    flag = await db.get(EquipmentFlag, equipment_id)
    if not flag:
        flag = EquipmentFlag(equipment_id=equipment_id, critical_flag=False, monitored_flag=False)
        db.add(flag)
    if critical is not None:
        flag.critical_flag = critical
    if monitored is not None:
        flag.monitored_flag = monitored

    await db.commit()
    logger.info(
        f"[CRITICAL] Flags do equipamento {equipment_id}: "
        f"crítico={flag.critical_flag} monitorado={flag.monitored_flag}"
    )
    return flag


async def critical_ids(db: AsyncSession) -> List[int]:
    result = await db.execute(
        select(EquipmentFlag.equipment_id)
        .where(EquipmentFlag.critical_flag.is_(True))
        .order_by(EquipmentFlag.equipment_id)
    )
    return list(result.scalars().all())


async def critical_kpi(db: AsyncSession, year: int, month: int) -> dict:
    """Disponibilidade média dos críticos no mês e metas de SLA"""
    ids = await critical_ids(db)
    kpis = [k for k in await uptime_kpi.get_all_critical_uptime_kpis(db, ids, year) if k.month == month]

    average = sum(k.uptime_percent for k in kpis) / len(kpis) if kpis else None
    return {
        "year": year,
        "month": month,
        "average_availability": average,
        "sla_service_target": SLA_SERVICE_TARGET,
        "sla_solution_target": SLA_SOLUTION_TARGET,
        "items": [
            {"equipment_id": k.equipment_id, "tag": k.tag, "availability": k.uptime_percent}
            for k in kpis
        ],
    }


async def critical_equipment(db: AsyncSession, year: int, sector: Optional[str] = None) -> List[dict]:
    """Equipamentos críticos ativos com custos de OS e uptime médio do ano"""
    ids = await critical_ids(db)
    if not ids:
        return []

    query = select(Equipment).where(Equipment.id.in_(ids))
    if sector:
        query = query.where(Equipment.sector == sector)
    equipment = [e for e in (await db.execute(query.order_by(Equipment.id))).scalars().all() if e.is_active]

    orders = (await db.execute(select(WorkOrder))).scalars().all()
    costs = maintenance_cost.get_equipment_costs(orders, equipment)

    items = []
    for eq in equipment:
        kpis = await uptime_kpi.get_equipment_uptime_kpis(db, eq.id, year)
        cost = costs.get(eq.id)
        items.append({
            **eq.to_dict(),
            "total_spent": round(cost.total_spent, 2) if cost else 0.0,
            "work_order_count": cost.work_order_count if cost else 0,
            "uptime_average": sum(k.uptime_percent for k in kpis) / len(kpis) if kpis else None,
            "uptime_kpis": [k.to_dict() for k in kpis],
        })
    return items


# ============================================
# OS / INDICADORES
# ============================================

async def list_work_orders(
    db: AsyncSession,
    status: Optional[str] = None,
    sector: Optional[str] = None,
    equipment_id: Optional[int] = None,
    year: Optional[int] = None,
    maintenance_type: Optional[str] = None
) -> List[WorkOrder]:
    query = select(WorkOrder)
    if status:
        query = query.where(WorkOrder.status == status)
    if sector:
        query = query.where(WorkOrder.sector == sector)
    if equipment_id is not None:
        query = query.where(WorkOrder.equipment_id == equipment_id)
    if maintenance_type:
        query = query.where(func.lower(WorkOrder.maintenance_type) == maintenance_type.lower())
    if year is not None:
        query = query.where(
            WorkOrder.opened_at >= datetime(year, 1, 1),
            WorkOrder.opened_at < datetime(year + 1, 1, 1),
        )
    result = await db.execute(query.order_by(WorkOrder.opened_at.desc()))
    return list(result.scalars().all())


async def _cost_inputs(db: AsyncSession):
    contracts = (await db.execute(select(MaintenanceContract))).scalars().all()
    orders = (await db.execute(select(WorkOrder))).scalars().all()
    equipment = (await db.execute(select(Equipment))).scalars().all()
    return contracts, orders, equipment


async def maintenance_cost_indicator(db: AsyncSession, year: int) -> dict:
    contracts, orders, equipment = await _cost_inputs(db)
    return maintenance_cost.calculate_maintenance_cost_indicator(
        year, contracts, orders, equipment
    ).to_dict()


async def maintenance_cost_evolution(db: AsyncSession, year: int) -> List[dict]:
    contracts, orders, equipment = await _cost_inputs(db)
    return [
        item.to_dict()
        for item in maintenance_cost.calculate_maintenance_cost_evolution(
            year, contracts, orders, equipment
        )
    ]
