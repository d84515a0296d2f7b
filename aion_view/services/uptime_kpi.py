"""
Aion View - Uptime KPI Service
KPIs mensais de disponibilidade dos equipamentos críticos

A disponibilidade é persistida como percentual por equipamento/mês. As horas
funcionando/paradas são derivadas de um mês padrão (HOURS_PER_MONTH) e a
agregação mensal pondera pelo total de horas de cada equipamento.
"""
import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core import settings
from aion_view.models import Equipment, EquipmentKpiMonthly

logger = logging.getLogger(__name__)


@dataclass
class EquipmentUptimeKpi:
    equipment_id: int
    tag: str
    equipment: str
    year: int
    month: int
    uptime_percent: float
    running_hours: float
    stopped_hours: float
    total_hours: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AggregatedUptimeKpi:
    year: int
    month: int
    uptime_percent: float
    equipment_count: int
    running_hours_total: float
    stopped_hours_total: float

    def to_dict(self) -> dict:
        return asdict(self)


def kpi_from_availability(
    equipment_id: int,
    year: int,
    month: int,
    availability: float,
    tag: str = "N/A",
    equipment: str = "N/A",
    total_hours: Optional[float] = None
) -> EquipmentUptimeKpi:
    """Monta o KPI derivando horas funcionando/paradas da disponibilidade"""
    total = settings.HOURS_PER_MONTH if total_hours is None else total_hours
    running = (availability / 100) * total
    return EquipmentUptimeKpi(
        equipment_id=equipment_id,
        tag=tag or "N/A",
        equipment=equipment or "N/A",
        year=year,
        month=month,
        uptime_percent=availability,
        running_hours=running,
        stopped_hours=total - running,
        total_hours=total,
    )


def aggregate_uptime(kpis: Iterable[EquipmentUptimeKpi]) -> List[AggregatedUptimeKpi]:
    """
    Agrupa KPIs por (ano, mês) e calcula a disponibilidade agregada.

    uptime = horas funcionando totais / (funcionando + paradas) * 100
    """
    grouped: Dict[tuple, List[EquipmentUptimeKpi]] = {}
    for kpi in kpis:
        grouped.setdefault((kpi.year, kpi.month), []).append(kpi)

    aggregated = []
    for (year, month), items in grouped.items():
        running_total = sum(k.running_hours for k in items)
        stopped_total = sum(k.stopped_hours for k in items)
        total = running_total + stopped_total

        aggregated.append(AggregatedUptimeKpi(
            year=year,
            month=month,
            uptime_percent=(running_total / total) * 100 if total > 0 else 0,
            equipment_count=len(items),
            running_hours_total=running_total,
            stopped_hours_total=stopped_total,
        ))

    aggregated.sort(key=lambda a: (a.year, a.month))
    return aggregated


# ============================================
# MOCK (arquivo JSON)
# ============================================

def _mock_file() -> Path:
    return Path(settings.MOCK_DIR) / "equipment_kpis.json"


def read_mock_kpis(path: Optional[Path] = None) -> Dict[str, List[EquipmentUptimeKpi]]:
    """Lê {"monthlyKpis": {"<id>": [...]}}; arquivo ausente ou inválido = vazio"""
    path = path or _mock_file()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"[UPTIME] Mock de KPIs indisponível ({path}): {e}")
        return {}

    return {
        key: [EquipmentUptimeKpi(**item) for item in items]
        for key, items in (data.get("monthlyKpis") or {}).items()
    }


def write_mock_kpis(kpis: Dict[str, List[EquipmentUptimeKpi]], path: Optional[Path] = None):
    path = path or _mock_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"monthlyKpis": {key: [k.to_dict() for k in items] for key, items in kpis.items()}}
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


# ============================================
# CONSULTAS
# ============================================

async def get_equipment_uptime_kpis(
    db: Optional[AsyncSession],
    equipment_id: int,
    year: Optional[int] = None
) -> List[EquipmentUptimeKpi]:
    """KPIs mensais de um equipamento, ordenados por ano/mês"""
    return await get_all_critical_uptime_kpis(db, [equipment_id], year)


async def get_all_critical_uptime_kpis(
    db: Optional[AsyncSession],
    critical_ids: List[int],
    year: Optional[int] = None
) -> List[EquipmentUptimeKpi]:
    """KPIs mensais de todos os equipamentos informados"""
    if not critical_ids:
        return []

    if settings.USE_MOCK:
        stored = read_mock_kpis()
        result = []
        for equipment_id in critical_ids:
            items = stored.get(str(equipment_id), [])
            result.extend(k for k in items if year is None or k.year == year)
        return result

    query = (
        select(EquipmentKpiMonthly, Equipment.tag, Equipment.name)
        .join(Equipment, Equipment.id == EquipmentKpiMonthly.equipment_id, isouter=True)
        .where(EquipmentKpiMonthly.equipment_id.in_(critical_ids))
    )
    if year is not None:
        query = query.where(EquipmentKpiMonthly.year == year)
    query = query.order_by(
        EquipmentKpiMonthly.equipment_id,
        EquipmentKpiMonthly.year,
        EquipmentKpiMonthly.month
    )

    result = await db.execute(query)
    return [
        kpi_from_availability(
            equipment_id=row.equipment_id,
            year=row.year,
            month=row.month,
            availability=row.availability,
            tag=tag,
            equipment=name,
        )
        for row, tag, name in result.all()
    ]


async def get_aggregated_uptime_kpi(
    db: Optional[AsyncSession],
    critical_ids: List[int],
    year: Optional[int] = None
) -> List[AggregatedUptimeKpi]:
    """Disponibilidade agregada mês a mês dos equipamentos críticos"""
    kpis = await get_all_critical_uptime_kpis(db, critical_ids, year)
    return aggregate_uptime(kpis)


async def save_equipment_uptime_kpi(db: Optional[AsyncSession], kpi: EquipmentUptimeKpi):
    """Salva ou atualiza o KPI do equipamento para o ano/mês"""
    if settings.USE_MOCK:
        stored = read_mock_kpis()
        key = str(kpi.equipment_id)
        items = [
            k for k in stored.get(key, [])
            if not (k.year == kpi.year and k.month == kpi.month)
        ]
        items.append(kpi)
        items.sort(key=lambda k: (k.year, k.month))
        stored[key] = items
        write_mock_kpis(stored)
        return

    result = await db.execute(
        select(EquipmentKpiMonthly).where(
            EquipmentKpiMonthly.equipment_id == kpi.equipment_id,
            EquipmentKpiMonthly.year == kpi.year,
            EquipmentKpiMonthly.month == kpi.month,
        )
    )
    existing = result.scalar_one_or_none()

    if existing:
        existing.availability = kpi.uptime_percent
    else:
        db.add(EquipmentKpiMonthly(
            equipment_id=kpi.equipment_id,
            year=kpi.year,
            month=kpi.month,
            availability=kpi.uptime_percent,
        ))
    await db.commit()
    logger.info(
        f"[UPTIME] KPI salvo: equipamento {kpi.equipment_id} "
        f"{kpi.month:02d}/{kpi.year} = {kpi.uptime_percent:.2f}%"
    )
