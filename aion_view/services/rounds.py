"""
Aion View - Rounds Service
Rondas semanais por setor: CRUD, contadores de OS e resumos
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core.errors import NotFoundError, ValidationError
from aion_view.models import Investment, PurchaseRequest, Round, User, WorkOrder, WorkOrderStatus
from aion_view.services import ai_summary

logger = logging.getLogger(__name__)

DUPLICATE_ROUND_MESSAGE = (
    "Já existe uma ronda para este setor nesta semana. "
    "Escolha outra semana ou edite a ronda existente."
)

OPEN_STATUSES = {"aberta", "aberto", "em andamento", "pendente"}


def normalize_week_start(value: datetime) -> datetime:
    """Segunda-feira 00:00 da semana (datas com fuso são convertidas para UTC)"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    monday = value - timedelta(days=value.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def count_work_orders(work_orders: Iterable[WorkOrder], os_ids: Sequence[int]) -> Dict[str, int]:
    """Contadores de OS abertas/fechadas entre as OS vinculadas"""
    by_code = {o.code: o for o in work_orders}
    counts = {"open": 0, "closed": 0}
    for os_id in os_ids or []:
        order = by_code.get(os_id)
        if not order:
            continue
        if order.status == WorkOrderStatus.ABERTA.value:
            counts["open"] += 1
        elif order.status == WorkOrderStatus.FECHADA.value:
            counts["closed"] += 1
    return counts


def rounds_summary_by_sector(work_orders: Iterable[WorkOrder]) -> List[dict]:
    """OS abertas/fechadas agrupadas por setor"""
    sectors: Dict[str, Dict[str, int]] = {}
    for order in work_orders:
        stats = sectors.setdefault(order.sector or "Desconhecido", {"open_os": 0, "closed_os": 0})
        if order.status == WorkOrderStatus.ABERTA.value:
            stats["open_os"] += 1
        elif order.status == WorkOrderStatus.FECHADA.value:
            stats["closed_os"] += 1

    return [
        {"sector_name": name, "open_os": stats["open_os"], "closed_os": stats["closed_os"]}
        for name, stats in sorted(sectors.items())
    ]


# ============================================
# CONSULTAS AUXILIARES
# ============================================

async def _work_orders_by_codes(db: AsyncSession, codes: Sequence[int]) -> List[WorkOrder]:
    if not codes:
        return []
    result = await db.execute(select(WorkOrder).where(WorkOrder.code.in_(list(codes))))
    return list(result.scalars().all())


async def _resolve_responsible_id(db: AsyncSession, name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    result = await db.execute(
        select(User.id).where(func.lower(User.name).contains(name.lower())).limit(1)
    )
    return result.scalar_one_or_none()


async def _ensure_unique_week(db: AsyncSession, sector_id: int, week_start: datetime, exclude_id=None):
    query = select(Round.id).where(Round.sector_id == sector_id, Round.week_start == week_start)
    if exclude_id:
        query = query.where(Round.id != exclude_id)
    if (await db.execute(query)).first():
        raise ValidationError(DUPLICATE_ROUND_MESSAGE, code="DUPLICATE_ROUND")


async def _link_investments(db: AsyncSession, round_id: str, investment_ids: Sequence[str]):
    """Vincula os investimentos informados e solta os que saíram da lista"""
    ids = list(investment_ids or [])
    unlink = update(Investment).where(Investment.round_id == round_id)
    if ids:
        unlink = unlink.where(Investment.id.not_in(ids))
    await db.execute(unlink.values(round_id=None))
    if ids:
        await db.execute(update(Investment).where(Investment.id.in_(ids)).values(round_id=round_id))


# ============================================
# CRUD
# ============================================

async def list_rounds(
    db: AsyncSession,
    sector_id: Optional[int] = None,
    week_start: Optional[datetime] = None
) -> List[Round]:
    query = select(Round)
    if sector_id is not None:
        query = query.where(Round.sector_id == sector_id)
    if week_start is not None:
        query = query.where(Round.week_start == normalize_week_start(week_start))
    result = await db.execute(query.order_by(Round.week_start.desc()))
    return list(result.scalars().all())


async def history(db: AsyncSession, sector_id: Optional[int] = None) -> List[Round]:
    """Histórico de rondas (mais recentes primeiro)"""
    return await list_rounds(db, sector_id=sector_id)


async def get_round(db: AsyncSession, round_id: str) -> Round:
    round_ = await db.get(Round, round_id)
    if not round_:
        raise NotFoundError("Ronda não encontrada")
    return round_


async def create_round(db: AsyncSession, data: dict) -> Round:
    """
    Cria a ronda normalizando a semana e calculando os contadores
    a partir das OS vinculadas.
    """
    for field in ("sector_id", "sector_name", "week_start", "responsible_name"):
        if not data.get(field):
            raise ValidationError(
                "Campos obrigatórios: sector_id, sector_name, week_start, responsible_name"
            )

    week_start = normalize_week_start(data["week_start"])
    sector_id = int(data["sector_id"])
    await _ensure_unique_week(db, sector_id, week_start)

    responsible_id = data.get("responsible_id") or await _resolve_responsible_id(
        db, data["responsible_name"]
    )

    os_ids = list(data.get("os_ids") or [])
    counts = count_work_orders(await _work_orders_by_codes(db, os_ids), os_ids)

    round_ = Round(
        sector_id=sector_id,
        sector_name=data["sector_name"],
        week_start=week_start,
        responsible_id=responsible_id,
        responsible_name=data["responsible_name"],
        notes=data.get("notes"),
        open_os_count=counts["open"],
        closed_os_count=counts["closed"],
        os_ids=os_ids,
        purchase_request_ids=list(data.get("purchase_request_ids") or []),
        investment_ids=list(data.get("investment_ids") or []),
    )
    db.add(round_)
    await db.flush()

    if round_.investment_ids:
        await _link_investments(db, round_.id, round_.investment_ids)

    await db.commit()
    await db.refresh(round_)
    logger.info(f"[ROUNDS] Ronda criada: {round_.sector_name} semana {week_start.date()}")
    return round_


async def update_round(db: AsyncSession, round_id: str, data: dict) -> Round:
    """Atualiza apenas os campos presentes em `data`"""
    round_ = await get_round(db, round_id)

    if "sector_id" in data and data["sector_id"] is not None:
        round_.sector_id = int(data["sector_id"])
    if "week_start" in data and data["week_start"] is not None:
        round_.week_start = normalize_week_start(data["week_start"])
    if "sector_id" in data or "week_start" in data:
        await _ensure_unique_week(db, round_.sector_id, round_.week_start, exclude_id=round_.id)

    for field in ("sector_name", "responsible_id", "responsible_name", "notes"):
        if field in data:
            setattr(round_, field, data[field])

    if "purchase_request_ids" in data:
        round_.purchase_request_ids = list(data["purchase_request_ids"] or [])

    if "os_ids" in data:
        os_ids = list(data["os_ids"] or [])
        counts = count_work_orders(await _work_orders_by_codes(db, os_ids), os_ids)
        round_.os_ids = os_ids
        round_.open_os_count = counts["open"]
        round_.closed_os_count = counts["closed"]

    if "investment_ids" in data:
        round_.investment_ids = list(data["investment_ids"] or [])
        await _link_investments(db, round_.id, round_.investment_ids)

    await db.commit()
    await db.refresh(round_)
    return round_


async def delete_round(db: AsyncSession, round_id: str):
    round_ = await get_round(db, round_id)
    await db.delete(round_)
    await db.commit()
    logger.info(f"[ROUNDS] Ronda removida: {round_id}")


# ============================================
# OS / RESUMOS
# ============================================

async def sector_summary(db: AsyncSession) -> List[dict]:
    result = await db.execute(select(WorkOrder))
    return rounds_summary_by_sector(result.scalars().all())


async def available_work_orders(
    db: AsyncSession,
    sector: Optional[str] = None,
    status: Optional[str] = None
) -> List[WorkOrder]:
    """OS corretivas abertas que podem ser vinculadas a uma ronda"""
    result = await db.execute(select(WorkOrder).order_by(WorkOrder.opened_at.desc()))
    orders = [
        o for o in result.scalars().all()
        if (o.status or "").strip().lower() in OPEN_STATUSES and o.is_corrective
    ]
    if sector:
        orders = [o for o in orders if o.sector == sector]
    if status:
        orders = [o for o in orders if o.status == status]
    return orders


async def round_ai_summary(db: AsyncSession, round_id: str) -> dict:
    """Resumo executivo da ronda com as OS, solicitações e investimentos vinculados"""
    round_ = await get_round(db, round_id)

    work_orders = await _work_orders_by_codes(db, round_.os_ids or [])

    purchase_requests = []
    if round_.purchase_request_ids:
        result = await db.execute(
            select(PurchaseRequest).where(PurchaseRequest.id.in_(round_.purchase_request_ids))
        )
        purchase_requests = list(result.scalars().all())

    result = await db.execute(select(Investment).where(Investment.round_id == round_.id))
    investments = list(result.scalars().all())

    summary = await ai_summary.generate_round_summary(
        round_, work_orders, purchase_requests, investments
    )
    return {"round_id": round_.id, **summary}


async def weekly_summary(db: AsyncSession, week_start: Optional[datetime] = None) -> dict:
    """Relatório texto das rondas da semana (semana atual por padrão)"""
    week = normalize_week_start(week_start or datetime.utcnow())
    rounds = await list_rounds(db, week_start=week)
    return {
        "week_start": week.isoformat(),
        "round_count": len(rounds),
        "summary": ai_summary.generate_weekly_summary(rounds),
    }
