"""
Aion View - Maintenance Cost Service
Indicador de custo total de manutenção

Fórmula: (valor dos contratos + valor das OS) / valor de substituição do parque * 100
Meta: abaixo de MAINTENANCE_COST_TARGET_PERCENT (4%) ao ano.
"""
import calendar
import re
from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from aion_view.core import settings


def parse_brazilian_currency(value) -> float:
    """
    Converte valor monetário brasileiro ("4.500,00", "R$ 1.234,56") para float.
    Sem vírgula, o texto é tratado como número simples ("4500.00").
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)

    cleaned = re.sub(r"[^\d,.\-]", "", str(value).strip())
    if not cleaned:
        return 0.0
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def classify(percent: float, target: float) -> str:
    """dentro (< meta), acima (< 1.5x meta) ou critico"""
    if percent < target:
        return "dentro"
    if percent < target * 1.5:
        return "acima"
    return "critico"


@dataclass
class EquipmentCost:
    equipment_id: int
    tag: str
    equipment: str
    total_spent: float
    work_order_count: int
    last_work_order: Optional[str]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MaintenanceCostIndicator:
    contracts_value: float
    work_orders_value: float
    total_maintenance_cost: float
    total_replacement_value: float
    annual_percent: float
    target_percent: float
    status: str
    target_difference: float
    year: int
    month: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _resolve_equipment_id(order, by_identity, by_name) -> Optional[int]:
    if order.equipment_id:
        return order.equipment_id
    identity = (order.equipment_name, order.equipment_model, order.equipment_manufacturer)
    if identity in by_identity:
        return by_identity[identity]
    return by_name.get(order.equipment_name)


def get_equipment_costs(work_orders, equipment) -> Dict[int, EquipmentCost]:
    """
    Soma o custo das OS por equipamento.

    OS sem equipment_id são associadas pelo trio (nome, modelo, fabricante)
    e, se não encontrar, apenas pelo nome.
    """
    equipment = list(equipment)
    by_id = {e.id: e for e in equipment}
    by_identity = {}
    by_name = {}
    for e in equipment:
        by_identity.setdefault((e.name, e.model, e.manufacturer), e.id)
        if e.name:
            by_name.setdefault(e.name, e.id)

    costs: Dict[int, EquipmentCost] = {}
    for order in work_orders:
        equipment_id = _resolve_equipment_id(order, by_identity, by_name)
        if not equipment_id:
            continue

        cost = parse_brazilian_currency(order.cost)
        opened = order.opened_at.isoformat() if order.opened_at else None

        if equipment_id in costs:
            existing = costs[equipment_id]
            existing.total_spent += cost
            existing.work_order_count += 1
            if opened and (existing.last_work_order is None or opened > existing.last_work_order):
                existing.last_work_order = opened
        else:
            eq = by_id.get(equipment_id)
            costs[equipment_id] = EquipmentCost(
                equipment_id=equipment_id,
                tag=(eq.tag if eq else "") or "",
                equipment=order.equipment_name or (eq.name if eq else ""),
                total_spent=cost,
                work_order_count=1,
                last_work_order=opened,
            )
    return costs


def total_replacement_value(equipment) -> float:
    """Valor de substituição do parque ativo"""
    return sum(
        parse_brazilian_currency(e.replacement_cost)
        for e in equipment
        if e.is_active
    )


def _build_indicator(contracts_value, work_orders_value, replacement, year, month=None):
    target = settings.MAINTENANCE_COST_TARGET_PERCENT
    total = contracts_value + work_orders_value
    percent = (total / replacement) * 100 if replacement > 0 else 0

    return MaintenanceCostIndicator(
        contracts_value=contracts_value,
        work_orders_value=work_orders_value,
        total_maintenance_cost=total,
        total_replacement_value=replacement,
        annual_percent=percent,
        target_percent=target,
        status=classify(percent, target),
        target_difference=percent - target,
        year=year,
        month=month,
    )


def calculate_maintenance_cost_indicator(
    year: int,
    contracts,
    work_orders,
    equipment
) -> MaintenanceCostIndicator:
    """Indicador anual: contratos ativos no ano + todas as OS"""
    equipment = list(equipment)
    costs = get_equipment_costs(work_orders, equipment)
    work_orders_value = sum(c.total_spent for c in costs.values())

    contracts_value = sum(
        parse_brazilian_currency(c.annual_value)
        for c in contracts
        if c.active and c.start_date.year <= year <= c.end_date.year
    )

    return _build_indicator(
        contracts_value, work_orders_value, total_replacement_value(equipment), year
    )


def calculate_maintenance_cost_evolution(
    year: int,
    contracts,
    work_orders,
    equipment
) -> List[MaintenanceCostIndicator]:
    """
    Evolução mês a mês.

    OS são acumuladas desde janeiro até o mês; cada contrato ativo que
    cobre o mês contribui com valor anual / 12.
    """
    equipment = list(equipment)
    work_orders = [o for o in work_orders if o.opened_at and o.opened_at.year == year]
    replacement = total_replacement_value(equipment)

    evolution = []
    for month in range(1, 13):
        orders_until_month = [o for o in work_orders if o.opened_at.month <= month]
        costs = get_equipment_costs(orders_until_month, equipment)
        work_orders_value = sum(c.total_spent for c in costs.values())

        month_start = datetime(year, month, 1)
        month_end = datetime(year, month, calendar.monthrange(year, month)[1], 23, 59, 59)
        contracts_value = sum(
            parse_brazilian_currency(c.annual_value) / 12
            for c in contracts
            if c.active and c.start_date <= month_end and c.end_date >= month_start
        )

        evolution.append(
            _build_indicator(contracts_value, work_orders_value, replacement, year, month)
        )

    return evolution
