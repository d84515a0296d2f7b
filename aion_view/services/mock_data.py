"""
Aion View - Mock Data
Gerador determinístico de inventário, KPIs de disponibilidade e OS

Mesma semente = mesmos dados. Usado pelo admin_cli.py (generate-mocks /
seed-db) e pelos testes.
"""
import json
import logging
import math
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core import settings
from aion_view.models import (
    Equipment,
    EquipmentFlag,
    EquipmentKpiMonthly,
    MaintenanceContract,
    WorkOrder,
    WorkOrderStatus
)
from aion_view.services.uptime_kpi import EquipmentUptimeKpi, kpi_from_availability, write_mock_kpis

logger = logging.getLogger(__name__)

FIRST_EQUIPMENT_ID = 1001

SECTORS = [
    "UTI 1", "UTI 2", "UTI 3", "Emergência", "Centro Cirúrgico", "Radiologia",
    "Cardiologia", "Neurologia", "Ortopedia", "Pediatria", "Maternidade", "Ambulatório",
]

COST_CENTERS = [
    "UTI Adulto", "UTI Pediátrica", "Emergência", "Bloco Cirúrgico",
    "Diagnóstico por Imagem", "Cardiologia", "Neurologia", "Ortopedia",
    "Pediatria", "Maternidade", "Ambulatório",
]

MANUFACTURERS = [
    "Philips", "Siemens", "GE Healthcare", "Toshiba", "Canon Medical", "Samsung",
    "Mindray", "Fujifilm", "Hitachi", "Braile", "Magnamed", "Maquet", "B. Braun", "Stryker",
]

COMMON_TYPES = [
    "Ventilador Pulmonar", "Bomba de Infusão", "Monitor Multiparâmetros", "Desfibrilador",
    "Mesa Cirúrgica", "Lâmpada Cirúrgica", "Aspirador Cirúrgico", "Eletrocardiógrafo",
    "Oxímetro", "Capnógrafo", "Nebulizador", "Cama Hospitalar", "Autoclave",
    "Centrífuga", "Estufa", "Refrigerador", "Freezer",
]

# (tipo, fabricante, modelo, tag, setor, centro de custo, valor, ano de aquisição)
IMAGING_EQUIPMENT = [
    ("Tomógrafo Computadorizado", "Siemens", "SOMATOM go.Now", "RADIO-CT-01",
     "Radiologia", "Diagnóstico por Imagem", 2500000, 2022),
    ("Tomógrafo Computadorizado", "Philips", "Ingenuity Core", "RADIO-CT-02",
     "Radiologia", "Diagnóstico por Imagem", 2800000, 2023),
    ("Ressonância Magnética", "Siemens", "MAGNETOM Sola", "RADIO-RM-01",
     "Radiologia", "Diagnóstico por Imagem", 8500000, 2021),
    ("Ultrassom", "GE Healthcare", "Vivid S70", "UTI1-US-01", "UTI 1", "UTI Adulto", 180000, 2020),
    ("Ultrassom", "GE Healthcare", "LOGIQ E10", "UTI2-US-02", "UTI 2", "UTI Adulto", 230000, 2021),
    ("Ultrassom", "Canon Medical", "Aplio i800", "CARD-US-03", "Cardiologia", "Cardiologia", 280000, 2022),
    ("Ultrassom", "Philips", "EPIQ Elite", "MATE-US-04", "Maternidade", "Maternidade", 330000, 2023),
    ("Ultrassom", "Siemens", "ACUSON Sequoia", "EMER-US-05", "Emergência", "Emergência", 380000, 2024),
    ("Ultrassom", "Hitachi", "ARIETTA 850", "AMBU-US-06", "Ambulatório", "Ambulatório", 430000, 2024),
    ("Arco Cirúrgico", "Siemens", "CIOS Flow", "CC-ARCO-01",
     "Centro Cirúrgico", "Bloco Cirúrgico", 1200000, 2022),
    ("Arco Cirúrgico", "Philips", "Zenition", "CC-ARCO-02",
     "Centro Cirúrgico", "Bloco Cirúrgico", 1350000, 2023),
    ("Arco Cirúrgico", "GE Healthcare", "OEC Elite", "CC-ARCO-03",
     "Centro Cirúrgico", "Bloco Cirúrgico", 1100000, 2021),
    ("Raio-X Fixo", "Siemens", "Mobilett Mira Max", "RADIO-RX-01",
     "Radiologia", "Diagnóstico por Imagem", 320000, 2020),
    ("Raio-X Fixo", "Philips", "DigitalDiagnost C90", "RADIO-RX-02",
     "Radiologia", "Diagnóstico por Imagem", 450000, 2022),
]

# Tipos que entram como críticos no seed (tomógrafos e ressonância)
CRITICAL_TYPES = {"Tomógrafo Computadorizado", "Ressonância Magnética"}


def _random_date(rng: random.Random, start: datetime, end: datetime) -> datetime:
    span = int((end - start).total_seconds())
    return start + timedelta(seconds=rng.randint(0, max(span, 0)))


def _digits(rng: random.Random, size: int) -> str:
    return "".join(rng.choice("0123456789") for _ in range(size))


def _letters(rng: random.Random, size: int) -> str:
    return "".join(rng.choice("ABCDEFGHIJKLMNOPQRSTUVWXYZ") for _ in range(size))


def _lifecycle(rng: random.Random, year: int, manufacturer: str) -> dict:
    acquisition = _random_date(rng, datetime(year, 1, 1), datetime(year, 12, 31))
    return {
        "acquisition_date": acquisition,
        "manufacture_date": _random_date(rng, datetime(year - 1, 1, 1), acquisition),
        "installation_date": _random_date(rng, acquisition, acquisition + timedelta(days=15)),
        "anvisa_registration": _digits(rng, 11),
        "anvisa_valid_until": acquisition + relativedelta(years=5),
        "end_of_life": acquisition + relativedelta(years=7),
        "end_of_service": acquisition + relativedelta(years=10),
        "serial_number": f"SN-{manufacturer[:3].upper()}-{acquisition.year}-{_digits(rng, 3)}",
        "asset_number": f"PAT-{acquisition.year}-{_digits(rng, 4)}",
    }


def generate_equipment(count: int = 50, seed: Optional[int] = None) -> List[dict]:
    """
    Inventário com os equipamentos de imagem (criticidade Alta) seguidos de
    equipamentos comuns até completar `count`.
    """
    rng = random.Random(settings.MOCK_SEED if seed is None else seed)
    items: List[dict] = []
    next_id = FIRST_EQUIPMENT_ID

    for kind, manufacturer, model, tag, sector, cost_center, value, year in IMAGING_EQUIPMENT:
        if len(items) >= count:
            break
        items.append({
            "id": next_id,
            "name": kind,
            "manufacturer": manufacturer,
            "model": model,
            "tag": tag,
            "sector": sector,
            "cost_center": cost_center,
            "replacement_cost": float(value),
            "criticality": "Alta",
            "status": "Ativo",
            **_lifecycle(rng, year, manufacturer),
        })
        next_id += 1

    while len(items) < count:
        kind = rng.choice(COMMON_TYPES)
        manufacturer = rng.choice(MANUFACTURERS)
        sector = rng.choice(SECTORS)
        year = rng.randint(2018, 2024)
        items.append({
            "id": next_id,
            "name": kind,
            "manufacturer": manufacturer,
            "model": f"{manufacturer[:3].upper()}-{_letters(rng, 3)}-{_digits(rng, 3)}",
            "tag": f"{sector[:4].upper().replace(' ', '')}-{kind[:3].upper()}-{_digits(rng, 2)}",
            "sector": sector,
            "cost_center": rng.choice(COST_CENTERS),
            "replacement_cost": float(rng.randint(15000, 350000)),
            "criticality": rng.choice(["Alta", "Média", "Baixa"]),
            "status": rng.choice(["Ativo", "Ativo", "Ativo", "Inativo"]),
            **_lifecycle(rng, year, manufacturer),
        })
        next_id += 1

    return items


def generate_uptime_kpis(
    equipment: Sequence[dict],
    year: int,
    seed: Optional[int] = None
) -> Dict[str, List[EquipmentUptimeKpi]]:
    """
    12 meses por equipamento: 97 + sin(mês/2) * 2 com ruído de +-1,
    limitado a [95, 99] e arredondado em 2 casas.
    """
    rng = random.Random(settings.MOCK_SEED if seed is None else seed)
    kpis: Dict[str, List[EquipmentUptimeKpi]] = {}

    for item in equipment:
        monthly = []
        for month in range(1, 13):
            base = 97 + math.sin(month / 2) * 2
            uptime = max(95.0, min(99.0, base + (rng.random() - 0.5) * 2))
            kpi = kpi_from_availability(
                equipment_id=item["id"],
                year=year,
                month=month,
                availability=round(uptime, 2),
                tag=item.get("tag"),
                equipment=item.get("name"),
            )
            kpi.running_hours = round(kpi.running_hours, 2)
            kpi.stopped_hours = round(kpi.stopped_hours, 2)
            monthly.append(kpi)
        kpis[str(item["id"])] = monthly

    return kpis


def generate_work_orders(
    equipment: Sequence[dict],
    count: int = 120,
    year: Optional[int] = None,
    seed: Optional[int] = None
) -> List[dict]:
    """OS distribuídas no ano, ~30% abertas, custo em reais com 2 casas"""
    rng = random.Random(settings.MOCK_SEED if seed is None else seed)
    year = year or datetime.utcnow().year
    if not equipment:
        return []

    orders = []
    for code in range(1, count + 1):
        item = rng.choice(list(equipment))
        opened = _random_date(rng, datetime(year, 1, 1), datetime(year, 12, 31, 23, 59))
        is_open = rng.random() < 0.3
        orders.append({
            "code": code,
            "number": f"OS-{year}-{code:05d}",
            "equipment_id": item["id"],
            "equipment_name": item["name"],
            "equipment_model": item.get("model"),
            "equipment_manufacturer": item.get("manufacturer"),
            "sector": item.get("sector"),
            "status": WorkOrderStatus.ABERTA.value if is_open else WorkOrderStatus.FECHADA.value,
            "priority": rng.choice(["Alta", "Média", "Baixa"]),
            "maintenance_type": rng.choice(["Corretiva", "Corretiva", "Preventiva", "Calibração"]),
            "opened_at": opened,
            "closed_at": None if is_open else opened + timedelta(hours=rng.randint(2, 240)),
            "cost": round(rng.uniform(150, 25000), 2),
        })
    return orders


def generate_contracts(equipment: Sequence[dict], year: int) -> List[dict]:
    """Um contrato anual para o parque de imagem"""
    imaging_ids = [e["id"] for e in equipment if e.get("criticality") == "Alta"][:5]
    return [{
        "name": "Manutenção Equipamentos de Imagem",
        "supplier": "Siemens Healthineers",
        "equipment_ids": imaging_ids,
        "contract_type": "Full Service",
        "annual_value": 480000.0,
        "start_date": datetime(year, 1, 1),
        "end_date": datetime(year, 12, 31, 23, 59, 59),
        "auto_renewal": True,
        "active": True,
    }]


def _to_json(value):
    return value.isoformat() if isinstance(value, datetime) else value


def write_mock_files(
    directory: Optional[str] = None,
    count: int = 50,
    year: Optional[int] = None,
    seed: Optional[int] = None
) -> Path:
    """
    Grava equipamentos.json, equipment_kpis.json e ordens_servico.json.

    Apenas equipment_kpis.json é lido pela API em modo mock; o inventário
    e as OS vêm do banco (seed-db). Os outros dois arquivos são fixtures
    para o front-end rodar sem backend.
    """
    target = Path(directory or settings.MOCK_DIR)
    target.mkdir(parents=True, exist_ok=True)
    year = year or datetime.utcnow().year

    equipment = generate_equipment(count, seed)
    critical = [e for e in equipment if e["name"] in CRITICAL_TYPES]
    work_orders = generate_work_orders(equipment, year=year, seed=seed)

    (target / "equipamentos.json").write_text(
        json.dumps([{k: _to_json(v) for k, v in e.items()} for e in equipment], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    (target / "ordens_servico.json").write_text(
        json.dumps([{k: _to_json(v) for k, v in o.items()} for o in work_orders], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    write_mock_kpis(generate_uptime_kpis(critical, year, seed), target / "equipment_kpis.json")

    logger.info(f"[MOCK] {len(equipment)} equipamentos e {len(work_orders)} OS gravados em {target}")
    return target


async def seed_database(
    db: AsyncSession,
    count: int = 50,
    year: Optional[int] = None,
    seed: Optional[int] = None
) -> dict:
    """
    Popula o banco com o inventário mock, flags dos críticos, KPIs, OS e um
    contrato. Não faz nada se já houver equipamentos.
    """
    existing = await db.execute(select(Equipment.id).limit(1))
    if existing.first():
        logger.info("[MOCK] Banco já possui equipamentos, seed ignorado")
        return {"equipment": 0, "work_orders": 0, "kpis": 0, "contracts": 0}

    year = year or datetime.utcnow().year
    equipment = generate_equipment(count, seed)
    critical = [e for e in equipment if e["name"] in CRITICAL_TYPES]

    for item in equipment:
        db.add(Equipment(**item))
    await db.flush()

    for item in critical:
        db.add(EquipmentFlag(equipment_id=item["id"], critical_flag=True, monitored_flag=True))

    kpi_count = 0
    for items in generate_uptime_kpis(critical, year, seed).values():
        for kpi in items:
            db.add(EquipmentKpiMonthly(
                equipment_id=kpi.equipment_id,
                year=kpi.year,
                month=kpi.month,
                availability=kpi.uptime_percent,
            ))
            kpi_count += 1

    work_orders = generate_work_orders(equipment, year=year, seed=seed)
    for order in work_orders:
        db.add(WorkOrder(**{k: v for k, v in order.items() if k != "code"}))

    contracts = generate_contracts(equipment, year)
    for contract in contracts:
        db.add(MaintenanceContract(**contract))

    await db.commit()
    logger.info(
        f"[MOCK] Seed concluído: {len(equipment)} equipamentos, {len(work_orders)} OS, {kpi_count} KPIs"
    )
    return {
        "equipment": len(equipment),
        "work_orders": len(work_orders),
        "kpis": kpi_count,
        "contracts": len(contracts),
    }
