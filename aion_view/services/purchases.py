"""
Aion View - Purchases Service
Solicitações de compra, investimentos e contratos de manutenção
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core.errors import NotFoundError
from aion_view.models import (
    Investment,
    MaintenanceContract,
    PurchaseRequest,
    Round,
    UserSector
)

logger = logging.getLogger(__name__)


async def _get(db: AsyncSession, model, item_id: str, label: str):
    item = await db.get(model, item_id)
    if not item:
        raise NotFoundError(f"{label} não encontrado(a)")
    return item


async def _update(db: AsyncSession, item, changes: dict):
    for key, value in changes.items():
        setattr(item, key, value)
    await db.commit()
    await db.refresh(item)
    return item


# ============================================
# SOLICITAÇÕES DE COMPRA
# ============================================

async def list_purchase_requests(
    db: AsyncSession,
    sector_id: Optional[int] = None,
    status: Optional[str] = None,
    round_id: Optional[str] = None
) -> List[PurchaseRequest]:
    query = select(PurchaseRequest)
    if sector_id is not None:
        query = query.where(PurchaseRequest.sector_id == sector_id)
    if status:
        query = query.where(PurchaseRequest.status == status)
    if round_id:
        query = query.where(PurchaseRequest.round_id == round_id)
    result = await db.execute(query.order_by(PurchaseRequest.created_at.desc()))
    return list(result.scalars().all())


async def get_purchase_request(db: AsyncSession, request_id: str) -> PurchaseRequest:
    return await _get(db, PurchaseRequest, request_id, "Solicitação de compra")


async def create_purchase_request(db: AsyncSession, data: dict, requested_by_id: Optional[str] = None):
    request = PurchaseRequest(**data, requested_by_id=requested_by_id)
    db.add(request)
    await db.commit()
    await db.refresh(request)
    logger.info(f"[PURCHASES] Solicitação criada para o setor {request.sector_id}")
    return request


async def update_purchase_request(db: AsyncSession, request_id: str, changes: dict):
    return await _update(db, await get_purchase_request(db, request_id), changes)


async def delete_purchase_request(db: AsyncSession, request_id: str):
    await db.delete(await get_purchase_request(db, request_id))
    await db.commit()


# ============================================
# INVESTIMENTOS
# ============================================

async def list_investments(
    db: AsyncSession,
    sector_id: Optional[int] = None,
    status: Optional[str] = None
) -> List[Investment]:
    query = select(Investment)
    if sector_id is not None:
        query = query.where(Investment.sector_id == sector_id)
    if status:
        query = query.where(Investment.status == status)
    result = await db.execute(query.order_by(Investment.created_at.desc()))
    return list(result.scalars().all())


async def get_investment(db: AsyncSession, investment_id: str) -> Investment:
    return await _get(db, Investment, investment_id, "Investimento")


async def investments_from_round(db: AsyncSession, round_id: str) -> List[Investment]:
    await _get(db, Round, round_id, "Ronda")
    result = await db.execute(
        select(Investment).where(Investment.round_id == round_id).order_by(Investment.created_at)
    )
    return list(result.scalars().all())


async def create_investment(db: AsyncSession, data: dict) -> Investment:
    investment = Investment(**data)
    db.add(investment)
    await db.commit()
    await db.refresh(investment)
    return investment


async def update_investment(db: AsyncSession, investment_id: str, changes: dict):
    return await _update(db, await get_investment(db, investment_id), changes)


async def delete_investment(db: AsyncSession, investment_id: str):
    await db.delete(await get_investment(db, investment_id))
    await db.commit()


async def list_sectors(db: AsyncSession) -> List[dict]:
    """Setores conhecidos (usuários, rondas, investimentos e solicitações)"""
    sectors = {}
    for model in (UserSector, Round, Investment, PurchaseRequest):
        result = await db.execute(
            select(model.sector_id, model.sector_name).where(model.sector_id.is_not(None)).distinct()
        )
        for sector_id, name in result.all():
            if name or sector_id not in sectors:
                sectors[sector_id] = name or sectors.get(sector_id) or f"Setor {sector_id}"

    return sorted(
        ({"id": sector_id, "name": name} for sector_id, name in sectors.items()),
        key=lambda s: s["name"].lower()
    )


# ============================================
# CONTRATOS
# ============================================

async def list_contracts(db: AsyncSession, active: Optional[bool] = None) -> List[MaintenanceContract]:
    query = select(MaintenanceContract)
    if active is not None:
        query = query.where(MaintenanceContract.active.is_(active))
    result = await db.execute(query.order_by(MaintenanceContract.start_date.desc()))
    return list(result.scalars().all())


async def get_contract(db: AsyncSession, contract_id: str) -> MaintenanceContract:
    return await _get(db, MaintenanceContract, contract_id, "Contrato")


async def create_contract(db: AsyncSession, data: dict) -> MaintenanceContract:
    contract = MaintenanceContract(**data)
    db.add(contract)
    await db.commit()
    await db.refresh(contract)
    logger.info(f"[CONTRACTS] Contrato criado: {contract.name} ({contract.supplier})")
    return contract


async def update_contract(db: AsyncSession, contract_id: str, changes: dict):
    return await _update(db, await get_contract(db, contract_id), changes)


async def delete_contract(db: AsyncSession, contract_id: str):
    await db.delete(await get_contract(db, contract_id))
    await db.commit()
