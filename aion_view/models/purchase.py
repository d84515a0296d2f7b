"""
Aion View - Purchase Request & Investment Models
"""
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, Numeric, ForeignKey

from aion_view.database import Base


class PurchaseRequestStatus(str, enum.Enum):
    PENDENTE = "Pendente"
    APROVADA = "Aprovada"
    REJEITADA = "Rejeitada"
    CONCLUIDA = "Concluida"


class PurchaseRequest(Base):
    """Solicitação de compra aberta a partir de uma ronda ou setor"""
    __tablename__ = "purchase_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    sector_id = Column(Integer, nullable=False, index=True)
    sector_name = Column(String(255))
    description = Column(Text, nullable=False)
    status = Column(String(20), default=PurchaseRequestStatus.PENDENTE.value, index=True)
    request_number = Column(String(40))

    round_id = Column(String(36), ForeignKey("rondas.id", ondelete="SET NULL"), index=True)
    equipment_id = Column(Integer, ForeignKey("equipamentos.id", ondelete="SET NULL"))
    requested_by_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "sector_id": self.sector_id,
            "sector_name": self.sector_name,
            "description": self.description,
            "status": self.status,
            "request_number": self.request_number,
            "round_id": self.round_id,
            "equipment_id": self.equipment_id,
            "requested_by_id": self.requested_by_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Investment(Base):
    """Investimento identificado (substituição, aquisição, reforma)"""
    __tablename__ = "investments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    title = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(60))
    estimated_value = Column(Numeric(14, 2))
    priority = Column(String(20))
    status = Column(String(30), default="Proposto")

    sector_id = Column(Integer, index=True)
    sector_name = Column(String(255))
    round_id = Column(String(36), ForeignKey("rondas.id", ondelete="SET NULL"), index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "estimated_value": float(self.estimated_value) if self.estimated_value is not None else None,
            "priority": self.priority,
            "status": self.status,
            "sector_id": self.sector_id,
            "sector_name": self.sector_name,
            "round_id": self.round_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
