"""
Aion View - Maintenance Contract Model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Text, Numeric, JSON

from aion_view.database import Base


class MaintenanceContract(Base):
    """Contrato de manutenção com fornecedor"""
    __tablename__ = "maintenance_contracts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)
    supplier = Column(String(255), nullable=False)
    equipment_ids = Column(JSON, default=list)
    contract_type = Column(String(60))
    annual_value = Column(Numeric(14, 2), nullable=False, default=0)

    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    auto_renewal = Column(Boolean, default=False)
    active = Column(Boolean, default=True, index=True)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "supplier": self.supplier,
            "equipment_ids": list(self.equipment_ids or []),
            "contract_type": self.contract_type,
            "annual_value": float(self.annual_value or 0),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "auto_renewal": bool(self.auto_renewal),
            "active": bool(self.active),
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
