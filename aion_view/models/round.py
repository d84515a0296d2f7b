"""
Aion View - Round Model
Rondas semanais de inspeção por setor
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship

from aion_view.database import Base


class Round(Base):
    """Ronda semanal executada em um setor"""
    __tablename__ = "rondas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    sector_id = Column(Integer, nullable=False, index=True)
    sector_name = Column(String(255), nullable=False)
    # Sempre segunda-feira 00:00
    week_start = Column(DateTime, nullable=False, index=True)

    responsible_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    responsible_name = Column(String(255))
    notes = Column(Text)

    open_os_count = Column(Integer, default=0)
    closed_os_count = Column(Integer, default=0)

    # Vínculos (ids de OS, solicitações de compra e investimentos)
    os_ids = Column(JSON, default=list)
    purchase_request_ids = Column(JSON, default=list)
    investment_ids = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    responsible = relationship("User", lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "sector_id": self.sector_id,
            "sector_name": self.sector_name,
            "week_start": self.week_start.isoformat() if self.week_start else None,
            "responsible_id": self.responsible_id,
            "responsible_name": self.responsible_name,
            "notes": self.notes,
            "open_os_count": self.open_os_count or 0,
            "closed_os_count": self.closed_os_count or 0,
            "os_ids": list(self.os_ids or []),
            "purchase_request_ids": list(self.purchase_request_ids or []),
            "investment_ids": list(self.investment_ids or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
