"""
Aion View - Work Order Model
Ordens de serviço (OS) de manutenção
"""
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Numeric, ForeignKey

from aion_view.database import Base


class WorkOrderStatus(str, enum.Enum):
    """Situação da OS"""
    ABERTA = "Aberta"
    FECHADA = "Fechada"


class WorkOrder(Base):
    """Ordem de serviço"""
    __tablename__ = "ordens_servico"

    # Código serial da OS no sistema de manutenção
    code = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(String(30), nullable=False, index=True)

    equipment_id = Column(Integer, ForeignKey("equipamentos.id", ondelete="SET NULL"), index=True)
    equipment_name = Column(String(255))
    equipment_model = Column(String(120))
    equipment_manufacturer = Column(String(120))
    sector = Column(String(120), index=True)

    status = Column(String(20), default=WorkOrderStatus.ABERTA.value, index=True)
    priority = Column(String(20))
    maintenance_type = Column(String(60))

    opened_at = Column(DateTime, default=datetime.utcnow)
    closed_at = Column(DateTime)
    cost = Column(Numeric(14, 2), default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def is_corrective(self) -> bool:
        tipo = (self.maintenance_type or "").lower()
        return any(p in tipo for p in ("corretiva", "corretivo", "correção", "correcao"))

    def to_dict(self):
        return {
            "code": self.code,
            "number": self.number,
            "equipment_id": self.equipment_id,
            "equipment_name": self.equipment_name,
            "equipment_model": self.equipment_model,
            "equipment_manufacturer": self.equipment_manufacturer,
            "sector": self.sector,
            "status": self.status,
            "priority": self.priority,
            "maintenance_type": self.maintenance_type,
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "cost": float(self.cost or 0),
        }
