"""
Aion View - Equipment Models
Inventário de equipamentos médicos, flags de criticidade e KPIs mensais
"""
from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Float, Numeric, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship

from aion_view.database import Base


def _iso(value):
    return value.isoformat() if value else None


class Equipment(Base):
    """Equipamento do parque (id é o código do ativo no sistema de origem)"""
    __tablename__ = "equipamentos"

    id = Column(Integer, primary_key=True, autoincrement=False)

    tag = Column(String(50), index=True)
    name = Column(String(255), nullable=False, index=True)
    manufacturer = Column(String(120))
    model = Column(String(120))
    serial_number = Column(String(120))
    asset_number = Column(String(60))

    sector = Column(String(120), index=True)
    cost_center = Column(String(120))

    # Ciclo de vida
    acquisition_date = Column(DateTime)
    manufacture_date = Column(DateTime)
    installation_date = Column(DateTime)
    end_of_life = Column(DateTime)
    end_of_service = Column(DateTime)
    replacement_cost = Column(Numeric(14, 2), default=0)

    # Registro ANVISA
    anvisa_registration = Column(String(20))
    anvisa_valid_until = Column(DateTime)

    criticality = Column(String(20), default="Média")
    status = Column(String(20), default="Ativo", index=True)

    needs_replacement = Column(Boolean, default=False)
    needs_inspection = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    flag = relationship("EquipmentFlag", back_populates="equipment", uselist=False, lazy="selectin")

    @property
    def is_active(self) -> bool:
        return (self.status or "").lower() == "ativo"

    def to_dict(self):
        return {
            "id": self.id,
            "tag": self.tag,
            "name": self.name,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "serial_number": self.serial_number,
            "asset_number": self.asset_number,
            "sector": self.sector,
            "cost_center": self.cost_center,
            "acquisition_date": _iso(self.acquisition_date),
            "manufacture_date": _iso(self.manufacture_date),
            "installation_date": _iso(self.installation_date),
            "end_of_life": _iso(self.end_of_life),
            "end_of_service": _iso(self.end_of_service),
            "replacement_cost": float(self.replacement_cost or 0),
            "anvisa_registration": self.anvisa_registration,
            "anvisa_valid_until": _iso(self.anvisa_valid_until),
            "criticality": self.criticality,
            "status": self.status,
            "needs_replacement": bool(self.needs_replacement),
            "needs_inspection": bool(self.needs_inspection),
            "is_critical": bool(self.flag and self.flag.critical_flag),
            "is_monitored": bool(self.flag and self.flag.monitored_flag),
        }


class EquipmentFlag(Base):
    """Marcação de equipamento crítico / monitorado"""
    __tablename__ = "equipment_flags"

    equipment_id = Column(Integer, ForeignKey("equipamentos.id", ondelete="CASCADE"), primary_key=True)
    critical_flag = Column(Boolean, default=False, nullable=False)
    monitored_flag = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    equipment = relationship("Equipment", back_populates="flag")


class EquipmentKpiMonthly(Base):
    """Disponibilidade mensal de um equipamento"""
    __tablename__ = "equipment_kpi_monthly"
    __table_args__ = (
        UniqueConstraint("equipment_id", "year", "month", name="uq_equipment_kpi_month"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    equipment_id = Column(Integer, ForeignKey("equipamentos.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    availability = Column(Float, nullable=False)
    mtbf = Column(Float)
    mttr = Column(Float)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "equipment_id": self.equipment_id,
            "year": self.year,
            "month": self.month,
            "availability": self.availability,
            "mtbf": self.mtbf,
            "mttr": self.mttr,
        }
