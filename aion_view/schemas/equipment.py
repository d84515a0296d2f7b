"""
Aion View - Equipment / KPI Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Union


class FlagUpdate(BaseModel):
    value: bool


class ReplaceUpdate(BaseModel):
    needs_replacement: bool


class InspectUpdate(BaseModel):
    needs_inspection: bool


class SubstitutionCostUpdate(BaseModel):
    # Aceita número ou texto no formato brasileiro ("4.500,00")
    replacement_cost: Union[str, float]


class UptimeKpiInput(BaseModel):
    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    uptime_percent: float = Field(..., ge=0, le=100)
