"""
Aion View - Purchase Request / Investment Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional


class PurchaseRequestCreate(BaseModel):
    sector_id: int
    sector_name: Optional[str] = None
    description: str = Field(..., min_length=1)
    status: str = Field("Pendente", pattern="^(Pendente|Aprovada|Rejeitada|Concluida)$")
    request_number: Optional[str] = None
    round_id: Optional[str] = None
    equipment_id: Optional[int] = None


class PurchaseRequestUpdate(BaseModel):
    sector_id: Optional[int] = None
    sector_name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = Field(None, pattern="^(Pendente|Aprovada|Rejeitada|Concluida)$")
    request_number: Optional[str] = None
    round_id: Optional[str] = None
    equipment_id: Optional[int] = None


class InvestmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    estimated_value: Optional[float] = Field(None, ge=0)
    priority: Optional[str] = None
    status: str = "Proposto"
    sector_id: Optional[int] = None
    sector_name: Optional[str] = None
    round_id: Optional[str] = None


class InvestmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    estimated_value: Optional[float] = Field(None, ge=0)
    priority: Optional[str] = None
    status: Optional[str] = None
    sector_id: Optional[int] = None
    sector_name: Optional[str] = None
    round_id: Optional[str] = None
