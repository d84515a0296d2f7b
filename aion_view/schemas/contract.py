"""
Aion View - Maintenance Contract Schemas
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime, timezone


def _naive_utc(value):
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ContractCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    supplier: str = Field(..., min_length=1, max_length=255)
    equipment_ids: List[int] = []
    contract_type: Optional[str] = None
    annual_value: float = Field(..., ge=0)
    start_date: datetime
    end_date: datetime
    auto_renewal: bool = False
    active: bool = True
    notes: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_to_utc(cls, value):
        return _naive_utc(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date deve ser posterior a start_date")
        return self


class ContractUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    supplier: Optional[str] = Field(None, min_length=1, max_length=255)
    equipment_ids: Optional[List[int]] = None
    contract_type: Optional[str] = None
    annual_value: Optional[float] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    auto_renewal: Optional[bool] = None
    active: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_to_utc(cls, value):
        return _naive_utc(value)
