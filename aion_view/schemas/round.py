"""
Aion View - Round Schemas
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class RoundCreate(BaseModel):
    sector_id: int
    sector_name: str = Field(..., min_length=1)
    week_start: datetime
    responsible_id: Optional[str] = None
    responsible_name: str = Field(..., min_length=1)
    notes: Optional[str] = None
    os_ids: List[int] = []
    purchase_request_ids: List[str] = []
    investment_ids: List[str] = []


class RoundUpdate(BaseModel):
    sector_id: Optional[int] = None
    sector_name: Optional[str] = None
    week_start: Optional[datetime] = None
    responsible_id: Optional[str] = None
    responsible_name: Optional[str] = None
    notes: Optional[str] = None
    os_ids: Optional[List[int]] = None
    purchase_request_ids: Optional[List[str]] = None
    investment_ids: Optional[List[str]] = None
