"""
Aion View - User Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional


class SectorAssignment(BaseModel):
    sector_id: int
    sector_name: Optional[str] = None


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    password: Optional[str] = Field(None, min_length=6)
    role: str = Field("comum", pattern="^(admin|gerente|comum)$")
    active: bool = True
    sectors: List[SectorAssignment] = []


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[str] = Field(None, pattern="^(admin|gerente|comum)$")
    active: Optional[bool] = None
    can_impersonate: Optional[bool] = None
    sectors: Optional[List[SectorAssignment]] = None
