from .auth import LoginRequest, LoginResponse, ChangePasswordRequest
from .user import SectorAssignment, UserCreate, UserUpdate
from .equipment import (
    FlagUpdate,
    ReplaceUpdate,
    InspectUpdate,
    SubstitutionCostUpdate,
    UptimeKpiInput
)
from .round import RoundCreate, RoundUpdate
from .purchase import (
    PurchaseRequestCreate,
    PurchaseRequestUpdate,
    InvestmentCreate,
    InvestmentUpdate
)
from .contract import ContractCreate, ContractUpdate

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "ChangePasswordRequest",
    "SectorAssignment",
    "UserCreate",
    "UserUpdate",
    "FlagUpdate",
    "ReplaceUpdate",
    "InspectUpdate",
    "SubstitutionCostUpdate",
    "UptimeKpiInput",
    "RoundCreate",
    "RoundUpdate",
    "PurchaseRequestCreate",
    "PurchaseRequestUpdate",
    "InvestmentCreate",
    "InvestmentUpdate",
    "ContractCreate",
    "ContractUpdate"
]
