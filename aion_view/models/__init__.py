from .user import User, UserSector, UserSession, UserRole
from .equipment import Equipment, EquipmentFlag, EquipmentKpiMonthly
from .work_order import WorkOrder, WorkOrderStatus
from .round import Round
from .purchase import PurchaseRequest, PurchaseRequestStatus, Investment
from .contract import MaintenanceContract
from .cache import HttpCache

__all__ = [
    "User",
    "UserSector",
    "UserSession",
    "UserRole",
    "Equipment",
    "EquipmentFlag",
    "EquipmentKpiMonthly",
    "WorkOrder",
    "WorkOrderStatus",
    "Round",
    "PurchaseRequest",
    "PurchaseRequestStatus",
    "Investment",
    "MaintenanceContract",
    "HttpCache"
]
