from .auth import router as auth_router
from .users import router as users_router
from .lifecycle import router as lifecycle_router
from .critical import router as critical_router
from .indicators import router as indicators_router
from .rounds import router as rounds_router
from .work_orders import router as work_orders_router
from .purchase_requests import router as purchase_requests_router
from .investments import router as investments_router
from .contracts import router as contracts_router
from .warmup import router as warmup_router
from .deps import limiter

__all__ = [
    "auth_router",
    "users_router",
    "lifecycle_router",
    "critical_router",
    "indicators_router",
    "rounds_router",
    "work_orders_router",
    "purchase_requests_router",
    "investments_router",
    "contracts_router",
    "warmup_router",
    "limiter"
]
