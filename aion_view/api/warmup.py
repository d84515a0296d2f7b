"""
Aion View - Warm-up API
"""
from fastapi import APIRouter, Depends

from aion_view.core.warmup_scheduler import force_warmup
from aion_view.models import User
from .deps import require_admin

router = APIRouter(prefix="/warmup", tags=["Warm-up"])


@router.post("")
async def trigger_warmup(admin: User = Depends(require_admin)):
    """Força o warm-up das rotas cacheadas"""
    report = await force_warmup()
    return report.to_dict()
