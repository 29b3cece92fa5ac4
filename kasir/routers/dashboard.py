from fastapi import APIRouter, Query, Request

from kasir.domain.models import money_json
from kasir.routers.common import get_facade, transaction_out

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard(request: Request, recent: int = Query(5, ge=1)):
    facade = get_facade(request)
    stats = facade.today_stats()
    return {
        "backend": facade.active_backend,
        "today": {"total_sales": money_json(stats.total_sales), "count": stats.count},
        "recent": [transaction_out(tx) for tx in facade.recent_transactions(recent)],
    }
