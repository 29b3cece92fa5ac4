from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from kasir.routers.common import get_backup, service_errors
from kasir.services.backup_service import backup_filename

router = APIRouter(prefix="/backup", tags=["backup"])


@router.get("/export")
def export_backup(request: Request):
    body = get_backup(request).export_json()
    return Response(
        content=body.encode("utf-8"),
        media_type="application/json; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("/import")
def import_backup(payload: dict, request: Request):
    with service_errors():
        replaced = get_backup(request).import_data(payload)
    return {"ok": True, "replaced": replaced}


@router.post("/cleanup")
def cleanup_duplicates(request: Request):
    removed = get_backup(request).cleanup_duplicate_transactions()
    return {"ok": True, "removed": removed}


@router.post("/clear")
def clear_data(request: Request):
    get_backup(request).clear_all_data()
    return {"ok": True}
