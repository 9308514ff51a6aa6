from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from app.database.supabase_client import get_service_supabase
from app.modules.admin.service import AdminLogService
from app.modules.trios.hooks import run_cleanup
from app.modules.trios.routes import get_trio_service, execute_formation
from app.modules.trios.service import TrioService
from app.core.dependencies import require_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_log_service(supabase: Client = Depends(get_service_supabase)) -> AdminLogService:
    return AdminLogService(supabase)


@router.post("/randomize-groups")
async def trigger_group_randomization(
    user_data: Dict = Depends(require_admin),
    service: TrioService = Depends(get_trio_service),
    admin_log: AdminLogService = Depends(get_admin_log_service)
):
    """Manually re-run today's group formation (admin only)"""
    return execute_formation(
        service,
        on_success=lambda result: admin_log.log_admin_action(
            user_data["id"], "Manually triggered group randomization"
        )
    )


@router.post("/cleanup-expired-content")
async def cleanup_expired_content(
    user_data: Dict = Depends(require_admin),
    service: TrioService = Depends(get_trio_service),
    admin_log: AdminLogService = Depends(get_admin_log_service)
):
    """Remove posts and replies past their 24h window (admin only)"""
    if not run_cleanup(service):
        return JSONResponse(
            status_code=500,
            content={"error": "internal server error", "details": "expired content cleanup failed"}
        )
    admin_log.log_admin_action(user_data["id"], "Manually triggered expired content cleanup")
    return {"message": "expired content cleanup completed"}
