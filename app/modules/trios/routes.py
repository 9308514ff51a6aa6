from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from app.database.supabase_client import get_service_supabase
from app.modules.trios.formation import GroupFormationJob
from app.modules.trios.schemas import FormationErrorResponse, FormationResult
from app.modules.trios.service import TrioService
from app.core.dependencies import verify_trigger_token
from supabase import Client
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trios"])


def get_trio_service(supabase: Client = Depends(get_service_supabase)) -> TrioService:
    return TrioService(supabase)


def execute_formation(
    service: TrioService,
    on_success: Optional[Callable[[FormationResult], None]] = None
) -> JSONResponse:
    """Run one formation pass and shape the outcome as the invoker expects it."""
    try:
        result = GroupFormationJob(service).run()
    except Exception as e:
        logger.exception(f"Error in trio randomization: {e}")
        body = FormationErrorResponse(details=str(e))
        return JSONResponse(status_code=500, content=body.model_dump())
    if on_success is not None:
        on_success(result)
    return JSONResponse(status_code=200, content=result.to_response())


@router.post("/randomize-groups")
async def randomize_groups(
    _: None = Depends(verify_trigger_token),
    service: TrioService = Depends(get_trio_service)
):
    """Form today's trios (no-op if they already exist)"""
    return execute_formation(service)
