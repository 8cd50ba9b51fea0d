"""
Dashboard endpoint
"""
from fastapi import APIRouter, Depends

from ielts_trainer.api.deps import get_session_client
from ielts_trainer.client import SessionClient
from ielts_trainer.schemas.auth import DashboardResponse
from ielts_trainer.services.dashboard_service import dashboard_service

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(client: SessionClient = Depends(get_session_client)):
    """Greeting plus the practice categories"""
    return dashboard_service.get_dashboard(client)
