from fastapi import APIRouter

from app.core.config import settings
from app.services.metrics.models import HealthModel
from app.services.metrics.store import format_timestamp, utc_now

router = APIRouter()


@router.get("/health", response_model=HealthModel)
async def health():
    """Health check endpoint"""
    return HealthModel(status="ok", name=settings.PROJECT_NAME, timestamp=format_timestamp(utc_now()))
