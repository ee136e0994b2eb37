"""REST placeholders for metrics.

Data access goes through GraphQL; these routes only point callers there.
"""

from fastapi import APIRouter

from app.services.metrics.models import MessageModel

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("/latest", response_model=MessageModel)
async def latest_placeholder():
    return MessageModel(message="Use GraphQL latestMetric query")


@router.get("/history", response_model=MessageModel)
async def history_placeholder():
    return MessageModel(message="Use GraphQL metrics query")
