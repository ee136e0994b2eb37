from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.core.security import require_user
from app.services.metrics.models import ProtectedModel

router = APIRouter(tags=["auth"])


@router.get("/protected", response_model=ProtectedModel)
async def protected(user: Dict[str, Any] = Depends(require_user)):
    """Sample route that requires a valid bearer token."""
    return ProtectedModel(ok=True, message="You accessed a protected route")
