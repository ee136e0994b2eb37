from fastapi import APIRouter
from .system import router as system_router
from .metrics import router as metrics_router
from .protected import router as protected_router
from .websocket import router as ws_router

api_router = APIRouter(prefix="/api")
api_router.include_router(metrics_router)
api_router.include_router(protected_router)

router = APIRouter()
router.include_router(system_router)
router.include_router(api_router)
router.include_router(ws_router)
