from fastapi import APIRouter

from routes.alternatives import router as alternatives_router
from routes.health import router as health_router
from routes.interactions import router as interactions_router
from routes.items import router as items_router


router = APIRouter()

router.include_router(health_router)
router.include_router(items_router)
router.include_router(interactions_router)
router.include_router(alternatives_router)
