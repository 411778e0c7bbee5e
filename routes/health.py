from fastapi import APIRouter, Depends
from sqlmodel import Session, select, func
from typing import Dict, Any
from datetime import datetime

from config.database import get_session
import config.config_loader as config_module
from models import ContentItem, InteractionRecord, AlternativeEdge
from utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "service": "interaction-engine"
    }


@router.get("/ready")
def readiness_check(session: Session = Depends(get_session)):
    checks: Dict[str, Any] = {}
    ready = True

    try:
        checks["database"] = {
            "status": "ready",
            "content_items": session.exec(select(func.count()).select_from(ContentItem)).one(),
            "interactions": session.exec(select(func.count()).select_from(InteractionRecord)).one(),
            "alternative_edges": session.exec(select(func.count()).select_from(AlternativeEdge)).one(),
        }
    except Exception as e:
        logger.warning("Readiness check failed", extra={"error": str(e)})
        checks["database"] = {"status": "not_ready", "error": str(e)}
        ready = False

    checks["config"] = {
        "status": "loaded" if config_module.config_loader is not None else "defaults"
    }

    return {
        "ready": ready,
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/live")
def liveness_check():
    return {
        "alive": True,
        "timestamp": datetime.utcnow().isoformat()
    }
