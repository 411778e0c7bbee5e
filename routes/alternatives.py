from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from typing import Optional
from pydantic import BaseModel, Field
from sqlmodel import Session

from config.database import get_session
from routes.deps import get_current_user_id, get_optional_user_id
from services.alternative_service import AlternativeService

router = APIRouter(prefix="/tools", tags=["alternatives"])


class AddAlternativeBody(BaseModel):
    alternative_id: str = Field(..., min_length=1)


@router.get("/{tool_id}/alternatives")
def list_alternatives(
    tool_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    session: Session = Depends(get_session)
):
    return AlternativeService().list_alternatives(session, tool_id, user_id)


@router.post("/{tool_id}/alternatives", status_code=201)
def add_alternative(
    tool_id: str,
    body: AddAlternativeBody,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    edge = AlternativeService().add_alternative(session, tool_id, body.alternative_id)
    return {
        "id": edge.id,
        "source_item_id": edge.source_item_id,
        "alternative_item_id": edge.alternative_item_id,
        "auto_suggested": edge.auto_suggested,
    }


@router.delete("/{tool_id}/alternatives/{alternative_id}")
def remove_alternative(
    tool_id: str,
    alternative_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    removed = AlternativeService().remove_alternative(session, tool_id, alternative_id)
    return {"status": "ok", "removed": removed}


@router.post("/{tool_id}/alternatives/{alternative_id}/vote")
def vote_alternative(
    tool_id: str,
    alternative_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    return AlternativeService().vote_alternative(session, tool_id, alternative_id, user_id)


@router.get("/{tool_id}/auto-alternatives")
def auto_alternatives(
    tool_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: Session = Depends(get_session)
):
    return AlternativeService().suggest_alternatives(session, tool_id, limit)


@router.get("/{tool_id}/auto-alternatives/preview")
def preview_auto_alternatives(
    tool_id: str,
    page_size: Optional[int] = Query(None, ge=1, le=100),
    session: Session = Depends(get_session)
):
    return AlternativeService().preview_alternatives(session, tool_id, page_size)


@router.post("/{tool_id}/auto-alternatives/materialize")
def materialize_auto_alternatives(
    tool_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    created = AlternativeService().materialize_alternatives(session, tool_id, limit)
    return {"created": created}


@router.get("/{tool_id}/feature-alternatives")
def feature_alternatives(
    tool_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    session: Session = Depends(get_session)
):
    return AlternativeService().suggest_by_features(session, tool_id, limit)
