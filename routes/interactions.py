from __future__ import annotations
from fastapi import APIRouter, Depends
from typing import Optional
from pydantic import BaseModel
from sqlmodel import Session

from config.database import get_session
from config.settings import settings
from models import ItemType, VoteDirection
from routes.deps import get_current_user_id
from services.content_service import ContentService
from services.interaction_service import InteractionService
from utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter(tags=["interactions"])


class VoteBody(BaseModel):
    direction: VoteDirection


@router.post("/interactions/{item_type}/{item_id}/bookmark")
def toggle_bookmark(
    item_type: ItemType,
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    return InteractionService().toggle_bookmark(session, user_id, item_type, item_id)


@router.post("/interactions/{item_type}/{item_id}/vote")
def vote(
    item_type: ItemType,
    item_id: str,
    body: VoteBody,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    result = InteractionService().vote(session, user_id, item_type, item_id, body.direction)

    if settings.SYNC_ENTITY_UPVOTES:
        synced = ContentService().set_upvote_count(session, item_type, item_id, result["upvotes"])
        if not synced:
            logger.debug(
                "Upvote writeback skipped, item not in content store",
                extra={"item_type": item_type.value, "item_id": item_id}
            )

    return result


@router.get("/interactions/{item_type}/{item_id}/votes")
def vote_counts(item_type: ItemType, item_id: str, session: Session = Depends(get_session)):
    return InteractionService().get_vote_counts(session, item_type, item_id)


@router.get("/interactions/{item_type}/{item_id}/bookmark-count")
def bookmark_count(item_type: ItemType, item_id: str, session: Session = Depends(get_session)):
    return {"count": InteractionService().get_bookmark_count(session, item_type, item_id)}


@router.get("/interactions/{item_type}/{item_id}/me")
def my_interactions(
    item_type: ItemType,
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    return InteractionService().get_user_interactions(session, user_id, item_type, item_id)


@router.get("/users/me/bookmarks")
def my_bookmarks(
    item_type: Optional[ItemType] = None,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session)
):
    bookmarks = InteractionService().get_user_bookmarks(session, user_id, item_type)
    return {"bookmarks": bookmarks, "count": len(bookmarks)}
