from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlmodel import Session

from config.database import get_session
from models import ItemStatus, ItemType
from models.query import ContentFilter, ContentItemCreate, SortField
from services.content_service import ContentService, serialize_item

router = APIRouter(prefix="/items", tags=["items"])


def get_content_filter(
    item_type: Optional[ItemType] = None,
    status: Optional[ItemStatus] = None,
    category_id: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=200),
    sort: SortField = SortField.UPVOTES,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ContentFilter:
    return ContentFilter(
        item_type=item_type,
        status=status,
        category_id=category_id,
        search=search,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.post("", status_code=201)
def create_item(payload: ContentItemCreate, session: Session = Depends(get_session)):
    item = ContentService().create_item(session, payload)
    return serialize_item(item)


@router.get("")
def list_items(filters: ContentFilter = Depends(get_content_filter), session: Session = Depends(get_session)):
    return ContentService().list_items(session, filters)


@router.get("/{item_id}")
def get_item(item_id: str, session: Session = Depends(get_session)):
    return serialize_item(ContentService().get_item(session, item_id))
