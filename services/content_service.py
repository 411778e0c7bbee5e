from __future__ import annotations
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from sqlmodel import Session, select, func

from models import ContentItem, ItemStatus, ItemType
from models.query import ContentFilter, ContentItemCreate, SortField
from services.errors import ConflictError, NotFoundError
from services.transaction import run_atomic, storage_guard
from utils.logger import setup_logger

logger = setup_logger(__name__)


_ORDERING = {
    SortField.UPVOTES: (ContentItem.upvotes.desc(), ContentItem.created_at.desc()),
    SortField.RATING: (ContentItem.rating.desc(), ContentItem.created_at.desc()),
    SortField.NEWEST: (ContentItem.created_at.desc(),),
    SortField.NAME: (ContentItem.name.asc(),),
}


def serialize_item(item: ContentItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "item_type": item.item_type,
        "name": item.name,
        "short_description": item.short_description,
        "category_id": item.category_id,
        "pricing_type": item.pricing_type,
        "rating": item.rating,
        "upvotes": item.upvotes,
        "views": item.views,
        "status": item.status,
        "features": list(item.features or []),
    }


class ContentService:
    def create_item(self, db_session: Session, payload: ContentItemCreate) -> ContentItem:
        values = payload.model_dump(exclude_none=True)
        values["item_type"] = payload.item_type.value
        values["status"] = payload.status.value

        item = ContentItem(**values)
        db_session.add(item)
        try:
            db_session.commit()
        except IntegrityError as exc:
            db_session.rollback()
            raise ConflictError(f"item already exists: {payload.id}") from exc
        db_session.refresh(item)

        logger.info(
            "Content item created",
            extra={"item_id": item.id, "item_type": item.item_type, "status": item.status}
        )

        return item

    def get_item(self, db_session: Session, item_id: str, item_type: Optional[ItemType] = None) -> ContentItem:
        with storage_guard("get_item", item_id=item_id):
            item = db_session.get(ContentItem, item_id)
        if item is None or (item_type is not None and item.item_type != item_type.value):
            raise NotFoundError(f"item not found: {item_id}")
        return item

    def list_items(self, db_session: Session, filters: ContentFilter) -> Dict[str, Any]:
        statement = select(ContentItem)
        count_statement = select(func.count()).select_from(ContentItem)

        conditions = []
        if filters.item_type is not None:
            conditions.append(ContentItem.item_type == filters.item_type.value)
        if filters.status is not None:
            conditions.append(ContentItem.status == filters.status.value)
        if filters.category_id is not None:
            conditions.append(ContentItem.category_id == filters.category_id)
        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            conditions.append(or_(
                func.lower(ContentItem.name).like(pattern),
                func.lower(ContentItem.short_description).like(pattern),
            ))

        for condition in conditions:
            statement = statement.where(condition)
            count_statement = count_statement.where(condition)

        with storage_guard("list_items"):
            total = db_session.exec(count_statement).one()
            items = db_session.exec(
                statement
                .order_by(*_ORDERING[filters.sort])
                .offset(filters.offset)
                .limit(filters.limit)
            ).all()

        return {"items": [serialize_item(i) for i in items], "total": total}

    def candidate_pool(self, db_session: Session, target: ContentItem, status: str = ItemStatus.APPROVED.value) -> List[ContentItem]:
        """Items of the target's type and given status, excluding the target, in creation order."""
        with storage_guard("candidate_pool", target_id=target.id):
            return list(db_session.exec(
                select(ContentItem)
                .where(ContentItem.item_type == target.item_type)
                .where(ContentItem.status == status)
                .where(ContentItem.id != target.id)
                .order_by(ContentItem.created_at, ContentItem.id)
            ).all())

    def set_upvote_count(self, db_session: Session, item_type: ItemType, item_id: str, upvotes: int) -> bool:
        """Copy a recomputed vote total onto the item row. Returns False when the item is unknown."""
        def write() -> bool:
            item = db_session.get(ContentItem, item_id)
            if item is None or item.item_type != item_type.value:
                return False
            item.upvotes = upvotes
            db_session.add(item)
            return True

        return run_atomic(db_session, write, "set_upvote_count", item_id=item_id)
