"""
Vote / Bookmark Service

Toggle semantics over the interactions ledger. Every call runs its
read-modify-write inside a single transaction; the unique constraint on
(user_id, item_type, item_id, kind) is the guard against concurrent
duplicate inserts.
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlmodel import Session, select, func

from models import ContentItem, InteractionRecord, InteractionKind, ItemType, VoteDirection
from services.errors import InvalidOperationError
from services.transaction import run_atomic, storage_guard
from utils.logger import setup_logger

logger = setup_logger(__name__)


def parse_item_type(item_type: Union[ItemType, str]) -> ItemType:
    try:
        return ItemType(item_type)
    except ValueError:
        raise InvalidOperationError(f"unknown item type: {item_type}") from None


def parse_direction(direction: Union[VoteDirection, str]) -> VoteDirection:
    try:
        return VoteDirection(direction)
    except ValueError:
        raise InvalidOperationError(f"invalid vote direction: {direction} (expected 'up' or 'down')") from None


class InteractionService:

    def _find(
        self,
        db_session: Session,
        user_id: str,
        item_type: ItemType,
        item_id: str,
        kind: InteractionKind
    ) -> Optional[InteractionRecord]:
        return db_session.exec(
            select(InteractionRecord)
            .where(InteractionRecord.user_id == user_id)
            .where(InteractionRecord.item_type == item_type.value)
            .where(InteractionRecord.item_id == item_id)
            .where(InteractionRecord.kind == kind.value)
        ).first()

    @staticmethod
    def _require(user_id: str, item_id: str) -> None:
        if not user_id:
            raise InvalidOperationError("user_id is required")
        if not item_id:
            raise InvalidOperationError("item_id is required")

    def toggle_bookmark(
        self,
        db_session: Session,
        user_id: str,
        item_type: Union[ItemType, str],
        item_id: str
    ) -> Dict[str, bool]:
        self._require(user_id, item_id)
        parsed_type = parse_item_type(item_type)

        def flip() -> bool:
            existing = self._find(db_session, user_id, parsed_type, item_id, InteractionKind.BOOKMARK)
            if existing:
                db_session.delete(existing)
                return False

            db_session.add(InteractionRecord(
                user_id=user_id,
                item_type=parsed_type.value,
                item_id=item_id,
                kind=InteractionKind.BOOKMARK.value,
            ))
            return True

        bookmarked = run_atomic(
            db_session, flip, "toggle_bookmark",
            user_id=user_id, item_type=parsed_type.value, item_id=item_id
        )

        logger.info(
            "Bookmark toggled",
            extra={
                "user_id": user_id,
                "item_type": parsed_type.value,
                "item_id": item_id,
                "bookmarked": bookmarked
            }
        )

        return {"bookmarked": bookmarked}

    def vote(
        self,
        db_session: Session,
        user_id: str,
        item_type: Union[ItemType, str],
        item_id: str,
        direction: Union[VoteDirection, str]
    ) -> Dict[str, Any]:
        """
        Apply one click of the up/down buttons.

        Clicking the direction already held clears the vote, clicking the
        other direction flips it in place, and clicking with no vote
        records it. Returns the caller's resulting vote and the item's
        totals counted from the ledger.
        """
        self._require(user_id, item_id)
        parsed_type = parse_item_type(item_type)
        parsed_direction = parse_direction(direction)
        vote_value = parsed_direction.value_int

        def transition() -> Optional[VoteDirection]:
            existing = self._find(db_session, user_id, parsed_type, item_id, InteractionKind.VOTE)

            if existing is None:
                db_session.add(InteractionRecord(
                    user_id=user_id,
                    item_type=parsed_type.value,
                    item_id=item_id,
                    kind=InteractionKind.VOTE.value,
                    vote_value=vote_value,
                ))
                return parsed_direction

            if existing.vote_value == vote_value:
                db_session.delete(existing)
                return None

            existing.vote_value = vote_value
            existing.updated_at = datetime.utcnow()
            db_session.add(existing)
            return parsed_direction

        user_vote = run_atomic(
            db_session, transition, "vote",
            user_id=user_id, item_type=parsed_type.value, item_id=item_id, direction=parsed_direction.value
        )

        counts = self.get_vote_counts(db_session, parsed_type, item_id)

        logger.info(
            "Vote applied",
            extra={
                "user_id": user_id,
                "item_type": parsed_type.value,
                "item_id": item_id,
                "direction": parsed_direction.value,
                "user_vote": user_vote.value if user_vote else None,
                **counts
            }
        )

        return {
            "user_vote": user_vote.value if user_vote else None,
            "upvotes": counts["upvotes"],
            "downvotes": counts["downvotes"],
        }

    def get_vote_counts(
        self,
        db_session: Session,
        item_type: Union[ItemType, str],
        item_id: str
    ) -> Dict[str, int]:
        parsed_type = parse_item_type(item_type)

        with storage_guard("get_vote_counts", item_type=parsed_type.value, item_id=item_id):
            rows = db_session.exec(
                select(InteractionRecord.vote_value, func.count())
                .where(InteractionRecord.item_type == parsed_type.value)
                .where(InteractionRecord.item_id == item_id)
                .where(InteractionRecord.kind == InteractionKind.VOTE.value)
                .group_by(InteractionRecord.vote_value)
            ).all()

        totals = {value: count for value, count in rows}
        return {"upvotes": totals.get(1, 0), "downvotes": totals.get(-1, 0)}

    def get_bookmark_count(
        self,
        db_session: Session,
        item_type: Union[ItemType, str],
        item_id: str
    ) -> int:
        parsed_type = parse_item_type(item_type)
        with storage_guard("get_bookmark_count", item_type=parsed_type.value, item_id=item_id):
            return db_session.exec(
                select(func.count())
                .select_from(InteractionRecord)
                .where(InteractionRecord.item_type == parsed_type.value)
                .where(InteractionRecord.item_id == item_id)
                .where(InteractionRecord.kind == InteractionKind.BOOKMARK.value)
            ).one()

    def get_user_interactions(
        self,
        db_session: Session,
        user_id: str,
        item_type: Union[ItemType, str],
        item_id: str
    ) -> Dict[str, Any]:
        """Bookmark and vote state of one user on one item."""
        parsed_type = parse_item_type(item_type)

        with storage_guard("get_user_interactions", user_id=user_id, item_type=parsed_type.value, item_id=item_id):
            bookmark = self._find(db_session, user_id, parsed_type, item_id, InteractionKind.BOOKMARK)
            vote = self._find(db_session, user_id, parsed_type, item_id, InteractionKind.VOTE)
        direction = VoteDirection.from_value(vote.vote_value) if vote else None

        return {
            "bookmarked": bookmark is not None,
            "user_vote": direction.value if direction else None,
        }

    def get_user_bookmarks(
        self,
        db_session: Session,
        user_id: str,
        item_type: Optional[Union[ItemType, str]] = None
    ) -> List[Dict[str, Any]]:
        statement = (
            select(InteractionRecord)
            .where(InteractionRecord.user_id == user_id)
            .where(InteractionRecord.kind == InteractionKind.BOOKMARK.value)
        )
        if item_type is not None:
            statement = statement.where(InteractionRecord.item_type == parse_item_type(item_type).value)

        items: Dict[tuple, ContentItem] = {}
        with storage_guard("get_user_bookmarks", user_id=user_id):
            bookmarks = db_session.exec(
                statement.order_by(InteractionRecord.created_at.desc())
            ).all()

            item_ids = {b.item_id for b in bookmarks}
            if item_ids:
                for item in db_session.exec(select(ContentItem).where(ContentItem.id.in_(item_ids))).all():
                    items[(item.item_type, item.id)] = item

        results = []
        for bookmark in bookmarks:
            item = items.get((bookmark.item_type, bookmark.item_id))
            results.append({
                "item_type": bookmark.item_type,
                "item_id": bookmark.item_id,
                "created_at": bookmark.created_at.isoformat(),
                "item": {
                    "id": item.id,
                    "name": item.name,
                    "short_description": item.short_description,
                    "upvotes": item.upvotes,
                    "rating": item.rating,
                } if item else None,
            })

        return results
