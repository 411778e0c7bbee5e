"""
Interaction ledger.

Stores the current bookmark and vote state of each user against any
content item. Rows are upserted or deleted by the toggle operations; the
table never holds history.
"""

from __future__ import annotations
from typing import Optional
from datetime import datetime
from enum import Enum
from uuid import uuid4
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Index, UniqueConstraint


class InteractionKind(str, Enum):
    BOOKMARK = "bookmark"
    VOTE = "vote"


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"

    @property
    def value_int(self) -> int:
        return 1 if self is VoteDirection.UP else -1

    @classmethod
    def from_value(cls, vote_value: Optional[int]) -> Optional["VoteDirection"]:
        if vote_value == 1:
            return cls.UP
        if vote_value == -1:
            return cls.DOWN
        return None


class InteractionRecord(SQLModel, table=True):
    __tablename__ = "interactions"
    __table_args__ = (
        UniqueConstraint("user_id", "item_type", "item_id", "kind", name="uq_interactions_user_item_kind"),
        CheckConstraint("vote_value IS NULL OR vote_value IN (1, -1)", name="ck_interactions_vote_value"),
        Index("ix_interactions_item_kind", "item_type", "item_id", "kind"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    item_type: str  # ItemType value
    item_id: str
    kind: str  # InteractionKind value
    vote_value: Optional[int] = None  # +1 / -1 for votes, None for bookmarks
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
