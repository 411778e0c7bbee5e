from __future__ import annotations
from typing import Optional
from datetime import datetime
from uuid import uuid4
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Column, ForeignKey, String, UniqueConstraint


class AlternativeEdge(SQLModel, table=True):
    __tablename__ = "alternative_edges"
    __table_args__ = (
        UniqueConstraint("source_item_id", "alternative_item_id", name="uq_alternative_edges_pair"),
        CheckConstraint("source_item_id <> alternative_item_id", name="ck_alternative_edges_not_self"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    source_item_id: str = Field(index=True)
    alternative_item_id: str = Field(index=True)
    auto_suggested: bool = False
    similarity_score: Optional[float] = None
    upvotes: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AlternativeVote(SQLModel, table=True):
    """One endorsement of an alternative edge by one user."""
    __tablename__ = "alternative_votes"
    __table_args__ = (
        UniqueConstraint("edge_id", "user_id", name="uq_alternative_votes_edge_user"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    edge_id: str = Field(
        sa_column=Column(String, ForeignKey("alternative_edges.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    user_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
