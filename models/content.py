from __future__ import annotations
from typing import List, Optional
from datetime import datetime
from enum import Enum
from uuid import uuid4
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, Index


class ItemType(str, Enum):
    TOOL = "tool"
    PROMPT = "prompt"
    COURSE = "course"
    JOB = "job"
    POST = "post"
    MODEL = "model"


class ItemStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def new_id() -> str:
    return str(uuid4())


class ContentItem(SQLModel, table=True):
    """
    One row per directory entry (tool, prompt, course, job, post, model).

    ``upvotes`` is a denormalized display counter written back by the HTTP
    layer after a vote; vote totals themselves are always counted from the
    interactions ledger.
    """
    __tablename__ = "content_items"
    __table_args__ = (
        Index("ix_content_items_type_status", "item_type", "status"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    item_type: str = Field(index=True)  # ItemType value
    name: str
    short_description: str = ""
    category_id: Optional[str] = Field(default=None, index=True)
    pricing_type: Optional[str] = None
    rating: float = 0.0
    upvotes: int = 0
    views: int = 0
    status: str = ItemStatus.PENDING.value
    features: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
