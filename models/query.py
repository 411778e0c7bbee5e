from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from .content import ItemType, ItemStatus


class SortField(str, Enum):
    UPVOTES = "upvotes"
    RATING = "rating"
    NEWEST = "newest"
    NAME = "name"


class ContentFilter(BaseModel):
    model_config = ConfigDict(extra="forbid")

    item_type: Optional[ItemType] = None
    status: Optional[ItemStatus] = None
    category_id: Optional[str] = None
    search: Optional[str] = Field(None, max_length=200, description="Substring match on name and short description")
    sort: SortField = SortField.UPVOTES
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class ContentItemCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(None, min_length=1, max_length=64)
    item_type: ItemType
    name: str = Field(..., min_length=1, max_length=200)
    short_description: str = ""
    category_id: Optional[str] = None
    pricing_type: Optional[str] = None
    rating: float = Field(0.0, ge=0, le=5)
    status: ItemStatus = ItemStatus.PENDING
    features: List[str] = Field(default_factory=list)
