from .content import ContentItem, ItemType, ItemStatus
from .interaction import InteractionRecord, InteractionKind, VoteDirection
from .alternative import AlternativeEdge, AlternativeVote
