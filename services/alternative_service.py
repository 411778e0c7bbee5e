"""
Alternative Recommender

Ranks comparable items for a target with the similarity scorer, persists
accepted suggestions as alternative edges, and records per-user votes on
those edges.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func

from config.config_loader import get_tunable
from models import AlternativeEdge, AlternativeVote, ContentItem, ItemStatus
from services.content_service import ContentService, serialize_item
from services.errors import ConflictError, InvalidOperationError, NotFoundError
from services.similarity_service import SimilarityInput, SimilarityWeights, feature_similarity, score
from services.transaction import run_atomic, storage_guard
from utils.logger import setup_logger

logger = setup_logger(__name__)


DEFAULT_SCORE_THRESHOLD = 0.3
DEFAULT_FEATURE_THRESHOLD = 0.3
DEFAULT_LIMIT = 5
DEFAULT_PREVIEW_PAGE_SIZE = 10


def rank_candidates(
    target: SimilarityInput,
    candidates: Iterable[Tuple[str, SimilarityInput]],
    threshold: float = DEFAULT_SCORE_THRESHOLD,
    limit: Optional[int] = DEFAULT_LIMIT,
    weights: Optional[SimilarityWeights] = None
) -> List[Tuple[str, float]]:
    """
    Score every candidate against the target and keep those at or above
    ``threshold``, best first. Equal scores keep their input order.
    ``limit=None`` returns every qualifying candidate.
    """
    if weights is None:
        weights = SimilarityWeights.from_config()

    scored = []
    for candidate_id, candidate in candidates:
        similarity = score(target, candidate, weights)
        if similarity < threshold:
            continue
        scored.append((candidate_id, similarity))

    ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


class AlternativeService:
    def __init__(self, content_service: Optional[ContentService] = None):
        self.content_service = content_service or ContentService()

    @staticmethod
    def _resolve_limit(limit: Optional[int], default: int) -> int:
        if limit is None:
            return default
        if limit < 1:
            raise InvalidOperationError(f"limit must be a positive integer, got {limit}")
        return limit

    def _find_edge(self, db_session: Session, source_id: str, alt_id: str) -> Optional[AlternativeEdge]:
        with storage_guard("find_alternative", source_id=source_id, alternative_id=alt_id):
            return db_session.exec(
                select(AlternativeEdge)
                .where(AlternativeEdge.source_item_id == source_id)
                .where(AlternativeEdge.alternative_item_id == alt_id)
            ).first()

    def _ranked(self, db_session: Session, target_id: str, limit: Optional[int]) -> List[Dict[str, Any]]:
        target = self.content_service.get_item(db_session, target_id)
        status = get_tunable("alternatives.candidate_status", ItemStatus.APPROVED.value)
        pool = self.content_service.candidate_pool(db_session, target, status=status)
        by_id = {item.id: item for item in pool}

        ranked = rank_candidates(
            SimilarityInput.from_item(target),
            ((item.id, SimilarityInput.from_item(item)) for item in pool),
            threshold=get_tunable("alternatives.score_threshold", DEFAULT_SCORE_THRESHOLD),
            limit=limit,
        )

        logger.debug(
            "Alternatives scored",
            extra={"target_id": target_id, "pool_size": len(pool), "qualifying": len(ranked)}
        )

        return [
            {"id": item_id, "name": by_id[item_id].name, "similarity_score": similarity}
            for item_id, similarity in ranked
        ]

    def suggest_alternatives(self, db_session: Session, target_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        limit = self._resolve_limit(limit, get_tunable("alternatives.default_limit", DEFAULT_LIMIT))
        return self._ranked(db_session, target_id, limit)

    def preview_alternatives(self, db_session: Session, target_id: str, page_size: Optional[int] = None) -> Dict[str, Any]:
        page_size = self._resolve_limit(
            page_size, get_tunable("alternatives.preview_page_size", DEFAULT_PREVIEW_PAGE_SIZE)
        )
        ranked = self._ranked(db_session, target_id, None)
        page = ranked[:page_size]

        return {
            "alternatives": page,
            "total": len(ranked),
            "remaining": len(ranked) - len(page),
            "has_more": len(ranked) > len(page),
        }

    def materialize_alternatives(self, db_session: Session, target_id: str, limit: Optional[int] = None) -> int:
        """Persist the top suggestions as auto-suggested edges. Returns how many edges were created."""
        suggestions = self.suggest_alternatives(db_session, target_id, limit)

        def persist() -> int:
            existing = set(db_session.exec(
                select(AlternativeEdge.alternative_item_id)
                .where(AlternativeEdge.source_item_id == target_id)
            ).all())

            created = 0
            for suggestion in suggestions:
                if suggestion["id"] in existing:
                    continue
                db_session.add(AlternativeEdge(
                    source_item_id=target_id,
                    alternative_item_id=suggestion["id"],
                    auto_suggested=True,
                    similarity_score=suggestion["similarity_score"],
                ))
                created += 1
            return created

        created = run_atomic(db_session, persist, "materialize_alternatives", target_id=target_id)

        logger.info(
            "Alternatives materialized",
            extra={"target_id": target_id, "suggested": len(suggestions), "edges_created": created}
        )

        return created

    def add_alternative(self, db_session: Session, source_id: str, alt_id: str) -> AlternativeEdge:
        if source_id == alt_id:
            raise InvalidOperationError("an item cannot be its own alternative")

        self.content_service.get_item(db_session, source_id)
        self.content_service.get_item(db_session, alt_id)

        if self._find_edge(db_session, source_id, alt_id):
            raise ConflictError(f"alternative already exists: {source_id} -> {alt_id}")

        edge = AlternativeEdge(source_item_id=source_id, alternative_item_id=alt_id, auto_suggested=False)
        db_session.add(edge)
        try:
            db_session.commit()
        except IntegrityError as exc:
            db_session.rollback()
            raise ConflictError(f"alternative already exists: {source_id} -> {alt_id}") from exc
        db_session.refresh(edge)

        logger.info("Alternative added", extra={"source_id": source_id, "alternative_id": alt_id})

        return edge

    def remove_alternative(self, db_session: Session, source_id: str, alt_id: str) -> bool:
        def delete() -> bool:
            edge = self._find_edge(db_session, source_id, alt_id)
            if edge is None:
                return False
            for vote in db_session.exec(select(AlternativeVote).where(AlternativeVote.edge_id == edge.id)).all():
                db_session.delete(vote)
            db_session.delete(edge)
            return True

        removed = run_atomic(db_session, delete, "remove_alternative", source_id=source_id, alternative_id=alt_id)

        logger.info(
            "Alternative removed" if removed else "Alternative already absent",
            extra={"source_id": source_id, "alternative_id": alt_id}
        )

        return removed

    def vote_alternative(self, db_session: Session, source_id: str, alt_id: str, user_id: str) -> Dict[str, Any]:
        """
        Toggle ``user_id``'s endorsement of one edge. The edge counter is
        recounted from its voter rows inside the same transaction.
        """
        if not user_id:
            raise InvalidOperationError("user_id is required")

        def toggle() -> Tuple[int, bool]:
            edge = self._find_edge(db_session, source_id, alt_id)
            if edge is None:
                raise NotFoundError(f"alternative not found: {source_id} -> {alt_id}")

            existing = db_session.exec(
                select(AlternativeVote)
                .where(AlternativeVote.edge_id == edge.id)
                .where(AlternativeVote.user_id == user_id)
            ).first()

            if existing:
                db_session.delete(existing)
            else:
                db_session.add(AlternativeVote(edge_id=edge.id, user_id=user_id))
            db_session.flush()

            edge.upvotes = db_session.exec(
                select(func.count()).select_from(AlternativeVote).where(AlternativeVote.edge_id == edge.id)
            ).one()
            db_session.add(edge)
            return edge.upvotes, existing is None

        upvotes, user_voted = run_atomic(
            db_session, toggle, "vote_alternative",
            source_id=source_id, alternative_id=alt_id, user_id=user_id
        )

        logger.info(
            "Alternative vote toggled",
            extra={
                "source_id": source_id,
                "alternative_id": alt_id,
                "user_id": user_id,
                "user_voted": user_voted,
                "upvotes": upvotes
            }
        )

        return {"upvotes": upvotes, "user_voted": user_voted}

    def list_alternatives(self, db_session: Session, source_id: str, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        self.content_service.get_item(db_session, source_id)

        with storage_guard("list_alternatives", source_id=source_id):
            rows = db_session.exec(
                select(AlternativeEdge, ContentItem)
                .join(ContentItem, ContentItem.id == AlternativeEdge.alternative_item_id)
                .where(AlternativeEdge.source_item_id == source_id)
                .order_by(AlternativeEdge.created_at, AlternativeEdge.id)
            ).all()

            voted_edges: Set[str] = set()
            if user_id and rows:
                voted_edges = set(db_session.exec(
                    select(AlternativeVote.edge_id)
                    .where(AlternativeVote.user_id == user_id)
                    .where(AlternativeVote.edge_id.in_([edge.id for edge, _ in rows]))
                ).all())

        results = [
            {
                **serialize_item(item),
                "upvotes": edge.upvotes,
                "auto_suggested": edge.auto_suggested,
                "similarity_score": edge.similarity_score,
                "user_voted": edge.id in voted_edges,
            }
            for edge, item in rows
        ]
        return sorted(results, key=lambda r: r["upvotes"], reverse=True)

    def suggest_by_features(self, db_session: Session, target_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Same-category items ranked by overlap of their feature lists."""
        limit = self._resolve_limit(limit, get_tunable("alternatives.default_limit", DEFAULT_LIMIT))
        threshold = get_tunable("alternatives.feature_threshold", DEFAULT_FEATURE_THRESHOLD)

        target = self.content_service.get_item(db_session, target_id)
        if target.category_id is None:
            return []

        status = get_tunable("alternatives.candidate_status", ItemStatus.APPROVED.value)
        scored = []
        for item in self.content_service.candidate_pool(db_session, target, status=status):
            if item.category_id != target.category_id or not item.features:
                continue
            similarity = feature_similarity(target.features or [], item.features)
            if similarity > threshold:
                scored.append((item, similarity))

        ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)[:limit]
        return [
            {"id": item.id, "name": item.name, "similarity_score": round(similarity, 2)}
            for item, similarity in ranked
        ]
