import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from models import AlternativeEdge, AlternativeVote, ItemStatus, ItemType
from services.alternative_service import AlternativeService
from services.errors import ConflictError, InvalidOperationError, NotFoundError, StorageError


@pytest.fixture
def catalog(make_item):
    make_item("target", name="Canvas", short_description="quick layout maker for mobile teams now", rating=4.0)
    make_item("close", name="Sketchy", short_description="layout helper with mobile export", rating=4.5)
    make_item("same-cat", name="Palette", short_description="colour picker", pricing_type="paid", rating=2.0)
    make_item("weak", name="Ledger", short_description="accounting", category_id="finance", pricing_type="paid", rating=1.0)
    make_item("pending", name="Draft", short_description="layout maker", status=ItemStatus.PENDING)
    make_item("a-prompt", name="Layout prompt", item_type=ItemType.PROMPT)


def test_suggestions_are_ranked_and_thresholded(session, catalog):
    suggestions = AlternativeService().suggest_alternatives(session, "target")

    assert [s["id"] for s in suggestions] == ["close", "same-cat"]
    assert suggestions[0]["similarity_score"] == 0.78
    assert suggestions[1]["similarity_score"] == 0.4
    assert all(s["similarity_score"] >= 0.3 for s in suggestions)


def test_suggestions_skip_target_pending_and_other_types(session, catalog):
    ids = {s["id"] for s in AlternativeService().suggest_alternatives(session, "target", limit=50)}

    assert "target" not in ids
    assert "pending" not in ids
    assert "a-prompt" not in ids


def test_suggest_respects_limit(session, catalog):
    assert len(AlternativeService().suggest_alternatives(session, "target", limit=1)) == 1


def test_suggest_for_missing_target_raises_not_found(session):
    with pytest.raises(NotFoundError):
        AlternativeService().suggest_alternatives(session, "nope")


def test_non_positive_limit_is_rejected(session, catalog):
    with pytest.raises(InvalidOperationError):
        AlternativeService().suggest_alternatives(session, "target", limit=0)


def test_preview_reports_remaining(session, make_item):
    make_item("hub", name="Hub")
    for i in range(13):
        make_item(f"peer-{i}", name=f"Peer {i}")

    preview = AlternativeService().preview_alternatives(session, "hub")

    assert len(preview["alternatives"]) == 10
    assert preview["total"] == 13
    assert preview["remaining"] == 3
    assert preview["has_more"] is True


def test_materialize_is_idempotent(session, catalog):
    service = AlternativeService()

    assert service.materialize_alternatives(session, "target") == 2
    assert service.materialize_alternatives(session, "target") == 0

    edges = session.exec(select(AlternativeEdge).where(AlternativeEdge.source_item_id == "target")).all()
    assert sorted(e.alternative_item_id for e in edges) == ["close", "same-cat"]
    assert all(e.auto_suggested for e in edges)


def test_materialize_keeps_manual_edges(session, catalog):
    service = AlternativeService()
    service.add_alternative(session, "target", "close")

    assert service.materialize_alternatives(session, "target") == 1

    manual = session.exec(
        select(AlternativeEdge).where(AlternativeEdge.alternative_item_id == "close")
    ).one()
    assert manual.auto_suggested is False


def test_self_alternative_is_invalid(session, catalog):
    with pytest.raises(InvalidOperationError):
        AlternativeService().add_alternative(session, "target", "target")


def test_duplicate_alternative_conflicts(session, catalog):
    service = AlternativeService()
    service.add_alternative(session, "target", "weak")

    with pytest.raises(ConflictError):
        service.add_alternative(session, "target", "weak")


def test_add_alternative_requires_existing_items(session, catalog):
    with pytest.raises(NotFoundError):
        AlternativeService().add_alternative(session, "target", "ghost")


def test_remove_alternative_is_idempotent(session, catalog):
    service = AlternativeService()
    service.add_alternative(session, "target", "weak")
    service.vote_alternative(session, "target", "weak", "u1")

    assert service.remove_alternative(session, "target", "weak") is True
    assert service.remove_alternative(session, "target", "weak") is False
    assert session.exec(select(AlternativeVote)).all() == []


def test_vote_alternative_toggles_per_user(session, catalog):
    service = AlternativeService()
    service.add_alternative(session, "target", "close")

    assert service.vote_alternative(session, "target", "close", "u1") == {"upvotes": 1, "user_voted": True}
    assert service.vote_alternative(session, "target", "close", "u2") == {"upvotes": 2, "user_voted": True}
    assert service.vote_alternative(session, "target", "close", "u1") == {"upvotes": 1, "user_voted": False}


def test_vote_on_missing_edge_raises_not_found(session, catalog):
    with pytest.raises(NotFoundError):
        AlternativeService().vote_alternative(session, "target", "close", "u1")


def test_list_alternatives_orders_by_votes_and_marks_caller(session, catalog):
    service = AlternativeService()
    service.add_alternative(session, "target", "weak")
    service.add_alternative(session, "target", "close")
    service.vote_alternative(session, "target", "close", "u1")

    listed = service.list_alternatives(session, "target", user_id="u1")

    assert [a["id"] for a in listed] == ["close", "weak"]
    assert listed[0]["user_voted"] is True
    assert listed[0]["upvotes"] == 1
    assert listed[1]["user_voted"] is False


def test_suggest_by_features_uses_jaccard_within_category(session, make_item):
    make_item("f-target", features=["chat", "search", "voice"])
    make_item("f-good", features=["chat", "search", "images"])
    make_item("f-poor", features=["chat", "video", "music", "maps"])
    make_item("f-other-cat", category_id="audio", features=["chat", "search", "voice"])
    make_item("f-none")

    suggestions = AlternativeService().suggest_by_features(session, "f-target")

    assert suggestions == [{"id": "f-good", "name": "Item", "similarity_score": 0.5}]


def test_unpriced_uncategorised_tools_still_qualify(session, make_item):
    make_item("bare-a", name="Alpha", category_id=None, pricing_type=None, rating=4.0)
    make_item("bare-b", name="Beta", category_id=None, pricing_type=None, rating=4.5)

    suggestions = AlternativeService().suggest_alternatives(session, "bare-a")

    assert suggestions == [{"id": "bare-b", "name": "Beta", "similarity_score": 0.3}]


def test_suggest_by_features_orders_on_unrounded_overlap(session, make_item):
    shared = [f"f{i}" for i in range(8)]
    make_item("r-target", features=shared)
    # 7/16 and 4/9 both round to 0.44
    make_item("r-lower", features=shared[:7] + [f"x{i}" for i in range(8)])
    make_item("r-higher", features=shared[:4] + ["y0"])

    suggestions = AlternativeService().suggest_by_features(session, "r-target")

    assert [s["id"] for s in suggestions] == ["r-higher", "r-lower"]
    assert [s["similarity_score"] for s in suggestions] == [0.44, 0.44]


def test_list_alternatives_surfaces_storage_error(session, catalog, monkeypatch):
    def broken_exec(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "exec", broken_exec)

    with pytest.raises(StorageError):
        AlternativeService().list_alternatives(session, "target")
