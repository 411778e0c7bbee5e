import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from config.database import get_session
from main import app

USER = {"X-User-Id": "user-1"}


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_tool(client, item_id, **overrides):
    payload = {
        "id": item_id,
        "item_type": "tool",
        "name": overrides.pop("name", item_id),
        "category_id": "design",
        "pricing_type": "freemium",
        "rating": 4.0,
        "status": "approved",
    }
    payload.update(overrides)
    response = client.post("/api/v1/items", json=payload)
    assert response.status_code == 201
    return response.json()


def test_health_endpoints(client):
    assert client.get("/api/v1/health").json()["status"] == "healthy"
    ready = client.get("/api/v1/health/ready").json()
    assert ready["ready"] is True
    assert ready["checks"]["config"]["status"] == "loaded"


def test_correlation_id_is_echoed(client):
    response = client.get("/api/v1/health/live", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert "X-Request-Duration-Ms" in response.headers


def test_vote_cycle_and_upvote_writeback(client):
    create_tool(client, "t1")

    first = client.post("/api/v1/interactions/tool/t1/vote", json={"direction": "up"}, headers=USER)
    assert first.json() == {"user_vote": "up", "upvotes": 1, "downvotes": 0}
    assert client.get("/api/v1/items/t1").json()["upvotes"] == 1

    second = client.post("/api/v1/interactions/tool/t1/vote", json={"direction": "up"}, headers=USER)
    assert second.json() == {"user_vote": None, "upvotes": 0, "downvotes": 0}
    assert client.get("/api/v1/items/t1").json()["upvotes"] == 0


def test_vote_requires_user_header(client):
    response = client.post("/api/v1/interactions/tool/t1/vote", json={"direction": "up"})

    assert response.status_code == 401


def test_vote_rejects_unknown_direction(client):
    response = client.post("/api/v1/interactions/tool/t1/vote", json={"direction": "left"}, headers=USER)

    assert response.status_code == 422


def test_unknown_item_type_in_path_is_rejected(client):
    response = client.post("/api/v1/interactions/podcast/p1/bookmark", headers=USER)

    assert response.status_code == 422


def test_bookmark_toggle_and_listing(client):
    create_tool(client, "t2", name="Bookmarked Tool")

    assert client.post("/api/v1/interactions/tool/t2/bookmark", headers=USER).json() == {"bookmarked": True}
    assert client.get("/api/v1/interactions/tool/t2/bookmark-count").json() == {"count": 1}

    listing = client.get("/api/v1/users/me/bookmarks", headers=USER).json()
    assert listing["count"] == 1
    assert listing["bookmarks"][0]["item"]["name"] == "Bookmarked Tool"

    me = client.get("/api/v1/interactions/tool/t2/me", headers=USER).json()
    assert me == {"bookmarked": True, "user_vote": None}

    assert client.post("/api/v1/interactions/tool/t2/bookmark", headers=USER).json() == {"bookmarked": False}


def test_alternative_curation_flow(client):
    create_tool(client, "src", name="Source")
    create_tool(client, "alt", name="Alternative")

    self_ref = client.post("/api/v1/tools/src/alternatives", json={"alternative_id": "src"}, headers=USER)
    assert self_ref.status_code == 400
    assert self_ref.json()["error"] == "invalid_operation"

    assert client.post("/api/v1/tools/src/alternatives", json={"alternative_id": "alt"}, headers=USER).status_code == 201
    duplicate = client.post("/api/v1/tools/src/alternatives", json={"alternative_id": "alt"}, headers=USER)
    assert duplicate.status_code == 409

    voted = client.post("/api/v1/tools/src/alternatives/alt/vote", headers=USER).json()
    assert voted == {"upvotes": 1, "user_voted": True}

    listed = client.get("/api/v1/tools/src/alternatives", headers=USER).json()
    assert listed[0]["id"] == "alt"
    assert listed[0]["user_voted"] is True

    assert client.delete("/api/v1/tools/src/alternatives/alt", headers=USER).json()["removed"] is True
    assert client.delete("/api/v1/tools/src/alternatives/alt", headers=USER).status_code == 200

    missing = client.post("/api/v1/tools/src/alternatives/alt/vote", headers=USER)
    assert missing.status_code == 404


def test_auto_alternatives_preview_and_materialize(client):
    create_tool(client, "base")
    create_tool(client, "peer-a")
    create_tool(client, "peer-b")
    create_tool(client, "unrelated", category_id="finance", pricing_type="paid", rating=1.0)

    suggested = client.get("/api/v1/tools/base/auto-alternatives").json()
    assert [s["id"] for s in suggested] == ["peer-a", "peer-b"]

    preview = client.get("/api/v1/tools/base/auto-alternatives/preview?page_size=1").json()
    assert preview["remaining"] == 1
    assert preview["has_more"] is True

    assert client.post("/api/v1/tools/base/auto-alternatives/materialize", headers=USER).json() == {"created": 2}
    assert client.post("/api/v1/tools/base/auto-alternatives/materialize", headers=USER).json() == {"created": 0}


def test_auto_alternatives_for_unknown_tool_is_404(client):
    response = client.get("/api/v1/tools/missing/auto-alternatives")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_item_listing_filter_validation(client):
    create_tool(client, "list-a", rating=4.9)
    create_tool(client, "list-b", rating=3.0)

    by_rating = client.get("/api/v1/items?item_type=tool&sort=rating").json()
    assert [i["id"] for i in by_rating["items"]] == ["list-a", "list-b"]
    assert by_rating["total"] == 2

    assert client.get("/api/v1/items?sort=popularity").status_code == 422
    assert client.get("/api/v1/items?limit=0").status_code == 422


def test_duplicate_item_id_conflicts(client):
    create_tool(client, "dup")
    response = client.post("/api/v1/items", json={"id": "dup", "item_type": "tool", "name": "Again"})

    assert response.status_code == 409
