"""
Watchlist API: CRUD lifecycle, ownership and uniqueness
"""
from datetime import datetime

from watchtrack.models.user import User
from watchtrack.models.watch_item import WatchItem


def create(client, headers, **fields):
    payload = {"title": "Dune", "type": "movie", "status": "want-to-watch"}
    payload.update(fields)
    return client.post("/api/watchlist", json=payload, headers=headers)


# ============================================
# Create
# ============================================

def test_create_returns_201_with_generated_id(client, alice_headers, alice_id):
    response = create(client, alice_headers)

    assert response.status_code == 201
    body = response.json()
    assert isinstance(body["id"], int)
    assert body["title"] == "Dune"
    assert body["type"] == "movie"
    assert body["status"] == "want-to-watch"
    assert body["userId"] == alice_id
    assert body["createdAt"] and body["updatedAt"]


def test_create_ignores_client_supplied_user_id(client, alice_headers, alice_id, bob_id):
    response = create(client, alice_headers, userId=bob_id, user_id=bob_id)

    assert response.status_code == 201
    assert response.json()["userId"] == alice_id


def test_create_lazily_creates_user_row(client, db_session, alice_headers, alice_id):
    assert db_session.get(User, alice_id) is None

    create(client, alice_headers)

    db_session.expire_all()
    user = db_session.get(User, alice_id)
    assert user is not None
    assert user.email == "alice@example.com"
    assert user.role == "user"


def test_create_missing_required_fields_is_400(client, alice_headers):
    response = client.post("/api/watchlist", json={"title": "Dune"}, headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_create_rejects_unknown_status(client, alice_headers):
    response = create(client, alice_headers, status="plan_to_watch")

    assert response.status_code == 400


def test_create_rejects_script_in_title(client, alice_headers):
    response = create(client, alice_headers, title="<script>alert(1)</script>")

    assert response.status_code == 400


def test_create_requires_authentication(client):
    response = create(client, {})

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_create_with_invalid_token_is_401(client):
    response = create(client, {"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_session_cookie_authenticates(client, alice_headers, alice_id):
    token = alice_headers["Authorization"].split(" ", 1)[1]
    client.cookies.set("sb-access-token", token)

    response = create(client, {})

    assert response.status_code == 201
    assert response.json()["userId"] == alice_id


def test_duplicate_tmdb_id_is_409_and_not_inserted(client, db_session, alice_headers):
    first = create(client, alice_headers, tmdbId=438631)
    second = create(client, alice_headers, title="Dune (again)", tmdbId=438631)

    assert first.status_code == 201
    assert second.status_code == 409
    assert "error" in second.json()
    db_session.expire_all()
    assert db_session.query(WatchItem).filter(WatchItem.tmdb_id == 438631).count() == 1


def test_same_tmdb_id_allowed_for_different_users(client, alice_headers, bob_headers):
    assert create(client, alice_headers, tmdbId=438631).status_code == 201
    assert create(client, bob_headers, tmdbId=438631).status_code == 201


def test_items_without_tmdb_id_are_never_duplicates(client, alice_headers):
    assert create(client, alice_headers).status_code == 201
    assert create(client, alice_headers).status_code == 201


def test_round_trip_returns_submitted_fields(client, alice_headers, alice_id):
    payload = {
        "title": "Severance",
        "type": "show",
        "status": "watching",
        "currentSeason": 2,
        "totalSeasons": 2,
        "notes": "Watch with subtitles",
        "rating": "loved",
        "tmdbId": 95396,
        "tmdbPosterPath": "/poster.jpg",
        "tmdbOverview": "Office workers with severed memories.",
        "tmdbTagline": None,
        "tmdbImdbId": "tt11280740",
        "tmdbTvFirstAirYear": 2022,
        "tmdbTvLastAirYear": 2025,
        "tmdbTvNetworks": "Apple TV+",
        "tmdbTvNumberOfEpisodes": 19,
        "tmdbTvNumberOfSeasons": 2,
        "tmdbTvStatus": "Returning Series",
        "tmdbTvCertification": "TV-MA",
    }
    created = client.post("/api/watchlist", json=payload, headers=alice_headers)
    assert created.status_code == 201

    listed = client.get("/api/watchlist", headers=alice_headers).json()

    assert len(listed) == 1
    row = listed[0]
    for key, value in payload.items():
        assert row[key] == value, key
    assert row["id"] == created.json()["id"]
    assert row["userId"] == alice_id
    assert row["createdAt"] and row["updatedAt"]


# ============================================
# List
# ============================================

def test_list_is_scoped_to_caller_and_newest_first(client, alice_headers, bob_headers):
    create(client, alice_headers, title="Arrival")
    dune = create(client, alice_headers, title="Dune").json()
    create(client, bob_headers, title="Heat")

    listed = client.get("/api/watchlist", headers=alice_headers).json()

    assert [item["title"] for item in listed] == ["Dune", "Arrival"]
    assert listed[0]["id"] == dune["id"]


def test_list_single_item_by_id(client, alice_headers):
    dune = create(client, alice_headers).json()

    response = client.get("/api/watchlist", params={"id": dune["id"]}, headers=alice_headers)

    assert response.status_code == 200
    assert response.json()["id"] == dune["id"]


def test_list_single_foreign_item_is_404(client, alice_headers, bob_headers):
    dune = create(client, alice_headers).json()

    response = client.get("/api/watchlist", params={"id": dune["id"]}, headers=bob_headers)

    assert response.status_code == 404


def test_list_with_invalid_id_is_400(client, alice_headers):
    response = client.get("/api/watchlist", params={"id": "abc"}, headers=alice_headers)

    assert response.status_code == 400


# ============================================
# Update
# ============================================

def test_partial_update_changes_only_sent_fields(client, alice_headers):
    dune = create(client, alice_headers, notes="IMAX if possible").json()

    response = client.put(
        "/api/watchlist",
        json={"id": dune["id"], "status": "finished"},
        headers=alice_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "finished"
    assert body["title"] == "Dune"
    assert body["notes"] == "IMAX if possible"
    assert datetime.fromisoformat(body["updatedAt"]) > datetime.fromisoformat(dune["updatedAt"])
    assert body["createdAt"] == dune["createdAt"]


def test_update_moves_item_to_front_of_list(client, alice_headers):
    arrival = create(client, alice_headers, title="Arrival").json()
    create(client, alice_headers, title="Dune")

    client.put("/api/watchlist", json={"id": arrival["id"], "status": "watching"}, headers=alice_headers)
    listed = client.get("/api/watchlist", headers=alice_headers).json()

    assert listed[0]["title"] == "Arrival"


def test_update_can_clear_optional_fields(client, alice_headers):
    show = create(client, alice_headers, type="show", currentSeason=1, totalSeasons=3).json()

    body = client.put(
        "/api/watchlist",
        json={"id": show["id"], "currentSeason": None},
        headers=alice_headers
    ).json()

    assert body["currentSeason"] is None
    assert body["totalSeasons"] == 3


def test_update_rejects_null_required_field(client, alice_headers):
    dune = create(client, alice_headers).json()

    response = client.put("/api/watchlist", json={"id": dune["id"], "title": None}, headers=alice_headers)

    assert response.status_code == 400


def test_update_foreign_item_is_404_and_row_unchanged(client, db_session, alice_headers, bob_headers):
    dune = create(client, alice_headers).json()

    response = client.put(
        "/api/watchlist",
        json={"id": dune["id"], "title": "Hijacked"},
        headers=bob_headers
    )

    assert response.status_code == 404
    db_session.expire_all()
    assert db_session.get(WatchItem, dune["id"]).title == "Dune"


def test_update_missing_item_matches_foreign_item_response(client, alice_headers, bob_headers):
    dune = create(client, alice_headers).json()

    foreign = client.put("/api/watchlist", json={"id": dune["id"], "status": "watching"}, headers=bob_headers)
    missing = client.put("/api/watchlist", json={"id": 99999, "status": "watching"}, headers=bob_headers)

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


def test_update_to_duplicate_tmdb_id_is_409(client, alice_headers):
    create(client, alice_headers, tmdbId=1)
    other = create(client, alice_headers, title="Other", tmdbId=2).json()

    response = client.put("/api/watchlist", json={"id": other["id"], "tmdbId": 1}, headers=alice_headers)

    assert response.status_code == 409


def test_update_without_id_is_400(client, alice_headers):
    response = client.put("/api/watchlist", json={"status": "watching"}, headers=alice_headers)

    assert response.status_code == 400


def test_any_status_transition_is_allowed(client, alice_headers):
    dune = create(client, alice_headers, status="finished").json()

    for status in ["want-to-watch", "dropped", "watching", "finished"]:
        response = client.put("/api/watchlist", json={"id": dune["id"], "status": status}, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["status"] == status


# ============================================
# Delete
# ============================================

def test_delete_removes_owned_item(client, alice_headers):
    dune = create(client, alice_headers).json()

    response = client.delete("/api/watchlist", params={"id": dune["id"]}, headers=alice_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/api/watchlist", headers=alice_headers).json() == []


def test_delete_by_other_user_is_404_and_item_survives(client, alice_headers, bob_headers):
    dune = create(client, alice_headers).json()

    response = client.delete("/api/watchlist", params={"id": dune["id"]}, headers=bob_headers)

    assert response.status_code == 404
    listed = client.get("/api/watchlist", headers=alice_headers).json()
    assert [item["id"] for item in listed] == [dune["id"]]


def test_delete_twice_reports_not_found(client, alice_headers):
    dune = create(client, alice_headers).json()

    client.delete("/api/watchlist", params={"id": dune["id"]}, headers=alice_headers)
    again = client.delete("/api/watchlist", params={"id": dune["id"]}, headers=alice_headers)

    assert again.status_code == 404


def test_delete_without_id_is_400(client, alice_headers):
    response = client.delete("/api/watchlist", headers=alice_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Missing item ID"


def test_notes_are_sanitized(client, alice_headers):
    body = create(client, alice_headers, notes="<b>great</b> <img src=x>").json()

    assert body["notes"] == "<b>great</b> "


def test_plain_text_notes_round_trip_unchanged(client, alice_headers):
    notes = "Tom & Jerry, 5 < 6 > 4"

    created = create(client, alice_headers, notes=notes)
    listed = client.get("/api/watchlist", headers=alice_headers).json()

    assert created.status_code == 201
    assert created.json()["notes"] == notes
    assert listed[0]["notes"] == notes


def test_event_handler_inside_tag_is_rejected(client, alice_headers):
    response = create(client, alice_headers, notes='<img src=x onerror="alert(1)">')

    assert response.status_code == 400


def test_free_text_with_on_equals_is_accepted(client, alice_headers):
    response = create(client, alice_headers, title="Monday=Funday", notes="Season one=great")

    assert response.status_code == 201
    assert response.json()["title"] == "Monday=Funday"
    assert response.json()["notes"] == "Season one=great"
