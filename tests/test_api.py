from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.config import CURRENT_XP_VERSION, START_BONUS
from app.llm.client import UNCONFIGURED_FALLBACK
from app.services.ledger_service import LedgerService
from app.services.xp_calculator import closed_contribution
from app.utils.dates import utcnow


def _today():
    return utcnow().date()


def _days_ago(days):
    return (_today() - timedelta(days=days)).isoformat()


# ============================================================================
# Service endpoints
# ============================================================================

def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Streaker API"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert "database_pool" in health


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


# ============================================================================
# Users
# ============================================================================

def test_get_me(client):
    body = client.get("/users/me").json()

    assert body["id"] == "user-1"
    assert body["total_xp"] == 0
    assert body["level"] == 1
    assert body["xp_version"] == CURRENT_XP_VERSION


def test_get_me_schedules_migration_for_stale_ledger(client, db, user):
    LedgerService(db).record_past_streak(user.id, _today() - timedelta(days=10), _today() - timedelta(days=3))
    user.total_xp = 1
    user.xp_version = None
    db.commit()

    response = client.get("/users/me")

    assert response.status_code == 200
    db.refresh(user)
    assert user.xp_version == CURRENT_XP_VERSION
    assert user.total_xp == closed_contribution(7)


def test_update_me(client):
    response = client.patch("/users/me", json={"display_name": "  Ada  ", "timezone": "Europe/Berlin"})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Ada"
    assert response.json()["timezone"] == "Europe/Berlin"


def test_update_me_rejects_unknown_timezone(client):
    assert client.patch("/users/me", json={"timezone": "Mars/Olympus"}).status_code == 422


def test_set_goal(client):
    response = client.put("/users/me/goal", json={"target_streak": 30})
    assert response.status_code == 200
    assert response.json()["target_streak"] == 30

    assert client.put("/users/me/goal", json={"target_streak": -1}).status_code == 422
    assert client.put("/users/me/goal", json={"target_streak": "thirty"}).status_code == 422


def test_export(client):
    client.post("/streaks/start")
    client.post("/journal", json={"mood": 4, "note": "Good day"})

    body = client.get("/users/me/export").json()

    assert body["profile"]["id"] == "user-1"
    assert len(body["streaks"]) == 1
    assert body["journal_entries"][0]["note"] == "Good day"
    assert body["app_name"] == "Streaker"
    assert "export_date" in body


# ============================================================================
# Streak lifecycle
# ============================================================================

def test_start_and_relapse(client):
    started = client.post("/streaks/start")
    assert started.status_code == 201
    assert started.json()["xp_delta"] == START_BONUS
    assert started.json()["total_xp"] == START_BONUS

    assert client.post("/streaks/start").status_code == 409

    active = client.get("/streaks/active").json()
    assert active["streak"]["is_active"]
    assert active["live"]["days"] == 0
    assert active["live"]["xp"] == START_BONUS

    relapsed = client.post("/streaks/relapse", json={"reason": "Boredom", "notes": "rainy day"})
    assert relapsed.status_code == 200
    assert relapsed.json()["xp_delta"] == 0
    assert relapsed.json()["streak"]["relapse_reason"] == "Boredom"

    assert client.post("/streaks/relapse", json={}).status_code == 409


def test_relapse_with_unknown_reason(client):
    client.post("/streaks/start")
    assert client.post("/streaks/relapse", json={"reason": "Because"}).status_code == 400


def test_past_streak_and_delete(client):
    created = client.post("/streaks/past", json={"start_date": _days_ago(10), "end_date": _days_ago(3)})
    assert created.status_code == 201
    assert created.json()["xp_delta"] == closed_contribution(7)
    streak_id = created.json()["streak"]["id"]

    overlap = client.post("/streaks/past", json={"start_date": _days_ago(5), "end_date": _days_ago(1)})
    assert overlap.status_code == 400

    future = client.post("/streaks/past", json={"start_date": _days_ago(1), "end_date": _days_ago(-2)})
    assert future.status_code == 400

    history = client.get("/streaks").json()["streaks"]
    assert [s["id"] for s in history] == [streak_id]
    assert history[0]["days"] == 7

    deleted = client.delete(f"/streaks/{streak_id}")
    assert deleted.status_code == 200
    assert deleted.json()["total_xp"] == 0

    assert client.delete(f"/streaks/{streak_id}").status_code == 404


def test_reflection_edit(client):
    streak_id = client.post("/streaks/past", json={"start_date": _days_ago(4), "end_date": _days_ago(2)}).json()["streak"]["id"]

    response = client.patch(f"/streaks/{streak_id}/reflection", json={"reason": "Other", "notes": "travel"})

    assert response.status_code == 200
    assert response.json()["streak"]["relapse_notes"] == "travel"
    assert response.json()["xp_delta"] == 0


def test_clear_history_requires_confirmation(client):
    client.post("/streaks/past", json={"start_date": _days_ago(9), "end_date": _days_ago(4)})
    client.post("/streaks/start")

    assert client.delete("/streaks").status_code == 400

    cleared = client.delete("/streaks", params={"confirm": "true"})
    assert cleared.status_code == 200
    assert cleared.json()["streaks_affected"] == 2
    assert cleared.json()["total_xp"] == 0


def test_active_streak_read_degrades_on_store_error(client):
    with patch("app.crud.get_active_streak", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
        response = client.get("/streaks/active")

    assert response.status_code == 200
    assert response.json()["warning"]
    assert response.json()["live"]["xp"] == 0


# ============================================================================
# Gamification
# ============================================================================

def test_goal_badge_is_live_only(client):
    streak_id = client.post("/streaks/start").json()["streak"]["id"]
    moved = client.patch(f"/streaks/{streak_id}/start-date", json={"start_date": _days_ago(6)})
    assert moved.status_code == 200
    client.put("/users/me/goal", json={"target_streak": 5})

    badges = client.get("/gamification/badges").json()["badges"]
    unlocked = {badge["id"] for badge in badges if badge["unlocked"]}
    assert "goal_target" in unlocked
    assert "5_days" in unlocked
    assert "1_week" not in unlocked

    progress = client.get("/gamification/progress").json()
    assert progress["live"]["days"] == 6
    assert progress["live"]["xp"] == closed_contribution(6)
    assert progress["live"]["goal_reached"]
    assert progress["ledger"]["total_xp"] == START_BONUS
    assert progress["projection"]["status"] == "projected"

    client.put("/users/me/goal", json={"target_streak": 10})
    badges = client.get("/gamification/badges").json()["badges"]
    assert not next(b for b in badges if b["id"] == "goal_target")["unlocked"]


def test_motivation_uses_fallback_without_api_key(client):
    body = client.get("/gamification/motivation").json()
    assert body["message"] == UNCONFIGURED_FALLBACK
    assert body["streak_days"] == 0


# ============================================================================
# Stats & journal
# ============================================================================

def test_stats(client):
    client.post("/streaks/past", json={"start_date": _days_ago(10), "end_date": _days_ago(3)})

    body = client.get("/stats").json()

    assert body["total_streaks"] == 1
    assert body["longest_streak"] == 7
    assert body["warning"] is None


def test_journal(client):
    assert client.get("/journal/today").json() is None

    created = client.post("/journal", json={"mood": 4, "note": "Calm and focused"})
    assert created.status_code == 201
    assert created.json()["mood_label"] == "Good"

    assert client.post("/journal", json={"mood": 6, "note": "x"}).status_code == 422
    assert client.post("/journal", json={"mood": 3, "note": "   "}).status_code == 422

    entries = client.get("/journal").json()
    assert len(entries) == 1
    assert client.get("/journal/today").json()["id"] == created.json()["id"]


# ============================================================================
# Public profile
# ============================================================================

def test_public_profile_flow(client):
    assert client.get("/public-profile/user-1").status_code == 404

    client.post("/streaks/start")
    saved = client.put("/public-profile", json={
        "is_enabled": True,
        "show_name": False,
        "show_level": True,
        "show_active_streak": True,
        "show_badges": False,
        "show_stats": True,
    })
    assert saved.status_code == 200
    assert saved.json()["synced"]

    public = client.get("/public-profile/user-1").json()
    assert public["display_name"] == "Anonymous Streaker"
    assert public["level"] == 1
    assert public["total_xp"] == START_BONUS
    assert public["badges"] is None
    assert public["success_rate"] is not None

    client.put("/public-profile", json={"is_enabled": False})
    assert client.get("/public-profile/user-1").status_code == 403


# ============================================================================
# Authentication
# ============================================================================

def test_requests_without_credentials_are_rejected(service_context, user):
    from app.main import create_app

    with TestClient(create_app(service_context)) as unauthenticated:
        assert unauthenticated.get("/users/me").status_code == 401
        assert unauthenticated.get("/users/me", headers={"X-User-ID": user.id}).status_code == 401


def test_user_id_header_when_allowed(service_context, user):
    from app.main import create_app

    service_context.settings = service_context.settings.model_copy(update={"ALLOW_USER_ID_HEADER": True})
    with TestClient(create_app(service_context)) as header_client:
        assert header_client.get("/users/me", headers={"X-User-ID": user.id}).json()["id"] == user.id
        assert header_client.get("/users/me", headers={"X-User-ID": "nobody"}).status_code == 401
