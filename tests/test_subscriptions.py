from datetime import datetime, timedelta

from saas_console.models import Team, User
from saas_console.services.subscriptions import extend_expiry

TEAMS = "/api/v1/admin/teams"


def test_extend_expiry_from_now_when_lapsed():
    now = datetime(2026, 1, 31, 12, 0)
    assert extend_expiry(None, 1, now=now) == datetime(2026, 2, 28, 12, 0)
    assert extend_expiry(datetime(2025, 6, 1), 2, now=now) == datetime(2026, 3, 31, 12, 0)


def test_extend_expiry_from_current_when_running():
    now = datetime(2026, 1, 1)
    assert extend_expiry(datetime(2026, 3, 15), 12, now=now) == datetime(2027, 3, 15)


def test_list_teams_with_limits(client, admin_headers, make_user):
    make_user("Jane", plan="pro")
    response = client.get(TEAMS, params={"plan": "pro"}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    team = body["data"][0]
    assert team["name"] == "Jane's Workspace"
    assert team["owner"]["email"] == "jane@example.com"
    assert team["members_count"] == 1
    assert team["member_limit"] == 5
    assert team["plan_max_tokens"] == 1000
    assert team["is_expired"] is False


def test_list_teams_search_and_status(client, db, admin_headers, make_user):
    jane = make_user("Jane")
    make_user("Bob")
    team = db.query(Team).filter(Team.id == jane.team_id).one()
    team.subscription_expires_at = datetime.utcnow() - timedelta(days=1)
    db.commit()

    expired = client.get(TEAMS, params={"status": "expired"}, headers=admin_headers).json()
    assert [row["id"] for row in expired["data"]] == [jane.team_id]
    assert expired["data"][0]["is_expired"] is True

    active = client.get(TEAMS, params={"status": "active", "plan": "all"}, headers=admin_headers).json()
    assert jane.team_id not in [row["id"] for row in active["data"]]
    assert active["total"] == 2

    by_owner = client.get(TEAMS, params={"search": "bob@"}, headers=admin_headers).json()
    assert [row["name"] for row in by_owner["data"]] == ["Bob's Workspace"]


def test_change_plan_resets_tokens_and_extends(client, db, admin_headers, make_user):
    jane = make_user("Jane", token_balance=3)
    response = client.put(
        f"{TEAMS}/{jane.team_id}/plan",
        json={"plan": "pro", "duration_months": 1},
        headers=admin_headers
    )
    assert response.status_code == 200
    team = response.json()["team"]
    assert team["plan_type"] == "pro"
    assert team["subscription_expires_at"] is not None

    db.expire_all()
    assert db.query(User).filter(User.id == jane.id).one().token_balance == 1000
    expires = db.query(Team).filter(Team.id == jane.team_id).one().subscription_expires_at
    assert timedelta(days=27) < expires - datetime.utcnow() < timedelta(days=32)


def test_change_plan_without_duration_keeps_expiry(client, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.put(f"{TEAMS}/{jane.team_id}/plan", json={"plan": "enterprise"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["team"]["subscription_expires_at"] is None


def test_change_plan_unknown_plan(client, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.put(f"{TEAMS}/{jane.team_id}/plan", json={"plan": "platinum"}, headers=admin_headers)
    assert response.status_code == 404


def test_change_plan_unknown_team(client, admin_headers):
    response = client.put(f"{TEAMS}/999/plan", json={"plan": "pro"}, headers=admin_headers)
    assert response.status_code == 404


def test_change_plan_rejects_zero_duration(client, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.put(
        f"{TEAMS}/{jane.team_id}/plan",
        json={"plan": "pro", "duration_months": 0},
        headers=admin_headers
    )
    assert response.status_code == 422
