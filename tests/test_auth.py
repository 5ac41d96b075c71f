from conftest import PASSWORD, auth_headers

from saas_console.models import Team, TeamMember, User
from saas_console.seeds import seed_admin


def register(client, **overrides):
    payload = {
        "name": "Jane",
        "email": "jane@example.com",
        "password": "secret-pass",
        "password_confirmation": "secret-pass",
    }
    payload.update(overrides)
    return client.post("/api/v1/auth/register", json=payload)


def test_register_creates_workspace_on_default_plan(client, seeded):
    response = register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]

    user = body["user"]
    assert user["token_balance"] == 10
    assert user["roles"] == ["admin"]
    # The team admin role is capped by the free plan
    assert user["permissions"] == ["report_facebook_basic"]
    assert user["is_super_admin"] is False

    seeded.expire_all()
    team = seeded.query(Team).filter(Team.id == user["team_id"]).one()
    assert team.name == "Jane's Workspace"
    assert team.plan_type == "free"
    assert team.members_count == 1
    assert team.memberships[0].role == "owner"


def test_register_rejects_duplicate_email(client, seeded):
    assert register(client).status_code == 201
    response = register(client)
    assert response.status_code == 400


def test_register_requires_matching_confirmation(client, seeded):
    response = register(client, password_confirmation="something-else")
    assert response.status_code == 422


def test_register_refused_before_admin_workspace_exists(client, db):
    response = register(client)
    assert response.status_code == 503
    assert db.query(User).count() == 0
    assert db.query(Team).count() == 0


def test_registered_workspace_never_takes_admin_team(client, db):
    seed_admin(db)
    db.commit()

    user = register(client).json()["user"]
    assert user["team_id"] != 1
    assert user["is_super_admin"] is False


def test_register_without_default_plan_falls_back(client, db):
    seed_admin(db)
    db.commit()

    response = register(client)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["token_balance"] == 0

    team = db.query(Team).filter(Team.id == user["team_id"]).one()
    assert team.plan is None
    assert team.member_limit == 5
    assert team.plan_max_tokens == 0


def test_login_returns_session_user(client, make_user):
    make_user("Jane", plan="pro")
    response = client.post("/api/v1/auth/login", json={"email": "jane@example.com", "password": PASSWORD})
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "jane@example.com"
    assert "share_report_link" in user["permissions"]
    assert "bot_telegram" not in user["permissions"]


def test_login_with_wrong_password(client, make_user):
    make_user("Jane")
    response = client.post("/api/v1/auth/login", json={"email": "jane@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["type"] == "authentication_error"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_login_unknown_email_uses_same_error(client, seeded):
    response = client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_inactive_user(client, db, make_user):
    user = make_user("Jane")
    user.is_active = False
    db.commit()
    response = client.post("/api/v1/auth/login", json={"email": "jane@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_super_admin_login(client, admin):
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "admin@example.com", "password": "admin-password"}
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["is_super_admin"] is True
    assert user["team_id"] == 1
    assert len(user["permissions"]) == 10


def test_me_requires_token(client, seeded):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401


def test_me_rejects_garbage_token(client, seeded):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_me_in_active_team(client, make_user):
    user = make_user("Jane", plan="pro")
    response = client.get("/api/v1/auth/me", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["team_id"] == user.team_id


def test_me_rejects_foreign_team_header(client, make_user):
    jane = make_user("Jane")
    bob = make_user("Bob")
    response = client.get("/api/v1/auth/me", headers=auth_headers(jane, team_id=bob.team_id))
    assert response.status_code == 403
    assert response.json()["type"] == "team_access_error"


def test_me_rejects_malformed_team_header(client, make_user):
    jane = make_user("Jane")
    headers = auth_headers(jane)
    headers["X-Team-Id"] = "abc"
    response = client.get("/api/v1/auth/me", headers=headers)
    assert response.status_code == 400


def test_member_can_switch_to_joined_team(client, db, make_user):
    jane = make_user("Jane")
    bob = make_user("Bob", plan="pro")
    team = db.query(Team).filter(Team.id == bob.team_id).one()
    team.memberships.append(TeamMember(user_id=jane.id))
    db.commit()

    response = client.get("/api/v1/auth/me", headers=auth_headers(jane, team_id=bob.team_id))
    assert response.status_code == 200
    body = response.json()
    assert body["team_id"] == bob.team_id
    # No roles in Bob's team, so nothing is granted there
    assert body["roles"] == []
    assert body["permissions"] == []


def test_token_for_inactive_user(client, db, make_user):
    jane = make_user("Jane")
    headers = auth_headers(jane)
    db.query(User).filter(User.id == jane.id).one().is_active = False
    db.commit()
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401
