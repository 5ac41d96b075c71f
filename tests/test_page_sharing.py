from conftest import auth_headers

from saas_console.models import PageShareLog, PageShareToken


def test_share_requires_plan_feature(client, make_user, make_page):
    jane = make_user("Jane", plan="free")
    page = make_page(jane.team_id)
    response = client.post(f"/api/v1/pages/{page.id}/share", headers=auth_headers(jane))
    assert response.status_code == 403


def test_share_creates_link_once(client, make_user, make_page):
    jane = make_user("Jane", plan="pro")
    page = make_page(jane.team_id)

    first = client.post(f"/api/v1/pages/{page.id}/share", headers=auth_headers(jane))
    assert first.status_code == 200
    body = first.json()
    assert body["url"] == f"http://frontend.test/share/page/{body['token']}"

    second = client.post(f"/api/v1/pages/{page.id}/share", headers=auth_headers(jane)).json()
    assert second["token"] == body["token"]


def test_other_teams_pages_look_missing(client, make_user, make_page):
    jane = make_user("Jane", plan="pro")
    bob = make_user("Bob", plan="pro")
    page = make_page(bob.team_id)
    response = client.post(f"/api/v1/pages/{page.id}/share", headers=auth_headers(jane))
    assert response.status_code == 404


def test_super_admin_bypasses_plan_and_team(client, admin_headers, make_user, make_page):
    jane = make_user("Jane", plan="free")
    page = make_page(jane.team_id)
    response = client.post(f"/api/v1/pages/{page.id}/share", headers=admin_headers)
    assert response.status_code == 200


def test_status_toggle_and_regenerate(client, db, make_user, make_page):
    jane = make_user("Jane", plan="pro")
    page = make_page(jane.team_id)
    headers = auth_headers(jane)

    status = client.get(f"/api/v1/pages/{page.id}/share-status", headers=headers).json()
    assert status == {"exists": False, "is_active": False, "view_count": 0, "token": None, "history": []}

    token = client.post(f"/api/v1/pages/{page.id}/share", headers=headers).json()["token"]
    client.get(f"/api/v1/public/share/{token}")

    status = client.get(f"/api/v1/pages/{page.id}/share-status", headers=headers).json()
    assert status["exists"] is True
    assert status["view_count"] == 1
    assert len(status["history"]) == 1

    toggled = client.post(f"/api/v1/pages/{page.id}/toggle-share", headers=headers).json()
    assert toggled["is_active"] is False
    assert client.get(f"/api/v1/public/share/{token}").status_code == 404

    regenerated = client.post(f"/api/v1/pages/{page.id}/regenerate-share", headers=headers).json()
    assert regenerated["token"] != token

    db.expire_all()
    assert db.query(PageShareToken).count() == 1
    assert db.query(PageShareLog).count() == 0
    share = db.query(PageShareToken).one()
    assert share.is_active is True
    assert share.view_count == 0


def test_toggle_without_link(client, make_user, make_page):
    jane = make_user("Jane", plan="pro")
    page = make_page(jane.team_id)
    response = client.post(f"/api/v1/pages/{page.id}/toggle-share", headers=auth_headers(jane))
    assert response.status_code == 404


def test_reset_history(client, db, make_user, make_page):
    jane = make_user("Jane", plan="pro")
    page = make_page(jane.team_id)
    headers = auth_headers(jane)
    token = client.post(f"/api/v1/pages/{page.id}/share", headers=headers).json()["token"]
    client.get(f"/api/v1/public/share/{token}")

    response = client.post(f"/api/v1/pages/{page.id}/reset-share-history", headers=headers)
    assert response.status_code == 200

    db.expire_all()
    share = db.query(PageShareToken).one()
    assert share.view_count == 0
    assert share.last_accessed_at is None
    assert share.last_location is None
    assert db.query(PageShareLog).count() == 0
    # The link keeps working
    assert client.get(f"/api/v1/public/share/{token}").status_code == 200
