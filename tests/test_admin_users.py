from conftest import auth_headers

from saas_console.models import Transaction, User

USERS = "/api/v1/admin/users"


def test_non_admin_is_refused(client, make_user):
    jane = make_user("Jane", plan="enterprise")
    response = client.get(USERS, headers=auth_headers(jane))
    assert response.status_code == 403


def test_list_users_paginates_and_searches(client, admin_headers, make_user):
    for name in ("Alice", "Bob", "Carol"):
        make_user(name)

    response = client.get(USERS, params={"per_page": 2, "sort_by": "name", "sort_dir": "asc"}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 4
    assert body["per_page"] == 2
    assert body["last_page"] == 2
    assert [user["name"] for user in body["data"]] == ["Alice", "Bob"]
    assert body["data"][0]["roles"] == ["admin"]

    response = client.get(USERS, params={"search": "caro"}, headers=admin_headers)
    assert [user["email"] for user in response.json()["data"]] == ["carol@example.com"]


def test_list_users_rejects_unknown_sort_column(client, admin_headers):
    response = client.get(USERS, params={"sort_by": "hashed_password"}, headers=admin_headers)
    assert response.status_code == 400


def test_update_user_profile_and_roles(client, db, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.put(
        f"{USERS}/{jane.id}",
        json={"name": "Jane Doe", "email": "jane.doe@example.com", "roles": ["member", "user"]},
        headers=admin_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Jane Doe"
    assert body["roles"] == ["member", "user"]


def test_update_user_email_must_be_unique(client, admin_headers, make_user):
    jane = make_user("Jane")
    make_user("Bob")
    response = client.put(
        f"{USERS}/{jane.id}",
        json={"name": "Jane", "email": "bob@example.com"},
        headers=admin_headers
    )
    assert response.status_code == 400


def test_update_user_keeps_own_email(client, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.put(
        f"{USERS}/{jane.id}",
        json={"name": "Jane", "email": "jane@example.com", "password": "brand-new-password"},
        headers=admin_headers
    )
    assert response.status_code == 200

    login = client.post("/api/v1/auth/login", json={"email": "jane@example.com", "password": "brand-new-password"})
    assert login.status_code == 200


def test_update_missing_user(client, admin_headers):
    response = client.put(f"{USERS}/999", json={"name": "X", "email": "x@example.com"}, headers=admin_headers)
    assert response.status_code == 404


def test_permissions_and_details(client, admin_headers, make_user):
    jane = make_user("Jane", roles=())
    response = client.put(
        f"{USERS}/{jane.id}/permissions",
        json={"permissions": ["bot_telegram", "report_export_pdf"], "member_limit": 3},
        headers=admin_headers
    )
    assert response.status_code == 200

    details = client.get(f"{USERS}/{jane.id}/details", headers=admin_headers).json()
    assert details["user_permissions"] == ["bot_telegram", "report_export_pdf"]
    assert details["user_settings"]["member_limit"] == 3
    assert len(details["all_permissions"]) == 10
    assert details["all_roles"] == ["admin", "member", "user"]


def test_permissions_rejects_unknown_names(client, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.put(
        f"{USERS}/{jane.id}/permissions",
        json={"permissions": ["fly_to_the_moon"]},
        headers=admin_headers
    )
    assert response.status_code == 400


def test_details_default_settings(client, db, admin_headers, make_user):
    jane = make_user("Jane")
    jane.settings = None
    db.commit()
    details = client.get(f"{USERS}/{jane.id}/details", headers=admin_headers).json()
    assert details["user_settings"] == {"member_limit": 0}


def test_adjust_tokens_records_transaction(client, db, admin_headers, make_user):
    jane = make_user("Jane", token_balance=5)
    response = client.post(
        f"{USERS}/{jane.id}/tokens",
        json={"amount": 20, "description": "Promo"},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["new_balance"] == 25

    response = client.post(
        f"{USERS}/{jane.id}/tokens",
        json={"amount": -10, "description": "Correction"},
        headers=admin_headers
    )
    assert response.json()["new_balance"] == 15

    db.expire_all()
    ledger = db.query(Transaction).filter(Transaction.user_id == jane.id).order_by(Transaction.id).all()
    assert [entry.amount for entry in ledger] == [20, -10]
    assert ledger[0].type == "admin_adjustment"
    assert ledger[0].description == "Promo (By Admin)"


def test_adjust_tokens_cannot_go_negative(client, db, admin_headers, make_user):
    jane = make_user("Jane", token_balance=5)
    response = client.post(
        f"{USERS}/{jane.id}/tokens",
        json={"amount": -6, "description": "Too much"},
        headers=admin_headers
    )
    assert response.status_code == 400
    db.expire_all()
    assert db.query(User).filter(User.id == jane.id).one().token_balance == 5
    assert db.query(Transaction).count() == 0


def test_adjust_tokens_rejects_zero(client, admin_headers, make_user):
    jane = make_user("Jane")
    response = client.post(
        f"{USERS}/{jane.id}/tokens",
        json={"amount": 0, "description": "Nothing"},
        headers=admin_headers
    )
    assert response.status_code == 422


def test_delete_user(client, db, admin_headers, make_user):
    jane_id = make_user("Jane").id
    response = client.delete(f"{USERS}/{jane_id}", headers=admin_headers)
    assert response.status_code == 204
    db.expire_all()
    assert db.query(User).filter(User.id == jane_id).first() is None


def test_admin_cannot_delete_self(client, admin, admin_headers):
    response = client.delete(f"{USERS}/{admin.id}", headers=admin_headers)
    assert response.status_code == 403
