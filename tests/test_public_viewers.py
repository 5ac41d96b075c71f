from datetime import datetime, timedelta

import pytest

from saas_console.models import PageShareLog, PageShareToken, PageShareView
from saas_console.services import share_links
from saas_console.services.share_links import detect_device


@pytest.fixture
def shared_page(db, make_user, make_page):
    jane = make_user("Jane", plan="pro")
    page = make_page(jane.team_id, name="Acme Page", platform="tiktok")
    share = share_links.get_or_create_share_token(db, page)
    db.commit()
    return page, share


@pytest.mark.parametrize("user_agent,device", [
    ("Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)", "Mobile"),
    ("Mozilla/5.0 (Linux; Android 14; Pixel 8)", "Mobile"),
    ("Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X)", "Tablet"),
    ("Mozilla/5.0 (Windows NT 10.0; Win64; x64)", "Desktop"),
    (None, "Desktop"),
])
def test_detect_device(user_agent, device):
    assert detect_device(user_agent) == device


def test_unknown_token(client, seeded):
    response = client.get("/api/v1/public/share/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Dashboard unavailable or private."


def test_view_logs_visit_and_lists_reports(client, db, shared_page, make_report):
    page, share = shared_page
    for rate in (2.0, 4.0, 6.0):
        make_report(page, engagement_rate=rate)

    response = client.get(
        f"/api/v1/public/share/{share.token}",
        params={"lat": 11.55, "lng": 104.92},
        headers={"User-Agent": "Mozilla/5.0 (iPhone)"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["page_name"] == "Acme Page"
    assert body["platform"] == "tiktok"
    assert body["view_count"] == 1
    assert body["reports"]["total"] == 3
    assert body["reports"]["per_page"] == 15

    newest, middle, oldest = body["reports"]["data"]
    assert newest["historical_avg"] == pytest.approx(3.0)
    assert middle["historical_avg"] == pytest.approx(2.0)
    assert oldest["historical_avg"] is None

    [visit] = body["history"]
    assert visit["device"] == "Mobile"
    assert visit["location"] == "Unknown"
    assert visit["lat"] == pytest.approx(11.55)


def test_repeat_views_count_once_per_day(client, db, shared_page):
    _, share = shared_page
    for _ in range(3):
        response = client.get(f"/api/v1/public/share/{share.token}")
    assert response.json()["view_count"] == 1

    db.expire_all()
    assert db.query(PageShareLog).count() == 3


def test_view_counts_again_after_a_day(db, shared_page):
    _, share = shared_page
    yesterday = datetime.utcnow() - timedelta(hours=25)
    share_links.record_visit(db, share, "10.0.0.1", "Unknown", "Desktop", None, None, now=yesterday)
    share_links.record_visit(db, share, "10.0.0.1", "Unknown", "Desktop", None, None)
    share_links.record_visit(db, share, "10.0.0.1", "Unknown", "Desktop", None, None)
    db.commit()
    assert share.view_count == 2


def test_logs_are_pruned(client, db, shared_page):
    _, share = shared_page
    for _ in range(8):
        client.get(f"/api/v1/public/share/{share.token}")

    db.expire_all()
    logs = db.query(PageShareLog).order_by(PageShareLog.id).all()
    assert len(logs) == 5
    assert logs[-1].id == 8


def test_exact_location_updates_latest_visit(client, db, shared_page):
    _, share = shared_page
    client.get(f"/api/v1/public/share/{share.token}")

    response = client.post(
        f"/api/v1/public/share/{share.token}/exact-location",
        json={"lat": 11.5564, "lng": 104.9282}
    )
    assert response.status_code == 200
    assert response.json() == {"status": "success"}

    db.expire_all()
    token = db.query(PageShareToken).one()
    assert token.last_location == "GPS: 11.5564, 104.9282"
    log = db.query(PageShareLog).one()
    assert log.location == "GPS: 11.5564, 104.9282"
    assert log.lat == pytest.approx(11.5564)


def test_exact_location_ignores_old_visits(db, shared_page):
    _, share = shared_page
    old = datetime.utcnow() - timedelta(minutes=10)
    share_links.record_visit(db, share, "10.0.0.1", "Phnom Penh, Cambodia", "Desktop", None, None, now=old)
    share_links.apply_exact_location(db, share, 1.0, 2.0)
    db.commit()

    log = db.query(PageShareLog).one()
    assert log.location == "Phnom Penh, Cambodia"
    assert share.last_location == "GPS: 1.0, 2.0"


def test_exact_location_unknown_token(client, seeded):
    response = client.post("/api/v1/public/share/nope/exact-location", json={"lat": 1, "lng": 2})
    assert response.status_code == 404


def test_public_report_by_uuid(client, db, shared_page, make_report):
    page, _ = shared_page
    make_report(page, engagement_rate=5.0)
    report = make_report(page, engagement_rate=7.5, report_data={"posts": [{"id": 1}]})
    share_links.publish_report(db, report)
    db.commit()

    response = client.get(f"/api/v1/public/reports/{report.public_uuid}")
    assert response.status_code == 200
    body = response.json()
    assert body["page"]["name"] == "Acme Page"
    assert body["report_data"] == {"posts": [{"id": 1}]}
    assert body["historical_avg"] == pytest.approx(5.0)


def test_public_report_unknown_uuid(client, seeded):
    assert client.get("/api/v1/public/reports/00000000-0000-0000-0000-000000000000").status_code == 404


def test_unique_views_survive_log_pruning(db, shared_page):
    _, share = shared_page
    for n in range(1, 7):
        share_links.record_visit(db, share, f"10.0.0.{n}", "Unknown", "Desktop", None, None)
    share_links.record_visit(db, share, "10.0.0.1", "Unknown", "Desktop", None, None)
    db.commit()

    assert share.view_count == 6
    assert db.query(PageShareLog).count() == 5
    assert db.query(PageShareView).count() == 6


def test_reset_history_clears_view_locks(db, shared_page):
    _, share = shared_page
    share_links.record_visit(db, share, "10.0.0.1", "Unknown", "Desktop", None, None)
    share_links.reset_history(db, share)
    share_links.record_visit(db, share, "10.0.0.1", "Unknown", "Desktop", None, None)
    db.commit()
    assert share.view_count == 1


def test_historical_average_uses_five_latest_earlier_reports(db, shared_page, make_report):
    page, _ = shared_page
    for rate in (100.0, 100.0, 1.0, 2.0, 3.0, 4.0, 5.0):
        make_report(page, engagement_rate=rate)
    latest = make_report(page, engagement_rate=50.0)
    assert share_links.historical_average(db, latest) == pytest.approx(3.0)
