import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

TESTS_DIR = Path(__file__).resolve().parent

# Configure before the application reads its settings
os.environ["DATABASE_URL"] = f"sqlite:///{TESTS_DIR / 'test_saas_console.db'}"
os.environ["REDIS_URL"] = ""  # Disable rate limiting
os.environ["GEOIP_URL"] = ""  # No outbound geolocation calls
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SUPER_ADMIN_EMAIL"] = "admin@example.com"
os.environ["SEED_ADMIN_PASSWORD"] = "admin-password"
os.environ["ADMIN_TEAM_ID"] = "1"
os.environ["PUBLIC_BASE_URL"] = "http://frontend.test"

from saas_console.main import app  # noqa: E402
from saas_console.database import Base, SessionLocal, engine  # noqa: E402
from saas_console.core.security import create_access_token, get_password_hash  # noqa: E402
from saas_console.core.permissions import assign_role  # noqa: E402
from saas_console.models import Page, Report, Team, TeamMember, User  # noqa: E402
from saas_console.seeds import run_all  # noqa: E402

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def prepare_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    """Permissions, plans and the super admin."""
    run_all(db)
    db.commit()
    return db


def auth_headers(user: User, team_id: int = None) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email})
    headers = {"Authorization": f"Bearer {token}"}
    if team_id is not None:
        headers["X-Team-Id"] = str(team_id)
    return headers


@pytest.fixture
def admin(seeded):
    return seeded.query(User).filter(User.email == "admin@example.com").one()


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_user(seeded):
    """Create a user owning a workspace on the given plan, with team role admin."""
    db = seeded

    def _make(name="Jane", email=None, plan="free", token_balance=0, roles=("admin",)):
        user = User(
            name=name,
            email=email or f"{name.lower()}@example.com",
            hashed_password=get_password_hash(PASSWORD),
            token_balance=token_balance,
            settings={},
            is_active=True
        )
        db.add(user)
        db.flush()
        team = Team(name=f"{name}'s Workspace", owner=user, plan_type=plan)
        db.add(team)
        db.flush()
        team.memberships.append(TeamMember(user_id=user.id, role="owner"))
        user.current_team = team
        user.team_id = team.id
        for role in roles:
            assign_role(db, user, role, team.id)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_page(db):
    def _make(team_id, name="Acme Page", platform="facebook", user_id=None):
        page = Page(team_id=team_id, user_id=user_id, name=name, platform=platform, username="acme")
        db.add(page)
        db.commit()
        return page

    return _make


@pytest.fixture
def make_report(db):
    def _make(page, engagement_rate=1.0, **fields):
        report = Report(
            page_id=page.id,
            team_id=page.team_id,
            platform=fields.pop("platform", page.platform),
            engagement_rate=engagement_rate,
            report_data=fields.pop("report_data", {"posts": []}),
            **fields
        )
        db.add(report)
        db.commit()
        return report

    return _make
