"""
Database Seeders

Idempotent bootstrap of the permission registry, the default plans and
the super admin with its workspace. Every seeder can run repeatedly.
"""
from datetime import datetime
import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from saas_console.config import get_settings
from saas_console.core.permissions import ADMIN_ROLE, DEFAULT_TEAM_ROLES, assign_role, get_or_create_role
from saas_console.core.security import get_password_hash
from saas_console.models.access import Permission
from saas_console.models.plan import ALL_FEATURES, Plan
from saas_console.models.team import Team, TeamMember
from saas_console.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()

# name -> (label, module)
PERMISSIONS = {
    "report_facebook_basic": ("Facebook Reports (Basic)", "Reporting"),
    "report_facebook_pro": ("Facebook Insights (Pro)", "Reporting"),
    "report_tiktok_basic": ("TikTok Reports (Basic)", "Reporting"),
    "report_tiktok_pro": ("TikTok Insights (Pro)", "Reporting"),
    "report_export_pdf": ("Export PDF", "Reporting"),
    "share_report_link": ("Share Public Link", "Reporting"),
    "bot_telegram": ("Telegram BYOB Integration", "Automation"),
    "team_manage_members": ("Manage Team Members", "Workspace"),
    "team_manage_roles": ("Manage Custom Roles", "Workspace"),
    "view_all_team_reports": ("View All Team Reports", "Workspace"),
}

PLANS = [
    {
        "name": "Free Starter",
        "slug": "free",
        "price": 0,
        "member_limit": 1,
        "max_tokens": 10,
        "features": ["report_facebook_basic"],
    },
    {
        "name": "Pro Business",
        "slug": "pro",
        "price": 29,
        "member_limit": 5,
        "max_tokens": 1000,
        "features": ["report_facebook_basic", "report_facebook_pro", "report_tiktok_basic", "share_report_link"],
        "is_popular": True,
    },
    {
        "name": "Enterprise",
        "slug": "enterprise",
        "price": 99,
        "member_limit": 20,
        "max_tokens": 10000,
        "features": [ALL_FEATURES],
    },
]

ADMIN_TEAM_NAME = "Admin Workspace"
ADMIN_PLAN_SLUG = "enterprise"


class SeedError(Exception):
    """The database holds data a seeder must not overwrite."""


def _sync_team_id_sequence(db: Session) -> None:
    # The admin workspace is inserted with an explicit id; move the serial past it
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text(
            "SELECT setval(pg_get_serial_sequence('teams', 'id'), (SELECT MAX(id) FROM teams))"
        ))


def seed_permissions(db: Session) -> int:
    """Register every known permission; labels and modules are refreshed. Returns how many were created."""
    created = 0
    for name, (label, module) in PERMISSIONS.items():
        permission = db.query(Permission).filter(Permission.name == name).first()
        if permission is None:
            permission = Permission(name=name, guard_name="web", is_active=True)
            db.add(permission)
            created += 1
        permission.label = label
        permission.module = module
    db.flush()
    logger.info(f"Permissions seeded: {created} created, {len(PERMISSIONS) - created} updated")
    return created


def seed_plans(db: Session) -> int:
    """Update-or-create the default plans by slug. Returns how many were created."""
    created = 0
    for values in PLANS:
        plan = db.query(Plan).filter(Plan.slug == values["slug"]).first()
        if plan is None:
            plan = Plan(slug=values["slug"], max_workspaces=1, is_active=True)
            db.add(plan)
            created += 1
        for field, value in values.items():
            setattr(plan, field, value)
    db.flush()
    logger.info(f"Plans seeded: {created} created, {len(PLANS) - created} updated")
    return created


def seed_admin(db: Session) -> User:
    """
    Find-or-create the super admin and the admin workspace.

    The workspace gets the standard team roles and the user gets "admin"
    in it, which is what makes them a super admin.
    Raises SeedError when that team id already belongs to someone else.
    """
    user = db.query(User).filter(User.email == settings.SUPER_ADMIN_EMAIL).first()
    if user is None:
        user = User(
            name=settings.SEED_ADMIN_NAME,
            email=settings.SUPER_ADMIN_EMAIL,
            hashed_password=get_password_hash(settings.SEED_ADMIN_PASSWORD),
            email_verified_at=datetime.utcnow(),
            settings={},
            is_active=True
        )
        db.add(user)
        db.flush()
        logger.info(f"Super admin created: {user.email}")

    team = db.query(Team).filter(Team.id == settings.ADMIN_TEAM_ID).first()
    if team is None:
        team = Team(id=settings.ADMIN_TEAM_ID, name=ADMIN_TEAM_NAME, owner=user, plan_type=ADMIN_PLAN_SLUG)
        db.add(team)
        db.flush()
        _sync_team_id_sequence(db)
        logger.info(f"Admin workspace created with id {team.id}")
    elif team.user_id != user.id:
        raise SeedError(
            f"Team {team.id} is owned by user {team.user_id}, not {user.email}; "
            f"refusing to use it as the admin workspace"
        )

    user.current_team = team
    user.team_id = team.id
    if user.id not in team.member_ids:
        team.memberships.append(TeamMember(user_id=user.id, role="owner"))

    for role_name in DEFAULT_TEAM_ROLES:
        get_or_create_role(db, role_name, team.id)
    assign_role(db, user, ADMIN_ROLE, team.id)

    db.flush()
    logger.info(f"Admin role and standard roles assigned to {user.email}")
    return user


def run_all(db: Session) -> None:
    """Permissions first: plans name them and the admin plan needs them."""
    seed_permissions(db)
    seed_plans(db)
    seed_admin(db)


__all__ = ["SeedError", "seed_permissions", "seed_plans", "seed_admin", "run_all", "PERMISSIONS", "PLANS"]
