"""
Database Models

Teams are the tenant boundary; roles are scoped to a team, permissions
and plans are global.
"""
from saas_console.models.access import Permission, Role
from saas_console.models.user import User
from saas_console.models.team import Team, TeamMember
from saas_console.models.plan import Plan
from saas_console.models.color import Color
from saas_console.models.transaction import Transaction, TransactionType
from saas_console.models.page import Page, PageShareToken, PageShareLog, PageShareView
from saas_console.models.report import Report

__all__ = [
    "Permission",
    "Role",
    "User",
    "Team",
    "TeamMember",
    "Plan",
    "Color",
    "Transaction",
    "TransactionType",
    "Page",
    "PageShareToken",
    "PageShareLog",
    "PageShareView",
    "Report",
]
