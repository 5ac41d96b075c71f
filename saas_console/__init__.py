"""
SaaS Admin Console

Backend for a multi-tenant reporting SaaS: teams on subscription plans,
team-scoped roles with a plan ceiling on permissions, token balances, and
public share links for Facebook/TikTok analytics reports.
"""

__version__ = "1.0.0"
