"""
Authentication Endpoints

Handles registration, login and the session user.
Registration creates the user's own workspace on the default plan.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import datetime, timedelta

from saas_console.database import get_db
from saas_console.models.user import User
from saas_console.models.team import Team, TeamMember
from saas_console.models.plan import Plan
from saas_console.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, SessionUser
from saas_console.core.security import (
    verify_password,
    get_password_hash,
    create_access_token
)
from saas_console.core.exceptions import AuthenticationError, DuplicateResourceError, RegistrationClosedError
from saas_console.core.permissions import ADMIN_ROLE, assign_role, effective_permissions, is_super_admin
from saas_console.api.deps import get_current_user, get_current_team
from saas_console.config import get_settings
from saas_console.utils.logging import log_security_event, get_logger

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(prefix="/auth", tags=["authentication"])


def session_user(db: Session, user: User, team: Team = None) -> SessionUser:
    """Build the session payload for a user acting in a team (default: current team)."""
    team = team if team is not None else user.current_team
    team_id = team.id if team is not None else None
    return SessionUser(
        id=user.id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
        token_balance=user.token_balance,
        team_id=team_id,
        roles=sorted({role.name for role in user.roles if role.team_id == team_id}),
        permissions=effective_permissions(db, user, team),
        is_super_admin=is_super_admin(user),
    )


def issue_token(user: User) -> str:
    return create_access_token(
        {"sub": str(user.id), "email": user.email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    registration: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new user with a personal workspace.

    The workspace starts on the default plan and the user receives the
    plan's token allowance and the team "admin" role.

    Sign-ups are refused until the admin workspace exists, so a new
    workspace can never take its id.
    """
    existing_user = db.query(User).filter(User.email == registration.email).first()
    if existing_user:
        raise DuplicateResourceError("The email has already been taken")

    if db.query(Team.id).filter(Team.id == settings.ADMIN_TEAM_ID).first() is None:
        logger.error(f"Admin workspace {settings.ADMIN_TEAM_ID} missing; run the seeders")
        raise RegistrationClosedError()

    plan = db.query(Plan).filter(Plan.slug == settings.DEFAULT_PLAN_SLUG).first()
    if plan is None:
        logger.warning(f"Default plan '{settings.DEFAULT_PLAN_SLUG}' missing; run the seeders")

    user = User(
        name=registration.name,
        email=registration.email,
        hashed_password=get_password_hash(registration.password),
        token_balance=plan.max_tokens if plan else 0,
        settings={},
        is_active=True
    )
    db.add(user)
    db.flush()

    team = Team(
        name=f"{registration.name}'s Workspace",
        owner=user,
        plan_type=settings.DEFAULT_PLAN_SLUG
    )
    db.add(team)
    db.flush()

    db.add(TeamMember(team_id=team.id, user_id=user.id, role="owner"))
    user.current_team = team
    user.team_id = team.id
    assign_role(db, user, ADMIN_ROLE, team.id)

    db.commit()
    db.refresh(user)

    logger.info(f"New user registered: {user.id} with team {team.id}", extra={"user_id": user.id, "team_id": team.id})

    return LoginResponse(access_token=issue_token(user), user=session_user(db, user))


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token with the session user.

    SECURITY: the same generic error is used for unknown email and bad
    password to prevent user enumeration.
    """
    user = db.query(User).filter(User.email == credentials.email).first()

    if not user:
        log_security_event(
            "failed_login",
            {"reason": "user_not_found", "email": credentials.email},
            logger
        )
        raise AuthenticationError("Invalid credentials")

    if not verify_password(credentials.password, user.hashed_password):
        log_security_event(
            "failed_login",
            {"reason": "invalid_password", "user_id": user.id},
            logger
        )
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        log_security_event(
            "failed_login",
            {"reason": "user_inactive", "user_id": user.id},
            logger
        )
        raise AuthenticationError("User account is inactive")

    user.last_login_at = datetime.utcnow()
    db.commit()

    logger.info(f"Successful login: user={user.id}", extra={"user_id": user.id})

    return LoginResponse(access_token=issue_token(user), user=session_user(db, user))


@router.get("/me", response_model=SessionUser)
async def me(
    current_user: User = Depends(get_current_user),
    team: Team = Depends(get_current_team),
    db: Session = Depends(get_db)
):
    """The signed-in user as seen from the active team."""
    return session_user(db, current_user, team)
