"""
Team Context Middleware

Reads the optional X-Team-Id header and makes the requested team id
available as request.state.team_id. Membership is checked later by the
get_current_team dependency, once the user is known.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Optional
import logging

logger = logging.getLogger(__name__)

TEAM_HEADER = "X-Team-Id"


class TeamContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware to extract the active team from the request.

    This runs on every request, so it does no database work.
    """

    def __init__(self, app):
        super().__init__(app)
        self.excluded_paths = [
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
            "/api/v1/public",
        ]

    async def dispatch(self, request: Request, call_next):
        request.state.team_id = None

        if any(request.url.path.startswith(path) for path in self.excluded_paths):
            return await call_next(request)

        raw = request.headers.get(TEAM_HEADER)
        if raw is not None:
            team_id = self._parse_team_id(raw)
            if team_id is None:
                logger.warning(f"Malformed {TEAM_HEADER} header: {raw!r}")
                return JSONResponse(
                    status_code=400,
                    content={"detail": f"{TEAM_HEADER} must be a positive integer"}
                )
            request.state.team_id = team_id

        return await call_next(request)

    @staticmethod
    def _parse_team_id(raw: str) -> Optional[int]:
        raw = raw.strip()
        if not raw.isdigit():
            return None
        team_id = int(raw)
        return team_id if team_id > 0 else None
