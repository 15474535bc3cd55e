from dataclasses import dataclass, field

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from auto_api.utils.security import verify_access_token, extract_roles
from auto_api.utils.exceptions import UnauthorizedException, ForbiddenException

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Principal taken from a validated bearer token. Users live in the identity provider."""
    sub:      str
    username: str | None = None
    roles:    frozenset[str] = field(default_factory=frozenset)


# ─── Get Current User ─────────────────────────────────────────────────────────
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Validate the Bearer token and return the caller.
    Raises 401 if token is missing, invalid, or expired.
    """
    if not credentials:
        raise UnauthorizedException("No authentication token provided")

    payload = verify_access_token(credentials.credentials)
    sub: str | None = payload.get("sub")
    if sub is None:
        raise UnauthorizedException("Invalid token payload")

    return CurrentUser(
        sub=sub,
        username=payload.get("preferred_username"),
        roles=frozenset(extract_roles(payload)),
    )


# ─── Role Guards ──────────────────────────────────────────────────────────────
def require_roles(*roles: str):
    """
    Factory that returns a FastAPI dependency requiring one of the given roles.

    Usage:
        @router.delete("/autos/{auto_id}")
        def delete(current_user = Depends(require_roles("admin"))):
            ...
    """
    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.roles.isdisjoint(roles):
            raise ForbiddenException(
                f"This action requires one of these roles: {list(roles)}"
            )
        return current_user
    return dependency


# ─── Pre-built role dependencies ─────────────────────────────────────────────
def get_admin_user(current_user: CurrentUser = Depends(require_roles("admin"))) -> CurrentUser:
    return current_user

def get_admin_or_user(current_user: CurrentUser = Depends(require_roles("admin", "user"))) -> CurrentUser:
    return current_user
