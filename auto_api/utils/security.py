from jose import JWTError, ExpiredSignatureError, jwt

from auto_api.config import settings
from auto_api.utils.exceptions import TokenExpiredException, UnauthorizedException


# ─── Bearer tokens from the identity provider ─────────────────────────────────
def verify_access_token(token: str) -> dict:
    """
    Decode and validate an access token issued by the identity provider.
    Raises 401 if invalid, 401 (TOKEN_EXPIRED) if expired.
    """
    try:
        return jwt.decode(
            token,
            settings.AUTH_SECRET_KEY,
            algorithms=[settings.AUTH_ALGORITHM],
            audience=settings.AUTH_AUDIENCE,
            options={"verify_aud": settings.AUTH_AUDIENCE is not None},
        )
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise UnauthorizedException("Invalid or malformed token")


def extract_roles(payload: dict) -> set[str]:
    """
    Collect realm roles and the roles granted to this client.

    Keycloak style payload:
        {"realm_access": {"roles": [...]},
         "resource_access": {"<client id>": {"roles": [...]}}}
    """
    roles = set(payload.get("realm_access", {}).get("roles", []))
    client = payload.get("resource_access", {}).get(settings.AUTH_CLIENT_ID, {})
    roles.update(client.get("roles", []))
    return roles
