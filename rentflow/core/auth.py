"""
Authentication against Supabase Auth.

The dashboard signs in through ``POST /auth/sign-in`` (proxied to Supabase's
password grant) and sends the returned access token in the Authorization
header. ``get_current_user`` verifies that JWT and extracts the user.
"""
import logging
from typing import Optional

import requests
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from rentflow.core.config import settings
from rentflow.core.errors import ConfigurationError, GatewayError

logger = logging.getLogger(__name__)

# Security scheme for Bearer token
security = HTTPBearer()

AUTH_TIMEOUT = 10


class User:
    """User model extracted from JWT token."""
    def __init__(self, user_id: str, email: Optional[str], role: Optional[str] = None):
        self.id = user_id
        self.email = email
        self.role = role or "authenticated"


# Cache for JWKS keys (to avoid fetching on every request)
_jwks_cache = None


def get_supabase_jwks():
    """
    Fetch Supabase's JSON Web Key Set (JWKS) for JWT verification.

    Newer Supabase projects sign with asymmetric keys (ES256 / RS256); the
    public keys come from the project's JWKS endpoint and are cached.
    """
    global _jwks_cache

    if _jwks_cache is not None:
        return _jwks_cache

    try:
        jwks_url = f"{settings.SUPABASE_URL}/auth/v1/.well-known/jwks.json"
        response = requests.get(jwks_url, timeout=AUTH_TIMEOUT)
        response.raise_for_status()
        _jwks_cache = response.json()
        return _jwks_cache
    except requests.RequestException as e:
        raise GatewayError(f"Failed to fetch JWKS from Supabase: {e}")


def verify_token(token: str) -> dict:
    """
    Verify a Supabase JWT and return its payload.

    Projects still on the legacy shared secret (HS256) are supported when
    ``SUPABASE_JWT_SECRET`` is set; otherwise the JWKS public keys are used.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    try:
        if settings.SUPABASE_JWT_SECRET and jwt.get_unverified_header(token).get("alg") == "HS256":
            key, algorithms = settings.SUPABASE_JWT_SECRET, ["HS256"]
        else:
            key, algorithms = get_supabase_jwks(), ["ES256", "RS256"]

        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience="authenticated",  # Supabase uses "authenticated" as audience
            options={"verify_aud": True},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """
    FastAPI dependency returning the authenticated user.

    Usage in route:
        @router.get("/tenants")
        def list_tenants(current_user: User = Depends(get_current_user)):
            ...
    """
    payload = verify_token(credentials.credentials)

    # Supabase JWT structure: {"sub": "user_id", "email": "user@example.com", "role": "authenticated", ...}
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return User(user_id=user_id, email=payload.get("email"), role=payload.get("role"))


# --- GoTrue REST calls ---

def _auth_url(path: str) -> str:
    return f"{settings.SUPABASE_URL}/auth/v1/{path}"


def _call(url: str, key: str, bearer: Optional[str] = None, **kwargs) -> requests.Response:
    headers = {"apikey": key, "Authorization": f"Bearer {bearer or key}"}
    try:
        return requests.request(kwargs.pop("method", "POST"), url, headers=headers, timeout=AUTH_TIMEOUT, **kwargs)
    except requests.RequestException as e:
        raise GatewayError(f"Auth service request failed: {e}")


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    return body.get("error_description") or body.get("msg") or body.get("message") or str(body)


def sign_in(email: str, password: str) -> dict:
    """Password sign-in; returns the Supabase session (access_token, refresh_token, user, ...)."""
    if not settings.SUPABASE_ANON_KEY:
        raise ConfigurationError("SUPABASE_ANON_KEY is not configured; sign-in is unavailable.")

    response = _call(
        _auth_url("token?grant_type=password"),
        settings.SUPABASE_ANON_KEY,
        json={"email": email, "password": password},
    )
    if response.status_code in (400, 401):
        logger.info("Sign-in rejected for %s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_error_message(response))
    if response.status_code >= 400:
        raise GatewayError(f"Sign-in failed: {_error_message(response)}")
    return response.json()


def sign_out(token: str) -> None:
    if not settings.SUPABASE_ANON_KEY:
        raise ConfigurationError("SUPABASE_ANON_KEY is not configured; sign-out is unavailable.")

    response = _call(_auth_url("logout"), settings.SUPABASE_ANON_KEY, bearer=token)
    # An already-expired session counts as signed out
    if response.status_code >= 400 and response.status_code not in (401, 403):
        raise GatewayError(f"Sign-out failed: {_error_message(response)}")


def update_credentials(user_id: str, email: Optional[str] = None, password: Optional[str] = None) -> dict:
    """Change the login email and/or password of a user (service-role call)."""
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY is not configured; cannot update credentials.")

    body = {}
    if email:
        body["email"] = email
    if password:
        body["password"] = password
    if not body:
        return {}

    response = _call(
        _auth_url(f"admin/users/{user_id}"),
        settings.SUPABASE_SERVICE_ROLE_KEY,
        method="PUT",
        json=body,
    )
    if response.status_code >= 400:
        raise GatewayError(f"Credential update failed: {_error_message(response)}")
    logger.info("Updated credentials (%s) for user %s", ", ".join(sorted(body)), user_id)
    return response.json()
