# storefront/core/auth.py
import logging
import time
import uuid
from functools import lru_cache
from typing import Any

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session, select

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User

settings = get_settings()
logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can support "guest" mode (unauthenticated).
bearer_scheme = HTTPBearer(auto_error=False)

SYMMETRIC_ALGORITHMS = {"HS256", "HS384", "HS512"}
ASYMMETRIC_ALGORITHMS = ["RS256", "ES256"]

# Minimum seconds between forced JWKS refreshes for unknown key ids
JWKS_REFRESH_INTERVAL = 60.0

_last_jwks_refresh = float("-inf")


@lru_cache
def fetch_jwks(url: str) -> dict[str, Any]:
    """
    Download the JSON Web Key Set published by Supabase Auth.

    Cached per URL; _signing_keys clears the cache when a token names an
    unknown key id.
    """
    logger.info("Fetching JWKS from %s", url)
    resp = httpx.get(url, timeout=5.0)
    resp.raise_for_status()
    return resp.json()


def _signing_keys(kid: str | None) -> dict[str, Any]:
    """
    Return the cached JWKS, refetching it once when the token names a key
    id the cache has not seen (key rotation).
    """
    global _last_jwks_refresh

    url = settings.jwks_url
    jwks = fetch_jwks(url)
    known = {k.get("kid") for k in jwks.get("keys", [])}
    if not kid or kid in known:
        return jwks

    now = time.monotonic()
    if now - _last_jwks_refresh < JWKS_REFRESH_INTERVAL:
        return jwks

    logger.info("Unknown signing key %s, refreshing JWKS", kid)
    _last_jwks_refresh = now
    fetch_jwks.cache_clear()
    return fetch_jwks(url)


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature:
          * HS256 tokens with SUPABASE_JWT_SECRET
          * RS256/ES256 tokens with the published JWKS
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        HTTPException(401): if token is invalid/expired.
        HTTPException(503): if the signing keys cannot be fetched.
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        raise _invalid_token()

    alg = header.get("alg")

    if alg in SYMMETRIC_ALGORITHMS:
        if not settings.SUPABASE_JWT_SECRET:
            raise _invalid_token()
        key: Any = settings.SUPABASE_JWT_SECRET
        algorithms = [settings.SUPABASE_JWT_ALG]
    else:
        try:
            key = _signing_keys(header.get("kid"))
        except httpx.HTTPError as e:
            logger.error("Could not fetch JWKS: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Auth signing keys unavailable",
            )
        algorithms = ASYMMETRIC_ALGORITHMS

    try:
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            options={"verify_aud": False},
        )
    except JWTError:
        raise _invalid_token()


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if the user has not
    completed their profile yet.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from a Supabase JWT.

    Flow:
      1. If no Authorization header => guest => return None.
      2. Decode JWT => extract 'sub' (auth user id) and 'email'.
      3. Convert 'sub' to UUID to match User.id type.
      4. Find user profile in public.users.
      5. If missing, auto-provision minimal profile.
    """
    if credentials is None:
        return None  # guest mode

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    user = session.exec(select(User).where(User.id == sub_uuid)).first()

    # Default role = "user" (admin must be manually promoted).
    if user is None:
        user = User(
            id=sub_uuid,
            email=email,
            name=_default_name_from_email(email),
            role="user",
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info("Provisioned profile for user %s", user.id)

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if user is None.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Raises:
        HTTPException(403): if role is not admin.
    """
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
