"""Dependency injection for FastAPI routes."""

import time
from datetime import date

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from jwt import PyJWKClient

from app.config import get_settings, Settings
from app.database import get_authenticated_postgrest_client, Database
from app.logging_config import get_logger
from app.services.ai_service import BaseAIService, get_ai_service
from app.services.budget_service import BudgetService
from app.utils.dates import local_today


security = HTTPBearer()
logger = get_logger("dependencies")

# Cache for JWKS client
_jwks_client: PyJWKClient | None = None
_jwks_client_timestamp: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get cached JWKS client for Supabase JWT verification."""
    global _jwks_client, _jwks_client_timestamp

    current_time = time.time()

    # Refresh if cache expired or not initialized
    if _jwks_client is None or (current_time - _jwks_client_timestamp) > JWKS_CACHE_TTL:
        jwks_url = f"{settings.supabase_url}/auth/v1/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url)
        _jwks_client_timestamp = current_time

    return _jwks_client


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_with_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> tuple[dict, str]:
    """
    Validate JWT token using JWKS and return (user_dict, token).

    Validates the JWT issued by Supabase Auth, fetches or auto-creates the
    user profile, and returns both the user dict and the raw access token.
    FastAPI caches this per-request so it only runs once even when
    both get_current_user and get_database depend on it.
    """
    token = credentials.credentials

    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256", "ES256"],
            audience="authenticated",
            issuer=f"{settings.supabase_url}/auth/v1",
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        raise _unauthorized(f"Token verification failed: {str(e)}")

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token: missing user ID")

    # PostgREST client with the user's JWT so RLS policies see auth.uid()
    database = Database(get_authenticated_postgrest_client(token))
    user = database.get_user_by_id(user_id)

    if user is None:
        # Auto-create profile for users who signed up directly with Supabase Auth
        user = database.create_user(
            {
                "id": user_id,
                "email": payload.get("email"),
                "display_name": None,
            }
        )
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create user record",
            )
        logger.info(f"Created user profile for {user_id}")

    return user, token


async def get_current_user(
    user_and_token: tuple[dict, str] = Depends(get_current_user_with_token),
) -> dict:
    """Return just the user dict."""
    user, _token = user_and_token
    return user


async def get_database(
    user_and_token: tuple[dict, str] = Depends(get_current_user_with_token),
) -> Database:
    """Get a Database instance authenticated with the current user's JWT."""
    _user, token = user_and_token
    return Database(get_authenticated_postgrest_client(token))


async def get_budget_service(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> BudgetService:
    """Budget service bound to the current user's database session."""
    return BudgetService(db=db, tz=settings.tzinfo)


async def get_ai(settings: Settings = Depends(get_settings)) -> BaseAIService:
    """AI provider, or 503 when none is configured."""
    try:
        return get_ai_service()
    except ValueError as e:
        logger.error(f"AI service unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service is not configured",
        )


async def get_today(settings: Settings = Depends(get_settings)) -> date:
    """Today's date in the configured local timezone."""
    return local_today(settings.tzinfo)
