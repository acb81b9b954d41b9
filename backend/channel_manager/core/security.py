"""Firebase JWT verification and client (tenant) resolution."""

import logging
from typing import Any, Optional
from uuid import UUID

import firebase_admin
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth, credentials, exceptions as firebase_exceptions
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.core.config import get_settings
from channel_manager.core.database import get_db

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_firebase_app() -> firebase_admin.App:
    """Initialize the Firebase Admin SDK on first use."""
    if not firebase_admin._apps:
        settings = get_settings()
        options = {"projectId": settings.firebase_project_id}
        if settings.google_application_credentials:
            cred = credentials.Certificate(settings.google_application_credentials)
            return firebase_admin.initialize_app(cred, options)
        return firebase_admin.initialize_app(options=options)
    return firebase_admin.get_app()


class AuthenticatedUser:
    """Represents an authenticated user from Firebase JWT."""

    def __init__(
        self,
        uid: str,
        email: Optional[str] = None,
        email_verified: bool = False,
        claims: Optional[dict[str, Any]] = None,
    ):
        self.uid = uid
        self.email = email
        self.email_verified = email_verified
        self.claims = claims or {}
        self.db_user_id: Optional[UUID] = None
        self.client_id: Optional[UUID] = None


async def verify_firebase_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    """Verify Firebase JWT and return authenticated user.

    This dependency NEVER mints JWTs - it only verifies tokens issued by Firebase.
    """
    token = credentials.credentials

    try:
        decoded_token = auth.verify_id_token(token, app=get_firebase_app())
    except auth.ExpiredIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.warning(f"[AUTH] Token verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        email_verified=decoded_token.get("email_verified", False),
        claims=decoded_token,
    )


async def get_current_user(
    auth_user: AuthenticatedUser = Depends(verify_firebase_token),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Get current user with database context (user_id, client_id)."""
    from channel_manager.models.user import User
    from channel_manager.models.client import Client

    # Find user by Firebase UID
    result = await db.execute(
        select(User).where(User.firebase_uid == auth_user.uid)
    )
    user = result.scalar_one_or_none()

    if user:
        auth_user.db_user_id = user.id

        # A user may be linked to several clients; the oldest link wins
        client_result = await db.execute(
            select(Client.id)
            .where(Client.user_id == user.id)
            .order_by(Client.id)
            .limit(1)
        )
        auth_user.client_id = client_result.scalar_one_or_none()

    return auth_user


def require_client(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require user to be linked to a client profile."""
    if not current_user.client_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account isn't linked to a client profile. Please contact support.",
        )
    return current_user


def client_ip(request: Request) -> Optional[str]:
    """Caller IP for audit entries."""
    return request.client.host if request.client else None
