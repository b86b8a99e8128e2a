# backend/core/auth.py

"""
Authentication gate backed by Firebase Authentication.

Clients sign in against Firebase directly and send the resulting ID token
as a bearer token. The backend verifies the token and then requires an
admin profile with ``role == "admin"`` for the token's uid.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth, exceptions as firebase_exceptions
from pydantic import BaseModel

from .config import settings
from .exceptions import (
    AuthenticationError,
    ConflictError,
    PermissionDeniedError,
    StoreError,
)
from .stores import DocumentStore

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class AuthenticatedAdmin(BaseModel):
    uid: str
    email: Optional[str] = None


class AuthProvider(ABC):
    """Identity provider used by the authentication gate and sign-up."""

    @abstractmethod
    async def verify_token(self, token: str) -> AuthenticatedAdmin:
        """Return the identity behind an ID token or raise AuthenticationError."""

    @abstractmethod
    async def create_user(self, email: str, password: str, display_name: str) -> str:
        """Create an e-mail/password account and return its uid."""

    @abstractmethod
    async def revoke_sessions(self, uid: str) -> None:
        """Invalidate every refresh token issued to ``uid``."""


class FirebaseAuthProvider(AuthProvider):
    def __init__(self, app=None):
        self.app = app

    async def verify_token(self, token: str) -> AuthenticatedAdmin:
        try:
            claims = await asyncio.to_thread(firebase_auth.verify_id_token, token, self.app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.warning(f"Rejected ID token: {e}")
            raise AuthenticationError("Invalid or expired token")
        return AuthenticatedAdmin(uid=claims["uid"], email=claims.get("email"))

    async def create_user(self, email: str, password: str, display_name: str) -> str:
        try:
            user = await asyncio.to_thread(
                firebase_auth.create_user,
                email=email,
                password=password,
                display_name=display_name,
                app=self.app,
            )
        except firebase_auth.EmailAlreadyExistsError:
            raise ConflictError("An account with this email already exists")
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(str(e), store="auth")
        logger.info(f"Created auth account {user.uid}")
        return user.uid

    async def revoke_sessions(self, uid: str) -> None:
        try:
            await asyncio.to_thread(firebase_auth.revoke_refresh_tokens, uid, self.app)
        except firebase_exceptions.FirebaseError as e:
            raise StoreError(str(e), store="auth")


def get_auth_provider(request: Request) -> AuthProvider:
    return request.app.state.auth_provider


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: AuthProvider = Depends(get_auth_provider),
) -> AuthenticatedAdmin:
    """Verify the bearer token without checking for an admin profile."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")
    return await provider.verify_token(credentials.credentials)


async def require_admin(
    identity: AuthenticatedAdmin, document_store: DocumentStore
) -> AuthenticatedAdmin:
    """Refuse identities without an admin profile."""
    profile = await document_store.get(settings.admins_collection, identity.uid)
    if not profile or profile.get("role") != "admin":
        logger.warning(f"Non-admin identity {identity.uid} refused")
        raise PermissionDeniedError(
            "You are not registered. Please contact administrator"
        )
    return identity


async def authenticate_admin(
    token: Optional[str], provider: AuthProvider, document_store: DocumentStore
) -> AuthenticatedAdmin:
    """Token check for transports without an Authorization header (WebSocket)."""
    if not token:
        raise AuthenticationError("Missing bearer token")
    identity = await provider.verify_token(token)
    return await require_admin(identity, document_store)


async def get_current_admin(
    identity: AuthenticatedAdmin = Depends(get_current_identity),
    document_store: DocumentStore = Depends(get_document_store),
) -> AuthenticatedAdmin:
    """Require a verified token whose uid owns an admin profile."""
    return await require_admin(identity, document_store)
