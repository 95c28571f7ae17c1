"""
API Dependencies
Per-request services built over the shared MongoDB handle, and the
authenticated identity set by the authentication gate.
"""

from datetime import timedelta

from fastapi import Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from formation_api.config import settings
from formation_api.core.identity import Identity
from formation_api.core.security import TokenService
from formation_api.services.auth_service import AuthenticationService
from formation_api.services.formation_service import FormationService
from formation_api.services.user_service import UsersService
from formation_api.services.user_store import UserStore


def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Database handle opened in the application lifespan."""
    return request.app.state.db


def get_user_store(request: Request) -> UserStore:
    return UserStore(get_db(request)[settings.MONGODB_USERS_COLLECTION])


def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.SECRET_KEY,
        valid_for=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        algorithm=settings.ALGORITHM,
    )


def get_authentication_service(
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticationService:
    return AuthenticationService(users, tokens, back_end_url=settings.BACK_END_URL)


def get_users_service(users: UserStore = Depends(get_user_store)) -> UsersService:
    return UsersService(users)


def get_formation_service(request: Request) -> FormationService:
    collection = get_db(request)[settings.MONGODB_FORMATIONS_COLLECTION]
    return FormationService(
        collection,
        suggestion_limit=settings.SUGGESTION_LIMIT,
        search_limit=settings.SEARCH_LIMIT,
    )


def get_current_identity(request: Request) -> Identity:
    """Identity attached by the authentication gate on protected routes."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
