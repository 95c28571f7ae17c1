"""Authentication endpoints."""

import structlog
from fastapi import APIRouter, Depends, status

from formation_api.api.deps import get_authentication_service
from formation_api.schemas.auth import AuthenticationResponse, LoginRequest, RegisterRequest
from formation_api.schemas.common import ApiResponse
from formation_api.services.auth_service import AuthenticationService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[AuthenticationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    service: AuthenticationService = Depends(get_authentication_service),
):
    """Create an account and return its session token."""
    token = await service.register(request.email, request.password, request.name)
    logger.info("user_registered", email=request.email)

    return ApiResponse.success("User registered successfully", AuthenticationResponse(token=token))


@router.post("/login", response_model=ApiResponse[AuthenticationResponse])
async def login(
    request: LoginRequest,
    service: AuthenticationService = Depends(get_authentication_service),
):
    """Exchange e-mail and password for a session token."""
    token = await service.authenticate(request.email, request.password)
    return ApiResponse.success("User logged in successfully", AuthenticationResponse(token=token))
