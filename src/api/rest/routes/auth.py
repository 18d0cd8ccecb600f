"""Auth API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import BearerToken, CurrentUser
from api.dependencies.services import get_auth_service
from api.rest.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserResponse
from api.rest.schemas.common import ErrorResponse, MessageResponse
from api.rest.schemas.profile import ProfileResponse
from core.rate_limit import AUTH_LIMIT, READ_LIMIT, limiter
from domain.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        id=result.user.id,
        username=result.user.username,
        profiles=[ProfileResponse.from_entity(p) for p in result.profiles],
        token=result.token,
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={
        201: {"description": "Account created with one default profile"},
        400: {"model": ErrorResponse, "description": "Username already exists"},
    },
)
@limiter.limit(AUTH_LIMIT)  # type: ignore[untyped-decorator]
async def signup(
    request: Request,
    body: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Create an account, its default profile, and a session token."""
    result = await service.signup(body.username, body.password)
    return _auth_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Sign in",
    responses={
        200: {"description": "Signed in"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
@limiter.limit(AUTH_LIMIT)  # type: ignore[untyped-decorator]
async def login(
    request: Request,
    body: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Check credentials and return the user's profiles with a session token."""
    result = await service.login(body.email, body.password)
    return _auth_response(result)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Sign out",
)
@limiter.limit(AUTH_LIMIT)  # type: ignore[untyped-decorator]
async def logout(
    request: Request,
    token: BearerToken,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the presented session token. Always succeeds."""
    await service.logout(token)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the signed-in user",
    responses={
        200: {"description": "The user and their profiles"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def me(
    request: Request,
    user: CurrentUser,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Get the authenticated user with their profile list."""
    account, profiles = await service.me(user.id)
    return UserResponse(
        id=account.id,
        username=account.username,
        profiles=[ProfileResponse.from_entity(p) for p in profiles],
    )
