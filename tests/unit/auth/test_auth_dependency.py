"""Unit tests for authentication dependencies."""

from uuid import uuid4

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from api.dependencies.auth import get_bearer_token, get_current_user, get_optional_user
from core.exceptions import AuthenticationError, ErrorCode
from domain.services.auth_service import AuthService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.password import BcryptPasswordHasher
from infrastructure.auth.provider import TokenUser
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def mock_auth_provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30)


@pytest.fixture
def auth_service(uow: FakeUnitOfWork, mock_auth_provider: JWTAuthProvider) -> AuthService:
    uow.revoked_tokens.is_revoked.return_value = False
    return AuthService(
        lambda: uow,
        auth_provider=mock_auth_provider,
        password_hasher=BcryptPasswordHasher(rounds=4),
    )


@pytest.fixture
def test_token_user() -> TokenUser:
    return TokenUser(id=uuid4(), username="alice")


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


# --- get_current_user ---


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_returns_user_with_valid_token(
        self,
        auth_service: AuthService,
        mock_auth_provider: JWTAuthProvider,
        test_token_user: TokenUser,
    ):
        token = mock_auth_provider.create_token(test_token_user)

        result = await get_current_user(_bearer(token), auth_service)

        assert result.username == test_token_user.username
        assert result.id == test_token_user.id

    @pytest.mark.asyncio
    async def test_raises_when_no_credentials(self, auth_service: AuthService):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(None, auth_service)

        assert exc_info.value.error_code == ErrorCode.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_raises_when_invalid_token(self, auth_service: AuthService):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(_bearer("invalid.jwt.token"), auth_service)

        assert exc_info.value.error_code == ErrorCode.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_raises_when_expired_token(
        self, auth_service: AuthService, test_token_user: TokenUser
    ):
        # Create provider with negative expiry to generate expired tokens
        provider = JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=-1)
        token = provider.create_token(test_token_user)

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(_bearer(token), auth_service)

        assert exc_info.value.error_code == ErrorCode.TOKEN_EXPIRED

    @pytest.mark.asyncio
    async def test_raises_when_token_revoked(
        self,
        auth_service: AuthService,
        uow: FakeUnitOfWork,
        mock_auth_provider: JWTAuthProvider,
        test_token_user: TokenUser,
    ):
        token = mock_auth_provider.create_token(test_token_user)
        uow.revoked_tokens.is_revoked.return_value = True

        with pytest.raises(AuthenticationError):
            await get_current_user(_bearer(token), auth_service)


# --- get_optional_user ---


class TestGetOptionalUser:
    @pytest.mark.asyncio
    async def test_returns_user_with_valid_token(
        self,
        auth_service: AuthService,
        mock_auth_provider: JWTAuthProvider,
        test_token_user: TokenUser,
    ):
        token = mock_auth_provider.create_token(test_token_user)

        result = await get_optional_user(_bearer(token), auth_service)

        assert result is not None
        assert result.username == test_token_user.username

    @pytest.mark.asyncio
    async def test_returns_none_when_no_credentials(self, auth_service: AuthService):
        assert await get_optional_user(None, auth_service) is None

    @pytest.mark.asyncio
    async def test_returns_none_for_invalid_token(self, auth_service: AuthService):
        assert await get_optional_user(_bearer("invalid.jwt.token"), auth_service) is None


# --- get_bearer_token ---


class TestGetBearerToken:
    @pytest.mark.asyncio
    async def test_returns_raw_token(self):
        assert await get_bearer_token(_bearer("abc.def.ghi")) == "abc.def.ghi"

    @pytest.mark.asyncio
    async def test_returns_none_without_header(self):
        assert await get_bearer_token(None) is None
