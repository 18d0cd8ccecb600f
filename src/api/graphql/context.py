"""Per-request GraphQL context."""

from fastapi import Depends
from strawberry.fastapi import BaseContext

from api.dependencies.auth import OptionalUser
from api.dependencies.services import get_auth_service, get_profile_service
from core.exceptions import AuthenticationError
from domain.services.auth_service import AuthService
from domain.services.profile_service import ProfileService
from infrastructure.auth.provider import TokenUser


class GraphQLContext(BaseContext):
    """Services plus the caller, if the bearer token verified."""

    def __init__(
        self,
        user: TokenUser | None,
        auth_service: AuthService,
        profile_service: ProfileService,
    ) -> None:
        super().__init__()
        self.user = user
        self.auth_service = auth_service
        self.profile_service = profile_service

    def require_user(self) -> TokenUser:
        """The authenticated caller, or an UNAUTHORIZED error."""
        if self.user is None:
            raise AuthenticationError()
        return self.user


async def get_graphql_context(
    user: OptionalUser,
    auth_service: AuthService = Depends(get_auth_service),
    profile_service: ProfileService = Depends(get_profile_service),
) -> GraphQLContext:
    """Build the context. A bad or expired token yields an anonymous context."""
    return GraphQLContext(
        user=user,
        auth_service=auth_service,
        profile_service=profile_service,
    )
