"""GraphQL schema for accounts and profiles."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional
from uuid import UUID

import strawberry
from graphql import GraphQLError
from strawberry.types import Info

from api.graphql.context import GraphQLContext
from api.graphql.types import AuthPayload, Profile, User
from core.exceptions import AppException, ProfileNotFoundError
from domain.services.auth_service import AuthResult


@contextmanager
def _app_errors() -> Iterator[None]:
    """Re-raise domain errors as GraphQL errors carrying the error code."""
    try:
        yield
    except AppException as exc:
        raise GraphQLError(
            exc.message,
            extensions={"code": exc.error_code.value, "details": exc.details},
        ) from exc


def _parse_profile_id(value: strawberry.ID) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ProfileNotFoundError(str(value)) from e


def _auth_payload(result: AuthResult) -> AuthPayload:
    return AuthPayload(
        token=result.token,
        user=User.from_entity(result.user, result.profiles),
    )


@strawberry.type
class Query:
    @strawberry.field(description="The signed-in user, or null when anonymous")
    async def me(self, info: Info[GraphQLContext, None]) -> Optional[User]:
        ctx = info.context
        if ctx.user is None:
            return None
        with _app_errors():
            user, profiles = await ctx.auth_service.me(ctx.user.id)
        return User.from_entity(user, profiles)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def signup(
        self, info: Info[GraphQLContext, None], username: str, password: str
    ) -> AuthPayload:
        with _app_errors():
            result = await info.context.auth_service.signup(username, password)
        return _auth_payload(result)

    @strawberry.mutation
    async def login(
        self, info: Info[GraphQLContext, None], username: str, password: str
    ) -> AuthPayload:
        with _app_errors():
            result = await info.context.auth_service.login(username, password)
        return _auth_payload(result)

    @strawberry.mutation(name="createProfile")
    async def create_profile(
        self, info: Info[GraphQLContext, None], name: str, avatar: str
    ) -> Profile:
        ctx = info.context
        with _app_errors():
            user = ctx.require_user()
            profile = await ctx.profile_service.add_profile(user.id, name, avatar=avatar)
        return Profile.from_entity(profile)

    @strawberry.mutation(name="updateProfile")
    async def update_profile(
        self,
        info: Info[GraphQLContext, None],
        id: strawberry.ID,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Profile:
        ctx = info.context
        with _app_errors():
            user = ctx.require_user()
            profile = await ctx.profile_service.update_profile(
                user.id, _parse_profile_id(id), name=name, avatar=avatar
            )
        return Profile.from_entity(profile)

    @strawberry.mutation(name="deleteProfile")
    async def delete_profile(self, info: Info[GraphQLContext, None], id: strawberry.ID) -> bool:
        ctx = info.context
        with _app_errors():
            user = ctx.require_user()
            return await ctx.profile_service.delete_profile(user.id, _parse_profile_id(id))


schema = strawberry.Schema(query=Query, mutation=Mutation)
