"""GraphQL router configuration."""

from strawberry.fastapi import GraphQLRouter

from api.graphql.context import get_graphql_context
from api.graphql.schema import schema
from core.config import settings


def create_graphql_router() -> GraphQLRouter:
    """GraphQL endpoint; GraphiQL is served outside production."""
    return GraphQLRouter(
        schema,
        context_getter=get_graphql_context,
        graphql_ide="graphiql" if settings.graphiql else None,
    )
