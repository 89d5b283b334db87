"""GraphQL transport over the feed service."""

from src.gql.schema import graphql_router, schema

__all__ = ["schema", "graphql_router"]
