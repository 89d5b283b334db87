"""GraphQL schema: the same operations as the REST surface, resolved by the feed service.

Resolvers are coroutines; database and bcrypt work goes through
``FeedContext.run`` so it never blocks the event loop.
"""

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from src.errors import FeedError, Internal
from src.gql.context import FeedContext, get_context
from src.gql.types import AuthData, PostData, PostInputData, PostType, UserInputData, UserType
from src.services import auth as auth_service


@strawberry.type
class Query:
    @strawberry.field
    async def login(self, info: Info[FeedContext, None], email: str, password: str) -> AuthData:
        def resolve() -> AuthData:
            token, user = auth_service.login(info.context.db, email, password)
            return AuthData(token=token, user_id=str(user.id))

        return await info.context.run(resolve)

    @strawberry.field
    async def show_posts(self, info: Info[FeedContext, None], page: int | None = None) -> PostData:
        info.context.require_user_id()

        def resolve() -> PostData:
            posts, total = info.context.feed_service.list_posts(page)
            return PostData(posts=[PostType.from_model(post) for post in posts], total_posts=total)

        return await info.context.run(resolve)

    @strawberry.field
    async def post(self, info: Info[FeedContext, None], id: strawberry.ID) -> PostType:
        info.context.require_user_id()
        return await info.context.run(
            lambda: PostType.from_model(info.context.feed_service.get_post(id))
        )

    @strawberry.field
    async def user(self, info: Info[FeedContext, None]) -> UserType:
        user_id = info.context.require_user_id()
        return await info.context.run(
            lambda: UserType.from_model(info.context.feed_service.get_user(user_id))
        )


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_user(
        self, info: Info[FeedContext, None], user_input: UserInputData
    ) -> UserType:
        def resolve() -> UserType:
            user = auth_service.create_user(
                info.context.db, user_input.email, user_input.password, user_input.name
            )
            return UserType.from_model(user)

        return await info.context.run(resolve)

    @strawberry.mutation
    async def create_post(
        self, info: Info[FeedContext, None], post_input: PostInputData
    ) -> PostType:
        user_id = info.context.require_user_id()

        def resolve() -> PostType:
            post = info.context.feed_service.create_post(
                user_id, post_input.title, post_input.content, post_input.image_url
            )
            return PostType.from_model(post)

        return await info.context.run(resolve)

    @strawberry.mutation
    async def update_post(
        self, info: Info[FeedContext, None], id: strawberry.ID, post_input: PostInputData
    ) -> PostType:
        user_id = info.context.require_user_id()

        def resolve() -> PostType:
            post = info.context.feed_service.update_post(
                id, user_id, post_input.title, post_input.content, post_input.image_url
            )
            return PostType.from_model(post)

        return await info.context.run(resolve)

    @strawberry.mutation
    async def delete_post(self, info: Info[FeedContext, None], id: strawberry.ID) -> bool:
        user_id = info.context.require_user_id()
        await info.context.run(info.context.feed_service.delete_post, id, user_id)
        return True

    @strawberry.mutation
    async def new_status(self, info: Info[FeedContext, None], status: str) -> UserType:
        user_id = info.context.require_user_id()
        return await info.context.run(
            lambda: UserType.from_model(info.context.feed_service.set_status(user_id, status))
        )


def is_unclassified(error: GraphQLError) -> bool:
    """Resolver exceptions outside the FeedError taxonomy are hidden from clients."""
    return error.original_error is not None and not isinstance(error.original_error, FeedError)


class MaskInternalErrors(MaskErrors):
    """Replace unclassified errors with a generic message tagged ``Internal``."""

    def anonymise_error(self, error: GraphQLError) -> GraphQLError:
        return GraphQLError(
            message=self.error_message,
            nodes=error.nodes,
            source=error.source,
            positions=error.positions,
            path=error.path,
            extensions={"code": Internal.code},
        )


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[MaskInternalErrors(should_mask_error=is_unclassified)],
)

graphql_router = GraphQLRouter(schema, context_getter=get_context)
