"""GraphQL object and input types."""

import strawberry
from strawberry.types import Info

from src.gql.context import FeedContext
from src.models.post import Post
from src.models.user import User


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    name: str
    email: str
    status: str
    instance: strawberry.Private[User]

    @strawberry.field
    async def posts(self, info: Info[FeedContext, None]) -> list["PostType"]:
        return await info.context.run(
            lambda: [PostType.from_model(post) for post in self.instance.posts]
        )

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(
            id=strawberry.ID(str(user.id)),
            name=user.name,
            email=user.email,
            status=user.status,
            instance=user,
        )


@strawberry.type(name="Post")
class PostType:
    id: strawberry.ID
    title: str
    content: str
    image_url: str
    created_at: str
    updated_at: str
    instance: strawberry.Private[Post]

    @strawberry.field
    async def creator(self, info: Info[FeedContext, None]) -> UserType:
        return await info.context.run(lambda: UserType.from_model(self.instance.creator))

    @classmethod
    def from_model(cls, post: Post) -> "PostType":
        return cls(
            id=strawberry.ID(str(post.id)),
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            created_at=post.created_at.isoformat(),
            updated_at=post.updated_at.isoformat(),
            instance=post,
        )


@strawberry.type
class PostData:
    posts: list[PostType]
    total_posts: int


@strawberry.type
class AuthData:
    token: str
    user_id: str


@strawberry.input
class UserInputData:
    email: str
    name: str
    password: str


@strawberry.input
class PostInputData:
    title: str
    content: str
    image_url: str | None = None
