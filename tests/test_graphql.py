"""GraphQL API tests."""

import asyncio
from unittest.mock import patch

from src.models.post import Post
from src.models.user import User
from src.services import auth as auth_service
from src.services.feed_service import FeedService


def running_on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


CREATE_USER = """
mutation CreateUser($email: String!, $name: String!, $password: String!) {
  createUser(userInput: {email: $email, name: $name, password: $password}) {
    id
    email
    status
  }
}
"""

LOGIN = """
query Login($email: String!, $password: String!) {
  login(email: $email, password: $password) { token userId }
}
"""

CREATE_POST = """
mutation CreatePost($title: String!, $content: String!, $imageUrl: String) {
  createPost(postInput: {title: $title, content: $content, imageUrl: $imageUrl}) {
    id
    title
    imageUrl
    creator { id name }
  }
}
"""

SHOW_POSTS = """
query ShowPosts($page: Int) {
  showPosts(page: $page) { totalPosts posts { id title } }
}
"""

UPDATE_POST = """
mutation UpdatePost($id: ID!, $title: String!, $content: String!, $imageUrl: String) {
  updatePost(id: $id, postInput: {title: $title, content: $content, imageUrl: $imageUrl}) {
    id
    title
    imageUrl
  }
}
"""


def gql(client, query, variables=None, headers=None):
    response = client.post(
        "/graphql", json={"query": query, "variables": variables or {}}, headers=headers or {}
    )
    assert response.status_code == 200, response.text
    return response.json()


def error_code(result):
    return result["errors"][0]["extensions"]["code"]


def gql_create_post(client, headers, title="GraphQL post", image_url="images/gql.png"):
    result = gql(
        client,
        CREATE_POST,
        {"title": title, "content": "Posted over GraphQL", "imageUrl": image_url},
        headers,
    )
    assert "errors" not in result, result
    return result["data"]["createPost"]


def test_create_user_and_login(client):
    created = gql(
        client,
        CREATE_USER,
        {"email": "gql@example.com", "name": "Graph User", "password": "secret"},
    )
    user = created["data"]["createUser"]
    assert user["email"] == "gql@example.com"
    assert user["status"] == "I'm new."

    login = gql(client, LOGIN, {"email": "gql@example.com", "password": "secret"})
    assert login["data"]["login"]["userId"] == user["id"]
    assert login["data"]["login"]["token"]


def test_create_user_validation_lists_every_violation(client, db):
    result = gql(client, CREATE_USER, {"email": "nope", "name": "N", "password": "abc"})
    assert error_code(result) == "ValidationFailed"
    data = result["errors"][0]["extensions"]["data"]
    assert [v["message"] for v in data] == ["Please enter a valid email.", "Password is too short."]
    assert db.query(User).count() == 0


def test_create_user_duplicate_email(client, auth_headers):
    result = gql(
        client,
        CREATE_USER,
        {"email": auth_headers.email, "name": "Again", "password": "secret"},
    )
    assert error_code(result) == "Conflict"


def test_login_errors(client, auth_headers):
    unknown = gql(client, LOGIN, {"email": "ghost@example.com", "password": "secret"})
    assert error_code(unknown) == "NotFound"

    wrong = gql(client, LOGIN, {"email": auth_headers.email, "password": "wrong-one"})
    assert error_code(wrong) == "Unauthenticated"


def test_unauthenticated_operations(client, db):
    result = gql(client, CREATE_POST, {"title": "Hello", "content": "World!", "imageUrl": "x.png"})
    assert result["data"] is None
    assert error_code(result) == "Unauthenticated"
    assert db.query(Post).count() == 0

    bad_token = gql(client, SHOW_POSTS, headers={"Authorization": "Bearer garbage"})
    assert error_code(bad_token) == "Unauthenticated"


def test_create_post(client, db, auth_headers):
    post = gql_create_post(client, auth_headers)
    assert post["creator"] == {"id": str(auth_headers.user_id), "name": "Test User"}

    user = db.query(User).filter(User.id == auth_headers.user_id).one()
    assert [str(p.id) for p in user.posts] == [post["id"]]


def test_create_post_requires_image(client, auth_headers):
    result = gql(client, CREATE_POST, {"title": "Hello", "content": "World!"}, auth_headers)
    assert error_code(result) == "ValidationFailed"
    assert result["errors"][0]["extensions"]["data"] == [
        {"field": "image_url", "message": "No image provided."}
    ]


def test_show_posts_matches_rest_listing(client, auth_headers, create_post):
    for i in range(3):
        create_post(auth_headers, title=f"Post number {i}")

    result = gql(client, SHOW_POSTS, {"page": 2}, auth_headers)
    page = result["data"]["showPosts"]
    assert page["totalPosts"] == 3
    assert [p["title"] for p in page["posts"]] == ["Post number 0"]

    rest = client.get("/feed/posts", params={"page": 2}, headers=auth_headers).json()
    assert [p["id"] for p in rest["posts"]] == [p["id"] for p in page["posts"]]


def test_single_post(client, auth_headers):
    created = gql_create_post(client, auth_headers)
    query = "query($id: ID!) { post(id: $id) { title } }"
    result = gql(client, query, {"id": created["id"]}, auth_headers)
    assert result["data"]["post"]["title"] == "GraphQL post"

    missing = gql(client, 'query { post(id: "999") { title } }', headers=auth_headers)
    assert error_code(missing) == "NotFound"


def test_update_post_reuses_image(client, auth_headers):
    created = gql_create_post(client, auth_headers)
    result = gql(
        client,
        UPDATE_POST,
        {"id": created["id"], "title": "Edited title", "content": "Edited content"},
        auth_headers,
    )
    updated = result["data"]["updatePost"]
    assert updated["title"] == "Edited title"
    assert updated["imageUrl"] == created["imageUrl"]


def test_update_post_checks_auth_and_ownership(client, db, auth_headers, other_auth_headers):
    created = gql_create_post(client, auth_headers)
    variables = {"id": created["id"], "title": "Hijacked title", "content": "Hijacked content"}

    anonymous = gql(client, UPDATE_POST, variables)
    assert error_code(anonymous) == "Unauthenticated"

    other = gql(client, UPDATE_POST, variables, other_auth_headers)
    assert error_code(other) == "Forbidden"

    assert db.query(Post).filter(Post.id == int(created["id"])).one().title == "GraphQL post"


def test_delete_post(client, db, auth_headers, other_auth_headers):
    created = gql_create_post(client, auth_headers)
    mutation = "mutation($id: ID!) { deletePost(id: $id) }"

    forbidden = gql(client, mutation, {"id": created["id"]}, other_auth_headers)
    assert error_code(forbidden) == "Forbidden"

    result = gql(client, mutation, {"id": created["id"]}, auth_headers)
    assert result["data"]["deletePost"] is True
    assert db.query(Post).count() == 0

    again = gql(client, mutation, {"id": created["id"]}, auth_headers)
    assert error_code(again) == "NotFound"


def test_user_and_new_status(client, auth_headers):
    gql_create_post(client, auth_headers)

    result = gql(client, "query { user { name status posts { title } } }", headers=auth_headers)
    user = result["data"]["user"]
    assert user["status"] == "I'm new."
    assert [p["title"] for p in user["posts"]] == ["GraphQL post"]

    mutation = "mutation($status: String!) { newStatus(status: $status) { status } }"
    updated = gql(client, mutation, {"status": "Out hiking"}, auth_headers)
    assert updated["data"]["newStatus"]["status"] == "Out hiking"

    empty = gql(client, mutation, {"status": ""}, auth_headers)
    assert error_code(empty) == "ValidationFailed"


def test_unexpected_errors_are_masked(client, auth_headers):
    with patch(
        "src.services.feed_service.FeedService.list_posts",
        side_effect=RuntimeError("connection reset by peer"),
    ):
        result = gql(client, SHOW_POSTS, headers=auth_headers)
    assert result["errors"][0]["message"] == "Unexpected error."
    assert error_code(result) == "Internal"


def test_borrowed_image_survives_delete(
    client, auth_headers, other_auth_headers, create_post, image_store
):
    shown = create_post(auth_headers)
    name = shown["imageUrl"].split("/")[-1]

    borrowed = gql_create_post(client, other_auth_headers, image_url=f"elsewhere/{name}")
    assert borrowed["imageUrl"] == shown["imageUrl"]

    mutation = "mutation($id: ID!) { deletePost(id: $id) }"
    result = gql(client, mutation, {"id": borrowed["id"]}, other_auth_headers)
    assert result["data"]["deletePost"] is True
    assert image_store.stored_refs() == {shown["imageUrl"]}


def test_resolvers_run_blocking_work_off_the_event_loop(client, auth_headers):
    on_loop = []
    real_hash, real_list = auth_service.get_password_hash, FeedService.list_posts

    def recording_hash(password):
        on_loop.append(running_on_event_loop())
        return real_hash(password)

    def recording_list(*args, **kwargs):
        on_loop.append(running_on_event_loop())
        return real_list(*args, **kwargs)

    with patch("src.services.auth.get_password_hash", side_effect=recording_hash):
        result = gql(
            client,
            CREATE_USER,
            {"email": "async@example.com", "name": "Async", "password": "secret"},
        )
    assert "errors" not in result, result

    with patch.object(FeedService, "list_posts", autospec=True, side_effect=recording_list):
        result = gql(client, SHOW_POSTS, headers=auth_headers)
    assert "errors" not in result, result

    assert on_loop == [False, False]
