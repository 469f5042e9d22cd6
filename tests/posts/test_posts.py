import pytest

from socialfeed.core.messages import ErrorMessages
from socialfeed.modules.posts.api import router as posts_router
from socialfeed.modules.posts.models.post import Post
from tests.conftest import auth_headers

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
FIVE_MIB = 5 * 1024 * 1024


def image(name, content=PNG, content_type="image/png"):
    return ("images", (name, content, content_type))


def create_post(client, token=None, content="hello", files=None):
    headers = auth_headers(token) if token else {}
    return client.post("/api/posts", data={"content": content}, files=files, headers=headers)


def test_create_text_post(client, db, user_token):
    response = create_post(client, user_token)

    assert response.status_code == 201
    body = response.json()
    assert body["imageUrls"] == []
    post = db.query(Post).filter(Post.id == body["postId"]).one()
    assert post.content == "hello"
    assert post.images is None


def test_content_is_trimmed(client, db, user_token):
    create_post(client, user_token, content="  hello  ")

    assert db.query(Post).one().content == "hello"


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
def test_blank_content_is_rejected(client, db, user_token, content):
    response = create_post(client, user_token, content=content)

    assert response.status_code == 400
    assert response.json() == {"error": ErrorMessages.CONTENT_REQUIRED}
    assert db.query(Post).count() == 0


def test_missing_content_is_rejected(client, user_token):
    response = client.post("/api/posts", files=[image("a.png")], headers=auth_headers(user_token))

    assert response.status_code == 400


def test_blank_content_without_session_is_bad_request(client):
    assert create_post(client, content="  ").status_code == 400


def test_post_without_session_is_unauthorized(client, db, storage):
    response = create_post(client, files=[image("a.png")])

    assert response.status_code == 401
    assert response.json() == {"error": ErrorMessages.UNAUTHORIZED}
    assert storage.objects == {}


def test_images_are_stored_in_submission_order(client, db, storage, user_token):
    files = [image("first.png"), image("second.jpg", content_type="image/jpeg"), image("third.gif", content_type="image/gif")]

    response = create_post(client, user_token, files=files)

    assert response.status_code == 201
    urls = response.json()["imageUrls"]
    assert len(urls) == 3
    assert urls[0].endswith("first.png")
    assert urls[1].endswith("second.jpg")
    assert urls[2].endswith("third.gif")
    assert all("/posts/" in url for url in urls)
    assert storage.objects[urls[1]]["content_type"] == "image/jpeg"
    assert db.query(Post).one().images == urls


def test_empty_file_parts_are_ignored(client, db, user_token):
    response = create_post(client, user_token, files=[image("a.png"), image("blank.png", content=b"")])

    assert response.status_code == 201
    assert len(response.json()["imageUrls"]) == 1


def test_oversized_image_is_rejected_before_upload(client, db, storage, user_token):
    files = [image("small.png"), image("big.png", content=b"\x00" * (FIVE_MIB + 1))]

    response = create_post(client, user_token, files=files)

    assert response.status_code == 400
    assert response.json() == {"error": ErrorMessages.FILE_TOO_LARGE}
    assert "5MB" in response.json()["error"]
    assert storage.objects == {}
    assert db.query(Post).count() == 0


def test_image_at_size_limit_is_accepted(client, user_token):
    response = create_post(client, user_token, files=[image("edge.png", content=b"\x00" * FIVE_MIB)])

    assert response.status_code == 201


def test_non_image_is_rejected(client, db, storage, user_token):
    response = create_post(client, user_token, files=[image("notes.pdf", content=b"%PDF", content_type="application/pdf")])

    assert response.status_code == 400
    assert response.json() == {"error": ErrorMessages.FILE_INVALID_TYPE}
    assert storage.objects == {}


def test_more_than_four_images_is_rejected(client, db, storage, user_token):
    files = [image(f"{i}.png") for i in range(5)]

    response = create_post(client, user_token, files=files)

    assert response.status_code == 400
    assert response.json() == {"error": ErrorMessages.TOO_MANY_IMAGES}
    assert storage.objects == {}
    assert db.query(Post).count() == 0


def test_four_images_are_accepted(client, user_token):
    files = [image(f"{i}.png") for i in range(4)]

    assert create_post(client, user_token, files=files).status_code == 201


def test_failed_upload_removes_earlier_uploads(client, db, storage, user_token):
    storage.fail_after = 2
    files = [image("1.png"), image("2.png"), image("3.png")]

    response = create_post(client, user_token, files=files)

    assert response.status_code == 500
    assert response.json() == {"error": ErrorMessages.UPLOAD_FAILED}
    assert len(storage.deleted) == 2
    assert storage.objects == {}
    assert db.query(Post).count() == 0


def test_failed_insert_removes_uploads(client, db, storage, user_token, monkeypatch):
    def broken_create_post(*args, **kwargs):
        raise RuntimeError("database is gone")

    monkeypatch.setattr(posts_router, "create_post", broken_create_post)

    response = create_post(client, user_token, files=[image("1.png"), image("2.png")])

    assert response.status_code == 500
    assert response.json() == {"error": ErrorMessages.POST_CREATE_FAILED}
    assert len(storage.deleted) == 2
    assert storage.objects == {}


def test_list_posts_newest_first(client, user_token):
    create_post(client, user_token, content="first")
    create_post(client, user_token, content="second")

    response = client.get("/api/posts", headers=auth_headers(user_token))

    assert response.status_code == 200
    posts = response.json()
    assert [post["content"] for post in posts] == ["second", "first"]
    assert posts[0]["authorId"] == posts[1]["authorId"]


def test_list_posts_requires_session(client):
    assert client.get("/api/posts").status_code == 401
