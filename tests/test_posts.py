from datetime import datetime, timedelta

import pytest

from wtfrent import db, time_utils
from wtfrent.errors import CommentTooOldError, NotFoundError, ValidationError
from wtfrent.models import Comment, Post
from wtfrent.posts import (
    create_comment,
    create_post,
    delete_comment,
    list_posts,
    update_post,
)


def _post(author_id, title="Mold everywhere", content="<p>Landlord ignores it</p>", created_at=None):
    post = create_post(title, content, author_id)
    if created_at is not None:
        post.created_at = created_at
        db.session.commit()
    return post


def test_create_post_requires_title_and_content(app_ctx, make_user):
    author_id = make_user("alice")

    with pytest.raises(ValidationError) as excinfo:
        create_post("", "body", author_id)
    assert excinfo.value.field == "title"

    with pytest.raises(ValidationError) as excinfo:
        create_post("title", "", author_id)
    assert excinfo.value.field == "content"


def test_list_posts_newest_first_with_comment_counts(app_ctx, make_user):
    author_id = make_user("alice")
    older = _post(author_id, "older", created_at=datetime(2024, 1, 1, 12, 0))
    newer = _post(author_id, "newer", created_at=datetime(2024, 2, 1, 12, 0))
    create_comment("first", author_id, older.id)
    create_comment("second", author_id, older.id)

    listed = list_posts()

    assert [post.title for post, _ in listed] == ["newer", "older"]
    assert [count for _, count in listed] == [0, 2]
    assert listed[0][0].id == newer.id


def test_update_post_by_author(app_ctx, make_user):
    author_id = make_user("alice")
    post = _post(author_id)

    update_post(post.id, author_id, "Updated", "<p>New body</p>")

    refreshed = db.session.get(Post, post.id)
    assert refreshed.title == "Updated"
    assert refreshed.content == "<p>New body</p>"


def test_update_post_by_non_author_is_not_found(app_ctx, make_user):
    author_id = make_user("alice")
    other_id = make_user("bob")
    post = _post(author_id)

    with pytest.raises(NotFoundError):
        update_post(post.id, other_id, "Hijacked", "nope")

    assert db.session.get(Post, post.id).title == "Mold everywhere"


def test_create_comment_on_missing_post(app_ctx, make_user):
    author_id = make_user("alice")

    with pytest.raises(NotFoundError):
        create_comment("hello", author_id, "missing-post")


def test_delete_comment_within_window(app_ctx, make_user, monkeypatch):
    author_id = make_user("alice")
    post = _post(author_id)
    comment = create_comment("me too", author_id, post.id)
    created = datetime(2024, 3, 1, 10, 0)
    comment.created_at = created
    db.session.commit()
    monkeypatch.setattr(time_utils, "utc_now", lambda: created + timedelta(minutes=19))

    delete_comment(comment.id, author_id, post.id)

    assert Comment.query.count() == 0


def test_delete_comment_at_window_boundary(app_ctx, make_user, monkeypatch):
    author_id = make_user("alice")
    post = _post(author_id)
    comment = create_comment("me too", author_id, post.id)
    created = datetime(2024, 3, 1, 10, 0)
    comment.created_at = created
    db.session.commit()
    monkeypatch.setattr(time_utils, "utc_now", lambda: created + timedelta(minutes=20))

    delete_comment(comment.id, author_id, post.id)

    assert Comment.query.count() == 0


def test_delete_comment_after_window_is_too_old(app_ctx, make_user, monkeypatch):
    author_id = make_user("alice")
    post = _post(author_id)
    comment = create_comment("me too", author_id, post.id)
    created = datetime(2024, 3, 1, 10, 0)
    comment.created_at = created
    db.session.commit()
    monkeypatch.setattr(time_utils, "utc_now", lambda: created + timedelta(minutes=21))

    with pytest.raises(CommentTooOldError):
        delete_comment(comment.id, author_id, post.id)

    assert Comment.query.count() == 1


def test_delete_comment_by_someone_else_is_not_found(app_ctx, make_user):
    author_id = make_user("alice")
    other_id = make_user("bob")
    post = _post(author_id)
    comment = create_comment("me too", author_id, post.id)

    with pytest.raises(NotFoundError):
        delete_comment(comment.id, other_id, post.id)
    with pytest.raises(NotFoundError):
        delete_comment(comment.id, author_id, "another-post")

    assert Comment.query.count() == 1


def test_new_post_route_creates_and_redirects(client, app, login_as, make_user):
    author_id = make_user("alice")
    login_as(author_id)

    response = client.post("/post/new", data={"title": "Leaky roof", "content": "<p>drip</p>"})

    assert response.status_code == 302
    with app.app_context():
        post = Post.query.one()
        assert post.author_id == author_id
        assert response.headers["Location"] == f"/post/{post.id}"


def test_new_post_route_validation_error(client, app, login_as, make_user):
    login_as(make_user("alice"))

    response = client.post("/post/new", data={"title": "", "content": "<p>drip</p>"})

    assert response.status_code == 400
    assert b"Title is required" in response.data
    with app.app_context():
        assert Post.query.count() == 0


def test_post_page_404_for_unknown_id(client):
    assert client.get("/post/does-not-exist").status_code == 404


def test_post_page_shows_comments_and_edit_link(client, app, login_as, make_user):
    author_id = make_user("alice")
    with app.app_context():
        post = _post(author_id, "Broken heater")
        create_comment("Same here", author_id, post.id)
        post_id = post.id

    anonymous_view = client.get(f"/post/{post_id}")
    assert anonymous_view.status_code == 200
    assert b"Broken heater" in anonymous_view.data
    assert b"Same here" in anonymous_view.data
    assert f"/post/{post_id}/edit".encode() not in anonymous_view.data

    login_as(author_id)
    author_view = client.get(f"/post/{post_id}")
    assert f"/post/{post_id}/edit".encode() in author_view.data


def test_comment_route_requires_session(client, app, make_user):
    author_id = make_user("alice")
    with app.app_context():
        post_id = _post(author_id).id

    response = client.post(f"/post/{post_id}", data={"content": "hi"})

    assert response.status_code == 302
    assert response.headers["Location"] == f"/login?redirectTo=%2Fpost%2F{post_id}"


def test_comment_route_creates_and_deletes(client, app, login_as, make_user):
    author_id = make_user("alice")
    with app.app_context():
        post_id = _post(author_id).id
    login_as(author_id)

    created = client.post(f"/post/{post_id}", data={"intent": "create-comment", "content": "hi"})
    assert created.status_code == 302
    with app.app_context():
        comment_id = Comment.query.one().id

    deleted = client.post(
        f"/post/{post_id}", data={"intent": "delete-comment", "comment_id": comment_id}
    )
    assert deleted.status_code == 302
    with app.app_context():
        assert Comment.query.count() == 0


def test_edit_route_is_404_for_non_author(client, app, login_as, make_user):
    author_id = make_user("alice")
    other_id = make_user("bob")
    with app.app_context():
        post_id = _post(author_id).id
    login_as(other_id)

    assert client.get(f"/post/{post_id}/edit").status_code == 404
    response = client.post(f"/post/{post_id}/edit", data={"title": "x", "content": "y"})
    assert response.status_code == 404
    with app.app_context():
        assert db.session.get(Post, post_id).title == "Mold everywhere"


def test_edit_route_updates_for_author(client, app, login_as, make_user):
    author_id = make_user("alice")
    with app.app_context():
        post_id = _post(author_id).id
    login_as(author_id)

    form = client.get(f"/post/{post_id}/edit")
    assert b"Mold everywhere" in form.data

    response = client.post(f"/post/{post_id}/edit", data={"title": "Fixed", "content": "<p>ok</p>"})
    assert response.status_code == 302
    assert response.headers["Location"] == f"/post/{post_id}"
    with app.app_context():
        assert db.session.get(Post, post_id).title == "Fixed"


def test_index_lists_posts(client, app, make_user):
    author_id = make_user("alice")
    with app.app_context():
        _post(author_id, "Cockroaches")

    response = client.get("/")

    assert response.status_code == 200
    assert b"Cockroaches" in response.data
    assert b"Posted by alice" in response.data
