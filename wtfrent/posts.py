from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from wtfrent import db, time_utils
from wtfrent.errors import CommentTooOldError, NotFoundError, ValidationError
from wtfrent.models import Comment, Post

COMMENT_DELETE_WINDOW = timedelta(minutes=20)


def _require_text(field, value, message):
    if not isinstance(value, str) or not value:
        raise ValidationError(field, message)


def list_posts():
    """Posts newest first, each paired with its comment count."""
    comment_counts = (
        db.session.query(Comment.post_id, func.count(Comment.id).label("comment_count"))
        .group_by(Comment.post_id)
        .subquery()
    )
    rows = (
        db.session.query(Post, func.coalesce(comment_counts.c.comment_count, 0))
        .outerjoin(comment_counts, comment_counts.c.post_id == Post.id)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc())
        .all()
    )
    return [(post, int(count)) for post, count in rows]


def get_post(post_id):
    post = (
        Post.query.options(joinedload(Post.author))
        .filter_by(id=post_id)
        .first()
    )
    if not post:
        raise NotFoundError(f"Post with id {post_id} not found")
    return post


def get_post_for_author(post_id, author_id):
    post = Post.query.filter_by(id=post_id, author_id=author_id).first()
    if not post:
        raise NotFoundError(f"Post with id {post_id} not found")
    return post


def create_post(title, content, author_id):
    _require_text("title", title, "Title is required")
    _require_text("content", content, "Body is required")
    post = Post(title=title, content=content, author_id=author_id)
    db.session.add(post)
    db.session.commit()
    return post


def update_post(post_id, author_id, title, content):
    """Update a post owned by ``author_id``; anyone else gets NotFoundError."""
    _require_text("title", title, "Title is required")
    _require_text("content", content, "Body is required")
    updated = Post.query.filter_by(id=post_id, author_id=author_id).update(
        {"title": title, "content": content}, synchronize_session="fetch"
    )
    if not updated:
        db.session.rollback()
        raise NotFoundError(f"Post with id {post_id} not found")
    db.session.commit()


def create_comment(content, author_id, post_id):
    _require_text("content", content, "Comment is required")
    if db.session.get(Post, post_id) is None:
        raise NotFoundError(f"Post with id {post_id} not found")
    comment = Comment(content=content, author_id=author_id, post_id=post_id)
    db.session.add(comment)
    db.session.commit()
    return comment


def comment_is_deletable(comment, user_id, now=None):
    if not user_id or comment.author_id != user_id:
        return False
    now = now or time_utils.utc_now()
    return now - comment.created_at <= COMMENT_DELETE_WINDOW


def delete_comment(comment_id, author_id, post_id):
    comment = Comment.query.filter_by(id=comment_id, post_id=post_id, author_id=author_id).first()
    if not comment:
        raise NotFoundError("Comment not found")
    if time_utils.utc_now() - comment.created_at > COMMENT_DELETE_WINDOW:
        raise CommentTooOldError()
    db.session.delete(comment)
    db.session.commit()
