import uuid

from wtfrent import db
from wtfrent.time_utils import utc_now


def _new_id():
    return str(uuid.uuid4())


class User(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    reset_token = db.relationship(
        'PasswordResetToken',
        backref=db.backref('user', lazy=True),
        uselist=False,
        cascade='all, delete-orphan',
    )

    def __repr__(self):
        return f'<User {self.username}>'


class PasswordResetToken(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.String(36), db.ForeignKey('user.id', ondelete='CASCADE'), unique=True, nullable=False
    )
    token = db.Column(db.String(128), unique=True, nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)

    def is_expired(self, now=None):
        return self.expires_at < (now or utc_now())


class Post(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    author = db.relationship('User', backref=db.backref('posts', lazy=True))
    comments = db.relationship(
        'Comment',
        backref=db.backref('post', lazy=True),
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Comment.created_at',
    )

    def __repr__(self):
        return f'<Post {self.title}>'


class Comment(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    content = db.Column(db.Text, nullable=False)
    author_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False, index=True)
    post_id = db.Column(
        db.String(36), db.ForeignKey('post.id', ondelete='CASCADE'), nullable=False, index=True
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    author = db.relationship('User', backref=db.backref('comments', lazy=True))

    def __repr__(self):
        return f'<Comment {self.id} post={self.post_id}>'
