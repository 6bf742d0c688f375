import logging

import requests
from flask import Blueprint, abort, redirect, render_template, request, url_for

from wtfrent.accounts import delete_account
from wtfrent.auth import (
    create_user_session,
    get_user,
    get_user_id,
    logout as logout_session,
    require_user,
    require_user_id,
    safe_redirect,
)
from wtfrent.errors import (
    AccountConfirmationError,
    CommentTooOldError,
    ConflictError,
    NotFoundError,
)
from wtfrent.forms import (
    CommentForm,
    DeleteAccountForm,
    DeleteCommentForm,
    ForgotPasswordForm,
    JoinForm,
    LoginForm,
    PostForm,
    ResetPasswordForm,
)
from wtfrent.models import User
from wtfrent.posts import (
    comment_is_deletable,
    create_comment,
    create_post,
    delete_comment,
    get_post,
    get_post_for_author,
    list_posts,
    update_post,
)
from wtfrent.time_utils import format_timestamp
from wtfrent.users import (
    create_user,
    get_valid_reset_token,
    issue_reset_token,
    reset_password as reset_user_password,
    verify_login,
)

bp = Blueprint("main", __name__)

INVALID_LOGIN_MESSAGE = "Invalid email or password"
RESET_REQUESTED_MESSAGE = "Check your email for password reset instructions!"


def _render_post_page(post_id, comment_form=None, delete_error=None, status=200):
    try:
        post = get_post(post_id)
    except NotFoundError:
        abort(404)

    viewer_id = get_user_id()
    comments = [
        {
            "comment": comment,
            "created": format_timestamp(comment.created_at),
            "deletable": comment_is_deletable(comment, viewer_id),
        }
        for comment in post.comments
    ]
    return (
        render_template(
            "post.html",
            post=post,
            created=format_timestamp(post.created_at),
            comments=comments,
            user_created_post=viewer_id is not None and post.author_id == viewer_id,
            comment_form=comment_form or CommentForm(formdata=None),
            delete_error=delete_error,
        ),
        status,
    )


@bp.route("/")
def index():
    posts = [
        {
            "post": post,
            "comment_count": comment_count,
            "created": format_timestamp(post.created_at),
            "updated": format_timestamp(post.updated_at),
        }
        for post, comment_count in list_posts()
    ]
    return render_template("index.html", posts=posts, user=get_user())


@bp.route("/post/new", methods=["GET", "POST"])
def new_post():
    user_id = require_user_id()
    form = PostForm()

    if request.method == "POST":
        if not form.validate_on_submit():
            return render_template("post_form.html", form=form, heading="New Post"), 400
        post = create_post(form.title.data, form.content.data, user_id)
        return redirect(url_for("main.post_detail", post_id=post.id))

    return render_template("post_form.html", form=form, heading="New Post")


@bp.route("/post/<post_id>", methods=["GET", "POST"])
def post_detail(post_id):
    if request.method == "GET":
        return _render_post_page(post_id)

    user_id = require_user_id()
    intent = request.form.get("intent", "create-comment")

    if intent == "delete-comment":
        form = DeleteCommentForm()
        if not form.validate_on_submit():
            abort(400)
        try:
            delete_comment(form.comment_id.data, user_id, post_id)
        except NotFoundError:
            abort(404)
        except CommentTooOldError as exc:
            return _render_post_page(post_id, delete_error=exc.message, status=400)
        return redirect(url_for("main.post_detail", post_id=post_id))

    form = CommentForm()
    if not form.validate_on_submit():
        return _render_post_page(post_id, comment_form=form, status=400)
    try:
        create_comment(form.content.data, user_id, post_id)
    except NotFoundError:
        abort(404)
    return redirect(url_for("main.post_detail", post_id=post_id))


@bp.route("/post/<post_id>/edit", methods=["GET", "POST"])
def edit_post(post_id):
    user_id = require_user_id()
    try:
        post = get_post_for_author(post_id, user_id)
    except NotFoundError:
        abort(404)

    form = PostForm(obj=post)
    if request.method == "POST":
        if not form.validate_on_submit():
            return render_template("post_form.html", form=form, heading="Edit Post"), 400
        try:
            update_post(post_id, user_id, form.title.data, form.content.data)
        except NotFoundError:
            abort(404)
        return redirect(url_for("main.post_detail", post_id=post_id))

    return render_template("post_form.html", form=form, heading="Edit Post")


@bp.route("/join", methods=["GET", "POST"])
def join():
    if get_user_id():
        return redirect("/")

    form = JoinForm()
    if request.method == "GET":
        form.redirect_to.data = request.args.get("redirectTo", "")
        return render_template("join.html", form=form)

    if not form.validate_on_submit():
        return render_template("join.html", form=form), 422

    try:
        user = create_user(form.email.data, form.password.data, form.username.data)
    except ConflictError as exc:
        form[exc.field].errors = [exc.message]
        return render_template("join.html", form=form), 400

    return create_user_session(
        user.id,
        remember=form.remember_me.data,
        redirect_to=safe_redirect(form.redirect_to.data),
    )


@bp.route("/login", methods=["GET", "POST"])
def login():
    if get_user_id():
        return redirect("/")

    form = LoginForm()
    if request.method == "GET":
        form.redirect_to.data = request.args.get("redirectTo", "")
        return render_template("login.html", form=form)

    if not form.validate_on_submit():
        return render_template("login.html", form=form), 400

    user = verify_login(form.email.data, form.password.data)
    if not user:
        logging.info("Failed login for %s", form.email.data)
        form.email.errors = [INVALID_LOGIN_MESSAGE]
        return render_template("login.html", form=form), 400

    redirect_to = form.redirect_to.data or request.args.get("redirectTo")
    return create_user_session(
        user.id,
        remember=form.remember_me.data,
        redirect_to=safe_redirect(redirect_to),
    )


@bp.route("/logout", methods=["GET", "POST"])
def logout():
    if request.method == "GET":
        return redirect("/")
    return logout_session(safe_redirect(request.args.get("returnTo")))


@bp.route("/forgot-password", methods=["GET", "POST"])
def forgot_password():
    form = ForgotPasswordForm()
    if request.method == "GET":
        return render_template("forgot_password.html", form=form)

    if not form.validate_on_submit():
        return render_template("forgot_password.html", form=form), 422

    reset_token = issue_reset_token(form.email.data)
    if reset_token:
        # no mail transport yet; the link goes to the log
        reset_link = url_for("main.reset_password", token=reset_token.token, _external=True)
        logging.info("Password reset link: %s", reset_link)
    return render_template("forgot_password.html", form=form, message=RESET_REQUESTED_MESSAGE)


@bp.route("/reset-password/<token>", methods=["GET", "POST"])
def reset_password(token):
    reset_token = get_valid_reset_token(token)
    if not reset_token:
        return redirect(url_for("main.forgot_password"))

    form = ResetPasswordForm()
    if request.method == "POST":
        if not form.validate_on_submit():
            return render_template("reset_password.html", form=form, token=token), 422
        reset_user_password(reset_token, form.password.data)
        return redirect(url_for("main.login"))

    return render_template("reset_password.html", form=form, token=token)


@bp.route("/profile", methods=["GET", "POST"])
def profile():
    user = require_user()
    form = DeleteAccountForm()

    if request.method == "POST":
        if not form.validate_on_submit():
            return render_template("profile.html", user=user, form=form), 400
        try:
            delete_account(user.id, form.email.data)
        except AccountConfirmationError as exc:
            form.email.errors = [exc.message]
            return render_template("profile.html", user=user, form=form), 400
        return logout_session("/")

    return render_template("profile.html", user=user, form=form)


@bp.route("/health")
def health():
    host = request.host
    try:
        # database reachable and the app answers a HEAD request to itself
        User.query.count()
        response = requests.head(f"http://{host}/", timeout=5)
        response.raise_for_status()
    except Exception:
        logging.exception("healthcheck failed")
        return "ERROR", 500
    return "OK"
