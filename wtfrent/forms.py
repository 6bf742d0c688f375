from flask_wtf import FlaskForm
from wtforms import BooleanField, HiddenField, PasswordField, StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Email, EqualTo, InputRequired, Length


class JoinForm(FlaskForm):
    email = StringField(
        'Email address',
        validators=[
            DataRequired(message="Email is required"),
            Email(message="Your email address is invalid"),
        ],
    )
    username = StringField('Username', validators=[DataRequired(message="Username is required")])
    password = PasswordField(
        'Password',
        validators=[
            InputRequired(message="Password is required"),
            Length(min=8, message="The minimum password length is 8 characters"),
        ],
    )
    password_confirm = PasswordField(
        'Password confirmation',
        validators=[
            InputRequired(message="Confirm password is required"),
            EqualTo('password', message="The password do not match"),
        ],
    )
    remember_me = BooleanField('Remember me')
    redirect_to = HiddenField()
    submit = SubmitField('Join')


class LoginForm(FlaskForm):
    email = StringField(
        'Email',
        validators=[
            DataRequired(message="Email is required"),
            Email(message="Your email address is invalid"),
        ],
    )
    password = PasswordField(
        'Password',
        validators=[
            InputRequired(message="Password is required"),
            Length(min=8, message="The minimum password length is 8 characters"),
        ],
    )
    remember_me = BooleanField('Remember me')
    redirect_to = HiddenField()
    submit = SubmitField('Sign in')


class ForgotPasswordForm(FlaskForm):
    email = StringField(
        'Email address',
        validators=[
            DataRequired(message="Email is required"),
            Email(message="Your email address is invalid"),
        ],
    )
    submit = SubmitField('Request Reset')


class ResetPasswordForm(FlaskForm):
    password = PasswordField(
        'New password',
        validators=[
            InputRequired(message="Password is required"),
            Length(min=8, message="The minimum password length is 8 characters"),
        ],
    )
    password_confirm = PasswordField(
        'Confirm new password',
        validators=[
            InputRequired(message="Confirm password is required"),
            EqualTo('password', message="The password do not match"),
        ],
    )
    submit = SubmitField('Reset Password')


class PostForm(FlaskForm):
    title = StringField('Title', validators=[InputRequired(message="Title is required")])
    content = TextAreaField('Body', validators=[InputRequired(message="Body is required")])
    submit = SubmitField('Post')


class CommentForm(FlaskForm):
    content = TextAreaField('Comment', validators=[InputRequired(message="Comment is required")])
    submit = SubmitField('Submit')


class DeleteCommentForm(FlaskForm):
    comment_id = HiddenField(validators=[InputRequired(message="Comment is required")])
    submit = SubmitField('Delete')


class DeleteAccountForm(FlaskForm):
    email = StringField(
        'Confirm Email',
        validators=[InputRequired(message="you must confirm your account's email")],
    )
    submit = SubmitField("Yup, I'm sure")
