class WtfRentError(Exception):
    """Base class for errors the routes translate into responses."""

    message = "Something went wrong"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class NotFoundError(WtfRentError):
    message = "Not found"


class ValidationError(WtfRentError):
    def __init__(self, field, message):
        super().__init__(message)
        self.field = field


class ConflictError(WtfRentError):
    """A unique column (``email`` or ``username``) is already taken."""

    def __init__(self, field):
        super().__init__(f"A user with this {field} already exists")
        self.field = field


class CommentTooOldError(WtfRentError):
    message = "Comments can only be deleted within 20 minutes of posting"


class AccountConfirmationError(WtfRentError):
    message = "no match"
