from typing import List


class SavorlyError(Exception):
    """Base class for errors raised by the data and session layer."""


class ValidationFailed(SavorlyError):
    def __init__(self, messages: List[str]):
        super().__init__("; ".join(messages))
        self.messages = messages


class AuthError(SavorlyError):
    message = "Authentication failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class UserNotFound(AuthError):
    message = "No user with this email"


class InvalidCredentials(AuthError):
    message = "Wrong password"


class PasswordMismatch(AuthError):
    message = "Passwords do not match"


class DuplicateEmail(AuthError):
    message = "A user with this email already exists"


class DuplicateUsername(AuthError):
    message = "A user with this username already exists"


class NotAuthenticated(SavorlyError):
    def __init__(self, message: str = "Please log in first"):
        super().__init__(message)


class PersistenceError(SavorlyError):
    """A database write failed; the original exception is chained."""
