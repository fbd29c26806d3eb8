"""Domain errors raised by the auth and task services.

The API layer maps each class to an HTTP status; see backend.main.
"""


class TaskTrackerError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(TaskTrackerError):
    pass


class DuplicateEmail(TaskTrackerError):
    pass


class InvalidCredentials(TaskTrackerError):
    pass


class InvalidToken(TaskTrackerError):
    pass


class UserNotFound(TaskTrackerError):
    """Credentials were accepted for an email the store does not hold."""
