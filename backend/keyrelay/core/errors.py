# keyrelay/core/errors.py


class RelayError(Exception):
    """Base for errors that are rendered to clients as ``{"error": message}``."""

    status_code = 500
    message = "internal error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(RelayError):
    status_code = 400
    message = "missing fields"


class UnknownSenderError(ValidationError):
    message = "unknown sender"


class NotFoundError(RelayError):
    status_code = 404
    message = "user not found"


class AuthError(RelayError):
    status_code = 401
    message = "invalid api key"


class InternalError(RelayError):
    pass
