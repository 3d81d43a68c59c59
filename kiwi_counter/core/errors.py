from typing import Optional


class CounterAppError(Exception):
    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(CounterAppError):
    code = "invalid-input"
    status_code = 400
    default_message = "Missing fields"


class DuplicateUsername(CounterAppError):
    code = "duplicate-username"
    status_code = 409
    default_message = "Username already exists"


class InvalidCredentials(CounterAppError):
    code = "invalid-credentials"
    status_code = 401
    default_message = "Invalid credentials"


class Unauthorized(CounterAppError):
    code = "unauthorized"
    status_code = 401
    default_message = "Login required"


class NotFound(CounterAppError):
    code = "not-found"
    status_code = 404
    default_message = "Not found"


class StorageUnavailable(CounterAppError):
    code = "storage-unavailable"
    status_code = 500
    default_message = "Server error"
