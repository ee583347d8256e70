from __future__ import annotations


class SantaError(Exception):
    """Base error; carries the HTTP status the API renders it with."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"error": self.message}


class BadRequest(SantaError):
    status_code = 400
    message = "Bad request"


class InsufficientParticipants(SantaError):
    status_code = 400
    message = "Need at least 2 users"


class NotReady(SantaError):
    status_code = 400
    message = "Assignments not generated yet"


class InvalidCredentials(SantaError):
    status_code = 401
    message = "Invalid credentials"


class Unauthorized(SantaError):
    status_code = 401
    message = "Authentication required"


class Forbidden(SantaError):
    status_code = 403
    message = "Not authorized"


class NotFound(SantaError):
    status_code = 404
    message = "No assignment found"


class DuplicateParticipant(SantaError):
    status_code = 409
    message = "User already exists"


class StoreFailure(SantaError):
    status_code = 500
    message = "Server error"


class DerangementFailed(SantaError):
    """No fixed-point-free shuffle was found within the attempt bound. Retriable."""

    status_code = 503
    message = "Could not generate assignments, please try again"
