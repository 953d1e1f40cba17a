"""Error taxonomy shared by the service layer and the HTTP boundary.

Services raise these; ``otp_gateway.api.errors`` turns them into a JSON
``{"error": message}`` body with the class-level ``status_code``.
"""


class OtpGatewayError(Exception):
    """Base class for every failure the gateway reports to a client."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequestError(OtpGatewayError):
    """Malformed input: bad JSON, unparseable id, unknown channel, bad range."""

    status_code = 400


class UnauthorizedError(OtpGatewayError):
    """Missing, invalid or expired token, or wrong credentials."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ForbiddenError(OtpGatewayError):
    """Authenticated, but the role does not satisfy the route."""

    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(OtpGatewayError):
    status_code = 404


class ConflictError(OtpGatewayError):
    """State conflict, e.g. a second administrator."""

    status_code = 409


class AlreadyExistsError(ConflictError):
    """A row with the same unique key already exists."""


class UnsupportedMediaTypeError(OtpGatewayError):
    status_code = 415

    def __init__(self, message: str = "Content-Type must be application/json") -> None:
        super().__init__(message)


class InternalError(OtpGatewayError):
    status_code = 500


class NotificationError(InternalError):
    """A delivery transport failed to hand the code over."""
