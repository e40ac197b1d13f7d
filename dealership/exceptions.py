"""
Custom exception classes for the dealership site.

Each error carries a default, user-facing message and the HTTP status the
API layer answers with. Controllers let them propagate; the handlers
registered in ``dealership.controllers.errors`` turn them into
``{"error": ...}`` JSON bodies.
"""


class DealershipError(Exception):
    """Base class for every error the API turns into a JSON response."""

    status_code = 500

    def __init__(self, message: str = "Error: internal server error") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ValidationError(DealershipError):
    """Raised before any remote write when submitted fields are missing or malformed."""

    status_code = 400

    def __init__(self, message: str = "Error: invalid data", fields: dict | None = None) -> None:
        self.fields = fields or {}
        super().__init__(message)


class VehicleNotFoundError(DealershipError):
    """Raised when a vehicle ID cannot be found in the catalog."""

    status_code = 404

    def __init__(self, message: str = "Error: vehicle not found") -> None:
        super().__init__(message)


class ServiceNotFoundError(DealershipError):
    """Raised when a service ID cannot be found."""

    status_code = 404

    def __init__(self, message: str = "Error: service not found") -> None:
        super().__init__(message)


class ServiceLimitError(DealershipError):
    """Raised when the admin tries to add a service past the listing cap."""

    status_code = 400

    def __init__(self, message: str = "Error: service limit reached") -> None:
        super().__init__(message)


class AuthenticationError(DealershipError):
    """Raised when an operation needs a signed-in user, or credentials are wrong."""

    status_code = 401

    def __init__(self, message: str = "Error: authentication required") -> None:
        super().__init__(message)


class AuthorizationError(DealershipError):
    """Raised when a signed-in user lacks the admin role."""

    status_code = 403

    def __init__(self, message: str = "Error: insufficient permission") -> None:
        super().__init__(message)


class DataServiceError(DealershipError):
    """Raised when the data service rejects or fails a request; message is passed through."""

    status_code = 500

    def __init__(self, message: str = "Error: data service request failed") -> None:
        super().__init__(message)


class SchemaError(DealershipError):
    """Raised when a stored record or payload does not match the canonical field names."""

    status_code = 400

    def __init__(self, message: str = "Error: record does not match schema") -> None:
        super().__init__(message)
