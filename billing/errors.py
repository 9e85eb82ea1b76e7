class BillingError(Exception):
    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(BillingError):
    status_code = 400


class NotFoundError(BillingError):
    status_code = 404


class ConflictError(BillingError):
    status_code = 409


class AuthError(BillingError):
    status_code = 401


class PermissionDeniedError(BillingError):
    status_code = 403


class AccountLockedError(BillingError):
    status_code = 423


class NumberGenerationFailed(BillingError):
    status_code = 500
