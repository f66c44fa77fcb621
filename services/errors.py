# services/errors.py


class ApiError(Exception):
    """Base for failures that are answered with a structured JSON body."""
    status_code = 500

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self):
        body = dict(self.payload)
        body['message'] = self.message
        return body


class ValidationError(ApiError):
    status_code = 400


class AuthError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class ConflictError(ApiError):
    # Slot overlap, unavailable slot, duplicate review window
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class DependencyError(ApiError):
    status_code = 500
