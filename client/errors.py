from typing import Any, Dict, Optional


class ApiError(Exception):
    """A request to the timetable API failed.

    ``status_code`` is None when the request never got a response
    (connection refused, timeout, ...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {'message': self.message, 'status_code': self.status_code, 'details': self.details}


class NotFoundError(ApiError):
    """The record does not exist (any more)."""

    def __init__(self, message: str = 'Record not found', details: Any = None):
        super().__init__(message, status_code=404, details=details)


class ResponseSchemaError(ApiError):
    """The server answered with a body that does not match the response envelope."""


class FormValidationError(ValueError):
    """A draft failed validation; ``errors`` maps field name -> message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__('; '.join(f'{k}: {v}' for k, v in errors.items()))
