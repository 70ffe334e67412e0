import json

INTERNAL_ERROR = "INTERNAL_ERROR"
INVALID_STATE = "INVALID_STATE"
INVALID_PARAMETER_VALUE = "INVALID_PARAMETER_VALUE"
RESOURCE_DOES_NOT_EXIST = "RESOURCE_DOES_NOT_EXIST"
RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
TEMPORARILY_UNAVAILABLE = "TEMPORARILY_UNAVAILABLE"

ERROR_CODE_TO_HTTP_STATUS = {
    INTERNAL_ERROR: 500,
    INVALID_STATE: 500,
    TEMPORARILY_UNAVAILABLE: 503,
    RESOURCE_DOES_NOT_EXIST: 404,
    RESOURCE_ALREADY_EXISTS: 409,
    INVALID_PARAMETER_VALUE: 400,
}


class ConsoleException(Exception):
    """
    Generic exception thrown to surface failure information about external-facing operations.
    The error message associated with this exception may be exposed to clients in HTTP responses,
    so it must never contain credential material.
    """

    def __init__(self, message, error_code=INTERNAL_ERROR, **kwargs):
        """
        Args:
            message: The message or exception describing the error that occurred. This will be
                included in the exception's serialized JSON representation.
            error_code: An appropriate error code for the error that occurred; it will be
                included in the exception's serialized JSON representation. This should
                be one of the codes defined in this module.
            kwargs: Additional key-value pairs to include in the serialized JSON representation
                of the ConsoleException.
        """
        if error_code not in ERROR_CODE_TO_HTTP_STATUS:
            error_code = INTERNAL_ERROR
        self.error_code = error_code
        message = str(message)
        self.message = message
        self.json_kwargs = kwargs
        super().__init__(message)

    def to_dict(self):
        exception_dict = {"error_code": self.error_code, "message": self.message}
        exception_dict.update(self.json_kwargs)
        return exception_dict

    def serialize_as_json(self):
        return json.dumps(self.to_dict())

    def get_http_status_code(self):
        return ERROR_CODE_TO_HTTP_STATUS.get(self.error_code, 500)

    @classmethod
    def invalid_parameter_value(cls, message, **kwargs):
        """Constructs a `ConsoleException` object with the `INVALID_PARAMETER_VALUE` error code.

        Args:
            message: The message describing the error that occurred.
            kwargs: Additional key-value pairs to include in the serialized JSON representation
                of the ConsoleException.
        """
        return cls(message, error_code=INVALID_PARAMETER_VALUE, **kwargs)


class NotFoundError(ConsoleException):
    """Raised when a requested resource, or the root of a provider's resource graph, is absent"""

    def __init__(self, message, kind=None, **kwargs):
        if kind is not None:
            kwargs["kind"] = kind
        self.kind = kind
        super().__init__(message, error_code=RESOURCE_DOES_NOT_EXIST, **kwargs)


class AlreadyExistsError(ConsoleException):
    """Raised when a resource with the same name already exists in the namespace"""

    def __init__(self, message, kind=None, name=None, **kwargs):
        if kind is not None:
            kwargs["kind"] = kind
        if name is not None:
            kwargs["name"] = name
        self.kind = kind
        self.name = name
        super().__init__(message, error_code=RESOURCE_ALREADY_EXISTS, **kwargs)


class StoreError(ConsoleException):
    """Wraps any other failure reported by the resource store, tagged with the resource kind"""

    def __init__(self, message, kind=None, **kwargs):
        if kind is not None:
            kwargs["kind"] = kind
        self.kind = kind
        super().__init__(message, error_code=INTERNAL_ERROR, **kwargs)


class IncompleteGraphError(ConsoleException):
    """Raised when a resource graph lacks a structurally required member"""

    def __init__(self, message, missing=None, **kwargs):
        self.missing = list(missing or [])
        if self.missing:
            kwargs["missing"] = self.missing
        super().__init__(message, error_code=INVALID_STATE, **kwargs)


class UnrecognizedResourceError(ConsoleException):
    """Raised when an object cannot be classified as one of the known resource kinds"""

    def __init__(self, message, **kwargs):
        super().__init__(message, error_code=INVALID_STATE, **kwargs)


class ValidationError(ConsoleException):
    """Raised when a required provider field is missing or cannot be resolved"""

    def __init__(self, message, field=None, **kwargs):
        if field is not None:
            kwargs["field"] = field
        self.field = field
        super().__init__(message, error_code=INVALID_PARAMETER_VALUE, **kwargs)
