"""Exception types raised while dispatching Lambda invocations."""
from typing import Optional

from sidecar.constants import ERROR_CODE_RESOURCE_NOT_FOUND, HTTP_STATUS_NOT_FOUND


class SidecarException(Exception):
    """Base class for all errors raised by sidecar itself."""

    pass


class FunctionNotFoundError(SidecarException):
    """Raised when Lambda reports that the invoked function (or its alias) does not exist."""

    function_name: str

    def __init__(self, function_name: str, message: str = None):
        self.function_name = function_name
        super(FunctionNotFoundError, self).__init__(
            message
            or f"Lambda function {function_name} not found. Make sure it is deployed and activated."
        )


class InvalidDescriptorError(SidecarException):
    """Raised when a function reference can not be resolved to a usable Lambda function."""

    def __init__(self, reference, reason: str = None):
        self.reference = reference
        message = f"{reference!r} is not a valid Lambda function"
        if reason:
            message = f"{message}: {reason}"
        super(InvalidDescriptorError, self).__init__(message)


class UsageError(SidecarException):
    """Raised when the API is used in an unsupported way, e.g., asserting without recording."""

    pass


class ExecutionHookError(SidecarException):
    """Raised when a before/after execution hook reports a failure."""

    def __init__(self, function_name: str, hook: str, error: Exception):
        self.function_name = function_name
        self.hook = hook
        self.error = error
        super(ExecutionHookError, self).__init__(
            f"{hook} hook of Lambda function {function_name} failed: {error}"
        )


class LambdaExecutionError(SidecarException):
    """Raised by SettledResult.throw() when the function itself failed."""

    def __init__(self, message, error_type: str = None, trace=None, log_output: str = None):
        super(LambdaExecutionError, self).__init__(message)
        self.error_type = error_type
        self.trace = trace or []
        self.log_output = log_output or ""


class TransportError(Exception):
    """Error raised by invocation clients which are not backed by boto. Boto clients raise a
    ``botocore.exceptions.ClientError`` instead, which is treated the same way."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: str = None):
        super(TransportError, self).__init__(message)
        self.status_code = status_code
        self.code = code


def get_status_code(error: Exception) -> Optional[int]:
    """Extract the HTTP status code of a transport error, if there is one."""
    if isinstance(error, TransportError):
        return error.status_code
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return None


def get_error_code(error: Exception) -> Optional[str]:
    if isinstance(error, TransportError):
        return error.code
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code")
    return None


def is_not_found_error(error: Exception) -> bool:
    """Whether the given transport error signals that the invoked function does not exist."""
    return (
        get_status_code(error) == HTTP_STATUS_NOT_FOUND
        or get_error_code(error) == ERROR_CODE_RESOURCE_NOT_FOUND
    )
