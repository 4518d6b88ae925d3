"""Higher-order functional tools."""
import logging
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

LOG = logging.getLogger(__name__)


class Result(NamedTuple):
    """Wraps the possible outcomes of a function call, that can either be a value or an exception."""

    error: Optional[Exception]
    value: Optional[Any] = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @classmethod
    def ok(cls, value: Any = None) -> "Result":
        return cls(error=None, value=value)

    @classmethod
    def failed(cls, error: Exception) -> "Result":
        return cls(error=error)


def call_safe_with_result(
    func: Callable, args: Tuple = None, kwargs: Dict = None, exception_message: str = None
) -> Result:
    """
    Call the given function with the given arguments, and if it fails, log the given exception_message.
    If logging.DEBUG is set for the logger, then we also log the traceback.

    :param func: function to call
    :param args: arguments to pass
    :param kwargs: keyword arguments to pass
    :param exception_message: message to log on exception
    :return: a Result that contains the value returned by func, or the raised exception
    """
    if exception_message is None:
        exception_message = "error calling function %s" % getattr(func, "__name__", func)
    if args is None:
        args = ()
    if kwargs is None:
        kwargs = {}

    try:
        value = func(*args, **kwargs)
        return Result(value=value, error=None)
    except Exception as e:
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.exception(exception_message)
        else:
            LOG.warning("%s: %s", exception_message, e)
        return Result(error=e)
