"""
Descriptors of deployed Lambda functions.

A ``LambdaFunction`` subclass describes one function: the name it is deployed under and the hooks that are
called around each of its invocations. Descriptors never hold invocation state, the same instance can be used
for any number of concurrent invocations::

    class Resize(LambdaFunction):
        def warming_config(self):
            return WarmingConfig.instances(3)

    Resize.execute({"width": 100}).body()
    Resize.execute_many([{"width": 100}, {"width": 200}])
"""
import logging
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, List, Optional, Union

from sidecar import config
from sidecar.constants import (
    DEFAULT_WARMING_PAYLOAD,
    FUNCTION_NAME_PREFIX,
    MAX_FUNCTION_NAME_LENGTH,
)
from sidecar.models import InvocationMode
from sidecar.results import PendingResult, ResultHandle, SettledResult

if TYPE_CHECKING:
    from sidecar.manager import Manager
    from sidecar.utils.functions import Result

LOG = logging.getLogger(__name__)


class WarmingConfig:
    """How many instances of a function are kept warm, and the payload used to warm them."""

    instance_count: int
    payload: Any

    def __init__(self, instance_count: int = 0, payload: Any = None):
        if instance_count < 0:
            raise ValueError(f"instance count must not be negative, got {instance_count}")
        self.instance_count = instance_count
        self.payload = dict(DEFAULT_WARMING_PAYLOAD) if payload is None else payload

    @classmethod
    def instances(cls, count: int) -> "WarmingConfig":
        return cls(instance_count=count)

    def with_payload(self, payload: Any) -> "WarmingConfig":
        self.payload = payload
        return self

    def payloads(self) -> List[Any]:
        return [self.payload for _ in range(self.instance_count)]

    def __bool__(self):
        return self.instance_count > 0

    def __repr__(self):
        return f"WarmingConfig(instance_count={self.instance_count}, payload={self.payload!r})"


class LambdaFunction:
    """Base class for function descriptors. Subclasses usually only override ``name`` and the hooks they
    need, everything else has sensible defaults."""

    # manager used by the class level execute* shortcuts, defaults to the process wide ``sidecar.manager.sidecar``
    manager: Optional["Manager"] = None

    def name(self) -> str:
        """Name of the function, without the environment specific prefix."""
        return self.__class__.__name__

    def prefix(self, environment: str = None) -> str:
        environment = environment or self.environment()
        return f"{FUNCTION_NAME_PREFIX}-{config.SIDECAR_APP_NAME}-{environment}-"

    def environment(self) -> str:
        # leave import here to avoid circular imports
        from sidecar.manager import get_manager

        return get_manager(self.manager).get_environment()

    def name_with_prefix(self, environment: str = None) -> str:
        """The name the function is deployed under in the given environment (defaults to the environment of
        the descriptor's manager)."""
        return f"{self.prefix(environment)}{self.name()}"[:MAX_FUNCTION_NAME_LENGTH]

    def prepare_payload(self, payload: Any) -> Any:
        return payload

    def before_execution(self, payload: Any) -> Optional["Result"]:
        """Called before every invocation. Return a failed ``Result`` to abort the invocation."""
        return None

    def after_execution(self, payload: Any, result: ResultHandle) -> Optional["Result"]:
        """Called after every invocation, with the (possibly still pending) result."""
        return None

    def to_result(self, raw: Any) -> ResultHandle:
        """Convert the raw response (or the future of a running invocation) into a result handle."""
        if isinstance(raw, ResultHandle):
            return raw
        if isinstance(raw, Future):
            return PendingResult(raw, self)
        return SettledResult(raw, self)

    def warming_config(self) -> Optional[WarmingConfig]:
        return None

    @classmethod
    def _manager(cls) -> "Manager":
        from sidecar.manager import get_manager

        return get_manager(cls.manager)

    @classmethod
    def execute(
        cls, payload: Any = None, mode: InvocationMode = InvocationMode.SYNC
    ) -> ResultHandle:
        return cls._manager().execute(cls, payload, mode=mode)

    @classmethod
    def execute_async(cls, payload: Any = None) -> ResultHandle:
        return cls._manager().execute_async(cls, payload)

    @classmethod
    def execute_many(
        cls, payloads: Union[int, List[Any]], asynchronous: bool = False
    ) -> List[ResultHandle]:
        return cls._manager().execute_many(cls, payloads, asynchronous=asynchronous)

    @classmethod
    def execute_many_async(cls, payloads: Union[int, List[Any]]) -> List[ResultHandle]:
        return cls._manager().execute_many_async(cls, payloads)

    def __repr__(self):
        return f"{self.__class__.__name__}()"


# methods a function descriptor has to provide
DESCRIPTOR_METHODS = (
    "name",
    "name_with_prefix",
    "prepare_payload",
    "before_execution",
    "after_execution",
    "to_result",
)


def is_function_descriptor(obj: Any) -> bool:
    """Whether the given object provides all methods of a function descriptor (duck typed, so descriptors do not
    have to extend LambdaFunction)."""
    if isinstance(obj, type):
        return False
    return all(callable(getattr(obj, method, None)) for method in DESCRIPTOR_METHODS)


def deployed_name(function: Any, environment: str = None) -> str:
    """Name of the given descriptor in the given environment. Descriptors that do not extend LambdaFunction
    determine their environment themselves."""
    if environment and isinstance(function, LambdaFunction):
        return function.name_with_prefix(environment)
    return function.name_with_prefix()
