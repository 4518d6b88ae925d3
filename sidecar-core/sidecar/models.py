import dataclasses
from enum import Enum
from typing import Any, Dict

from sidecar.constants import (
    INVOCATION_TYPE_EVENT,
    INVOCATION_TYPE_REQUEST_RESPONSE,
    LOG_TYPE_TAIL,
)
from sidecar.utils.strings import to_bytes


class InvocationMode(str, Enum):
    """How an invocation is dispatched.

    ``sync`` waits for the response, ``async`` returns a pending result immediately and receives the response
    in the background, ``event`` hands the payload to Lambda's internal queue and only waits for the
    acknowledgement (no function response is returned).
    """

    SYNC = "sync"
    ASYNC = "async"
    EVENT = "event"

    @property
    def invocation_type(self) -> str:
        if self is InvocationMode.EVENT:
            return INVOCATION_TYPE_EVENT
        # async invocations are regular request/response calls running in the background
        return INVOCATION_TYPE_REQUEST_RESPONSE


@dataclasses.dataclass(frozen=True)
class InvocationRequest:
    function_name: str
    mode: InvocationMode
    payload: str
    log_type: str = LOG_TYPE_TAIL

    @property
    def invocation_type(self) -> str:
        return self.mode.invocation_type

    def to_boto_params(self) -> Dict[str, Any]:
        """Parameters for ``lambda_client.invoke(...)``."""
        return {
            "FunctionName": self.function_name,
            "InvocationType": self.invocation_type,
            "LogType": self.log_type,
            "Payload": to_bytes(self.payload),
        }


@dataclasses.dataclass(frozen=True)
class InvocationRecord:
    """An invocation captured by a recording session, instead of being sent to Lambda."""

    function: str
    payload: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"function": self.function, "payload": self.payload}
