"""
Results of Lambda invocations.

Every dispatch returns a result handle: a ``SettledResult`` if the response is already available, or a
``PendingResult`` wrapping the future of an invocation that is still running. Both expose ``settled()``,
which blocks until the response is available and returns the ``SettledResult``::

    result = Resize.execute_async({"width": 100})
    ...
    result.settled().body()
"""
import logging
import re
import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from sidecar.exceptions import LambdaExecutionError
from sidecar.utils.json import try_json
from sidecar.utils.strings import base64_decode_str, to_str, truncate

if TYPE_CHECKING:
    from sidecar.functions import LambdaFunction

LOG = logging.getLogger(__name__)

# log lines the Lambda runtime adds around every invocation
RUNTIME_LOG_LINE_PREFIXES = ("START RequestId:", "END RequestId:", "REPORT RequestId:", "INIT_START")

REGEX_REPORT_FIELD = re.compile(r"(?P<key>[A-Za-z ]+):\s*(?P<value>[^\t]+?)\s*(?:\t|$)")

REPORT_FIELDS = {
    "RequestId": "request",
    "Duration": "execution_time",
    "Billed Duration": "billed_time",
    "Memory Size": "memory_size",
    "Max Memory Used": "max_memory_used",
    "Init Duration": "init_time",
}


class ResultHandle:
    def settled(self) -> "SettledResult":
        raise NotImplementedError

    def resolve(self) -> "SettledResult":
        return self.settled()


class SettledResult(ResultHandle):
    """The final, decoded response of a Lambda invocation."""

    raw: Dict[str, Any]
    function: Optional["LambdaFunction"]

    def __init__(self, raw: Dict[str, Any], function: "LambdaFunction" = None):
        self.raw = raw or {}
        self.function = function
        self._raw_body = self._read_payload(self.raw.get("Payload"))
        self._body = try_json(self._raw_body)
        self._log_output = base64_decode_str(self.raw.get("LogResult"))

    @staticmethod
    def _read_payload(payload: Union[None, str, bytes, Any]) -> str:
        if payload is None:
            return ""
        if hasattr(payload, "read"):
            # botocore StreamingBody
            payload = payload.read()
        return to_str(payload, errors="replace")

    def settled(self) -> "SettledResult":
        return self

    @property
    def status_code(self) -> Optional[int]:
        return self.raw.get("StatusCode")

    @property
    def executed_version(self) -> Optional[str]:
        return self.raw.get("ExecutedVersion")

    @property
    def error_type(self) -> Optional[str]:
        """Value of the ``FunctionError`` field, set if the function raised an error."""
        return self.raw.get("FunctionError")

    def is_error(self) -> bool:
        return bool(self.error_type)

    def raw_body(self) -> str:
        return self._raw_body

    def body(self) -> Any:
        """The JSON decoded payload returned by the function."""
        return self._body

    def throw(self) -> "SettledResult":
        """Raise a LambdaExecutionError if the function failed, otherwise return this result."""
        if not self.is_error():
            return self

        body = self._body if isinstance(self._body, dict) else {}
        message = body.get("errorMessage") or self._raw_body or "Lambda execution failed"
        raise LambdaExecutionError(
            message,
            error_type=body.get("errorType") or self.error_type,
            trace=body.get("stackTrace"),
            log_output=self._log_output,
        )

    def raw_logs(self) -> str:
        """The decoded tail of the execution log (only available with LogType=Tail)."""
        return self._log_output

    def logs(self) -> List[str]:
        """Log lines printed by the function, without the lines added by the Lambda runtime."""
        return [
            line
            for line in self._log_output.splitlines()
            if line.strip() and not line.startswith(RUNTIME_LOG_LINE_PREFIXES)
        ]

    def report(self) -> Dict[str, str]:
        """Parse the ``REPORT`` line of the execution log, e.g.::

            {"request": "...", "execution_time": "12.47 ms", "billed_time": "13 ms", ...}
        """
        for line in self._log_output.splitlines():
            if not line.startswith("REPORT "):
                continue
            report = {}
            for match in REGEX_REPORT_FIELD.finditer(line[len("REPORT ") :]):
                key = REPORT_FIELDS.get(match.group("key").strip())
                if key:
                    report[key] = match.group("value").strip()
            return report
        return {}

    def __repr__(self):
        return f"SettledResult(status_code={self.status_code}, body={truncate(self._raw_body)!r})"


class PendingResult(ResultHandle):
    """Handle of an invocation that is still running. ``settled()`` waits for the response, converts it via
    the function's ``to_result`` and caches the settled result for subsequent calls."""

    def __init__(self, future: "Future", function: "LambdaFunction"):
        self.future = future
        self.function = function
        self._settled: Optional[SettledResult] = None
        self._lock = threading.Lock()

    def settled(self) -> SettledResult:
        if self._settled is not None:
            return self._settled

        # raises the invocation error, if any
        raw = self.future.result()

        with self._lock:
            if self._settled is None:
                self._settled = self._to_settled(raw)
            return self._settled

    def _to_settled(self, raw: Dict[str, Any]) -> SettledResult:
        if self.function is None:
            return SettledResult(raw)
        return self.function.to_result(raw).settled()

    def is_settled(self) -> bool:
        return self._settled is not None

    def done(self) -> bool:
        return self.future.done()

    def __repr__(self):
        state = "settled" if self.is_settled() else ("done" if self.done() else "running")
        return f"PendingResult({state})"
