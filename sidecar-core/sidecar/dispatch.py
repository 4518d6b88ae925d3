"""
Dispatching of Lambda invocations.

A dispatcher runs every invocation through the same steps, regardless of the invocation mode:

1. resolve the function reference to a descriptor
2. prepare the payload (``function.prepare_payload``)
3. notify ``BeforeFunctionExecuted`` listeners, then call ``function.before_execution``
4. send the request (``LiveDispatcher``) or record it (``RecordingDispatcher``)
5. convert the raw response via ``function.to_result``
6. notify ``AfterFunctionExecuted`` listeners, then call ``function.after_execution``

Batches (``execute_many``) are always dispatched asynchronously, and joined afterwards if the caller asked for
settled results.
"""
import json
import logging
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Union

from sidecar import config
from sidecar.clients import InvocationClient, RawResponse, StaticInvocationClient
from sidecar.events import AfterFunctionExecuted, BeforeFunctionExecuted, EventDispatcher
from sidecar.exceptions import ExecutionHookError, FunctionNotFoundError, is_not_found_error
from sidecar.functions import deployed_name
from sidecar.models import InvocationMode, InvocationRequest
from sidecar.registry import FunctionReference, FunctionRegistry
from sidecar.results import ResultHandle, SettledResult
from sidecar.testing.recording import RecordingSession
from sidecar.utils.functions import Result
from sidecar.utils.json import dumps

LOG = logging.getLogger(__name__)

Payloads = Union[int, List[Any]]


def translate_error(function_name: str, error: Exception) -> Exception:
    """Translate a transport error into the error surfaced to the caller."""
    if is_not_found_error(error):
        return FunctionNotFoundError(function_name)
    return error


def translate_future(function_name: str, future: Future) -> Future:
    """Return a future that resolves like the given one, with transport errors translated."""
    translated = Future()

    def _on_done(_future: Future):
        error = _future.exception()
        if error is None:
            translated.set_result(_future.result())
            return
        result = translate_error(function_name, error)
        if result is not error:
            result.__cause__ = error
        translated.set_exception(result)

    future.add_done_callback(_on_done)
    return translated


def check_hook_result(function_name: str, hook: str, result: Any):
    """Hooks report failures by returning a failed ``Result``."""
    if isinstance(result, Result) and result.has_error:
        raise ExecutionHookError(function_name, hook, result.error) from result.error


class Dispatcher:
    """Base class of the live and the recording dispatcher. Subclasses implement ``_send``."""

    registry: FunctionRegistry
    events: EventDispatcher

    def __init__(
        self,
        registry: FunctionRegistry = None,
        events: EventDispatcher = None,
        alias: str = None,
        log_type: str = None,
        environment: Callable[[], Optional[str]] = None,
    ):
        """
        :param environment: returns the environment that function names are computed for, evaluated for every
            invocation; if not given, each descriptor uses the environment of its own manager
        """
        self.registry = registry or FunctionRegistry()
        self.events = events or EventDispatcher()
        self.alias = alias
        self.log_type = log_type
        self.environment = environment

    def deployed_name(self, function: Any) -> str:
        return deployed_name(function, self.environment() if self.environment else None)

    def execute(
        self,
        function: FunctionReference,
        payload: Any = None,
        mode: InvocationMode = InvocationMode.SYNC,
    ) -> ResultHandle:
        function = self.registry.resolve(function)
        function_name = self.deployed_name(function)
        mode = InvocationMode(mode)

        payload = function.prepare_payload({} if payload is None else payload)

        self.events.dispatch(BeforeFunctionExecuted(function, payload))
        check_hook_result(function_name, "before_execution", function.before_execution(payload))

        request = self.build_request(function_name, payload, mode)
        LOG.debug("Dispatching %s invocation of %s", mode.value, request.function_name)
        raw = self._send(function_name, request)

        # let the function determine what to do with the result
        result = function.to_result(raw)

        self.events.dispatch(AfterFunctionExecuted(function, payload, result))
        check_hook_result(
            function_name, "after_execution", function.after_execution(payload, result)
        )

        return result

    def execute_async(self, function: FunctionReference, payload: Any = None) -> ResultHandle:
        return self.execute(function, payload, mode=InvocationMode.ASYNC)

    def execute_many(
        self, function: FunctionReference, payloads: Payloads, asynchronous: bool = False
    ) -> List[Union[ResultHandle, SettledResult]]:
        if isinstance(payloads, bool) or not isinstance(payloads, (int, list, tuple)):
            raise TypeError(f"payloads must be a list or a number of invocations, got {payloads!r}")
        if isinstance(payloads, int):
            payloads = [{} for _ in range(payloads)]

        # resolve once, so that every invocation of the batch uses the same descriptor
        function = self.registry.resolve(function)

        results = [
            self.execute(function, payload, mode=InvocationMode.ASYNC) for payload in payloads
        ]

        if asynchronous:
            # return all the pending results
            return results

        # wait for all the requests to finish, in dispatch order
        return [result.settled() for result in results]

    def execute_many_async(
        self, function: FunctionReference, payloads: Payloads
    ) -> List[ResultHandle]:
        return self.execute_many(function, payloads, asynchronous=True)

    def build_request(
        self, function_name: str, payload: Any, mode: InvocationMode
    ) -> InvocationRequest:
        alias = self.alias if self.alias is not None else config.SIDECAR_ALIAS
        if alias:
            function_name = f"{function_name}:{alias}"
        return InvocationRequest(
            function_name=function_name,
            mode=mode,
            payload=dumps(payload),
            log_type=self.log_type or config.SIDECAR_LOG_TYPE,
        )

    def _send(self, function_name: str, request: InvocationRequest) -> Union[RawResponse, Future]:
        """Send the request, returning the raw response, or a future of it for asynchronous requests."""
        raise NotImplementedError

    def shutdown(self):
        pass


class LiveDispatcher(Dispatcher):
    """Sends invocations to Lambda through an invocation client."""

    def __init__(self, client: InvocationClient, **kwargs):
        super().__init__(**kwargs)
        self.client = client

    def _send(self, function_name: str, request: InvocationRequest) -> Union[RawResponse, Future]:
        if request.mode is InvocationMode.ASYNC:
            return translate_future(function_name, self.client.invoke_async(request))

        try:
            return self.client.invoke(request)
        except Exception as e:
            error = translate_error(function_name, e)
            if error is e:
                raise
            raise error from e

    def shutdown(self):
        self.client.shutdown()


class RecordingDispatcher(Dispatcher):
    """Records invocations in a session and answers them with the session's fake response, without
    contacting Lambda."""

    session: RecordingSession

    def __init__(self, session: RecordingSession, **kwargs):
        super().__init__(**kwargs)
        self.session = session

    def _send(self, function_name: str, request: InvocationRequest) -> Union[RawResponse, Future]:
        self.session.record(function_name, json.loads(request.payload))
        client = StaticInvocationClient(self.session.fake_response())
        if request.mode is InvocationMode.ASYNC:
            return client.invoke_async(request)
        return client.invoke(request)

