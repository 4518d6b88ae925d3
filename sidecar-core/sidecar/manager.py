"""
The ``Manager`` is the entry point of the library. It owns the function registry, the observers, the logger
sink and the active dispatcher, and switches between live dispatching and recording::

    from sidecar.manager import sidecar

    sidecar.fake({"status": "ok"})
    Resize.execute({"width": 100})
    sidecar.assert_executed(Resize, {"width": 100})
    sidecar.reset()
"""
import logging
import threading
from typing import Any, Callable, List, Optional, Type

from sidecar import config
from sidecar.clients import InvocationClient, LambdaInvocationClient
from sidecar.dispatch import Dispatcher, LiveDispatcher, Payloads, RecordingDispatcher
from sidecar.events import EventDispatcher
from sidecar.exceptions import UsageError
from sidecar.functions import deployed_name
from sidecar.logging.sink import LogSink, SidecarLogger
from sidecar.models import InvocationMode
from sidecar.registry import FunctionReference, FunctionRegistry
from sidecar.results import ResultHandle
from sidecar.testing.recording import RecordingSession
from sidecar.warming import Warmer

LOG = logging.getLogger(__name__)


class Manager:
    registry: FunctionRegistry
    events: EventDispatcher
    logger: SidecarLogger
    session: Optional[RecordingSession]

    def __init__(
        self,
        client: InvocationClient = None,
        registry: FunctionRegistry = None,
        events: EventDispatcher = None,
        logger: SidecarLogger = None,
    ):
        self._client = client
        # injected clients are kept on shutdown, only clients created here are dropped
        self._owns_client = client is None
        self.registry = registry or FunctionRegistry()
        self.events = events or EventDispatcher()
        self.logger = logger or SidecarLogger()
        self.session = None
        self._environment = None
        self._live = None
        self._recording = None
        self._mutex = threading.RLock()
        self.warmer = Warmer(lambda: self.dispatcher, self.logger)

    # dispatchers

    @property
    def client(self) -> InvocationClient:
        with self._mutex:
            if self._client is None:
                self._client = LambdaInvocationClient()
                self._owns_client = True
            return self._client

    @property
    def dispatcher(self) -> Dispatcher:
        """The recording dispatcher while faking, the live dispatcher otherwise."""
        with self._mutex:
            if self._recording is not None:
                return self._recording
            if self._live is None:
                self._live = LiveDispatcher(
                    self.client,
                    registry=self.registry,
                    events=self.events,
                    environment=self.get_environment,
                )
            return self._live

    @property
    def is_recording(self) -> bool:
        return self._recording is not None

    def fake(self, mocked_response: Any = None) -> RecordingSession:
        """Start a new recording session. Until ``reset`` is called, no invocation reaches Lambda, and every
        invocation returns ``mocked_response`` as its body."""
        with self._mutex:
            self.session = RecordingSession(mocked_response)
            self._recording = RecordingDispatcher(
                self.session,
                registry=self.registry,
                events=self.events,
                environment=self.get_environment,
            )
            LOG.debug("Recording invocations, live dispatching is disabled")
            return self.session

    def reset(self):
        """Stop recording, and return to live dispatching."""
        with self._mutex:
            self.session = None
            self._recording = None

    def _require_session(self, method: str) -> RecordingSession:
        session = self.session
        if session is None:
            raise UsageError(f"You called {method}() without calling fake()")
        return session

    def _function_name(self, function: FunctionReference) -> str:
        return deployed_name(self.registry.resolve(function), self.get_environment())

    def assert_executed(self, function: FunctionReference, expected_payload: Any = None):
        session = self._require_session("assert_executed")
        payload = {} if expected_payload is None else expected_payload
        session.assert_executed(self._function_name(function), payload)

    def assert_not_executed(self, function: FunctionReference, payload: Any = None):
        session = self._require_session("assert_not_executed")
        session.assert_not_executed(self._function_name(function), payload)

    def assert_executed_count(self, function: FunctionReference, count: int):
        session = self._require_session("assert_executed_count")
        session.assert_executed_count(self._function_name(function), count)

    # execution

    def execute(
        self,
        function: FunctionReference,
        payload: Any = None,
        mode: InvocationMode = InvocationMode.SYNC,
    ) -> ResultHandle:
        return self.dispatcher.execute(function, payload, mode=mode)

    def execute_async(self, function: FunctionReference, payload: Any = None) -> ResultHandle:
        return self.dispatcher.execute_async(function, payload)

    def execute_many(
        self, function: FunctionReference, payloads: Payloads, asynchronous: bool = False
    ) -> List[ResultHandle]:
        return self.dispatcher.execute_many(function, payloads, asynchronous=asynchronous)

    def execute_many_async(
        self, function: FunctionReference, payloads: Payloads
    ) -> List[ResultHandle]:
        return self.dispatcher.execute_many_async(function, payloads)

    def warm(self, functions: List[FunctionReference] = None) -> List[ResultHandle]:
        return self.warmer.warm(functions)

    # registry and observers

    def register(self, function: Any, name: str = None) -> Any:
        return self.registry.register(function, name)

    def listen(self, event_type: Type, listener: Callable[[Any], None]) -> Callable[[], None]:
        return self.events.listen(event_type, listener)

    # environment

    def override_environment(self, environment: str):
        """Use the given environment for function names, instead of the configured SIDECAR_ENV."""
        self._environment = environment

    def clear_environment(self):
        self._environment = None

    def get_environment(self) -> str:
        return self._environment or config.SIDECAR_ENV

    # logger sink

    def add_logger(self, logger: LogSink) -> "Manager":
        self.logger.add_logger(logger)
        return self

    def log(self, message: str):
        self.logger.log(message)

    def sublog(self):
        return self.logger.sublog()

    def shutdown(self):
        with self._mutex:
            self._live = None
            if self._client is None:
                return
            self._client.shutdown()
            if self._owns_client:
                self._client = None


# process wide default manager, used by descriptors that do not set their own
sidecar = Manager()


def get_manager(manager: Manager = None) -> Manager:
    return manager if manager is not None else sidecar
