import logging
from typing import Any, Callable, List
from unittest.mock import MagicMock

import pytest

from sidecar.clients import LambdaInvocationClient
from sidecar.manager import Manager, sidecar
from sidecar.testing.config import TEST_SIDECAR_ENV

LOG = logging.getLogger(__name__)


@pytest.fixture
def sidecar_manager() -> Manager:
    """
    Returns a fresh manager for the test, with its own registry and observers, that uses the test environment
    for function names. Descriptors use it by setting ``manager = sidecar_manager``, or by passing it to
    ``Manager.execute`` directly.
    """
    manager = Manager()
    manager.override_environment(TEST_SIDECAR_ENV)
    yield manager
    manager.reset()
    manager.shutdown()


@pytest.fixture
def sidecar_fake():
    """
    Puts the process wide default manager into recording mode for the duration of the test, so no invocation
    reaches Lambda. Yields the manager, on which the recorded invocations can be asserted::

        def test_resize(sidecar_fake):
            Resize.execute({"width": 100})
            sidecar_fake.assert_executed(Resize, {"width": 100})

    Use ``sidecar_fake.fake(response)`` to change the response returned by the faked invocations.
    """
    sidecar.fake()
    yield sidecar
    sidecar.reset()


@pytest.fixture
def lambda_client_mock() -> Callable[..., MagicMock]:
    """
    Returns a factory for boto3 Lambda client mocks. The factory accepts the response returned by ``invoke``, or
    an exception raised by it.
    """

    def _create(response: Any = None, error: Exception = None) -> MagicMock:
        client = MagicMock()
        if error is not None:
            client.invoke.side_effect = error
        else:
            client.invoke.return_value = response or {"StatusCode": 200, "Payload": b"null"}
        return client

    return _create


@pytest.fixture
def live_invocation_client(lambda_client_mock):
    """Returns a factory for ``LambdaInvocationClient`` instances backed by a boto3 client mock. All created
    clients are shut down after the test."""
    clients: List[LambdaInvocationClient] = []

    def _create(response: Any = None, error: Exception = None) -> LambdaInvocationClient:
        client = LambdaInvocationClient(lambda_client_mock(response, error), max_workers=4)
        clients.append(client)
        return client

    yield _create

    for client in clients:
        client.shutdown()
