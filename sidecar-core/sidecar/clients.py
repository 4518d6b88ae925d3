"""Invocation clients, the transport used by the live dispatcher to reach Lambda."""
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Optional

from botocore.client import BaseClient

from sidecar import config
from sidecar.models import InvocationRequest

LOG = logging.getLogger(__name__)

# raw response of an invocation, as returned by ``lambda_client.invoke(...)``
RawResponse = Dict[str, Any]


class InvocationClient(ABC):
    """Sends invocation requests to the remote service.

    Implementations raise a ``botocore.exceptions.ClientError`` or a ``sidecar.exceptions.TransportError`` if
    the request fails. Asynchronous invocations report these errors through the returned future.
    """

    @abstractmethod
    def invoke(self, request: InvocationRequest) -> RawResponse:
        raise NotImplementedError

    @abstractmethod
    def invoke_async(self, request: InvocationRequest) -> "Future[RawResponse]":
        raise NotImplementedError

    def shutdown(self):
        pass


class LambdaInvocationClient(InvocationClient):
    """Invocation client backed by a boto3 Lambda client. Asynchronous invocations run on a thread pool, the
    number of concurrent invocations is bounded by the pool size and the connection pool of the boto client."""

    def __init__(self, lambda_client: BaseClient = None, max_workers: int = None):
        self._lambda_client = lambda_client
        self.executor = ThreadPoolExecutor(
            max_workers or config.SIDECAR_MAX_WORKERS, thread_name_prefix="sidecar_invoke"
        )

    @property
    def lambda_client(self) -> BaseClient:
        if self._lambda_client is None:
            # leave here to create the client (and its session) only once it is actually needed
            from sidecar.connect import connect_to

            self._lambda_client = connect_to.lambda_client()
        return self._lambda_client

    def invoke(self, request: InvocationRequest) -> RawResponse:
        LOG.debug(
            "Invoking Lambda function %s (%s)", request.function_name, request.invocation_type
        )
        return self.lambda_client.invoke(**request.to_boto_params())

    def invoke_async(self, request: InvocationRequest) -> "Future[RawResponse]":
        return self.executor.submit(self.invoke, request)

    def shutdown(self):
        self.executor.shutdown(wait=False)


class StaticInvocationClient(InvocationClient):
    """Client that answers every request with the same response, without any network activity."""

    def __init__(self, response: Optional[RawResponse] = None):
        self.response = response or {"StatusCode": 200, "Payload": b"null"}

    def invoke(self, request: InvocationRequest) -> RawResponse:
        return dict(self.response)

    def invoke_async(self, request: InvocationRequest) -> "Future[RawResponse]":
        future = Future()
        future.set_result(self.invoke(request))
        return future
