"""
Warming of function instances.

Functions that return a ``WarmingConfig`` from ``warming_config()`` are invoked ``instance_count`` times in
parallel, so that Lambda keeps that many execution environments initialized. Warming is best effort: results are
never awaited, and failures are only logged.
"""
import logging
from concurrent.futures import Future
from typing import Any, Callable, List, Optional

from sidecar.dispatch import Dispatcher
from sidecar.functions import WarmingConfig
from sidecar.logging.sink import SidecarLogger
from sidecar.registry import FunctionReference
from sidecar.results import ResultHandle
from sidecar.utils.functions import call_safe_with_result

LOG = logging.getLogger(__name__)


def on_failure(results: List[ResultHandle], callback: Callable[[Exception], None]) -> None:
    """Call ``callback`` for every pending result of a batch that fails, without waiting for any of them."""
    for result in results:
        future: Optional[Future] = getattr(result, "future", None)
        if future is None:
            continue

        def _on_done(_future: Future):
            error = _future.exception()
            if error is not None:
                callback(error)

        future.add_done_callback(_on_done)


class Warmer:
    """Fires the warming invocations of a set of functions through a dispatcher."""

    def __init__(self, dispatcher: Callable[[], Dispatcher], logger: SidecarLogger = None):
        """
        :param dispatcher: returns the dispatcher to use, evaluated for every ``warm`` call so that warming
            follows the dispatcher that is active at that time (e.g., a recording one)
        :param logger: optional sink for progress output
        """
        self._dispatcher = dispatcher
        self.logger = logger or SidecarLogger()

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher()

    def warm(self, functions: Optional[List[FunctionReference]] = None) -> List[ResultHandle]:
        """Warm the given functions, or the configured default functions. Returns the pending results of all
        warming invocations; callers are not expected to wait for them."""
        dispatcher = self.dispatcher
        results = []
        for reference in dispatcher.registry.references(functions):
            outcome = call_safe_with_result(
                dispatcher.registry.resolve,
                args=(reference,),
                exception_message=f"Unable to resolve {reference!r} for warming",
            )
            if outcome.has_error:
                self.logger.log(f"Skipped warming of {reference!r}: {outcome.error}")
                continue
            results.extend(self.warm_function(outcome.value, dispatcher))
        return results

    def warm_function(self, function: Any, dispatcher: Dispatcher = None) -> List[ResultHandle]:
        dispatcher = dispatcher or self.dispatcher
        warming_config = self._warming_config(function)
        if not warming_config:
            LOG.debug("No warming configured for %s", function.name())
            return []

        name = dispatcher.deployed_name(function)
        self.logger.log(f"Warming {warming_config.instance_count} instance(s) of {name}.")

        outcome = call_safe_with_result(
            dispatcher.execute_many_async,
            args=(function, warming_config.payloads()),
            exception_message=f"Unable to warm {name}",
        )
        if outcome.has_error:
            with self.logger.sublog():
                self.logger.log(f"Warming failed: {outcome.error}")
            return []

        results = outcome.value
        on_failure(
            results, lambda error: LOG.info("Warming invocation of %s failed: %s", name, error)
        )
        with self.logger.sublog():
            self.logger.log(f"Dispatched {len(results)} warming invocation(s).")
        return results

    @staticmethod
    def _warming_config(function: Any) -> Optional[WarmingConfig]:
        get_config = getattr(function, "warming_config", None)
        if not callable(get_config):
            return None
        warming_config = get_config()
        if not isinstance(warming_config, WarmingConfig):
            return None
        return warming_config
