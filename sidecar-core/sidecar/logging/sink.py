"""
Line oriented progress output for tools built on top of sidecar (deployment scripts, CLIs, ...).

Registered loggers receive already formatted lines, e.g.::

    [Sidecar] Warming 3 instance(s) of SC-app-production-Resize.
              ↳ Dispatched 3 warming invocation(s).
"""
import contextlib
import logging
import threading
from typing import Callable, Iterator, List

from sidecar.constants import LOG_PREFIX, SUBLOG_PREFIX

LOG = logging.getLogger(__name__)

LogSink = Callable[[str], None]


class SidecarLogger:
    loggers: List[LogSink]

    def __init__(self):
        self.loggers = []
        self._local = threading.local()

    def add_logger(self, logger: LogSink) -> "SidecarLogger":
        self.loggers.append(logger)
        return self

    def add_logging_logger(
        self, logger: logging.Logger = None, level: int = logging.INFO
    ) -> "SidecarLogger":
        """Forward all lines to a python logger (defaults to the logger of this module)."""
        target = logger or LOG
        return self.add_logger(lambda message: target.log(level, message))

    def clear(self):
        self.loggers.clear()

    @property
    def nested(self) -> bool:
        return getattr(self._local, "nested", False)

    def log(self, message: str):
        line = f"{SUBLOG_PREFIX if self.nested else LOG_PREFIX} {message}"
        for logger in self.loggers:
            logger(line)

    @contextlib.contextmanager
    def sublog(self) -> Iterator["SidecarLogger"]:
        """Indent all lines logged within the context, restoring the previous state afterwards."""
        cached = self.nested
        self._local.nested = True
        try:
            yield self
        finally:
            self._local.nested = cached
