"""
Resolution of function references.

Everywhere a function is expected, callers may pass a descriptor instance, a descriptor class, a name the
class was registered under, or an import path (``package.module:ClassName`` or ``package.module.ClassName``).
"""
import importlib
import logging
import threading
from typing import Any, Dict, List, Optional, Union

from sidecar import config
from sidecar.exceptions import InvalidDescriptorError
from sidecar.functions import LambdaFunction, is_function_descriptor
from sidecar.utils.collections import ensure_list

LOG = logging.getLogger(__name__)

FunctionReference = Union[str, type, LambdaFunction, Any]


def import_reference(path: str) -> Any:
    """Import ``package.module:attr`` or ``package.module.attr``."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ImportError(f"{path} is not an import path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"module {module_name} has no attribute {attr}") from e


class FunctionRegistry:
    """Maps names to function descriptors, and resolves references to descriptor instances. Classes are
    instantiated once and the instance is reused for all subsequent lookups."""

    def __init__(self):
        self._functions: Dict[str, Any] = {}
        self._instances: Dict[Any, Any] = {}
        self._lock = threading.RLock()

    def register(self, function: Union[type, Any], name: str = None) -> Any:
        """Register a descriptor class or instance. Usable as class decorator::

        @registry.register
        class Resize(LambdaFunction):
            ...
        """
        instance = self._instantiate(function)
        with self._lock:
            self._functions[name or instance.name()] = function
        return function

    def unregister(self, name: str):
        with self._lock:
            self._functions.pop(name, None)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._functions.keys())

    def resolve(self, reference: FunctionReference) -> Any:
        """Resolve a reference to a descriptor instance, raising InvalidDescriptorError if it can not be
        resolved, or does not resolve to a descriptor."""
        if isinstance(reference, str):
            with self._lock:
                target = self._functions.get(reference)
            if target is None:
                try:
                    target = import_reference(reference)
                except ImportError as e:
                    raise InvalidDescriptorError(reference, f"unknown function ({e})") from e
            return self._instantiate(target, reference)

        return self._instantiate(reference)

    def references(
        self, references: Optional[List[FunctionReference]] = None
    ) -> List[FunctionReference]:
        """The given references as a list, or the configured SIDECAR_FUNCTIONS if none are given."""
        if references is None:
            references = config.SIDECAR_FUNCTIONS
        return list(ensure_list(references) or [])

    def _instantiate(self, target: Any, reference: FunctionReference = None) -> Any:
        reference = target if reference is None else reference
        if isinstance(target, type):
            with self._lock:
                instance = self._instances.get(target)
                if instance is None:
                    try:
                        instance = target()
                    except TypeError as e:
                        raise InvalidDescriptorError(reference, f"unable to instantiate ({e})") from e
                    self._instances[target] = instance
            target = instance

        if not is_function_descriptor(target):
            raise InvalidDescriptorError(reference, "missing function descriptor methods")
        return target
