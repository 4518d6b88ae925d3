from typing import Any, List, Optional


def ensure_list(obj: Any, wrap_none=False) -> Optional[List]:
    """Wrap the given object in a list, or return the object itself if it already is a list."""
    if obj is None and not wrap_none:
        return obj
    if isinstance(obj, tuple):
        return list(obj)
    return obj if isinstance(obj, list) else [obj]
