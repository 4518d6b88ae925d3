import base64
import binascii
from typing import Union

from sidecar.constants import DEFAULT_ENCODING


def to_str(obj: Union[str, bytes], encoding: str = DEFAULT_ENCODING, errors="strict") -> str:
    """If ``obj`` is an instance of ``binary_type``, return
    ``obj.decode(encoding, errors)``, otherwise return ``obj``"""
    return obj.decode(encoding, errors) if isinstance(obj, bytes) else obj


def to_bytes(obj: Union[str, bytes], encoding: str = DEFAULT_ENCODING, errors="strict") -> bytes:
    """If ``obj`` is an instance of ``text_type``, return
    ``obj.encode(encoding, errors)``, otherwise return ``obj``"""
    return obj.encode(encoding, errors) if isinstance(obj, str) else obj


def truncate(data: str, max_length: int = 100) -> str:
    data = str(data or "")
    return ("%s..." % data[:max_length]) if len(data) > max_length else data


def base64_decode_str(data: Union[str, bytes], errors="replace") -> str:
    """Decode a base64 encoded string (e.g., a Lambda ``LogResult``), returning an empty string for invalid input."""
    if not data:
        return ""
    try:
        return to_str(base64.b64decode(to_bytes(data)), errors=errors)
    except (binascii.Error, ValueError):
        return ""
