import decimal
import json
import logging
from datetime import date, datetime
from json import JSONDecodeError
from typing import Any, Union

from .strings import to_str

LOG = logging.getLogger(__name__)


class CustomEncoder(json.JSONEncoder):
    """Helper class to convert payloads with datetime, decimals, sets, or bytes to JSON."""

    def default(self, o):
        if isinstance(o, decimal.Decimal):
            if o % 1 > 0:
                return float(o)
            else:
                return int(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, (set, frozenset)):
            return list(o)
        if isinstance(o, bytes):
            return to_str(o)
        return super(CustomEncoder, self).default(o)


def dumps(item: Any) -> str:
    """Serialize a payload to the JSON document sent to Lambda."""
    return json.dumps(item, cls=CustomEncoder)


def clone(item):
    """Return a JSON round-tripped copy of the given payload, i.e., exactly what Lambda would receive."""
    return json.loads(dumps(item))


def try_json(data: Union[str, bytes]):
    """
    Tries to deserialize the passed json input to an object if possible, otherwise returns the original input.
    :param data: string
    :return: deserialize version of input
    """
    if data is None or data == b"" or data == "":
        return None
    try:
        return json.loads(to_str(data))
    except (JSONDecodeError, UnicodeDecodeError):
        LOG.debug("Unable to decode JSON payload, returning the raw value")
        return to_str(data, errors="replace")
