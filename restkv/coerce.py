import logging
from collections.abc import Iterator
from decimal import Decimal
from typing import Any

logger = logging.getLogger(__name__)


def format_number(value: int | float | Decimal) -> str:
    match value:
        case float() if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        case float():
            return repr(value)
        case _:
            return str(value)


def add_values(key: str, value: Any) -> Iterator[tuple[str, str]]:
    """Flatten a decoded JSON value into form fields under `key`.

    Objects contribute their member names, not their member values.
    """
    match value:
        case bool():
            yield key, "true" if value else "false"
        case str():
            yield key, value
        case int() | float() | Decimal():
            yield key, format_number(value)
        case dict():
            for member in value:
                yield from add_values(key, member)
        case list():
            for element in value:
                yield from add_values(key, element)
        case _:
            logger.warning("unknown type: %s", type(value).__name__)


def form_fields(params: dict[str, Any]) -> list[tuple[str, str]]:
    fields = []
    for key in sorted(params):
        fields.extend(add_values(key, params[key]))
    return fields
