import json
import logging
from decimal import Decimal
from typing import Any

from rich.text import Text

logger = logging.getLogger(__name__)

INDENT = "    "

LITERAL_STYLE = "blue"
KEY_STYLE = "bright_blue"
STRING_STYLE = "yellow"


def render_json(value: Any, depth: int = 1, color: bool = True) -> Text:
    """Pretty print a decoded JSON value.

    Object members are printed in sorted key order, nested containers are
    indented by `depth` units.
    """
    text = Text()
    _render(text, value, depth, color, is_key=False)
    return text


def _append(text: Text, chunk: str, style: str, color: bool):
    text.append(chunk, style=style if color else None)


def _render(text: Text, value: Any, depth: int, color: bool, is_key: bool):
    match value:
        case None:
            _append(text, "null", LITERAL_STYLE, color)
        case bool():
            _append(text, "true" if value else "false", LITERAL_STYLE, color)
        case str():
            _append(text, json.dumps(value, ensure_ascii=False), KEY_STYLE if is_key else STRING_STYLE, color)
        case int() | float() | Decimal():
            _append(text, str(value), LITERAL_STYLE, color)
        case dict() if not value:
            text.append("{}")
        case dict():
            text.append("{\n")
            for i, key in enumerate(sorted(value)):
                if i:
                    text.append(",\n")
                text.append(INDENT * depth)
                _render(text, key, depth + 1, color, is_key=True)
                text.append(": ")
                _render(text, value[key], depth + 1, color, is_key=False)
            text.append("\n" + INDENT * (depth - 1) + "}")
        case list() if not value:
            text.append("[]")
        case list():
            text.append("[\n")
            for i, element in enumerate(value):
                if i:
                    text.append(",\n")
                text.append(INDENT * depth)
                _render(text, element, depth + 1, color, is_key=False)
            text.append("\n" + INDENT * (depth - 1) + "]")
        case _:
            logger.warning("unknown type: %s", type(value).__name__)
            text.append(f"unknown type: {type(value).__name__}")
