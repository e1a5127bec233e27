"""Command-line item grammar.

Each item is `key<delimiter>value`; the first unescaped delimiter decides what
the item contributes to the request:

    key:=json   raw JSON merged into the body
    key:value   header
    key==value  query parameter
    key=value   body field
    key@path    file upload, `-@path` sends the file as the whole body

A backslash makes the next character literal.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Self, Any

from restkv.errors import ArgumentParseError, JsonFragmentError


class Kind(Enum):
    UNKNOWN = "unknown"
    HEADER = "header"
    QUERY = "query"
    BODY = "body"
    JSON = "json"
    FILE = "file"


RAW_BODY_KEY = "-"


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def unescape(s: str) -> str:
    chars = []
    escape = False
    for c in s:
        if escape:
            chars.append(c)
            escape = False
            continue
        if c == "\\":
            escape = True
            continue
        chars.append(c)
    return "".join(chars)


def parse_key_value(key_value: str) -> tuple[Kind, str, str]:
    key = []
    escape = False
    for i, c in enumerate(key_value):
        if escape:
            key.append(c)
            escape = False
            continue
        if c == "\\":
            escape = True
            continue
        following = key_value[i + 1:i + 2]
        match c:
            case ":" if following == "=":
                return Kind.JSON, "".join(key), unescape(key_value[i + 2:])
            case ":":
                return Kind.HEADER, "".join(key), unescape(key_value[i + 1:])
            case "=" if following == "=":
                return Kind.QUERY, "".join(key), unescape(key_value[i + 2:])
            case "=":
                return Kind.BODY, "".join(key), unescape(key_value[i + 1:])
            case "@":
                return Kind.FILE, "".join(key), unescape(key_value[i + 1:])
        key.append(c)
    return Kind.UNKNOWN, "", ""


@dataclass(frozen=True)
class KvPairs():
    headers: dict[str, str] = field(default_factory=dict[str, str])
    query: dict[str, list[str]] = field(default_factory=dict[str, list[str]])
    body: dict[str, list[str]] = field(default_factory=dict[str, list[str]])
    json: dict[str, str] = field(default_factory=dict[str, str])
    files: dict[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def create(cls, args: list[str]) -> Self:
        kvp = cls()
        for arg in args:
            kind, key, value = parse_key_value(arg)
            match kind:
                case Kind.HEADER:
                    kvp.headers[key] = value
                case Kind.QUERY:
                    kvp.query.setdefault(key, []).append(value)
                case Kind.BODY:
                    kvp.body.setdefault(key, []).append(value)
                case Kind.JSON:
                    kvp.json[key] = value
                case Kind.FILE:
                    kvp.files[key] = value
                case _:
                    raise ArgumentParseError(f"bad key/value: {arg}")
        return kvp

    @property
    def raw_body_file(self) -> str | None:
        return self.files.get(RAW_BODY_KEY)

    def query_pairs(self) -> list[tuple[str, str]]:
        return [(key, value) for key, values in self.query.items() for value in values]

    def body_params(self) -> dict[str, Any]:
        """Merge form fields and JSON fragments into one body mapping.

        Single form values collapse to scalars, repeated ones stay lists.
        JSON fragments are decoded one by one and win on key collisions.
        """
        params: dict[str, Any] = {}
        for key, values in self.body.items():
            params[key] = values[0] if len(values) == 1 else list(values)
        for key, raw in self.json.items():
            try:
                params[key] = json.loads(raw, parse_constant=_reject_constant)
            except ValueError as e:
                raise JsonFragmentError(f"invalid json for '{key}': {raw} ({e})") from e
        return params
