import json
import logging
import sys
from decimal import Decimal
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict
from rich.console import Console
from rich.text import Text

from restkv.render import render_json

logger = logging.getLogger(__name__)

NO_BINARY_NOTICE = (
    "\n\n"
    "+-----------------------------------------+\n"
    "| NOTE: binary data not shown in terminal |\n"
    "+-----------------------------------------+"
)

_HTTP_VERSIONS = {9: "HTTP/0.9", 10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2", 30: "HTTP/3"}


def make_console(color: bool = True, stderr: bool = False) -> Console:
    return Console(
        stderr=stderr,
        no_color=not color,
        highlight=False,
        soft_wrap=True,
        emoji=False,
        markup=False,
    )


def write_bytes(data: bytes):
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


def _styled(text: Text, chunk: str, style: str, color: bool):
    text.append(chunk, style=style if color else None)


def headers_text(headers, color: bool) -> Text:
    text = Text()
    for name in sorted(headers):
        _styled(text, name, "cyan", color)
        text.append(": ")
        _styled(text, headers[name], "yellow", color)
        text.append("\n")
    return text


def print_request_headers(console: Console, request: requests.PreparedRequest, color: bool):
    parts = urlsplit(request.url)
    target = parts.path or "/"
    if parts.query:
        target += "?" + parts.query
    text = Text()
    _styled(text, request.method, "green", color)
    _styled(text, f" {target}", "cyan", color)
    _styled(text, " HTTP/1.1", "blue", color)
    text.append("\n")
    headers = CaseInsensitiveDict(request.headers)
    headers.setdefault("Host", parts.netloc)
    text.append_text(headers_text(headers, color))
    console.print(text)


def http_version(response: requests.Response) -> str:
    version = getattr(response.raw, "version", None)
    return _HTTP_VERSIONS.get(version, "HTTP/1.1")


def print_response_headers(console: Console, response: requests.Response, color: bool):
    text = Text()
    _styled(text, f"{http_version(response)} {response.status_code}", "blue", color)
    _styled(text, f" {response.reason or ''}".rstrip(), "cyan", color)
    text.append("\n")
    text.append_text(headers_text(response.headers, color))
    console.print(text)


def is_binary(body: bytes) -> bool:
    return b"\x00" in body


def format_json(body: bytes, color: bool) -> Text | None:
    try:
        return render_json(json.loads(body, parse_float=Decimal), color=color)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("response is not valid json: %s", e)
        return None


def print_body(
        console: Console,
        response: requests.Response,
        color: bool = True,
        no_formatting: bool = False,
        raw: bool = False,
):
    body = response.content
    if raw:
        write_bytes(body)
        return
    if no_formatting:
        if is_binary(body):
            console.print(NO_BINARY_NOTICE, end="")
        else:
            write_bytes(body)
        return

    content_type = response.headers.get("Content-Type", "")
    formatted: Text | None = None
    if content_type.startswith("application/json"):
        formatted = format_json(body, color)
    if formatted is not None:
        console.print(formatted, end="")
    elif content_type.startswith("text/"):
        write_bytes(body)
    elif is_binary(body):
        console.print(NO_BINARY_NOTICE, end="")
    else:
        write_bytes(body)
    console.print("\n\n", end="")
