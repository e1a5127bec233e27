import argparse
import getpass
import logging
import sys

import requests
import urllib3
from rich.logging import RichHandler

from restkv import __version__
from restkv.config import load_config, parse_duration
from restkv.errors import RestKvError, TransportError, UpstreamError, error_and_exit
from restkv.kv import Kind, parse_key_value
from restkv.output import (
    make_console,
    print_body,
    print_request_headers,
    print_response_headers,
    write_bytes,
)
from restkv.request import RequestOptions, compile_request

logger = logging.getLogger("restkv")

ITEMS_HELP = """\
items:
  key:=json    raw JSON value merged into the body
  key:value    request header
  key==value   query parameter
  key=value    body field
  key@path     file upload; -@path sends the file as the whole body
  a backslash makes the next character literal, e.g. 'a\\:b=c'
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="restkv",
        description="Compose and send an HTTP request from key/value items",
        epilog=ITEMS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("args", nargs="*", metavar="[METHOD] URL [ITEM]")
    parser.add_argument("-f", "--form", action="store_true", help="post form")
    parser.add_argument("--headers", action="store_true", dest="only_headers", help="only show headers")
    parser.add_argument("--body", action="store_true", dest="only_body", help="only show body")
    parser.add_argument("-v", "--verbose", action="store_true", help="echo the request before sending")
    parser.add_argument("--auth", help="username:password")
    parser.add_argument("--color", action=argparse.BooleanOptionalAction, default=None, help="use color")
    parser.add_argument("-n", "--no-formatting", action="store_true", help="no formatting/colour")
    parser.add_argument("--raw", action="store_true", help="raw output (no headers/formatting/color)")
    parser.add_argument("-m", "--multipart", action=argparse.BooleanOptionalAction, default=None,
                        help="use multipart if uploading files")
    parser.add_argument("-t", "--timeout", help="timeout, e.g. 5, 2.5s, 300ms (default none)")
    parser.add_argument("-k", "--insecure", action="store_true", help="allow insecure TLS")
    parser.add_argument("-e", "--env-proxy", action=argparse.BooleanOptionalAction, default=None,
                        help="use proxies from environment")
    parser.add_argument("--config", help="configuration file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(level: str):
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=make_console(stderr=True), show_time=False, show_path=False)],
    )


def parse_auth(auth: str | None) -> tuple[str, str] | None:
    if not auth:
        return None
    user, sep, password = auth.partition(":")
    if not sep:
        password = getpass.getpass(f"password for {user}: ")
    return user, password


def send(prepared: requests.PreparedRequest, verify: bool, timeout: float | None, env_proxy: bool) -> requests.Response:
    session = requests.Session()
    session.trust_env = env_proxy
    if not verify:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    settings = session.merge_environment_settings(prepared.url, {}, None, verify, None)
    try:
        return session.send(prepared, timeout=timeout, **settings)
    except requests.RequestException as e:
        raise TransportError(f"error during fetch: {e}") from e
    finally:
        session.close()


def split_items(parser: argparse.ArgumentParser, extras: list[str]) -> list[str]:
    """Keep leftovers that are items, e.g. `-@body.bin` looks like an option to argparse."""
    items = []
    for extra in extras:
        if extra.startswith("--") or (extra.startswith("-") and parse_key_value(extra)[0] is Kind.UNKNOWN):
            parser.error(f"unrecognized arguments: {extra}")
        items.append(extra)
    return items


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args, extras = parser.parse_known_args(argv)
    args.args += split_items(parser, extras)

    config = load_config(args.config)
    setup_logging(config.log_level)

    color = config.color if args.color is None else args.color
    multipart = config.multipart if args.multipart is None else args.multipart
    env_proxy = config.env_proxy if args.env_proxy is None else args.env_proxy
    timeout = config.timeout if args.timeout is None else parse_duration(args.timeout)
    verify = config.verify and not args.insecure
    only_headers = args.only_headers
    only_body = args.only_body
    no_formatting = args.no_formatting
    if no_formatting:
        color = False
    if args.raw:
        only_headers = False
        only_body = True
        color = False
        no_formatting = True

    if not args.args:
        parser.print_usage()
        return 0

    compiled = compile_request(args.args, RequestOptions(
        form=args.form,
        multipart=multipart,
        auth=parse_auth(args.auth),
        default_headers=config.default_headers(),
    ))

    console = make_console(color=color)
    if args.verbose:
        print_request_headers(console, compiled.request, color)
        write_bytes(compiled.body + b"\n\n")

    response = send(compiled.request, verify=verify, timeout=timeout, env_proxy=env_proxy)

    if not only_body:
        print_response_headers(console, response, color)
    if not only_headers:
        print_body(console, response, color=color, no_formatting=no_formatting, raw=args.raw)

    if response.status_code >= 400:
        raise UpstreamError(response.status_code, response.reason or "")
    return 0


def run():
    try:
        code = main()
    except UpstreamError as e:
        code = e.exit_code
    except RestKvError as e:
        error_and_exit(e.name, e.__str__())
    sys.exit(code)
