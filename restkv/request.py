import logging
from dataclasses import dataclass

import requests
from requests.structures import CaseInsensitiveDict

from restkv.body import Payload, assemble_body
from restkv.errors import UsageError
from restkv.kv import KvPairs

logger = logging.getLogger(__name__)

METHODS = ("GET", "HEAD", "POST", "PUT", "DELETE", "PURGE", "TRACE", "OPTIONS", "CONNECT", "PATCH")


@dataclass(frozen=True)
class RequestOptions():
    form: bool = False
    multipart: bool = True
    auth: tuple[str, str] | None = None
    default_headers: dict[str, str] | None = None


@dataclass(frozen=True)
class CompiledRequest():
    request: requests.PreparedRequest
    payload: Payload | None
    kvp: KvPairs

    @property
    def body(self) -> bytes:
        return self.payload.data if self.payload else b""


def with_scheme(url: str) -> str:
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return "http://" + url


def compile_request(args: list[str], options: RequestOptions | None = None) -> CompiledRequest:
    """Turn `[METHOD] URL [ITEM ...]` into a prepared request.

    The method defaults to GET, or POST with `form`; a produced body switches
    an implicit method to POST.
    """
    options = options or RequestOptions()
    args = list(args)

    method = "POST" if options.form else "GET"
    method_provided = options.form
    if args and args[0] in METHODS:
        method = args.pop(0)
        method_provided = True
    if not args:
        raise UsageError("missing URL")

    url = with_scheme(args.pop(0))
    kvp = KvPairs.create(args)
    payload = assemble_body(kvp, form=options.form, multipart=options.multipart)
    if payload is not None and not method_provided:
        method = "POST"

    headers = CaseInsensitiveDict(options.default_headers or {})
    if payload is not None:
        headers["Content-Type"] = payload.content_type
    headers.update({key: value.lstrip() for key, value in kvp.headers.items()})

    req = requests.Request(
        method=method,
        url=url,
        headers=headers,
        params=kvp.query_pairs(),
        data=payload.data if payload is not None else None,
        auth=options.auth,
    )
    try:
        prepared = req.prepare()
    except requests.RequestException as e:
        raise UsageError(f"invalid request: {e}") from e
    logger.debug("compiled %s %s", prepared.method, prepared.url)
    return CompiledRequest(request=prepared, payload=payload, kvp=kvp)
