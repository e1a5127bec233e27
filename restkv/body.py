"""Request body assembly.

`choose_encoding` decides how the body is encoded without touching the
filesystem; `assemble_body` reads the referenced files and builds the bytes.
"""
import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from operator import itemgetter
from typing import Any
from urllib.parse import urlencode

import urllib3

from restkv.coerce import form_fields
from restkv.errors import FileAccessError, MultipleRawBodyFilesError
from restkv.kv import KvPairs, RAW_BODY_KEY

logger = logging.getLogger(__name__)


class Encoding(Enum):
    NONE = "none"
    RAW_FILE = "raw-file"
    MULTIPART = "multipart"
    URL_ENCODED = "url-encoded"
    JSON = "json"


CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_JSON = "application/json"


@dataclass(frozen=True)
class Payload():
    encoding: Encoding
    data: bytes
    content_type: str


def choose_encoding(
        files: dict[str, str],
        body_params: dict[str, Any],
        form: bool = False,
        multipart: bool = True,
) -> Encoding:
    if RAW_BODY_KEY in files:
        if len(files) > 1:
            raise MultipleRawBodyFilesError("only one input file allowed when setting raw body")
        return Encoding.RAW_FILE
    if files and multipart:
        return Encoding.MULTIPART
    if not files and not body_params:
        return Encoding.NONE
    if form:
        return Encoding.URL_ENCODED
    return Encoding.JSON


def read_file(path: str, purpose: str = "file") -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileAccessError(f"unable to read {purpose} '{path}': {e}") from e


def _raw_file_payload(kvp: KvPairs, body_params: dict[str, Any]) -> Payload:
    if body_params:
        logger.warning("extra body parameters ignored when setting raw body: %s", ", ".join(sorted(body_params)))
    return Payload(
        encoding=Encoding.RAW_FILE,
        data=read_file(kvp.files[RAW_BODY_KEY], "file for body"),
        content_type=CONTENT_TYPE_OCTET_STREAM,
    )


def _multipart_payload(kvp: KvPairs, body_params: dict[str, Any]) -> Payload:
    fields: list[tuple[str, Any]] = []
    for key, path in kvp.files.items():
        fields.append((key, (os.path.basename(path), read_file(path))))
    fields.extend(form_fields(body_params))
    data, content_type = urllib3.encode_multipart_formdata(fields)
    return Payload(encoding=Encoding.MULTIPART, data=data, content_type=content_type)


def _inline_files(kvp: KvPairs, body_params: dict[str, Any]) -> dict[str, Any]:
    params = dict(body_params)
    for key, path in kvp.files.items():
        params[key] = read_file(path, "file for body").decode("utf-8", errors="replace")
    return params


def _url_encoded_payload(kvp: KvPairs, body_params: dict[str, Any]) -> Payload:
    params = {key: value for key, value in body_params.items() if key not in kvp.files}
    fields: list[tuple[str, str | bytes]] = list(form_fields(params))
    for key, path in kvp.files.items():
        fields.append((key, read_file(path, "file for body")))
    fields.sort(key=itemgetter(0))
    return Payload(
        encoding=Encoding.URL_ENCODED,
        data=urlencode(fields).encode("ascii"),
        content_type=CONTENT_TYPE_FORM,
    )


def assemble_body(
        kvp: KvPairs,
        form: bool = False,
        multipart: bool = True,
) -> Payload | None:
    body_params = kvp.body_params()
    encoding = choose_encoding(kvp.files, body_params, form=form, multipart=multipart)
    logger.debug("body encoding: %s", encoding.value)
    match encoding:
        case Encoding.RAW_FILE:
            return _raw_file_payload(kvp, body_params)
        case Encoding.MULTIPART:
            return _multipart_payload(kvp, body_params)
        case Encoding.URL_ENCODED:
            return _url_encoded_payload(kvp, body_params)
        case Encoding.JSON:
            params = _inline_files(kvp, body_params)
            return Payload(
                encoding=Encoding.JSON,
                data=json.dumps(params, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8"),
                content_type=CONTENT_TYPE_JSON,
            )
    return None
