"""Tests for terminal output of requests and responses."""

from restkv.output import (
    NO_BINARY_NOTICE,
    make_console,
    print_body,
    print_request_headers,
    print_response_headers,
)
from restkv.request import compile_request


def test_request_headers(capsys) -> None:
    prepared = compile_request(["example.com/a", "q==1", "X-B:2", "X-A:1"]).request
    print_request_headers(make_console(color=False), prepared, color=False)
    assert capsys.readouterr().out == "GET /a?q=1 HTTP/1.1\nHost: example.com\nX-A: 1\nX-B: 2\n\n"


def test_request_line_defaults_to_root_path(capsys) -> None:
    prepared = compile_request(["example.com"]).request
    print_request_headers(make_console(color=False), prepared, color=False)
    assert capsys.readouterr().out.startswith("GET / HTTP/1.1\n")


def test_response_headers(capsys, make_response) -> None:
    response = make_response(404, headers={"Server": "x", "Content-Type": "text/plain"}, reason="Not Found")
    print_response_headers(make_console(color=False), response, color=False)
    assert capsys.readouterr().out == "HTTP/1.1 404 Not Found\nContent-Type: text/plain\nServer: x\n\n"


def test_json_body_colored_renderer_text(capsys, make_response) -> None:
    response = make_response(body=b'{"b": 1.50, "a": [true]}', headers={"Content-Type": "application/json"})
    print_body(make_console(color=False), response, color=True)
    assert capsys.readouterr().out == '{\n    "a": [\n        true\n    ],\n    "b": 1.50\n}\n\n'


def test_json_body_without_color_is_reindented(capsys, make_response) -> None:
    response = make_response(body=b'{"a":[1,2]}', headers={"Content-Type": "application/json; charset=utf-8"})
    print_body(make_console(color=False), response, color=False)
    assert capsys.readouterr().out == '{\n    "a": [\n        1,\n        2\n    ]\n}\n\n'


def test_invalid_json_body_falls_back_to_text(capsys, make_response) -> None:
    response = make_response(body=b"not json", headers={"Content-Type": "application/json"})
    print_body(make_console(color=False), response, color=False)
    assert capsys.readouterr().out == "not json\n\n"


def test_text_body_untouched(capsys, make_response) -> None:
    response = make_response(body=b"<p>hi</p>", headers={"Content-Type": "text/html"})
    print_body(make_console(color=False), response, color=False)
    assert capsys.readouterr().out == "<p>hi</p>\n\n"


def test_binary_body_notice(capsys, make_response) -> None:
    response = make_response(body=b"\x89PNG\x00\x00", headers={"Content-Type": "image/png"})
    print_body(make_console(color=False), response, color=False)
    assert capsys.readouterr().out == NO_BINARY_NOTICE + "\n\n"


def test_no_formatting(capsys, make_response) -> None:
    response = make_response(body=b'{"b":1,"a":2}', headers={"Content-Type": "application/json"})
    print_body(make_console(color=False), response, color=False, no_formatting=True)
    assert capsys.readouterr().out == '{"b":1,"a":2}'

    response = make_response(body=b"a\x00b", headers={"Content-Type": "text/plain"})
    print_body(make_console(color=False), response, color=False, no_formatting=True)
    assert capsys.readouterr().out == NO_BINARY_NOTICE


def test_raw_writes_bytes(capsysbinary, make_response) -> None:
    response = make_response(body=b"\x00\xffraw", headers={"Content-Type": "application/json"})
    print_body(make_console(color=False), response, raw=True)
    assert capsysbinary.readouterr().out == b"\x00\xffraw"


def test_text_body_bytes_are_not_redecoded(capsysbinary, make_response) -> None:
    response = make_response(body="héllo".encode(), headers={"Content-Type": "text/plain"})
    assert response.encoding == "ISO-8859-1"
    print_body(make_console(color=False), response, color=False)
    assert capsysbinary.readouterr().out == b"h\xc3\xa9llo\n\n"


def test_no_formatting_keeps_control_characters(capsysbinary, make_response) -> None:
    response = make_response(body=b"a\tb\r\nc", headers={"Content-Type": "text/plain"})
    print_body(make_console(color=False), response, color=False, no_formatting=True)
    assert capsysbinary.readouterr().out == b"a\tb\r\nc"


def test_text_body_keeps_control_characters(capsysbinary, make_response) -> None:
    response = make_response(body=b"a\tb\r\nc", headers={"Content-Type": "text/csv"})
    print_body(make_console(color=False), response, color=False)
    assert capsysbinary.readouterr().out == b"a\tb\r\nc\n\n"


def test_json_body_without_color_sorts_keys_and_keeps_numbers(capsys, make_response) -> None:
    response = make_response(body=b'{"b":1.50,"a":2}', headers={"Content-Type": "application/json"})
    print_body(make_console(color=False), response, color=False)
    assert capsys.readouterr().out == '{\n    "a": 2,\n    "b": 1.50\n}\n\n'


def test_request_headers_keep_explicit_host(capsys) -> None:
    prepared = compile_request(["example.com:8080/a", "Host:api.internal"]).request
    print_request_headers(make_console(color=False), prepared, color=False)
    assert capsys.readouterr().out == "GET /a HTTP/1.1\nHost: api.internal\n\n"
