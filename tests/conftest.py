import pytest
import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers


def build_response(
        status: int = 200,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
        reason: str = "OK",
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.headers = CaseInsensitiveDict(headers or {})
    response._content = body
    response._content_consumed = True
    response.encoding = get_encoding_from_headers(response.headers)
    response.url = "http://example.com/"
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.delenv("RESTKV_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def sent(monkeypatch, isolated_config, make_response):
    """Replace `Session.send`; the response to return is set on `sent.response`."""

    class Sent:
        response = make_response(body=b"{}", headers={"Content-Type": "application/json"})
        prepared = []
        kwargs = []
        error = None

    def fake_send(session, request, **kwargs):
        Sent.prepared.append(request)
        Sent.kwargs.append(kwargs)
        if Sent.error is not None:
            raise Sent.error
        return Sent.response

    monkeypatch.setattr(requests.Session, "send", fake_send)
    return Sent
