import json

import pytest
import requests

from dmp_agent import http_client
from dmp_agent.constants import REQUEST_TIMEOUT_SEC
from dmp_agent.errors import TransportFailure, UnexpectedResponse
from dmp_agent.transport import NO_CACHE_HEADERS, RequestsTransport

pytestmark = pytest.mark.unit


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content
        self.text = content.decode("utf-8", "replace")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def test_get_is_uncached_with_bounded_timeout():
    session = FakeSession(FakeResponse(200, b"ok"))
    assert RequestsTransport(session).send("https://bcp.x/5/") == b"ok"
    url, headers, timeout = session.calls[0]
    assert headers == NO_CACHE_HEADERS
    assert timeout == REQUEST_TIMEOUT_SEC == 60


def test_send_accepts_no_content():
    assert RequestsTransport(FakeSession(FakeResponse(204))).send("https://bcp.x/") == b""


def test_send_non_2xx_is_unexpected_response():
    transport = RequestsTransport(FakeSession(FakeResponse(503, b"busy")))
    with pytest.raises(UnexpectedResponse) as info:
        transport.send("https://bcp.x/")
    assert info.value.status_code == 503


def test_request_exception_becomes_transport_failure():
    transport = RequestsTransport(FakeSession(error=requests.Timeout("slow")))
    with pytest.raises(TransportFailure) as info:
        transport.send("https://bcp.x/")
    assert isinstance(info.value.cause, requests.Timeout)


def test_connection_error_resets_session(monkeypatch):
    stale = FakeSession(error=requests.ConnectionError("reset by peer"))
    fresh = FakeSession(FakeResponse(200, b"ok"))
    monkeypatch.setattr(http_client, "create_session", lambda: fresh)
    transport = RequestsTransport(stale)

    with pytest.raises(TransportFailure):
        transport.send("https://bcp.x/")
    assert stale.closed
    assert transport.send("https://bcp.x/") == b"ok"


def test_fetch_json_returns_parsed_body():
    body = json.dumps({"Profile": {"pid": "1"}}).encode()
    transport = RequestsTransport(FakeSession(FakeResponse(200, body)))
    assert transport.fetch_json("https://ad.x/") == {"Profile": {"pid": "1"}}


def test_fetch_json_accepts_fragments():
    transport = RequestsTransport(FakeSession(FakeResponse(200, b'"segment"')))
    assert transport.fetch_json("https://ad.x/") == "segment"


def test_fetch_json_requires_200():
    transport = RequestsTransport(FakeSession(FakeResponse(202, b"{}")))
    with pytest.raises(UnexpectedResponse):
        transport.fetch_json("https://ad.x/")


def test_fetch_json_empty_body_is_unexpected():
    transport = RequestsTransport(FakeSession(FakeResponse(200, b"")))
    with pytest.raises(UnexpectedResponse):
        transport.fetch_json("https://ad.x/")


def test_fetch_json_bad_body_is_transport_failure():
    transport = RequestsTransport(FakeSession(FakeResponse(200, b"<html>")))
    with pytest.raises(TransportFailure):
        transport.fetch_json("https://ad.x/")


def test_session_has_no_transport_retries():
    session = http_client.create_session()
    try:
        adapter = session.get_adapter("https://bcp.crwdcntrl.net/")
        assert adapter.max_retries.total == 0
        assert session.headers["User-Agent"].startswith("dmp-agent/")
        assert session.verify
    finally:
        session.close()


def test_ca_bundle_prefers_environment(tmp_path, monkeypatch):
    bundle = tmp_path / "ca.pem"
    bundle.write_text("cert")
    monkeypatch.setenv("REQUESTS_CA_BUNDLE", str(bundle))
    assert http_client._get_ca_bundle() == str(bundle)


def test_broken_session_is_replaced_only_once(monkeypatch):
    created = []

    def create():
        session = FakeSession(FakeResponse(200, b"ok"))
        created.append(session)
        return session

    monkeypatch.setattr(http_client, "create_session", create)
    stale = FakeSession(error=requests.ConnectionError("reset by peer"))
    transport = RequestsTransport(stale)

    with pytest.raises(TransportFailure):
        transport.send("https://bcp.x/")
    # a second worker that grabbed the same stale session fails later
    transport._replace_session(stale)

    assert len(created) == 1
    assert stale.closed
    assert transport.send("https://bcp.x/") == b"ok"
