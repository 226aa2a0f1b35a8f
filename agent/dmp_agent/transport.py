"""
Transport adapters — issue the GET for a built URL.

Both calls are blocking and run on the agent's network pool, never on the
serial queue. Failures are raised as DMPError subclasses:
  TransportFailure    network error or undecodable body
  UnexpectedResponse  the server answered with a status/body we can't use
"""

import threading

import requests

from .config import log
from .constants import REQUEST_TIMEOUT_SEC
from .errors import TransportFailure, UnexpectedResponse
from . import http_client

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class Transport:
    """Contract used by the agent. Swap in a fake for tests."""

    def send(self, url) -> bytes:
        raise NotImplementedError

    def fetch_json(self, url):
        raise NotImplementedError

    def close(self):
        pass


class RequestsTransport(Transport):
    """Transport over a pooled requests.Session."""

    def __init__(self, session=None, timeout=REQUEST_TIMEOUT_SEC):
        self._session = session or http_client.create_session()
        self._timeout = timeout
        self._lock = threading.Lock()

    def _get(self, url):
        with self._lock:
            session = self._session
        try:
            return session.get(url, headers=NO_CACHE_HEADERS, timeout=self._timeout)
        except requests.ConnectionError as e:
            log.warning("Connection error for %s: %s", _host(url), e)
            self._replace_session(session)
            raise TransportFailure(e) from e
        except requests.RequestException as e:
            log.warning("Request to %s failed: %s", _host(url), e)
            raise TransportFailure(e) from e

    def _replace_session(self, stale):
        # Only the first thread to see a broken session swaps it.
        with self._lock:
            if self._session is stale:
                self._session = http_client.reset_session(stale)

    def send(self, url):
        resp = self._get(url)
        if not 200 <= resp.status_code < 300:
            log.warning("Behavior send failed: HTTP %d", resp.status_code)
            raise UnexpectedResponse(f"HTTP {resp.status_code}", status_code=resp.status_code)
        log.info("Behavior data sent | HTTP %d | %d bytes", resp.status_code, len(resp.content))
        return resp.content

    def fetch_json(self, url):
        resp = self._get(url)
        if resp.status_code != 200:
            log.warning("Audience fetch failed: HTTP %d — %s", resp.status_code, resp.text[:200])
            raise UnexpectedResponse(f"HTTP {resp.status_code}", status_code=resp.status_code)
        if not resp.content:
            raise UnexpectedResponse("empty response body", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            log.warning("Audience response is not JSON: %s", e)
            raise TransportFailure(e) from e

    def close(self):
        with self._lock:
            self._session.close()


def _host(url):
    return url.split("://", 1)[-1].split("/", 1)[0]
