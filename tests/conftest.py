import random
import threading

import pytest

from dmp_agent.dispatch import SerialQueue
from dmp_agent.dmp import DMP
from dmp_agent.identity import StaticIdentityProvider
from dmp_agent.tracker import SessionTracker
from dmp_agent.transport import Transport

AD_ID = "6D92078A-8246-4BA4-AE5B-76104861E7DC"


class FakeTransport(Transport):
    """Records every URL; answers with canned values or raises canned errors."""

    def __init__(self, body=b"", json_value=None, error=None):
        self.body = body
        self.json_value = json_value
        self.error = error
        self.sent = []
        self.fetched = []
        self.closed = False
        self.release = threading.Event()
        self.release.set()

    def send(self, url):
        self.release.wait(5)
        self.sent.append(url)
        if self.error:
            raise self.error
        return self.body

    def fetch_json(self, url):
        self.fetched.append(url)
        if self.error:
            raise self.error
        return self.json_value

    def close(self):
        self.closed = True


class Waiter:
    """Completion handler that remembers results and the thread they ran on."""

    def __init__(self):
        self.results = []
        self.threads = []
        self._event = threading.Event()

    def __call__(self, result):
        self.results.append(result)
        self.threads.append(threading.current_thread().name)
        self._event.set()

    def wait(self, timeout=5):
        assert self._event.wait(timeout), "completion was not delivered"
        return self.results[0]


@pytest.fixture
def identity():
    return StaticIdentityProvider(advertising_id=AD_ID, tracking_enabled=True)


@pytest.fixture
def serial():
    queue = SerialQueue()
    yield queue
    queue.shutdown()


@pytest.fixture
def tracker(serial, identity):
    return SessionTracker(serial, identity, rng=random.Random(7))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dmp(identity, transport):
    agent = DMP(identity, transport=transport, rng=random.Random(7))
    yield agent
    agent.shutdown()


@pytest.fixture
def waiter():
    return Waiter()
