"""
DMP — public entry points of the agent.

One instance per process, built by the composition root (runner.py) and
passed to whoever needs it. Wires together:

  SessionTracker  buffer + session + config, on the serial queue
  router          URL building
  Transport       blocking GET, run on a small network pool
  callback pool   where completion handlers are invoked

Every async call returns a concurrent.futures.Future and optionally takes a
completion(Result) handler. Errors are delivered, never raised, except for
ConfigurationError from configure().
"""

from concurrent.futures import Future, ThreadPoolExecutor

from .config import log
from .constants import (
    BEHAVIOR_ID_KEY, DEFAULT_DOMAIN, DEFAULT_PROTOCOL, NETWORK_WORKERS, OPPORTUNITY_KEY,
)
from .dispatch import SerialQueue, create_callback_executor, deliver
from .errors import DMPError, NotInitialized, TrackingDisabled, TransportFailure
from .identity import tracking_identifier
from .profile import AudienceProfile
from .tracker import SessionTracker
from .transport import RequestsTransport
from . import router


class DMP:

    def __init__(self, identity, transport=None, callback_executor=None, rng=None):
        self._identity = identity
        self._transport = transport or RequestsTransport()
        self._serial = SerialQueue()
        self._tracker = SessionTracker(self._serial, identity, rng=rng)
        self._network = ThreadPoolExecutor(max_workers=NETWORK_WORKERS, thread_name_prefix="dmp-net")
        self._owns_callbacks = callback_executor is None
        self._callbacks = callback_executor or create_callback_executor()

    # ─── Identity ────────────────────────────────────────────

    @property
    def tracking_enabled(self) -> bool:
        return self._identity.is_tracking_enabled()

    @property
    def advertising_id(self):
        """The advertising id, or None if tracking is limited."""
        return tracking_identifier(self._identity)

    @property
    def is_initialized(self) -> bool:
        return self._tracker.is_initialized

    # ─── Configuration ───────────────────────────────────────

    def initialize(self, client_id):
        """
        Call first. Sets the client id, resets domain and protocol to the
        defaults and starts a new session. Blocks until applied.
        """
        return self.configure(client_id=client_id, domain=DEFAULT_DOMAIN, protocol=DEFAULT_PROTOCOL)

    def configure(self, client_id=None, domain=None, protocol=None):
        """Change any of client id / domain / protocol. Always starts a new session."""
        future = self._tracker.configure(client_id=client_id, domain=domain, protocol=protocol)
        return future.result()

    def start_new_session(self):
        """The next flush will carry a page view marker."""
        self._tracker.reset_session()

    # ─── Behavior collection ─────────────────────────────────

    def add_behavior_data(self, value, behavior_type):
        """Collect any type/value pair. Non-blocking; dropped if type is empty."""
        self._tracker.append(behavior_type, value)

    def add_behavior_id(self, behavior_id):
        self.add_behavior_data(str(int(behavior_id)), BEHAVIOR_ID_KEY)

    def add_opportunity_id(self, opportunity_id):
        self.add_behavior_data(str(int(opportunity_id)), OPPORTUNITY_KEY)

    def pending_behaviors(self):
        """Copy of the buffer, after every previously queued append has run."""
        return self._tracker.pending().result()

    # ─── Sending ─────────────────────────────────────────────

    def send_behavior_data(self, completion=None) -> Future:
        """
        Flush the collected behaviors to the collection server.
        The buffer is cleared even if tracking is disabled or the send fails.
        """
        future = Future()
        future.set_running_or_notify_cancel()
        deliver(future, completion, self._callbacks)
        drained = self._tracker.drain_for_send()
        drained.add_done_callback(lambda d: self._dispatch_batch(d, future))
        return future

    def _dispatch_batch(self, drained, future):
        error = drained.exception()
        if error is not None:
            if isinstance(error, DMPError):
                log.info("Behavior data not sent: %s", error)
            future.set_exception(error)
            return
        batch = drained.result()
        try:
            url = router.send_behavior_url(batch.config, batch.advertising_id, batch.events)
        except DMPError as e:
            future.set_exception(e)
            return
        log.debug("Sending %d behaviors to %s", len(batch.events), url)
        self._submit_request(self._transport.send, url, future)

    # ─── Audience data ───────────────────────────────────────

    def get_audience_data(self, completion=None) -> Future:
        """
        Fetch the audience profile for this device. Fails fast, without
        queueing anything, when not initialized or tracking is limited.
        """
        future = Future()
        future.set_running_or_notify_cancel()
        deliver(future, completion, self._callbacks)
        if not self._tracker.is_initialized:
            future.set_exception(NotInitialized())
            return future
        if not self.tracking_enabled:
            future.set_exception(TrackingDisabled())
            return future

        captured = self._tracker.capture()
        captured.add_done_callback(lambda c: self._dispatch_profile(c, future))
        return future

    def _dispatch_profile(self, captured, future):
        try:
            config, advertising_id = captured.result()
            url = router.audience_url(config, advertising_id)
        except DMPError as e:
            future.set_exception(e)
            return
        self._submit_request(self._fetch_profile, url, future)

    def _fetch_profile(self, url):
        return AudienceProfile.from_json(self._transport.fetch_json(url))

    def get_audience_data_with_handler(self, handler):
        """Legacy form: handler(profile, success), profile is None on failure."""
        def _completion(result):
            handler(result.value if result.is_success else None, result.is_success)
        return self.get_audience_data(_completion)

    # ─── Network pool ────────────────────────────────────────

    def _submit_request(self, fn, url, future):
        try:
            self._network.submit(self._run_request, fn, url, future)
        except RuntimeError as e:
            future.set_exception(TransportFailure(e))

    @staticmethod
    def _run_request(fn, url, future):
        try:
            value = fn(url)
        except DMPError as e:
            future.set_exception(e)
        except Exception as e:
            log.error("Transport raised unexpectedly: %s", e, exc_info=True)
            future.set_exception(TransportFailure(e))
        else:
            future.set_result(value)

    # ─── Lifecycle ───────────────────────────────────────────

    def shutdown(self, wait=True):
        """Stop worker threads. In-flight requests finish when wait is True."""
        self._serial.shutdown(wait=wait)
        self._network.shutdown(wait=wait)
        if self._owns_callbacks:
            self._callbacks.shutdown(wait=wait)
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()
        return False
