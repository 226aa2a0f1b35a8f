"""
SessionTracker — the behavior buffer, session flag and client config.

Every read-modify-write of that state runs as one job on the SerialQueue.
The public methods only submit work and return futures, so producers never
block on a drain and an append is never split across one:

  - an append submitted before a drain lands in the drained batch
  - an append submitted after lands in the fresh, empty buffer

PRIVACY: events are dropped on arrival while tracking is disabled, and the
buffer is cleared (never sent) when a flush finds tracking disabled.
"""

import random
from dataclasses import dataclass
from typing import List, Optional

from .config import log
from .constants import (
    ALLOWED_PROTOCOLS, COUNT_PLACEMENTS_KEY, MARKER_VALUE, OPPORTUNITY_KEY,
    PAGE_VIEW_KEY, RAND_KEY, RAND_UPPER_BOUND,
)
from .errors import ConfigurationError, NotInitialized, TrackingDisabled
from .identity import tracking_identifier
from .state import BehaviorEvent, ClientConfig, SessionState


@dataclass(frozen=True)
class Batch:
    """A drained batch plus everything captured in the same serial turn."""
    events: List[BehaviorEvent]
    was_new_session: bool
    config: ClientConfig
    advertising_id: Optional[str]


class SessionTracker:
    """Owns the EventBuffer, SessionState and ClientConfig."""

    def __init__(self, serial, identity, rng=None):
        self._serial = serial
        self._identity = identity
        self._rng = rng or random.Random()
        self._events: List[BehaviorEvent] = []
        self._session = SessionState()
        self._config = ClientConfig()

    # ── Producers ─────────────────────────────────────────────

    def append(self, key, value=None):
        """Queue one event. Empty keys are dropped before reaching the queue."""
        if not key:
            return None
        return self._serial.submit(self._append, BehaviorEvent(key, value))

    def _append(self, event):
        if not self._identity.is_tracking_enabled():
            return False
        self._events.append(event)
        return True

    # ── Session / config ─────────────────────────────────────

    def reset_session(self):
        return self._serial.submit(self._session.reset)

    def configure(self, client_id=None, domain=None, protocol=None):
        """Validate now, then apply and start a new session in one serial turn."""
        if client_id is not None and not isinstance(client_id, str):
            raise ConfigurationError(f"client id must be a string, got {type(client_id).__name__}")
        if domain is not None and (not isinstance(domain, str) or not domain.strip()):
            raise ConfigurationError("domain must be a non-empty string")
        if protocol is not None and protocol not in ALLOWED_PROTOCOLS:
            raise ConfigurationError(f"protocol must be one of {sorted(ALLOWED_PROTOCOLS)}, got {protocol!r}")
        return self._serial.submit(self._configure, client_id, domain, protocol)

    def _configure(self, client_id, domain, protocol):
        if client_id is not None:
            self._config.client_id = client_id
        if domain is not None:
            self._config.domain = domain.strip()
        if protocol is not None:
            self._config.protocol = protocol
        self._session.reset()
        log.info("Configured client=%s domain=%s protocol=%s (new session)",
                 self._config.client_id or "<unset>", self._config.domain, self._config.protocol)
        return self._config.snapshot()

    @property
    def is_initialized(self) -> bool:
        # Unsynchronized read for fail-fast checks; URLs use capture() values.
        return self._config.is_initialized

    def capture(self):
        """Future of (config snapshot, tracking identifier) taken in one turn."""
        return self._serial.submit(self._capture)

    def _capture(self):
        return self._config.snapshot(), tracking_identifier(self._identity)

    def pending(self):
        """Future of a copy of the buffered events."""
        return self._serial.submit(lambda: list(self._events))

    def session_state(self):
        return self._serial.submit(
            lambda: SessionState(self._session.is_new_session, self._session.flush_count)
        )

    # ── Flush ─────────────────────────────────────────────────

    def drain_for_send(self):
        """Future of a Batch; fails with NotInitialized or TrackingDisabled."""
        return self._serial.submit(self._drain)

    def _drain(self):
        if not self._config.is_initialized:
            raise NotInitialized()

        advertising_id = tracking_identifier(self._identity)
        if advertising_id is None:
            dropped = len(self._events)
            self._events.clear()
            log.info("Tracking disabled — discarded %d buffered behaviors", dropped)
            raise TrackingDisabled()

        events = self._events
        events.insert(0, BehaviorEvent(RAND_KEY, str(self._rng.randrange(RAND_UPPER_BOUND))))

        was_new_session = self._session.consume_page_view()
        if was_new_session:
            events.insert(1, BehaviorEvent(PAGE_VIEW_KEY, MARKER_VALUE))

        for index, event in enumerate(events):
            if event.key == OPPORTUNITY_KEY:
                events.insert(index + 1, BehaviorEvent(COUNT_PLACEMENTS_KEY, MARKER_VALUE))
                break

        batch = list(events)
        events.clear()
        self._session.flush_count += 1
        log.debug("Drained %d behaviors (flush #%d, new_session=%s)",
                  len(batch), self._session.flush_count, was_new_session)
        return Batch(batch, was_new_session, self._config.snapshot(), advertising_id)
