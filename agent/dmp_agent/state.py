"""
Agent data model — behavior events, client config, session state, results.

ClientConfig and SessionState are only mutated from the serial queue
worker (see dispatch.py). No locks needed.
"""

from concurrent.futures import CancelledError
from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import DEFAULT_DOMAIN, DEFAULT_PROTOCOL


@dataclass(frozen=True)
class BehaviorEvent:
    """One key/value tag. A missing or empty value renders as a bare key."""
    key: str
    value: Optional[str] = None


@dataclass
class ClientConfig:
    client_id: str = ""
    domain: str = DEFAULT_DOMAIN
    protocol: str = DEFAULT_PROTOCOL

    @property
    def is_initialized(self) -> bool:
        return bool(self.client_id)

    def snapshot(self):
        """Immutable copy used to build URLs outside the serial queue."""
        return ClientConfig(self.client_id, self.domain, self.protocol)

    @classmethod
    def from_dict(cls, data):
        """Build from the camelCase keys used in the JSON config file."""
        return cls(
            client_id=str(data.get("clientId") or ""),
            domain=data.get("domain") or DEFAULT_DOMAIN,
            protocol=data.get("protocol") or DEFAULT_PROTOCOL,
        )


@dataclass
class SessionState:
    # True until the first flush of a session has carried its pv marker.
    is_new_session: bool = True
    flush_count: int = 0

    def reset(self):
        self.is_new_session = True

    def consume_page_view(self) -> bool:
        """Returns whether a page view is due, and marks it as sent."""
        due = self.is_new_session
        self.is_new_session = False
        return due


@dataclass(frozen=True)
class Result:
    """What a completion callback receives: exactly one of value / error."""
    value: Any = None
    error: Optional[BaseException] = field(default=None)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @classmethod
    def from_future(cls, future):
        if future.cancelled():
            return cls(error=CancelledError())
        error = future.exception()
        if error is not None:
            return cls(error=error)
        return cls(value=future.result())
