"""
Identity / consent providers.

The agent never reads a device identifier directly: it asks a provider for
the advertising id and the tracking-consent flag. tracking_identifier()
enforces the rule that the id is absent whenever tracking is disabled,
whatever the provider returns.
"""

import threading
import uuid
from typing import Optional


class IdentityProvider:
    """Contract: advertising id (or None) + tracking consent flag."""

    def advertising_identifier(self) -> Optional[str]:
        raise NotImplementedError

    def is_tracking_enabled(self) -> bool:
        raise NotImplementedError


class StaticIdentityProvider(IdentityProvider):
    """Holds an id and consent flag in memory. Both can change at runtime."""

    def __init__(self, advertising_id=None, tracking_enabled=True):
        self._lock = threading.Lock()
        self._advertising_id = advertising_id
        self._tracking_enabled = as_bool(tracking_enabled)

    def advertising_identifier(self):
        with self._lock:
            return self._advertising_id

    def is_tracking_enabled(self):
        with self._lock:
            return self._tracking_enabled

    @property
    def tracking_enabled(self):
        return self.is_tracking_enabled()

    @tracking_enabled.setter
    def tracking_enabled(self, value):
        with self._lock:
            self._tracking_enabled = as_bool(value)

    @property
    def advertising_id(self):
        return self.advertising_identifier()

    @advertising_id.setter
    def advertising_id(self, value):
        with self._lock:
            self._advertising_id = value


_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


def as_bool(value) -> bool:
    """Consent flag from config: strings like "false" or "0" mean off."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def new_advertising_id() -> str:
    """Fresh identifier in the uppercase UUID form devices report."""
    return str(uuid.uuid4()).upper()


def tracking_identifier(provider) -> Optional[str]:
    """The advertising id, or None when tracking is off or no id exists."""
    if not provider.is_tracking_enabled():
        return None
    return provider.advertising_identifier() or None
