"""
dmp_agent — Audience tracking agent
===================================
Architecture: one serial worker owns all state, network I/O on a pool,
completions on a caller-facing executor.

  constants.py    → Version, endpoint defaults, reserved keys, timeouts
  config.py       → Logging, config load/save, helpers
  errors.py       → DMPError taxonomy
  state.py        → BehaviorEvent, ClientConfig, SessionState, Result
  encoding.py     → URL path / host percent-encoding
  router.py       → Collect + audience URL building
  dispatch.py     → SerialQueue + completion delivery
  tracker.py      → SessionTracker (buffer, session, config)
  identity.py     → Advertising id / tracking consent providers
  http_client.py  → HTTP session with pooling + CA bundle
  transport.py    → Transport contract + requests implementation
  profile.py      → AudienceProfile
  dmp.py          → DMP facade (public API)
  runner.py       → Composition root + main()
"""

from .dmp import DMP
from .errors import (
    ConfigurationError,
    DMPError,
    NotInitialized,
    TrackingDisabled,
    TransportFailure,
    UnexpectedResponse,
)
from .identity import IdentityProvider, StaticIdentityProvider
from .profile import Audience, AudienceProfile
from .state import BehaviorEvent, Result
from .transport import RequestsTransport, Transport

__all__ = [
    "DMP",
    "ConfigurationError",
    "DMPError",
    "NotInitialized",
    "TrackingDisabled",
    "TransportFailure",
    "UnexpectedResponse",
    "IdentityProvider",
    "StaticIdentityProvider",
    "Audience",
    "AudienceProfile",
    "BehaviorEvent",
    "Result",
    "RequestsTransport",
    "Transport",
]
