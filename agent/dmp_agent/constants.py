"""
Constants: SDK version, endpoint defaults, reserved behavior keys, timeouts.
"""

AGENT_VERSION = "3.0.0"
SDK_VERSION = "3.0"            # Sent in the collect URL as sdk=3.0

# ─── Endpoint defaults ───────────────────────────────────────────
DEFAULT_DOMAIN = "crwdcntrl.net"
DEFAULT_PROTOCOL = "https"
ALLOWED_PROTOCOLS = frozenset({"http", "https"})

COLLECT_HOST_PREFIX = "bcp"    # behavior collection
PROFILE_HOST_PREFIX = "ad"     # audience extraction
API_VERSION = "5"

# ─── Reserved behavior keys ──────────────────────────────────────
RAND_KEY = "rand"              # cache buster, always index 0 of a batch
PAGE_VIEW_KEY = "pv"           # once per session
COUNT_PLACEMENTS_KEY = "dp"    # once per batch containing an opportunity
OPPORTUNITY_KEY = "p"
BEHAVIOR_ID_KEY = "b"
MARKER_VALUE = "y"

RAND_UPPER_BOUND = 999_999_999  # exclusive

# ─── Network ─────────────────────────────────────────────────────
REQUEST_TIMEOUT_SEC = 60       # Generous, requests are fire-and-forget
NETWORK_WORKERS = 2

# ─── URL encoding ────────────────────────────────────────────────
# Kept unescaped in path segments on top of letters, digits and "-._~".
PATH_SAFE_CHARS = "!*'\"();:@&=+$,/?#[]% "
HOST_SAFE_CHARS = "!$&'()*+,;=:[]"
