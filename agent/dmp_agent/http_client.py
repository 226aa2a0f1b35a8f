"""
HTTP session with connection pooling and an explicit CA bundle.

Transport-level retries are switched off: delivery is best effort and a
lost batch is never replayed. Cache headers are set per request by the
transport.
"""

import os
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import log
from .constants import AGENT_VERSION

_retry_strategy = Retry(
    total=0,                 # one attempt per request
    raise_on_status=False,
)

USER_AGENT = f"dmp-agent/{AGENT_VERSION}"


def _get_ca_bundle():
    """Get the CA bundle path.

    Priority: env var → certifi → system default.
    """
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    try:
        import certifi
        return certifi.where()
    except ImportError:
        return True


def create_session(pool_maxsize=4):
    """Create a new requests.Session with connection pooling and SSL."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=2,        # bcp.* and ad.* hosts
        pool_maxsize=pool_maxsize,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    session.headers["User-Agent"] = USER_AGENT
    return session


def reset_session(session):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except Exception as e:
        log.debug("Closing stale session failed: %s", e)
    return create_session()
