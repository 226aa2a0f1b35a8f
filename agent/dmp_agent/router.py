"""
Request builder — renders behavior batches into collect / profile URLs.

Each event becomes one path segment appended to the base URL:
    key=value/   when the value is present and non-empty
    key/         otherwise (bare markers such as a valueless "dp")
"""

from .constants import (
    API_VERSION, COLLECT_HOST_PREFIX, PROFILE_HOST_PREFIX, SDK_VERSION,
)
from .encoding import url_path_encode, url_host_encode
from .errors import NotInitialized, TrackingDisabled


def build(base_url, events):
    """Append every event to base_url as an escaped path segment, in order."""
    parts = [base_url]
    for event in events:
        key = url_path_encode(event.key)
        if event.value:
            parts.append(f"{key}={url_path_encode(event.value)}/")
        else:
            parts.append(f"{key}/")
    return "".join(parts)


def _check(config, advertising_id):
    if not config.is_initialized:
        raise NotInitialized()
    if not advertising_id:
        raise TrackingDisabled()


def collect_base_url(config, advertising_id):
    """{protocol}://bcp.{domain}/5/c={clientId}/mid={adId}/e=app/dt=IDFA/sdk=3.0/"""
    _check(config, advertising_id)
    return (
        f"{config.protocol}://{COLLECT_HOST_PREFIX}.{url_host_encode(config.domain)}"
        f"/{API_VERSION}/c={url_path_encode(config.client_id)}"
        f"/mid={url_path_encode(advertising_id)}"
        f"/e=app/dt=IDFA/sdk={SDK_VERSION}/"
    )


def profile_base_url(config, advertising_id):
    """{protocol}://ad.{domain}/5/pe=y/c={clientId}/mid={adId}/"""
    _check(config, advertising_id)
    return (
        f"{config.protocol}://{PROFILE_HOST_PREFIX}.{url_host_encode(config.domain)}"
        f"/{API_VERSION}/pe=y/c={url_path_encode(config.client_id)}"
        f"/mid={url_path_encode(advertising_id)}/"
    )


def send_behavior_url(config, advertising_id, events):
    return build(collect_base_url(config, advertising_id), events)


def audience_url(config, advertising_id):
    return build(profile_base_url(config, advertising_id), [])
