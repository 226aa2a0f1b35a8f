import pytest

from dmp_agent import router
from dmp_agent.errors import NotInitialized, TrackingDisabled
from dmp_agent.state import BehaviorEvent, ClientConfig

pytestmark = pytest.mark.unit

BASE = "https://bcp.example.net/5/"


def test_build_value_and_valueless_forms():
    events = [BehaviorEvent("a", "1"), BehaviorEvent("b", "")]
    assert router.build(BASE, events) == BASE + "a=1/b/"


def test_build_absent_value_is_bare_key():
    assert router.build(BASE, [BehaviorEvent("dp")]) == BASE + "dp/"


def test_build_keeps_duplicates_in_order():
    events = [BehaviorEvent("int", "sports"), BehaviorEvent("int", "news"), BehaviorEvent("int", "sports")]
    assert router.build(BASE, events) == BASE + "int=sports/int=news/int=sports/"


def test_build_escapes_keys_and_values():
    events = [BehaviorEvent("sé", "a b&c"), BehaviorEvent("ké")]
    assert router.build(BASE, events) == BASE + "s%C3%A9=a b&c/k%C3%A9/"


def test_build_with_no_events_is_base():
    assert router.build(BASE, []) == BASE


def test_collect_url_wire_format():
    config = ClientConfig(client_id="1234")
    url = router.send_behavior_url(config, "AD-ID", [BehaviorEvent("rand", "5"), BehaviorEvent("pv", "y")])
    assert url == "https://bcp.crwdcntrl.net/5/c=1234/mid=AD-ID/e=app/dt=IDFA/sdk=3.0/rand=5/pv=y/"


def test_profile_url_wire_format():
    config = ClientConfig(client_id="1234")
    assert router.audience_url(config, "AD-ID") == "https://ad.crwdcntrl.net/5/pe=y/c=1234/mid=AD-ID/"


def test_custom_domain_and_protocol():
    config = ClientConfig(client_id="c 1", domain="example.org", protocol="http")
    assert router.collect_base_url(config, "m") == (
        "http://bcp.example.org/5/c=c 1/mid=m/e=app/dt=IDFA/sdk=3.0/"
    )
    assert router.profile_base_url(config, "m") == "http://ad.example.org/5/pe=y/c=c 1/mid=m/"


def test_refuses_without_advertising_id():
    with pytest.raises(TrackingDisabled):
        router.collect_base_url(ClientConfig(client_id="1234"), None)


def test_refuses_without_client_id():
    with pytest.raises(NotInitialized):
        router.profile_base_url(ClientConfig(), "AD-ID")
