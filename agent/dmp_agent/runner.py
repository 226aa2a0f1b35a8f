"""
Composition root and command-line entry point.

Builds the single DMP instance from the JSON config (plus CLI overrides),
queues the requested behaviors, flushes them and optionally prints the
audience profile.
"""

import argparse
import sys

from .constants import AGENT_VERSION, DEFAULT_DOMAIN, DEFAULT_PROTOCOL, REQUEST_TIMEOUT_SEC
from .config import log, safe_print, setup_logging, load_config, save_config
from .dmp import DMP
from .errors import DMPError
from .identity import StaticIdentityProvider, new_advertising_id
from .state import ClientConfig
from .transport import RequestsTransport


def build_agent(config, transport=None, callback_executor=None):
    """Create and initialize the process-wide DMP from a config dict."""
    client = ClientConfig.from_dict(config)
    identity = StaticIdentityProvider(
        advertising_id=config.get("advertisingId"),
        tracking_enabled=config.get("trackingEnabled", True),
    )
    if transport is None:
        transport = RequestsTransport(timeout=config.get("timeoutSec", REQUEST_TIMEOUT_SEC))
    dmp = DMP(identity, transport=transport, callback_executor=callback_executor)
    dmp.initialize(client.client_id)
    if client.domain != DEFAULT_DOMAIN or client.protocol != DEFAULT_PROTOCOL:
        dmp.configure(domain=client.domain, protocol=client.protocol)
    return dmp


def _parse_behavior(text):
    key, sep, value = text.partition("=")
    if not key:
        raise argparse.ArgumentTypeError(f"behavior needs a type: {text!r}")
    return key, (value if sep else None)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="dmp-agent", description="Send behavior data and read audiences.")
    parser.add_argument("--config", help="JSON config file (default: $DMP_CONFIG or ./dmp_config.json)")
    parser.add_argument("--client-id")
    parser.add_argument("--domain")
    parser.add_argument("--protocol", choices=["http", "https"])
    parser.add_argument("--ad-id", help="advertising id to report")
    parser.add_argument("--no-tracking", action="store_true", help="behave as if the user limited ad tracking")
    parser.add_argument("--behavior", action="append", default=[], type=_parse_behavior,
                        metavar="TYPE=VALUE", help="collect a behavior (repeatable)")
    parser.add_argument("--behavior-id", action="append", default=[], type=int)
    parser.add_argument("--opportunity-id", action="append", default=[], type=int)
    parser.add_argument("--profile", action="store_true", help="fetch and print the audience profile")
    parser.add_argument("--save", action="store_true", help="write the merged config back to disk")
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def merged_config(args):
    config = load_config(args.config) or {}
    overrides = {
        "clientId": args.client_id,
        "domain": args.domain,
        "protocol": args.protocol,
        "advertisingId": args.ad_id,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})
    if args.no_tracking:
        config["trackingEnabled"] = False
    if not config.get("advertisingId"):
        config["advertisingId"] = new_advertising_id()
        log.info("Generated advertising id %s...", config["advertisingId"][:8])
    return config


def main(argv=None):
    """Primary entry point. Returns the process exit code."""
    args = parse_args(argv)
    setup_logging(args.log_file, "DEBUG" if args.verbose else "INFO")
    log.info("DMP agent v%s", AGENT_VERSION)

    config = merged_config(args)
    if not config.get("clientId"):
        safe_print("No client id: pass --client-id or set clientId in the config file.")
        return 1
    if args.save:
        save_config(config, args.config)

    exit_code = 0
    with build_agent(config) as dmp:
        for key, value in args.behavior:
            dmp.add_behavior_data(value, key)
        for behavior_id in args.behavior_id:
            dmp.add_behavior_id(behavior_id)
        for opportunity_id in args.opportunity_id:
            dmp.add_opportunity_id(opportunity_id)

        try:
            dmp.send_behavior_data().result()
            safe_print("Behavior data sent.")
        except DMPError as e:
            log.error("Send failed: %s", e)
            exit_code = 1

        if args.profile:
            try:
                profile = dmp.get_audience_data().result()
            except DMPError as e:
                log.error("Audience fetch failed: %s", e)
                exit_code = 1
            else:
                safe_print(f"pid={profile.pid} tpid={profile.tpid}")
                for audience in profile.audiences:
                    safe_print(f"  {audience.id}\t{audience.abbreviation}")

    return exit_code


def run():
    sys.exit(main())
