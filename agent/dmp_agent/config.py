"""
Logging setup, config load/save, safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path


# ─── Paths ───────────────────────────────────────────────────────
# DMP_CONFIG wins over the working-directory default.
DEFAULT_CONFIG_FILE = Path("dmp_config.json")
MAX_LOG_BYTES = 1_000_000


def config_path(path=None):
    """Resolve the config file location: explicit arg → env var → default."""
    if path:
        return Path(path)
    env_path = os.environ.get("DMP_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


# ─── Safe print (no crash when stdout is closed) ─────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except (OSError, ValueError):
        pass


# ─── Logging ─────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

log = logging.getLogger("dmp")


def setup_logging(log_file=None, level="INFO"):
    """
    Attach console (and optionally file) handlers to the shared logger.
    Safe to call more than once: existing handlers are replaced.
    """
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    log.setLevel(level.upper() if isinstance(level, str) else level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        try:
            if log_file.exists() and log_file.stat().st_size > MAX_LOG_BYTES:
                log_file.write_text("")
        except OSError:
            pass
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    log.propagate = False
    return log


# ─── Config Management ──────────────────────────────────────────

def load_config(path=None):
    """Load config from disk. Returns dict or None."""
    path = config_path(path)
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            log.warning("Ignoring unreadable config %s: %s", path, e)
            return None
        if isinstance(data, dict):
            return data
        log.warning("Ignoring config %s: top level is not an object", path)
    return None


def save_config(config, path=None):
    """Save config dict to disk."""
    path = config_path(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    log.info("Config saved to %s", path)
