"""
Session event log and logging setup.

Lifecycle events (session enabled/disabled, detector or camera failures) are
appended as JSON lines to `logs/events.jsonl` when the `log_events` config
flag is on. Each line holds at least `timestamp` and `type`. Per-frame
diagnostics go through the standard `logging` module instead.
"""
import json
import logging
import os
import time

from orla_vision.processing_config import get_config

LOG_DIR = os.path.join(os.path.dirname(__file__), '..', 'logs')
LOG_FILE = os.path.join(LOG_DIR, 'events.jsonl')

log = logging.getLogger(__name__)


def configure_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_event(event_type: str, **fields):
    """Append one event as a JSON line. No-op unless `log_events` is enabled."""
    if not get_config()["log_events"]:
        return
    event = {"timestamp": time.time(), "type": event_type}
    event.update(fields)
    try:
        os.makedirs(os.path.dirname(LOG_FILE), exist_ok=True)
        with open(LOG_FILE, 'a', encoding='utf-8') as f:
            f.write(json.dumps(event, ensure_ascii=False, default=str) + '\n')
    except OSError as exc:
        log.warning("could not write event %s: %s", event_type, exc)
