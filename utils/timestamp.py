"""Microsecond timestamp utilities and the identifier epoch."""

import time
from datetime import datetime, timedelta, timezone

# Identifier epoch: 2020-01-01T00:00:00Z
EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)
DISPLAY_FORMAT = "%Y_%m_%dT%H:%M:%S"

_ONE_MICRO = timedelta(microseconds=1)


def now_micros():
    """Current time in microseconds since Unix epoch."""
    return int(time.time() * 1_000_000)


def format_timestamp(epoch_us=None):
    """Format timestamp as ISO 8601 with microseconds."""
    if epoch_us is None:
        epoch_us = now_micros()

    dt = datetime.fromtimestamp(epoch_us / 1_000_000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z"


def as_utc(dt):
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_micros(dt):
    """Exact microsecond offset of dt from EPOCH (negative before it)."""
    return (as_utc(dt) - EPOCH) // _ONE_MICRO


def from_epoch_micros(offset):
    return EPOCH + timedelta(microseconds=offset)


def format_display(dt):
    """Second-precision UTC rendering used in display strings."""
    return as_utc(dt).strftime(DISPLAY_FORMAT)
