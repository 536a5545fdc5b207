"""
Epoch-second time helpers.

Every timestamp the service stores or signs is an integer count of seconds
since the Unix epoch (UTC). Conversion to datetimes only happens at the
API edge, in the memo view adapter.
"""

import time
from datetime import datetime, timezone

SECONDS_PER_DAY = 24 * 60 * 60


def current_epoch() -> int:
    return int(time.time())


def epoch_to_datetime(ts: int) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def start_of_day(ts: int) -> int:
    """Floor `ts` to 00:00:00 UTC of the same day."""
    return ts - (ts % SECONDS_PER_DAY)
