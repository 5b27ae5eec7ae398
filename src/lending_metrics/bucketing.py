"""
UTC time buckets derived from block timestamps.

Bucket identity depends only on the event timestamp, never on the wall clock:

    day_index   = floor(timestamp / 86400)
    hour_of_day = floor((timestamp - day_index * 86400) / 3600)     (0..23)
    hour_index  = day_index * 24 + hour_of_day

The hour of day alone repeats every day, so hourly snapshots and hourly active account markers
are keyed by `hour_index`, which is unique across days.
"""

from datetime import UTC, datetime

from lending_metrics.constants import HOURS_PER_DAY, SECONDS_PER_DAY, SECONDS_PER_HOUR
from lending_metrics.types import Granularity


def day_index(timestamp: int) -> int:
    return timestamp // SECONDS_PER_DAY


def hour_of_day(timestamp: int) -> int:
    return (timestamp - day_index(timestamp) * SECONDS_PER_DAY) // SECONDS_PER_HOUR


def hour_index(timestamp: int) -> int:
    return day_index(timestamp) * HOURS_PER_DAY + hour_of_day(timestamp)


def bucket_index(granularity: Granularity, timestamp: int) -> int:
    match granularity:
        case Granularity.DAILY:
            return day_index(timestamp)
        case Granularity.HOURLY:
            return hour_index(timestamp)


def bucket_id(granularity: Granularity, timestamp: int) -> str:
    """
    Get the snapshot id for the protocol-wide bucket containing the timestamp.
    """

    return str(bucket_index(granularity, timestamp))


def market_bucket_id(granularity: Granularity, market_id: str, timestamp: int) -> str:
    """
    Get the snapshot id for a market's bucket containing the timestamp.
    """

    return f"{market_id}-{bucket_index(granularity, timestamp)}"


def active_account_id(granularity: Granularity, address: str, timestamp: int) -> str:
    return f"{granularity.value}-{address}-{bucket_index(granularity, timestamp)}"


def bucket_bounds(granularity: Granularity, timestamp: int) -> tuple[str, str]:
    """
    Get the ISO-8601 UTC start (inclusive) and end (exclusive) of the bucket containing the
    timestamp.
    """

    match granularity:
        case Granularity.DAILY:
            width = SECONDS_PER_DAY
        case Granularity.HOURLY:
            width = SECONDS_PER_HOUR

    start = bucket_index(granularity, timestamp) * width
    return (
        datetime.fromtimestamp(start, tz=UTC).isoformat(),
        datetime.fromtimestamp(start + width, tz=UTC).isoformat(),
    )
