"""Forecast aggregation: per-day buckets and the near-term hourly slice."""

import logging
from datetime import datetime, tzinfo

from weatherdash.models.weather import DailyForecast, WeatherSample

logger = logging.getLogger(__name__)

MAX_DAILY_ENTRIES = 7  # one calendar week
DEFAULT_HOURLY_COUNT = 8  # 8 x 3h steps ~ next 24 hours


def day_key(timestamp: int, tz: tzinfo | None = None) -> str:
    """Calendar-day key (YYYY-MM-DD) for an epoch timestamp.

    tz=None interprets the timestamp in the host's local time zone.
    """
    return datetime.fromtimestamp(timestamp, tz=tz).date().isoformat()


def bucket_by_day(
    samples: list[WeatherSample], tz: tzinfo | None = None
) -> list[DailyForecast]:
    """Group chronological samples into one DailyForecast per calendar day.

    The first sample of a day fixes the bucket's condition; later samples
    only widen the min/max range. Output follows first-seen day order.
    """
    buckets: dict[str, DailyForecast] = {}

    for sample in samples:
        key = day_key(sample.timestamp, tz)
        current = buckets.get(key)
        if current is None:
            buckets[key] = DailyForecast(
                date_key=key,
                representative_timestamp=sample.timestamp,
                temp_max_c=sample.temp_max_c,
                temp_min_c=sample.temp_min_c,
                condition=sample.condition,
            )
            continue

        buckets[key] = DailyForecast(
            date_key=key,
            representative_timestamp=current.representative_timestamp,
            temp_max_c=max(current.temp_max_c, sample.temp_max_c),
            temp_min_c=min(current.temp_min_c, sample.temp_min_c),
            condition=current.condition,
            sample_count=current.sample_count + 1,
        )

    # dicts keep insertion order, so this is first-seen order
    return list(buckets.values())


def take_daily(
    samples: list[WeatherSample],
    tz: tzinfo | None = None,
    max_days: int = MAX_DAILY_ENTRIES,
) -> list[DailyForecast]:
    """Day buckets truncated to the display cap."""
    days = bucket_by_day(samples, tz)
    if len(days) > max_days:
        logger.debug("Truncating %d day buckets to %d", len(days), max_days)
    return days[:max_days]


def take_hourly(
    samples: list[WeatherSample], max_count: int = DEFAULT_HOURLY_COUNT
) -> list[WeatherSample]:
    """First max_count samples, in provider order, unmodified."""
    return list(samples[:max_count])
