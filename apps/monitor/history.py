"""
SceptView Network Monitor - History Aggregation

Rolling averages over a window of MetricsHistory samples and the
current-versus-average comparison shown on the device performance card.

Functions:
    window_start: Start of a trailing window of N hours
    compute_averages: Mean utilization and bandwidth over samples
    percent_diff: Deviation of a current value from its average, in percent
    classify_trend: Map a deviation onto up / down / flat
    compare_performance: Full comparison for both metrics

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone

# Deviations strictly inside +/- this many percent count as "flat"
FLAT_BAND_PERCENT = 5

DEFAULT_WINDOW_HOURS = 24

# Longest trailing window a history query may ask for (one year)
MAX_WINDOW_HOURS = 24 * 366

# Safety cap on samples returned by a single history query
MAX_HISTORY_SAMPLES = 10000

CENTS = Decimal("0.01")


class Trend:
    UP = 'up'
    DOWN = 'down'
    FLAT = 'flat'


def window_start(hours, now=None):
    """Start of the trailing window ending at `now`."""
    now = now or timezone.now()
    return now - timedelta(hours=hours)


def _as_decimal(value):
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _mean(values):
    values = [_as_decimal(v) for v in values]
    if not values:
        return Decimal(0)
    return sum(values, Decimal(0)) / len(values)


def compute_averages(samples):
    """
    Mean utilization and bandwidth over `samples`, a sequence of objects
    carrying `utilization` and `bandwidth_mbps` attributes.

    Means are exact Decimals; empty input averages to zero.
    """
    samples = list(samples)
    return {
        "avg_utilization": _mean(s.utilization for s in samples),
        "avg_bandwidth": _mean(s.bandwidth_mbps for s in samples),
    }


def percent_diff(current, average):
    """
    Percentage deviation of `current` from `average`, as a Decimal rounded
    to two places (0 when average is 0).
    """
    average = _as_decimal(average)
    if not average:
        return Decimal(0)
    diff = (_as_decimal(current) - average) / average * 100
    return diff.quantize(CENTS, rounding=ROUND_HALF_UP)


def classify_trend(diff):
    if abs(diff) < FLAT_BAND_PERCENT:
        return Trend.FLAT
    return Trend.UP if diff > 0 else Trend.DOWN


def _compare_metric(current, average, places):
    diff = percent_diff(current, average)
    return {
        "current": float(current),
        "average": _round_half_up(average, places),
        "diff_percent": float(diff),
        "trend": classify_trend(diff),
    }


def _round_half_up(value, places):
    rounded = _as_decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def compare_performance(current_utilization, current_bandwidth, samples):
    """
    Compare a device's current utilization and bandwidth against the means
    of the historical `samples`.

    The reported averages are rounded for display (utilization to a whole
    percent, bandwidth to two places); deviations use the exact means.
    """
    averages = compute_averages(samples)
    return {
        "utilization": _compare_metric(current_utilization, averages["avg_utilization"], 0),
        "bandwidth": _compare_metric(current_bandwidth, averages["avg_bandwidth"], 2),
    }
