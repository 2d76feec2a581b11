"""Statistical Calculation Module.

Descriptive statistics over measurement channels. Every function accepts a
sequence that may contain None, NaN or infinite entries; those are dropped
before computing. An undefined result is returned as None instead of raising
or producing NaN, so calls compose without per-step error handling.

Conventions:
- variance and standard deviation use the population formulas (divide by N)
- percentiles use linear interpolation between bracketing order statistics
- outliers use Tukey fences at q1 - k*IQR and q3 + k*IQR (k = 1.5 default)
"""

import math
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence

import numpy as np
import pandas as pd

from config.config import ANALYSIS_CONFIG


class Quartiles(NamedTuple):
    """First, second (median) and third quartile."""
    q1: Optional[float]
    q2: Optional[float]
    q3: Optional[float]


class OutlierResult(NamedTuple):
    """Tukey fence outlier detection result."""
    outliers: List[float]
    lower_fence: float
    upper_fence: float


class ValueRange(NamedTuple):
    min: float
    max: float


class TestDuration(NamedTuple):
    """Elapsed time between two timestamps in several units."""
    milliseconds: float
    seconds: float
    minutes: float
    hours: float
    formatted: str


def is_finite_number(value: Any) -> bool:
    """True for real, finite numbers (booleans excluded)."""
    if isinstance(value, (bool, np.bool_)):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def finite_values(values: Iterable[Any]) -> np.ndarray:
    """Convert to a float array keeping only finite entries."""
    series = pd.Series(list(values), dtype=object)
    arr = pd.to_numeric(series, errors="coerce").to_numpy(dtype=float)
    return arr[np.isfinite(arr)]


# ============================================================================
# CENTRAL TENDENCY AND SPREAD
# ============================================================================

def calculate_mean(values: Iterable[Any]) -> Optional[float]:
    """Arithmetic mean."""
    arr = finite_values(values)
    if arr.size == 0:
        return None
    return float(np.mean(arr))


def calculate_median(values: Iterable[Any]) -> Optional[float]:
    """Median; average of the two middle values on even-length input."""
    arr = finite_values(values)
    if arr.size == 0:
        return None
    return float(np.median(arr))


def calculate_mode(values: Iterable[Any]) -> Optional[List[float]]:
    """Most frequent value(s).

    Returns:
        All values tied for the highest frequency, ascending, or None
    """
    arr = finite_values(values)
    if arr.size == 0:
        return None
    unique, counts = np.unique(arr, return_counts=True)
    return [float(v) for v in unique[counts == counts.max()]]


def calculate_variance(values: Iterable[Any]) -> Optional[float]:
    """Population variance (divides by N)."""
    arr = finite_values(values)
    if arr.size == 0:
        return None
    return float(np.var(arr))


def calculate_standard_deviation(values: Iterable[Any]) -> Optional[float]:
    """Population standard deviation."""
    variance = calculate_variance(values)
    if variance is None:
        return None
    return math.sqrt(variance)


def calculate_coefficient_of_variation(values: Iterable[Any]) -> Optional[float]:
    """Coefficient of variation in percent: std / |mean| × 100."""
    values = list(values)
    mean = calculate_mean(values)
    std_dev = calculate_standard_deviation(values)

    if mean is None or std_dev is None or mean == 0:
        return None

    return (std_dev / abs(mean)) * 100.0


def calculate_range(values: Iterable[Any]) -> Optional[ValueRange]:
    """Minimum and maximum."""
    arr = finite_values(values)
    if arr.size == 0:
        return None
    return ValueRange(min=float(np.min(arr)), max=float(np.max(arr)))


# ============================================================================
# PERCENTILES AND OUTLIERS
# ============================================================================

def calculate_percentile(values: Iterable[Any], percentile: float) -> Optional[float]:
    """Percentile by linear interpolation.

    Args:
        values: Input sequence
        percentile: Percentile in [0, 100]

    Returns:
        Interpolated value, or None for empty input or percentile out of range
    """
    if not is_finite_number(percentile) or percentile < 0 or percentile > 100:
        return None

    arr = finite_values(values)
    if arr.size == 0:
        return None

    return float(np.percentile(arr, percentile))


def calculate_quartiles(values: Iterable[Any]) -> Quartiles:
    """Quartiles as the 25th, 50th and 75th percentiles."""
    arr = finite_values(values)
    return Quartiles(
        q1=calculate_percentile(arr, 25),
        q2=calculate_percentile(arr, 50),
        q3=calculate_percentile(arr, 75),
    )


def calculate_iqr(values: Iterable[Any]) -> Optional[float]:
    """Interquartile range q3 - q1."""
    q1, _, q3 = calculate_quartiles(values)
    if q1 is None or q3 is None:
        return None
    return q3 - q1


def detect_outliers(
    values: Sequence[Any],
    multiplier: Optional[float] = None
) -> Optional[OutlierResult]:
    """Flag values outside the Tukey fences.

    Args:
        values: Input sequence
        multiplier: IQR multiplier (default from ANALYSIS_CONFIG, 1.5)

    Returns:
        OutlierResult with outliers in input order, or None for empty input
    """
    if multiplier is None:
        multiplier = ANALYSIS_CONFIG["outlier_iqr_multiplier"]

    arr = finite_values(values)
    q1, _, q3 = calculate_quartiles(arr)
    if q1 is None or q3 is None:
        return None

    iqr = q3 - q1
    lower_fence = q1 - multiplier * iqr
    upper_fence = q3 + multiplier * iqr

    outliers = [
        float(v) for v in arr
        if v < lower_fence or v > upper_fence
    ]

    return OutlierResult(outliers=outliers, lower_fence=lower_fence, upper_fence=upper_fence)


# ============================================================================
# DEVIATION AND COMPLIANCE RATIOS
# ============================================================================

def calculate_deviation(actual: Any, expected: Any) -> Optional[float]:
    """Signed percentage deviation (actual - expected) / expected × 100."""
    if not is_finite_number(actual) or not is_finite_number(expected):
        return None
    if expected == 0:
        return None
    return ((actual - expected) / expected) * 100.0


def is_within_tolerance(value: Any, target: Any, tolerance_percent: float) -> bool:
    """Check |deviation| <= tolerance_percent.

    An undefined deviation (non-finite input, zero target) counts as 0.
    """
    deviation = calculate_deviation(value, target)
    if deviation is None:
        deviation = 0.0
    return abs(deviation) <= tolerance_percent


def calculate_pass_rate(pass_count: int, total_count: int) -> Optional[float]:
    """Pass rate in percent, None when there is nothing to rate."""
    if not total_count:
        return None
    return (pass_count / total_count) * 100.0


# ============================================================================
# TIME CALCULATIONS
# ============================================================================

def to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse to a tz-naive UTC timestamp, None when unparseable."""
    if value is None:
        return None
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def calculate_test_duration(start_time: Any, end_time: Any) -> Optional[TestDuration]:
    """Elapsed time from start to end.

    Args:
        start_time: datetime or ISO-8601 string
        end_time: datetime or ISO-8601 string

    Returns:
        TestDuration with a ``"{h}h {m}m {s}s"`` formatted string, or None
    """
    start = to_timestamp(start_time)
    end = to_timestamp(end_time)
    if start is None or end is None:
        return None

    milliseconds = (end - start).total_seconds() * 1000.0
    seconds = milliseconds / 1000.0
    minutes = seconds / 60.0
    hours = minutes / 60.0

    formatted = f"{math.floor(hours)}h {math.floor(minutes % 60)}m {math.floor(seconds % 60)}s"

    return TestDuration(
        milliseconds=milliseconds,
        seconds=seconds,
        minutes=minutes,
        hours=hours,
        formatted=formatted,
    )


def calculate_sampling_rate(timestamps: Iterable[Any]) -> Optional[float]:
    """Average samples per second from the mean sampling interval."""
    parsed = [to_timestamp(t) for t in timestamps]
    times = sorted(t for t in parsed if t is not None)
    if len(times) < 2:
        return None

    intervals_ms = [
        (later - earlier).total_seconds() * 1000.0
        for earlier, later in zip(times, times[1:])
    ]
    avg_interval = calculate_mean(intervals_ms)
    if avg_interval is None or avg_interval == 0:
        return None

    return 1000.0 / avg_interval
