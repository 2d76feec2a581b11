"""Session Summary Statistics.

Projection of a measurement set onto counts, pass rate and per-channel
descriptive statistics. Always recomputed from the records; nothing here is
cached or persisted.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .statistics import (
    TestDuration,
    calculate_mean,
    calculate_pass_rate,
    calculate_range,
    calculate_sampling_rate,
    calculate_standard_deviation,
    calculate_test_duration,
    finite_values,
    to_timestamp,
)

CHANNELS = ("voltage", "current", "resistance", "power")


@dataclass(frozen=True)
class ChannelStatistics:
    """Descriptive statistics for one measurement channel."""
    count: int
    min: float
    max: float
    mean: float
    std_dev: float

    @property
    def range(self) -> float:
        return self.max - self.min

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class SessionStatistics:
    """Summary of a test session's accepted measurements.

    ``pass_rate`` counts only measurements carrying a pass/fail verdict.
    Channel statistics are None when no record has a value for the channel.
    """
    total_measurements: int
    pass_count: int
    fail_count: int
    pass_rate: Optional[float]
    voltage: Optional[ChannelStatistics] = None
    current: Optional[ChannelStatistics] = None
    resistance: Optional[ChannelStatistics] = None
    power: Optional[ChannelStatistics] = None
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None
    duration: Optional[TestDuration] = None
    sampling_rate: Optional[float] = None

    @property
    def rated_count(self) -> int:
        return self.pass_count + self.fail_count

    def channel(self, name: str) -> Optional[ChannelStatistics]:
        if name not in CHANNELS:
            raise KeyError(f"Unknown channel: {name}")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "total_measurements": self.total_measurements,
            "pass_count": self.pass_count,
            "fail_count": self.fail_count,
            "pass_rate": self.pass_rate,
            "first_timestamp": self.first_timestamp.isoformat() if self.first_timestamp else None,
            "last_timestamp": self.last_timestamp.isoformat() if self.last_timestamp else None,
            "duration": self.duration.formatted if self.duration else None,
            "sampling_rate": self.sampling_rate,
        }
        for name in CHANNELS:
            stats = getattr(self, name)
            data[name] = stats.to_dict() if stats else None
        return data


def summarize_channel(values: Iterable[Any]) -> Optional[ChannelStatistics]:
    """Count, min, max, mean and population standard deviation."""
    arr = finite_values(values)
    if arr.size == 0:
        return None

    value_range = calculate_range(arr)
    return ChannelStatistics(
        count=int(arr.size),
        min=value_range.min,
        max=value_range.max,
        mean=calculate_mean(arr),
        std_dev=calculate_standard_deviation(arr),
    )


def compute_session_statistics(records: List[Any]) -> SessionStatistics:
    """Compute SessionStatistics from measurement records.

    Args:
        records: MeasurementRecord objects (any object with the same attributes)

    Returns:
        SessionStatistics
    """
    pass_count = sum(1 for r in records if r.pass_fail is True)
    fail_count = sum(1 for r in records if r.pass_fail is False)

    channels = {
        name: summarize_channel(getattr(r, name) for r in records)
        for name in CHANNELS
    }

    timestamps = sorted(
        (r.timestamp for r in records if r.timestamp is not None),
        key=to_timestamp,
    )
    first_timestamp = timestamps[0] if timestamps else None
    last_timestamp = timestamps[-1] if timestamps else None

    duration = None
    if first_timestamp is not None:
        duration = calculate_test_duration(first_timestamp, last_timestamp)

    return SessionStatistics(
        total_measurements=len(records),
        pass_count=pass_count,
        fail_count=fail_count,
        pass_rate=calculate_pass_rate(pass_count, pass_count + fail_count),
        first_timestamp=first_timestamp,
        last_timestamp=last_timestamp,
        duration=duration,
        sampling_rate=calculate_sampling_rate(timestamps),
        **channels
    )
