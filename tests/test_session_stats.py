"""Tests for session summary statistics."""

from datetime import datetime, timedelta

import pytest

from pvdisconnect.analysis.session_stats import compute_session_statistics, summarize_channel
from pvdisconnect.ingestion.models import MeasurementRecord


class TestSessionStatistics:

    def test_counts_and_pass_rate(self, sample_records):
        stats = compute_session_statistics(sample_records)

        assert stats.total_measurements == 10
        assert stats.pass_count == 8
        assert stats.fail_count == 1
        assert stats.rated_count == 9
        assert stats.pass_rate == pytest.approx(800.0 / 9.0)

    def test_channels(self, sample_records):
        stats = compute_session_statistics(sample_records)

        assert stats.voltage.count == 10
        assert stats.voltage.min == pytest.approx(1000.0)
        assert stats.voltage.max == pytest.approx(1009.0)
        assert stats.voltage.mean == pytest.approx(1004.5)
        assert stats.voltage.range == pytest.approx(9.0)
        assert stats.current.std_dev == pytest.approx(0.0)
        assert stats.channel("power").mean == pytest.approx(10045.0)

    def test_time_span(self, sample_records, base_time):
        stats = compute_session_statistics(list(reversed(sample_records)))

        assert stats.first_timestamp == base_time
        assert stats.last_timestamp == base_time + timedelta(seconds=9)
        assert stats.duration.seconds == pytest.approx(9.0)
        assert stats.sampling_rate == pytest.approx(1.0)

    def test_empty_session(self):
        stats = compute_session_statistics([])

        assert stats.total_measurements == 0
        assert stats.pass_rate is None
        assert stats.voltage is None
        assert stats.duration is None
        assert stats.sampling_rate is None

    def test_channel_without_values(self):
        records = [MeasurementRecord(timestamp=datetime(2024, 1, 1), current=2.0)]
        stats = compute_session_statistics(records)

        assert stats.voltage is None
        assert stats.current.count == 1
        assert stats.pass_rate is None

    def test_unknown_channel(self, sample_records):
        with pytest.raises(KeyError):
            compute_session_statistics(sample_records).channel("humidity")

    def test_to_dict(self, sample_records):
        data = compute_session_statistics(sample_records).to_dict()

        assert data["total_measurements"] == 10
        assert data["voltage"]["max"] == pytest.approx(1009.0)
        assert data["first_timestamp"] == "2024-01-15T10:00:00"
        assert data["duration"] == "0h 0m 9s"


def test_summarize_channel_ignores_missing_values():
    summary = summarize_channel([1.0, None, 3.0, float("nan")])
    assert summary.count == 2
    assert summary.mean == pytest.approx(2.0)
    assert summary.std_dev == pytest.approx(1.0)
    assert summarize_channel([None]) is None
