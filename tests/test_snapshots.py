"""Tests for snapshot variants and units"""
import math
from dataclasses import FrozenInstanceError
from datetime import timedelta
import pytest

from metrics.snapshots import (
    CounterSnapshot,
    HistogramSnapshot,
    TimerSnapshot,
    sample_percentiles,
)
from metrics.units import (
    MICROSECOND,
    MILLISECOND,
    NANOSECOND,
    SECOND,
    parse_time_unit,
    resolve_time_unit,
)


class TestTimeUnits:
    """Test duration unit resolution"""

    @pytest.mark.parametrize("unit,name", [
        (SECOND, "seconds"),
        (MILLISECOND, "milliseconds"),
        (MICROSECOND, "microseconds"),
        (NANOSECOND, "nanoseconds"),
    ])
    def test_known_units(self, unit, name):
        resolved = resolve_time_unit(unit)

        assert resolved.name == name
        assert resolved.nanoseconds == unit

    @pytest.mark.parametrize("unit", [None, 0, 7, 60 * SECOND])
    def test_unknown_units_default_to_milliseconds(self, unit):
        assert resolve_time_unit(unit) == ("milliseconds", MILLISECOND)

    @pytest.mark.parametrize("value,expected", [
        ("s", SECOND),
        ("Seconds", SECOND),
        ("ms", MILLISECOND),
        ("microseconds", MICROSECOND),
        ("ns", NANOSECOND),
        ("1000", MICROSECOND),
        ("fortnights", MILLISECOND),
        (timedelta(seconds=1), SECOND),
        (timedelta(milliseconds=1), MILLISECOND),
        (NANOSECOND, NANOSECOND),
        (None, MILLISECOND),
    ])
    def test_parse_time_unit(self, value, expected):
        assert parse_time_unit(value) == expected


class TestSnapshots:
    """Test snapshot construction"""

    def test_snapshot_returns_itself(self):
        snapshot = CounterSnapshot(count=3)

        assert snapshot.snapshot() is snapshot

    def test_snapshots_are_immutable(self):
        with pytest.raises(FrozenInstanceError):
            CounterSnapshot(count=3).count = 4

    def test_percentiles_lookup(self):
        snapshot = HistogramSnapshot(percentile_values={75: 1.5, 99: 3})

        assert snapshot.percentiles([75, 95, 99]) == [1.5, 0.0, 3.0]

    def test_histogram_from_values(self):
        snapshot = HistogramSnapshot.from_values([1, 2, 3, 4])

        assert snapshot.count == 4
        assert snapshot.sum == 10
        assert snapshot.mean == 2.5
        assert snapshot.variance == 1.25
        assert snapshot.stddev == math.sqrt(1.25)
        assert snapshot.max == 4
        assert snapshot.min == 1
        assert set(dict(snapshot.percentile_values)) == {75, 95, 98, 99, 99.9}

    def test_histogram_from_empty_sample(self):
        snapshot = HistogramSnapshot.from_values([])

        assert snapshot.count == 0
        assert snapshot.mean == 0.0
        assert snapshot.percentiles([75]) == [0.0]

    def test_timer_from_values(self):
        snapshot = TimerSnapshot.from_values([2 * MILLISECOND, 4 * MILLISECOND], rate1=1.5)

        assert snapshot.count == 2
        assert snapshot.rate1 == 1.5
        assert snapshot.mean == 3 * MILLISECOND

    def test_sample_percentiles_interpolate(self):
        values = list(range(10, 0, -1))

        scores = sample_percentiles(values, [50, 75, 99.9, 1])

        assert scores[50] == 5.5
        assert scores[75] == 8.25
        assert scores[99.9] == 10.0
        assert scores[1] == 1.0

    def test_snapshots_with_percentiles_are_hashable(self):
        first = HistogramSnapshot(count=2, percentile_values={99: 3.0, 75: 1.5})
        second = HistogramSnapshot(count=2, percentile_values={75: 1.5, 99: 3.0})

        assert hash(HistogramSnapshot()) == hash(HistogramSnapshot())
        assert first == second
        assert hash(first) == hash(second)
        assert hash(TimerSnapshot.from_values([1, 2, 3]))

    def test_percentiles_are_copied_on_construction(self):
        recorded = {75: 1.5}
        snapshot = HistogramSnapshot(percentile_values=recorded)

        recorded[75] = 9.0
        recorded[99] = 9.0

        assert snapshot.percentiles([75, 99]) == [1.5, 0.0]
        assert snapshot.percentile_values == ((75, 1.5),)
