"""Immutable point-in-time snapshots of metric instruments.

Each instrument kind has its own snapshot variant; converters dispatch on the
variant type. A snapshot's ``snapshot()`` returns itself, so a snapshot can be
registered directly as a frozen instrument.
"""
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

DEFAULT_PERCENTILES = (75, 95, 98, 99, 99.9)

PercentileValues = Tuple[Tuple[float, float], ...]


def _freeze_percentiles(values: Union[Mapping[float, float], Iterable[Tuple[float, float]]]) -> PercentileValues:
    """Sorted (percentile, value) pairs; mappings are accepted and copied"""
    pairs = values.items() if isinstance(values, Mapping) else values
    return tuple(sorted((p, v) for p, v in pairs))


def sample_percentiles(values: Sequence[float], percentiles: Iterable[float]) -> Dict[float, float]:
    """Linearly interpolated percentiles of a sample using the p * (n + 1) rank rule"""
    ordered = sorted(values)
    size = len(ordered)
    scores = {}
    for p in percentiles:
        if not size:
            scores[p] = 0.0
            continue
        pos = (p / 100.0) * (size + 1)
        if pos < 1.0:
            scores[p] = float(ordered[0])
        elif pos >= size:
            scores[p] = float(ordered[-1])
        else:
            lower = float(ordered[int(pos) - 1])
            upper = float(ordered[int(pos)])
            scores[p] = lower + (pos - math.floor(pos)) * (upper - lower)
    return scores


def _sample_statistics(values: Sequence[float], percentiles: Iterable[float]) -> Dict:
    size = len(values)
    if not size:
        return {"percentile_values": {p: 0.0 for p in percentiles}}
    total = sum(values)
    mean = total / size
    variance = sum((v - mean) ** 2 for v in values) / size
    return {
        "count": size,
        "mean": mean,
        "stddev": math.sqrt(variance),
        "sum": total,
        "variance": variance,
        "max": max(values),
        "min": min(values),
        "percentile_values": sample_percentiles(values, percentiles),
    }


@dataclass(frozen=True)
class CounterSnapshot:
    count: int = 0

    def snapshot(self) -> "CounterSnapshot":
        return self


@dataclass(frozen=True)
class GaugeSnapshot:
    value: int = 0

    def snapshot(self) -> "GaugeSnapshot":
        return self


@dataclass(frozen=True)
class GaugeFloat64Snapshot:
    value: float = 0.0

    def snapshot(self) -> "GaugeFloat64Snapshot":
        return self


@dataclass(frozen=True)
class MeterSnapshot:
    """Event count plus exponentially weighted rates in events per second"""
    count: int = 0
    rate1: float = 0.0
    rate5: float = 0.0
    rate15: float = 0.0
    rate_mean: float = 0.0

    def snapshot(self) -> "MeterSnapshot":
        return self


@dataclass(frozen=True)
class HistogramSnapshot:
    """Statistical moments, extrema and percentiles of a sample"""
    count: int = 0
    mean: float = 0.0
    stddev: float = 0.0
    sum: float = 0.0
    variance: float = 0.0
    max: float = 0.0
    min: float = 0.0
    percentile_values: PercentileValues = ()

    def __post_init__(self):
        object.__setattr__(self, "percentile_values", _freeze_percentiles(self.percentile_values))

    def percentiles(self, ps: Iterable[float]) -> List[float]:
        """Values at the requested percentiles (0.0 when not recorded)"""
        recorded = dict(self.percentile_values)
        return [float(recorded.get(p, 0.0)) for p in ps]

    def snapshot(self) -> "HistogramSnapshot":
        return self

    @classmethod
    def from_values(cls, values: Sequence[float],
                    percentiles: Iterable[float] = DEFAULT_PERCENTILES) -> "HistogramSnapshot":
        """Build a snapshot from a raw sample (population variance)"""
        return cls(**_sample_statistics(list(values), list(percentiles)))


@dataclass(frozen=True)
class TimerSnapshot:
    """Meter rates plus a histogram of durations measured in nanoseconds"""
    count: int = 0
    rate1: float = 0.0
    rate5: float = 0.0
    rate15: float = 0.0
    rate_mean: float = 0.0
    mean: float = 0.0
    stddev: float = 0.0
    sum: float = 0.0
    variance: float = 0.0
    max: float = 0.0
    min: float = 0.0
    percentile_values: PercentileValues = ()

    def __post_init__(self):
        object.__setattr__(self, "percentile_values", _freeze_percentiles(self.percentile_values))

    def percentiles(self, ps: Iterable[float]) -> List[float]:
        recorded = dict(self.percentile_values)
        return [float(recorded.get(p, 0.0)) for p in ps]

    def snapshot(self) -> "TimerSnapshot":
        return self

    @classmethod
    def from_values(cls, durations: Sequence[float], rate1: float = 0.0, rate5: float = 0.0,
                    rate15: float = 0.0, rate_mean: float = 0.0,
                    percentiles: Iterable[float] = DEFAULT_PERCENTILES) -> "TimerSnapshot":
        return cls(rate1=rate1, rate5=rate5, rate15=rate15, rate_mean=rate_mean,
                   **_sample_statistics(list(durations), list(percentiles)))
