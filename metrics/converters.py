"""Converters from metric snapshots to metric forwarder data points"""
from decimal import Decimal
from typing import Any, List, Optional
from .models import DataPoint, MetricType
from .snapshots import (
    DEFAULT_PERCENTILES,
    CounterSnapshot,
    GaugeSnapshot,
    GaugeFloat64Snapshot,
    MeterSnapshot,
    HistogramSnapshot,
    TimerSnapshot,
)
from .units import TimeUnit, resolve_time_unit
from logging_config import get_logger

logger = get_logger(__name__)

PERCENTILES = DEFAULT_PERCENTILES


def namer(*names: str) -> str:
    """Join name segments with dots"""
    return ".".join(names)


def percentile_name(percentile: float) -> str:
    """99.9 -> '999thPercentile', 75 -> '75thPercentile'"""
    formatted = format(Decimal(repr(float(percentile))).normalize(), "f")
    return f"{formatted.replace('.', '')}thPercentile"


def convert_counter(counter: CounterSnapshot, name: str, timestamp: int) -> DataPoint:
    return DataPoint(
        name=name,
        value=float(counter.count),
        timestamp=timestamp,
        metric_type=MetricType.COUNTER,
    )


def convert_gauge(gauge: GaugeSnapshot, name: str, timestamp: int) -> DataPoint:
    return DataPoint(name=name, value=float(gauge.value), timestamp=timestamp)


def convert_gauge_float64(gauge: GaugeFloat64Snapshot, name: str, timestamp: int) -> DataPoint:
    return DataPoint(name=name, value=float(gauge.value), timestamp=timestamp)


def convert_meter(meter: MeterSnapshot, name: str, timestamp: int,
                  include_count: bool = True) -> List[DataPoint]:
    """Count plus the four rate gauges. Rates are events per second and never rescaled."""
    points = []
    if include_count:
        points.append(DataPoint(
            name=namer(name, "count"),
            value=float(meter.count),
            timestamp=timestamp,
            metric_type=MetricType.COUNTER,
        ))

    rates = [
        ("rate.1-minute", meter.rate1),
        ("rate.5-minute", meter.rate5),
        ("rate.15-minute", meter.rate15),
        ("rate.mean", meter.rate_mean),
    ]
    for suffix, rate in rates:
        points.append(DataPoint(name=namer(name, suffix), value=float(rate), timestamp=timestamp))

    return points


def convert_histogram(histogram: HistogramSnapshot, name: str, timestamp: int,
                      unit: Optional[TimeUnit] = None, include_count: bool = True) -> List[DataPoint]:
    """Count, moments, extrema and the fixed percentile set.

    Values are only rescaled when a duration unit is passed; each value is then
    divided by the unit's nanosecond magnitude and tagged with its name.
    """
    divisor = float(unit.nanoseconds) if unit else 1.0
    unit_name = unit.name if unit else ""

    points = []
    if include_count:
        points.append(DataPoint(
            name=namer(name, "count"),
            value=float(histogram.count),
            timestamp=timestamp,
            metric_type=MetricType.COUNTER,
        ))

    statistics = [
        ("mean", histogram.mean),
        ("stddev", histogram.stddev),
        ("sum", histogram.sum),
        ("variance", histogram.variance),
        ("max", histogram.max),
        ("min", histogram.min),
    ]
    for suffix, value in statistics:
        points.append(DataPoint(
            name=namer(name, suffix),
            value=float(value) / divisor,
            timestamp=timestamp,
            unit=unit_name,
        ))

    for percentile, value in zip(PERCENTILES, histogram.percentiles(PERCENTILES)):
        points.append(DataPoint(
            name=namer(name, percentile_name(percentile)),
            value=float(value) / divisor,
            timestamp=timestamp,
            unit=unit_name,
        ))

    return points


def convert_timer(timer: TimerSnapshot, name: str, timestamp: int,
                  time_unit: Optional[int] = None) -> List[DataPoint]:
    """Count, rate gauges and a rescaled duration histogram under ``<name>.duration``"""
    unit = resolve_time_unit(time_unit)

    points = [DataPoint(
        name=namer(name, "count"),
        value=float(timer.count),
        timestamp=timestamp,
        metric_type=MetricType.COUNTER,
    )]
    points.extend(convert_meter(timer, name, timestamp, include_count=False))
    points.extend(convert_histogram(timer, namer(name, "duration"), timestamp,
                                    unit=unit, include_count=False))
    return points


def convert(name: str, snapshot: Any, timestamp: int, time_unit: Optional[int] = None) -> List[DataPoint]:
    """Dispatch a snapshot to its converter; unknown kinds yield no points"""
    if isinstance(snapshot, CounterSnapshot):
        return [convert_counter(snapshot, name, timestamp)]
    elif isinstance(snapshot, GaugeSnapshot):
        return [convert_gauge(snapshot, name, timestamp)]
    elif isinstance(snapshot, GaugeFloat64Snapshot):
        return [convert_gauge_float64(snapshot, name, timestamp)]
    elif isinstance(snapshot, MeterSnapshot):
        return convert_meter(snapshot, name, timestamp)
    elif isinstance(snapshot, TimerSnapshot):
        return convert_timer(snapshot, name, timestamp, time_unit)
    elif isinstance(snapshot, HistogramSnapshot):
        return convert_histogram(snapshot, name, timestamp)

    logger.debug("Skipping unsupported metric", metric_name=name,
                 metric_kind=type(snapshot).__name__, event_type="conversion_skipped")
    return []
