"""Normalized data point model shared by all converters"""
from dataclasses import dataclass
from typing import Any, Dict
from enum import Enum

class MetricType(Enum):
    """Metric forwarder data point types"""
    COUNTER = "counter"
    GAUGE = "gauge"

@dataclass(frozen=True)
class DataPoint:
    """Single scalar data point for metric forwarder export"""
    name: str
    value: float
    timestamp: int
    metric_type: MetricType = MetricType.GAUGE
    unit: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation of the data point"""
        return {
            "name": self.name,
            "type": self.metric_type.value,
            "value": self.value,
            "timestamp": self.timestamp,
            "unit": self.unit,
        }
