"""Metrics registry holding named instruments for export"""
import threading
from typing import Any, Callable, Dict, List, Optional
from logging_config import get_logger


logger = get_logger(__name__)


class DuplicateMetricError(ValueError):
    """Raised when a metric name is already registered"""

    def __init__(self, name: str):
        super().__init__(f"Metric already registered: {name}")
        self.name = name


class MetricsRegistry:
    """Thread-safe registry of named instruments.

    An instrument is any object exposing ``snapshot()``. The exporter only
    reads the registry through ``each``.
    """

    def __init__(self):
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, instrument: Any) -> None:
        """Register an instrument under a unique name"""
        if not callable(getattr(instrument, "snapshot", None)):
            raise ValueError("Instrument must provide a snapshot() method")

        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(name)
            self._metrics[name] = instrument
        logger.debug("Registered metric", metric_name=name, metric_kind=type(instrument).__name__)

    def get_or_register(self, name: str, factory: Callable[[], Any]) -> Any:
        """Return the existing instrument or register the one built by ``factory``"""
        with self._lock:
            existing = self._metrics.get(name)
            if existing is not None:
                return existing
            instrument = factory()
            self._metrics[name] = instrument
            return instrument

    def unregister(self, name: str) -> None:
        with self._lock:
            self._metrics.pop(name, None)

    def get(self, name: str) -> Optional[Any]:
        """Get instrument by name"""
        with self._lock:
            return self._metrics.get(name)

    def list_metrics(self) -> List[str]:
        """List all registered metric names"""
        with self._lock:
            return list(self._metrics.keys())

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def each(self, visitor: Callable[[str, Any], None]) -> None:
        """Call ``visitor(name, instrument)`` for every registered instrument.

        The visitor runs on a copy taken under the lock, so instrumented code
        registering metrics is never blocked by the walk.
        """
        with self._lock:
            items = list(self._metrics.items())

        for name, instrument in items:
            visitor(name, instrument)

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)
