"""Periodic exporter: snapshot the registry, convert and deliver on a fixed cadence"""
import asyncio
import time
from typing import Any, Callable, List, Mapping, Optional
import httpx
from .converters import convert
from .models import DataPoint
from .transport import HttpTransporter, TransportError
from .units import MILLISECOND
from config import Options, resolve_config
from logging_config import (
    get_logger,
    log_error,
    log_export_cycle,
    log_exporter_startup,
    setup_structured_logging,
)

logger = get_logger(__name__)


def current_time_millis() -> int:
    return time.time_ns() // 1_000_000


class Exporter:
    """Drives the snapshot -> convert -> send cycle, one export at a time.

    Export failures are logged and swallowed; the next tick is the only retry.
    """

    def __init__(self, transport,
                 time_unit: int = MILLISECOND,
                 clock: Callable[[], int] = current_time_millis,
                 sleep: Callable[[float], Any] = asyncio.sleep,
                 monotonic: Callable[[], float] = time.monotonic):
        self.transport = transport
        self.time_unit = time_unit
        self.clock = clock
        self.sleep = sleep
        self.monotonic = monotonic

        # Export state
        self.tick_count = 0
        self.export_errors = 0
        self.last_export_time = 0.0

        self._export_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    def assemble_data_points(self, registry) -> List[DataPoint]:
        """Convert every instrument in the registry, all sharing one timestamp"""
        data: List[DataPoint] = []
        timestamp = self.clock()

        def visit(name: str, instrument: Any) -> None:
            snapshot = getattr(instrument, "snapshot", None)
            if not callable(snapshot):
                logger.debug("Skipping metric without snapshot", metric_name=name, event_type="conversion_skipped")
                return
            data.extend(convert(name, snapshot(), timestamp, self.time_unit))

        registry.each(visit)
        return data

    async def send_metrics_batch(self, registry) -> int:
        """Assemble and deliver one batch. Raises TransportError on delivery failure."""
        points = self.assemble_data_points(registry)
        await self.transport.send_metrics(points)
        return len(points)

    async def export_metrics(self, registry) -> bool:
        """Run one export cycle; never raises"""
        start_time = self.monotonic()
        try:
            points_count = await self.send_metrics_batch(registry)
        except TransportError as e:
            self.export_errors += 1
            logger.error(
                "Could not export metrics to metric forwarder",
                error=str(e),
                status_code=e.status_code,
                event_type="export_error"
            )
            return False
        except Exception as e:
            self.export_errors += 1
            logger.error(
                "Unexpected error during metrics export",
                error=str(e),
                error_type=type(e).__name__,
                event_type="export_error",
                exc_info=True
            )
            return False

        self.last_export_time = time.time()
        log_export_cycle(logger, points_count, self.monotonic() - start_time, success=True)
        return True

    async def export_at_frequency(self, registry, frequency: float,
                                  stop_event: Optional[asyncio.Event] = None) -> None:
        """Export every ``frequency`` seconds until stopped or cancelled.

        The next deadline is set as soon as a tick fires, before the export
        runs, so a slow export delays the schedule by at most its own duration.
        """
        stop_event = stop_event or asyncio.Event()
        deadline = self.monotonic() + frequency

        while not stop_event.is_set():
            await self.sleep(max(deadline - self.monotonic(), 0.0))
            if stop_event.is_set():
                break

            deadline = self.monotonic() + frequency
            self.tick_count += 1
            await self.export_metrics(registry)

    def start(self, registry, frequency: float) -> asyncio.Task:
        """Run the export loop as a background task on the running event loop"""
        if self._export_task is None or self._export_task.done():
            self._stop_event = asyncio.Event()
            self._export_task = asyncio.create_task(
                self.export_at_frequency(registry, frequency, self._stop_event)
            )
            logger.info("Metrics exporter started", frequency_seconds=frequency)
        return self._export_task

    async def stop(self) -> None:
        """Stop the background export loop"""
        if self._export_task:
            self._stop_event.set()
            self._export_task.cancel()
            try:
                await self._export_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(
                    "Export loop ended with an error",
                    error=str(e),
                    error_type=type(e).__name__,
                    event_type="export_loop_error",
                    exc_info=True
                )
            self._export_task = None

        logger.info("Metrics exporter stopped")


async def run_exporter(registry, options: Optional[Options] = None,
                       environ: Optional[Mapping[str, str]] = None,
                       stop_event: Optional[asyncio.Event] = None,
                       client: Optional[httpx.AsyncClient] = None) -> None:
    """Resolve configuration and export until stopped.

    Returns immediately when no metric forwarder URL can be resolved.
    """
    config = resolve_config(options, environ)

    if not config.url:
        logger.warning("Could not export metrics to metric forwarder: no URL provided",
                       event_type="exporter_disabled")
        return

    log_exporter_startup(logger, config)

    transport = HttpTransporter(config, client=client)
    exporter = Exporter(transport, time_unit=config.time_unit)
    try:
        await exporter.export_at_frequency(registry, config.frequency, stop_event)
    finally:
        await transport.aclose()


def start_exporter(registry, options: Optional[Options] = None, **overrides) -> None:
    """Export ``registry`` on the current thread. Does not return under normal operation.

    Keyword overrides (``url=...``, ``frequency=...``) take precedence over ``options``.
    """
    if overrides:
        base = options.model_dump(exclude_unset=True) if options is not None else {}
        options = Options(**{**base, **overrides})
    options = options if options is not None else Options()

    setup_structured_logging(options)

    try:
        asyncio.run(run_exporter(registry, options))
    except Exception as e:
        log_error(logger, e, {"component": "exporter", "phase": "run"})
        raise
