"""HTTP transport delivering payloads to the metric forwarder"""
import json
from typing import List, Optional
import httpx
from .models import DataPoint
from .payload import build_payload
from logging_config import get_logger


logger = get_logger(__name__)


class TransportError(Exception):
    """Delivery failed: network error, non-2xx status or unserializable payload"""

    def __init__(self, message: str, status_code: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


def create_client(config) -> httpx.AsyncClient:
    """Create the HTTP client; TLS verification is skipped only when configured"""
    kwargs = {"verify": not config.skip_ssl_verification}
    if config.timeout is not None:
        kwargs["timeout"] = config.timeout
    return httpx.AsyncClient(**kwargs)


class HttpTransporter:
    """POSTs data point batches as JSON to the configured URL"""

    def __init__(self, config, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._owns_client = client is None
        self.client = client or create_client(config)

    async def send_metrics(self, points: List[DataPoint]) -> None:
        """Send one batch. Raises TransportError on any failure; never retries."""
        body = self._serialize(points)

        try:
            response = await self.client.post(
                self.config.url,
                content=body,
                headers={
                    "Authorization": self.config.token,
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Request to metric forwarder failed: {e}", cause=e) from e

        if response.status_code < 200 or response.status_code > 299:
            raise TransportError(
                f"Received a non-2xx status code: {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(
            "Delivered metrics",
            points_count=len(points),
            status_code=response.status_code,
            url=self.config.url,
            event_type="transport_delivered"
        )

    def _serialize(self, points: List[DataPoint]) -> bytes:
        payload = build_payload(points, self.config)
        try:
            return json.dumps(payload, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise TransportError(f"Could not serialize metrics payload: {e}", cause=e) from e

    async def aclose(self) -> None:
        """Close the HTTP client if this transporter created it"""
        if self._owns_client:
            await self.client.aclose()
