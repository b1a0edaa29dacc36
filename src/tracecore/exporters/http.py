"""
Generic exporter that posts span batches as JSON over HTTP.
"""

from typing import Dict, List, Optional
import asyncio
import json
import logging

import requests

from ..config import BufferConfig
from ..errors import PublishError
from ..models import SpanRecord
from .buffer import ExporterBuffer
from .interfaces import Exporter


class HttpJsonExporter(Exporter):
    """
    Sends finished spans to an HTTP endpoint.

    Each batch is posted as {"spans": [...]} with every span serialized by
    its pydantic model. The request runs in a worker thread so the event
    loop is never blocked. Failed batches are not retried; the buffer logs
    them and keeps them in failed_batches.
    """

    def __init__(
        self,
        url: str,
        config: Optional[BufferConfig] = None,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 10,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the HTTP exporter.

        Args:
            url: Endpoint receiving the POST requests
            config: Buffer configuration
            session: requests session to reuse; a new one by default
            timeout_seconds: Request timeout
            headers: Extra headers sent with every request
        """
        config = config or BufferConfig()
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.headers = {"Content-Type": "application/json; charset=utf-8"}
        self.headers.update(headers or {})
        self.session = session or requests.Session()
        self.logger = config.logger or logging.getLogger(__name__)
        self.buffer = ExporterBuffer(self, config)

    def on_start_span(self, record: SpanRecord) -> None:
        pass

    def on_end_span(self, record: SpanRecord) -> None:
        self.buffer.add_to_buffer(record)

    async def publish(self, spans: List[SpanRecord]) -> None:
        payload = self.build_payload(spans)
        self.logger.debug(f"Sending {len(spans)} spans to {self.url}")
        await asyncio.to_thread(self._post, payload, len(spans))

    @staticmethod
    def build_payload(spans: List[SpanRecord]) -> str:
        return json.dumps({"spans": [span.model_dump(mode="json") for span in spans]})

    def _post(self, payload: str, batch_size: int) -> None:
        try:
            response = self.session.post(
                self.url,
                data=payload.encode("utf-8"),
                headers=self.headers,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise PublishError(f"Error sending spans to {self.url}: {e}", batch_size) from e

        if not 200 <= response.status_code < 300:
            raise PublishError(
                f"Failed to send spans to {self.url}: {response.status_code}",
                batch_size,
                response.status_code,
            )
        self.logger.debug(f"Sent {batch_size} spans to {self.url}: {response.status_code}")
