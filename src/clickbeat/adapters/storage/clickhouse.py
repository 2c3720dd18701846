"""ClickHouse storage adapter.

Writes each batch with one HTTP call to the ClickHouse HTTP interface using
the JSONEachRow input format.
"""

import logging
from collections.abc import Sequence

import httpx

from clickbeat.core.config import ClickHouseConfig
from clickbeat.core.encoding.ndjson import encode_rows
from clickbeat.core.models import CanonicalEvent, WriteResult
from clickbeat.core.projection import project_event

logger = logging.getLogger(__name__)


class ClickHouseBatchWriter:
    """ClickHouse implementation of EventSinkPort.

    One httpx.Client (and its connection pool) is created per writer and
    shared by every request thread. There is no retry: a failed batch is
    reported to the caller as a whole.

    Args:
        config: Store connection settings.
        client: Client to send requests with. Defaults to a new
            httpx.Client using the configured timeout.
    """

    def __init__(
        self, config: ClickHouseConfig, client: httpx.Client | None = None
    ) -> None:
        self._config = config
        self._client = client or httpx.Client(timeout=config.timeout)
        self._auth = (config.user, config.password) if config.user else None

    def _encode(self, events: Sequence[CanonicalEvent]) -> tuple[str, int]:
        """Encode events as a JSONEachRow payload, dropping bad records."""
        rows = []
        for event in events:
            try:
                rows.append(project_event(event).to_row())
            except (TypeError, ValueError, RecursionError) as error:
                logger.debug("dropping record that cannot be serialized: %s", error)
        return encode_rows(rows), len(rows)

    def write(self, events: Sequence[CanonicalEvent]) -> WriteResult:
        """Insert a batch of events.

        Args:
            events: Events in the order they were parsed.

        Returns:
            success with the number of rows sent, or failure with the
            transport error or the store's response.
        """
        if not events:
            return WriteResult.success(0)

        payload, count = self._encode(events)
        if count == 0:
            logger.warning("no serializable records in batch of %d", len(events))
            return WriteResult.success(0)

        try:
            response = self._client.post(
                self._config.url,
                params={"query": self._config.insert_query},
                content=payload.encode("utf-8"),
                headers={"Content-Type": "application/x-ndjson"},
                auth=self._auth,
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as error:
            reason = f"request failed: {error}"
            logger.error("ClickHouse write failed: %s", reason)
            return WriteResult.failure(reason)

        if response.status_code != httpx.codes.OK:
            reason = f"ClickHouse returned {response.status_code}: {response.text}"
            logger.error("ClickHouse write failed: %s", reason)
            return WriteResult.failure(reason)

        logger.info("wrote %d records to ClickHouse", count)
        return WriteResult.success(count)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
