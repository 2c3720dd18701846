"""Application assembly for the clickbeat service."""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clickbeat.adapters.frameworks.fastapi import create_ingest_router
from clickbeat.adapters.producers import IngestPump, build_producers
from clickbeat.adapters.storage.clickhouse import ClickHouseBatchWriter
from clickbeat.core.config import AppConfig
from clickbeat.core.ports import EventSinkPort, ProducerPort

logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig | None = None,
    sink: EventSinkPort | None = None,
    producers: Sequence[ProducerPort] | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Application configuration. Defaults to all defaults.
        sink: Sink for every batch. Defaults to a ClickHouseBatchWriter for
            ``config.clickhouse``, closed on shutdown.
        producers: Non-HTTP sources. Defaults to those enabled in
            ``config.inputs``; they are started with the application.

    Returns:
        The application, ready to be served by uvicorn.
    """
    config = config or AppConfig()
    owned_writer = None
    if sink is None:
        owned_writer = ClickHouseBatchWriter(config.clickhouse)
        sink = owned_writer

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sources = (
            build_producers(config.inputs, config.server.host)
            if producers is None
            else producers
        )
        pump = IngestPump(sink, sources)
        pump.start()
        ch = config.clickhouse
        logger.info(
            "ClickHouse target %s:%d/%s.%s", ch.host, ch.port, ch.database, ch.table
        )
        try:
            yield
        finally:
            pump.stop()
            if owned_writer is not None:
                owned_writer.close()

    app = FastAPI(title="clickbeat", lifespan=lifespan)
    app.include_router(create_ingest_router(sink))
    return app
