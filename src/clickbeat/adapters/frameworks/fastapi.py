"""FastAPI adapter for the ingestion endpoints."""

import logging
from collections.abc import Sequence

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from clickbeat.core.bulk import parse_bulk
from clickbeat.core.errors import EventShapeError
from clickbeat.core.models import CanonicalEvent
from clickbeat.core.payloads import (
    decode_event_array,
    decode_logstash,
    decode_single_event,
)
from clickbeat.core.ports import EventSinkPort
from clickbeat.core.timestamps import format_rfc3339, utc_now

logger = logging.getLogger(__name__)

SERVICE_NAME = "clickbeat"

_ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _bad_request(error: EventShapeError) -> JSONResponse:
    logger.warning("rejected request body: %s", error)
    return JSONResponse(status_code=400, content={"error": "invalid JSON format"})


async def _write(
    sink: EventSinkPort, events: Sequence[CanonicalEvent], source: str
) -> JSONResponse | None:
    """Write a batch on the worker thread pool.

    Returns:
        None on success (or for an empty batch), else the 500 response.
    """
    if not events:
        return None
    result = await run_in_threadpool(sink.write, events)
    if result.ok:
        return None
    logger.error(
        "write of %d events from %s failed: %s", len(events), source, result.reason
    )
    return JSONResponse(status_code=500, content={"error": "write failed"})


def create_ingest_router(sink: EventSinkPort) -> APIRouter:
    """Create a FastAPI router with the ingestion and health endpoints.

    Args:
        sink: Sink implementing EventSinkPort that receives every batch.

    Returns:
        APIRouter with the bulk, logstash, events, filebeat, ingest and
        health endpoints configured.
    """
    router = APIRouter()

    @router.get("/health")
    @router.get("/")
    async def health() -> dict[str, str]:
        """Return service identity and current time."""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "time": format_rfc3339(utc_now().replace(microsecond=0)),
        }

    @router.post("/_bulk")
    @router.post("/{index}/_bulk")
    @router.post("/{index}/{doc_type}/_bulk")
    async def bulk(request: Request) -> JSONResponse:
        """Accept an Elasticsearch bulk request.

        Malformed lines are dropped; the response always reports no errors.
        """
        events = parse_bulk(await request.body())
        failed = await _write(sink, events, "bulk")
        if failed is not None:
            return failed
        count = len(events)
        return JSONResponse(content={"took": count, "errors": False, "items": count})

    @router.post("/")
    @router.api_route("/logstash", methods=_ANY_METHOD)
    async def logstash(request: Request) -> JSONResponse:
        """Accept a Logstash HTTP output body (object or array of objects)."""
        try:
            events = decode_logstash(await request.body())
        except EventShapeError as error:
            return _bad_request(error)
        failed = await _write(sink, events, "logstash")
        if failed is not None:
            return failed
        return JSONResponse(content={"status": "ok", "count": len(events)})

    @router.post("/events")
    async def events_array(request: Request) -> JSONResponse:
        """Accept a strict JSON array of canonical events."""
        try:
            events = decode_event_array(await request.body())
        except EventShapeError as error:
            return _bad_request(error)
        failed = await _write(sink, events, "events")
        if failed is not None:
            return failed
        return JSONResponse(content={"status": "ok", "count": len(events)})

    @router.post("/filebeat")
    @router.post("/ingest")
    async def single_event(request: Request) -> JSONResponse:
        """Accept exactly one canonical event."""
        try:
            event = decode_single_event(await request.body())
        except EventShapeError as error:
            return _bad_request(error)
        failed = await _write(sink, [event], "single")
        if failed is not None:
            return failed
        return JSONResponse(content={"status": "ok"})

    return router
