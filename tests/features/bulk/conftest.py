"""Step definitions for the bulk parsing feature."""

import asyncio
from dataclasses import dataclass, field

import httpx
import pytest
from fastapi import FastAPI
from pytest_bdd import given, parsers, then, when

from clickbeat.adapters.storage.in_memory import InMemoryEventSink
from clickbeat.app import create_app


@dataclass
class BulkScenarioContext:
    """State shared between the steps of one scenario."""

    sink: InMemoryEventSink | None = None
    app: FastAPI | None = None
    body: bytes = b""
    response: httpx.Response | None = None
    lines: list[str] = field(default_factory=list)


async def _post(app: FastAPI, path: str, body: bytes) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(path, content=body)


@pytest.fixture
def ctx() -> BulkScenarioContext:
    """Fresh scenario context for each test."""
    return BulkScenarioContext()


# === Background Steps ===
@given("an in-memory event sink")
def step_sink(ctx: BulkScenarioContext) -> None:
    ctx.sink = InMemoryEventSink()


@given("the clickbeat application")
def step_app(ctx: BulkScenarioContext) -> None:
    ctx.app = create_app(sink=ctx.sink, producers=[])


# === Request Steps ===
@given("a bulk body with the lines:")
def step_bulk_body(ctx: BulkScenarioContext, datatable: list[list[str]]) -> None:
    ctx.lines = [row[0] for row in datatable[1:]]
    ctx.body = ("\n".join(ctx.lines) + "\n").encode("utf-8")


@when(parsers.parse('the body is posted to "{path}"'))
def step_post(ctx: BulkScenarioContext, path: str) -> None:
    assert ctx.app is not None
    ctx.response = asyncio.run(_post(ctx.app, path, ctx.body))


# === Assertion Steps ===
@then(parsers.parse("the response reports {count:d} items without errors"))
def step_response(ctx: BulkScenarioContext, count: int) -> None:
    assert ctx.response is not None
    assert ctx.response.status_code == 200
    assert ctx.response.json() == {"took": count, "errors": False, "items": count}


@then(parsers.parse('the sink holds the messages "{messages}"'))
def step_messages(ctx: BulkScenarioContext, messages: str) -> None:
    assert ctx.sink is not None
    assert [event.message for event in ctx.sink.events] == messages.split(",")


@then("the sink received no batches")
def step_no_batches(ctx: BulkScenarioContext) -> None:
    assert ctx.sink is not None
    assert ctx.sink.batches == []
