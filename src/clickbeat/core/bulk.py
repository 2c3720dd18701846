"""Permissive reader for the Elasticsearch bulk request format.

The bulk body alternates action lines (``{"index": {...}}``) and document
lines. Producers do not always follow that pairing, so the reader recovers
documents instead of rejecting the request:

- blank lines are ignored,
- lines that are not a JSON object are skipped,
- an object without an action key is taken as a document in place,
- an action takes the next line as its document; if that line is not a
  JSON object the pair is dropped.

Action values (index, type, id) are not used.
"""

import logging

from clickbeat.core.encoding.ndjson import decode_object
from clickbeat.core.models import CanonicalEvent
from clickbeat.core.normalize import normalize_event

logger = logging.getLogger(__name__)

ACTION_KEYS = frozenset({"index", "create", "update", "delete"})


def _lines(body: bytes) -> list[str]:
    text = body.decode("utf-8", errors="replace")
    return [line for line in (raw.strip() for raw in text.split("\n")) if line]


def parse_bulk(body: bytes) -> list[CanonicalEvent]:
    """Parse a bulk request body into canonical events.

    Args:
        body: Raw request body.

    Returns:
        Events for every accepted document, in input order.
    """
    lines = _lines(body)
    events: list[CanonicalEvent] = []
    index = 0
    while index < len(lines):
        obj = decode_object(lines[index])
        index += 1
        if obj is None:
            logger.debug("skipping malformed bulk line %d", index)
            continue
        if ACTION_KEYS.isdisjoint(obj):
            events.append(normalize_event(obj))
            continue
        if index == len(lines):
            logger.debug("dropping trailing bulk action without a document")
            break
        document = decode_object(lines[index])
        index += 1
        if document is None:
            logger.debug("dropping bulk action with malformed document line %d", index)
            continue
        events.append(normalize_event(document))
    return events
