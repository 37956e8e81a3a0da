"""
Decoding of inbound feed units and snapshot bodies.

Stream units that fail to parse raise DecodeError so the connection
layer can drop them without closing the stream. Snapshot bodies are
validated record by record; bad records are skipped.
"""

import logging
from typing import Any

import orjson
from pydantic import TypeAdapter, ValidationError

from arbfeed.core.exceptions import DecodeError, SnapshotError
from arbfeed.core.types import ArbitrageOpportunity
from arbfeed.feed.models import FeedMessage, OpportunityPayload


logger = logging.getLogger(__name__)


_MESSAGE_ADAPTER: TypeAdapter[FeedMessage] = TypeAdapter(FeedMessage)


def decode_message(raw: str | bytes) -> FeedMessage:
    """
    Decode one inbound unit.

    Args:
        raw: JSON text or bytes of a `{type, data, timestamp}` envelope.

    Returns:
        The validated message variant selected by `type`.

    Raises:
        DecodeError: On invalid JSON, unknown type, or invalid payload.
    """
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(f"Expected an object envelope, got {type(payload).__name__}")

    try:
        return _MESSAGE_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise DecodeError(
            f"Invalid {payload.get('type', '<untyped>')!s} message: "
            f"{e.error_count()} validation error(s)"
        ) from e


def parse_snapshot(body: Any) -> list[ArbitrageOpportunity]:
    """
    Validate a snapshot body into opportunities, preserving order.

    Args:
        body: Parsed JSON body of the snapshot endpoint.

    Returns:
        Valid opportunities in server order. `null` yields an empty list.

    Raises:
        SnapshotError: If the body is not a list.
    """
    if body is None:
        return []

    if not isinstance(body, list):
        raise SnapshotError(f"Expected a list of opportunities, got {type(body).__name__}")

    opportunities: list[ArbitrageOpportunity] = []

    for index, item in enumerate(body):
        try:
            opportunities.append(OpportunityPayload.model_validate(item).to_opportunity())
        except ValidationError as e:
            logger.warning(f"Skipping invalid snapshot record #{index}: {e.error_count()} error(s)")

    return opportunities
