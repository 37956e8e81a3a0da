"""Feed module for the opportunity stream and snapshot retrieval."""

from arbfeed.feed.decoder import decode_message, parse_snapshot
from arbfeed.feed.models import (
    ArbitrageMessage,
    FeedMessage,
    OddsUpdateMessage,
    OpportunityPayload,
    StatusMessage,
)
from arbfeed.feed.snapshot import SnapshotClient
from arbfeed.feed.websocket import AiohttpConnector, ConnectionManager


__all__ = [
    "AiohttpConnector",
    "ArbitrageMessage",
    "ConnectionManager",
    "FeedMessage",
    "OddsUpdateMessage",
    "OpportunityPayload",
    "SnapshotClient",
    "StatusMessage",
    "decode_message",
    "parse_snapshot",
]
