"""
Unit tests for feed message decoding.

Tests envelope dispatch, payload validation, timestamp handling and
snapshot parsing.
"""

from datetime import UTC, datetime

import orjson
import pytest

from arbfeed.core.exceptions import DecodeError, SnapshotError
from arbfeed.core.types import MarketType, OpportunityStatus
from arbfeed.feed.decoder import decode_message, parse_snapshot
from arbfeed.feed.models import ArbitrageMessage, OddsUpdateMessage, StatusMessage


def _dumps(data: object) -> str:
    return orjson.dumps(data).decode()


class TestDecodeMessage:
    """Tests for stream envelope decoding."""

    def test_arbitrage_message(self, make_envelope) -> None:
        """Test a full opportunity record."""
        message = decode_message(_dumps(make_envelope(id="opp-9")))

        assert isinstance(message, ArbitrageMessage)
        opportunity = message.data.to_opportunity()
        assert opportunity.id == "opp-9"
        assert opportunity.home_odds == 1.91
        assert opportunity.status == OpportunityStatus.ACTIVE
        assert opportunity.expires_at.tzinfo is not None

    def test_accepts_bytes(self, make_envelope) -> None:
        """Test binary frames decode the same way."""
        message = decode_message(orjson.dumps(make_envelope()))

        assert isinstance(message, ArbitrageMessage)

    def test_nanosecond_timestamps(self, make_envelope) -> None:
        """Test RFC 3339 timestamps with nanosecond fractions."""
        envelope = make_envelope(
            created_at="2024-06-01T11:59:50.123456789Z",
            expires_at="2024-06-01T12:05:00.987654321+00:00",
        )

        opportunity = decode_message(_dumps(envelope)).data.to_opportunity()

        assert opportunity.created_at == datetime(2024, 6, 1, 11, 59, 50, 123456, tzinfo=UTC)
        assert opportunity.expires_at == datetime(2024, 6, 1, 12, 5, 0, 987654, tzinfo=UTC)

    def test_odds_update_message(self) -> None:
        """Test an odds update with a zeroed draw price."""
        raw = _dumps(
            {
                "type": "odds_update",
                "data": {
                    "id": "u1",
                    "event_id": "e1",
                    "sport": "soccer_epl",
                    "home_team": "Arsenal",
                    "away_team": "Chelsea",
                    "bookmaker": "Bet365",
                    "home_odds": 2.4,
                    "away_odds": 3.1,
                    "draw_odds": 0,
                    "timestamp": "2024-06-01T12:00:00Z",
                    "market_type": "moneyline",
                },
                "timestamp": "2024-06-01T12:00:00Z",
            }
        )

        message = decode_message(raw)

        assert isinstance(message, OddsUpdateMessage)
        update = message.data.to_odds_update()
        assert update.draw_odds is None
        assert update.market_type == MarketType.MONEYLINE

    def test_status_message(self) -> None:
        """Test a status notice with extra keys and no timestamp."""
        message = decode_message(_dumps({"type": "status", "data": {"status": "ok", "clients": 3}}))

        assert isinstance(message, StatusMessage)
        assert message.data is not None
        assert message.data.status == "ok"
        assert message.timestamp == ""

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "",
            "[1, 2, 3]",
            '"arbitrage"',
            '{"data": {}}',
            '{"type": "unknown", "data": {}}',
        ],
    )
    def test_malformed_units(self, raw: str) -> None:
        """Test that malformed units raise DecodeError."""
        with pytest.raises(DecodeError):
            decode_message(raw)

    def test_unknown_type_named_in_error(self) -> None:
        """Test the error names the offending type."""
        with pytest.raises(DecodeError, match="heartbeat"):
            decode_message('{"type": "heartbeat", "data": null}')

    @pytest.mark.parametrize(
        "overrides",
        [
            {"home_odds": 1.0},
            {"away_odds": -2.0},
            {"id": ""},
            {"status": "cancelled"},
            {"home_stake": -1.0},
            {"expires_at": "2024-06-01T11:00:00Z"},
            {"created_at": "yesterday"},
            {"expires_at": "9999-12-31T23:30:00-05:00"},
        ],
    )
    def test_invalid_payload(self, make_envelope, overrides: dict) -> None:
        """Test that payload violations are decode errors."""
        with pytest.raises(DecodeError):
            decode_message(_dumps(make_envelope(**overrides)))

    def test_missing_field(self, make_envelope) -> None:
        """Test that a required field must be present."""
        envelope = make_envelope()
        del envelope["data"]["profit_percent"]

        with pytest.raises(DecodeError):
            decode_message(_dumps(envelope))

    def test_unknown_payload_keys_ignored(self, make_envelope) -> None:
        """Test forward compatibility with extra fields."""
        message = decode_message(_dumps(make_envelope(league="NBA")))

        assert isinstance(message, ArbitrageMessage)


class TestParseSnapshot:
    """Tests for snapshot body validation."""

    def test_list_in_order(self, make_payload) -> None:
        """Test valid records keep server order."""
        body = [make_payload(id=oid) for oid in ("c", "a", "b")]

        assert [o.id for o in parse_snapshot(body)] == ["c", "a", "b"]

    def test_null_body(self) -> None:
        """Test that null means no opportunities."""
        assert parse_snapshot(None) == []

    def test_skips_invalid_records(self, make_payload) -> None:
        """Test that bad records are dropped individually."""
        body = [make_payload(id="a"), make_payload(id="b", home_odds=0.5), {"id": "c"}, 42]

        assert [o.id for o in parse_snapshot(body)] == ["a"]

    def test_skips_out_of_range_timestamp(self, make_payload) -> None:
        """Test that a record with an unrepresentable time is dropped alone."""
        far = make_payload(id="far", expires_at="9999-12-31T23:30:00-05:00")
        body = [make_payload(id="a"), far]

        assert [o.id for o in parse_snapshot(body)] == ["a"]

    @pytest.mark.parametrize("body", [{"opportunities": []}, "[]", 7])
    def test_non_list_body(self, body: object) -> None:
        """Test that a non-list body is a snapshot error."""
        with pytest.raises(SnapshotError):
            parse_snapshot(body)
