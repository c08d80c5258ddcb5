"""Tests for backtest data models."""

from datetime import date

import pytest
from strategy_lab.backtest.models import Bar, Stats, Trade


class TestBar:
    """Tests for Bar validation."""

    def test_valid_bar(self) -> None:
        bar = Bar(date=date(2024, 1, 2), open=1.0, high=2.0, low=0.5, close=1.5, volume=0.0)

        assert bar.close == 1.5
        assert bar.symbol == ""

    @pytest.mark.parametrize("close", [0.0, -1.0])
    def test_non_positive_close_rejected(self, close: float) -> None:
        with pytest.raises(ValueError, match="non-positive close"):
            Bar(date=date(2024, 1, 2), open=1.0, high=1.0, low=1.0, close=close, volume=1.0)

    def test_negative_volume_rejected(self) -> None:
        with pytest.raises(ValueError, match="negative volume"):
            Bar(date=date(2024, 1, 2), open=1.0, high=1.0, low=1.0, close=1.0, volume=-1.0)

    @pytest.mark.parametrize("field", ["open", "high", "low", "close", "volume"])
    def test_non_finite_rejected(self, field: str) -> None:
        values = {"open": 1.0, "high": 1.0, "low": 1.0, "close": 1.0, "volume": 1.0}
        values[field] = float("nan")

        with pytest.raises(ValueError, match="non-finite"):
            Bar(date=date(2024, 1, 2), **values)


class TestBarFromRow:
    """Tests for Bar.from_row."""

    def test_parses_strings(self) -> None:
        bar = Bar.from_row(
            {
                "date": "2024-01-02T00:00:00Z",
                "open": "100",
                "high": "105",
                "low": "95",
                "close": "102.5",
                "volume": "1000",
                "ticker": "msft",
            }
        )

        assert bar.date == date(2024, 1, 2)
        assert bar.close == 102.5
        assert bar.volume == 1000.0
        assert bar.symbol == "msft"

    def test_accepts_date_object_and_fallback_symbol(self) -> None:
        bar = Bar.from_row(
            {"date": date(2024, 1, 2), "open": 1, "high": 1, "low": 1, "close": 1, "volume": 1},
            symbol="AAPL",
        )

        assert bar.date == date(2024, 1, 2)
        assert bar.symbol == "AAPL"

    def test_missing_field(self) -> None:
        with pytest.raises(ValueError, match="missing 'volume'"):
            Bar.from_row({"date": "2024-01-02", "open": 1, "high": 1, "low": 1, "close": 1})

    def test_missing_date(self) -> None:
        with pytest.raises(ValueError, match="no usable date"):
            Bar.from_row({"open": 1, "high": 1, "low": 1, "close": 1, "volume": 1})

    def test_bad_date(self) -> None:
        with pytest.raises(ValueError):
            Bar.from_row({"date": "02/01/2024", "open": 1, "high": 1, "low": 1, "close": 1, "volume": 1})


class TestWireFormat:
    """Tests for camelCase dictionaries."""

    def test_trade_to_dict(self) -> None:
        trade = Trade(entry_index=3, exit_index=9, entry_price=100.0, exit_price=110.0, pnl=0.1)

        assert trade.to_dict() == {
            "entryIdx": 3,
            "exitIdx": 9,
            "entryPrice": 100.0,
            "exitPrice": 110.0,
            "pnl": 0.1,
        }

    def test_stats_to_dict(self) -> None:
        stats = Stats(total_return_pct=4.0, trade_count=2, win_rate_pct=50.0, avg_trade_pct=2.0)

        assert stats.to_dict() == {
            "totalReturnPct": 4.0,
            "trades": 2,
            "winRatePct": 50.0,
            "avgTradePct": 2.0,
        }
