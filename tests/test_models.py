"""Tests for data models."""

import pytest
from pydantic import ValidationError

from klinechart.errors import InvalidBarsError, UnknownIndicatorError
from klinechart.models import (
    Bar,
    IndicatorKind,
    TradeLevel,
    TradeLevels,
    TradeSide,
    TradeTerm,
    ordered,
    parse_selection,
    validate_bars,
)


def make_bar(day: str, close: float = 10.0, open_: float = 9.5) -> Bar:
    return Bar(date=day, open=open_, high=max(open_, close) + 1, low=min(open_, close) - 1, close=close)


class TestBar:
    """Tests for Bar."""

    def test_bullish(self):
        assert make_bar("2024-01-02", close=10.0, open_=9.5).is_bullish
        assert make_bar("2024-01-02", close=10.0, open_=10.0).is_bullish
        assert not make_bar("2024-01-02", close=9.0, open_=9.5).is_bullish

    def test_range_size(self):
        assert make_bar("2024-01-02", close=10.0, open_=9.5).range_size == pytest.approx(2.5)

    def test_volume_defaults_to_zero(self):
        assert make_bar("2024-01-02").volume == 0.0

    def test_frozen(self):
        bar = make_bar("2024-01-02")
        with pytest.raises(ValidationError):
            bar.close = 11.0


class TestValidateBars:
    """Tests for validate_bars."""

    def test_ascending(self):
        validate_bars([make_bar("2024-01-02"), make_bar("2024-01-03")])

    def test_empty(self):
        validate_bars([])

    def test_duplicate_date(self):
        with pytest.raises(InvalidBarsError):
            validate_bars([make_bar("2024-01-02"), make_bar("2024-01-02")])

    def test_out_of_order(self):
        with pytest.raises(InvalidBarsError, match="chronological"):
            validate_bars([make_bar("20240103"), make_bar("20240102")])


class TestSelection:
    """Tests for indicator selection parsing."""

    def test_case_insensitive(self):
        assert parse_selection(["MA", " volume ", "Rsi"]) == frozenset(
            {IndicatorKind.MA, IndicatorKind.VOLUME, IndicatorKind.RSI}
        )

    def test_duplicates_collapse(self):
        assert parse_selection(["ma", IndicatorKind.MA, "MA"]) == frozenset({IndicatorKind.MA})

    def test_unknown_key(self):
        with pytest.raises(UnknownIndicatorError) as exc_info:
            parse_selection(["ma", "boll"])
        assert exc_info.value.key == "boll"
        assert "trix" in exc_info.value.available
        assert isinstance(exc_info.value, ValueError)

    def test_ordered(self):
        selection = {IndicatorKind.TRIX, IndicatorKind.MA, IndicatorKind.KDJ}
        assert ordered(selection) == [IndicatorKind.MA, IndicatorKind.KDJ, IndicatorKind.TRIX]


class TestTradeLevels:
    """Tests for lenient trade level parsing."""

    def test_camel_case_payload(self):
        levels = TradeLevels.model_validate(
            {
                "shortTerm": {"buy": 10.5, "sell": 12, "reason": "support"},
                "longTerm": {"buy": 8.0},
            }
        )
        assert levels.short_term.term is TradeTerm.SHORT
        assert levels.short_term.sell == 12.0
        assert levels.short_term.reason == "support"
        assert levels.mid_term is None
        assert levels.long_term.price(TradeSide.SELL) is None

    def test_snake_case_payload(self):
        levels = TradeLevels.model_validate({"mid_term": {"buy": 5.0}})
        assert levels.mid_term.term is TradeTerm.MID
        assert levels.mid_term.price(TradeSide.BUY) == 5.0

    def test_junk_prices(self):
        level = TradeLevel(term=TradeTerm.SHORT, buy="12.5", sell=float("inf"))
        assert level.buy is None
        assert level.sell is None

    def test_bool_price_rejected(self):
        assert TradeLevel(term=TradeTerm.SHORT, buy=True).buy is None

    def test_zero_price_not_drawable(self):
        level = TradeLevel(term=TradeTerm.MID, buy=0, sell=3)
        assert level.buy == 0.0
        assert level.price(TradeSide.BUY) is None
        assert level.price(TradeSide.SELL) == 3.0

    def test_malformed_term_becomes_none(self):
        levels = TradeLevels.model_validate({"shortTerm": 42, "midTerm": [1, 2]})
        assert levels.short_term is None
        assert levels.mid_term is None

    def test_items_order(self):
        levels = TradeLevels.model_validate({"longTerm": {"buy": 1.0}})
        assert [term for term, _ in levels.items()] == [TradeTerm.SHORT, TradeTerm.MID, TradeTerm.LONG]

    def test_none_reason(self):
        level = TradeLevel(term=TradeTerm.LONG, reason=None)
        assert level.reason == ""
