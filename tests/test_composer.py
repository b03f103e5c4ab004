"""Tests for series composition and the chart-building pipeline."""

from datetime import date, timedelta

import orjson
import pytest

from klinechart.chart import build_chart, build_trade_lines, compose_series
from klinechart.chart.composer import CANDLESTICK_NAME
from klinechart.chart.layout import plan_panels
from klinechart.config import Settings
from klinechart.indicators import compute_indicators, oscillator_kinds
from klinechart.models import (
    Bar,
    IndicatorKind,
    PanelKey,
    SeriesKind,
    TradeLevel,
    TradeLevels,
    TradeSide,
    TradeTerm,
)
from klinechart.models.chart import DOWN_COLOR, UP_COLOR
from klinechart.models.config import IndicatorParams


def make_bars(n: int, start_price: float = 10.0) -> list[Bar]:
    """Alternating up/down candles on a gentle uptrend."""
    start = date(2024, 1, 1)
    bars = []
    for i in range(n):
        close = start_price + i * 0.1 + (0.3 if i % 2 else -0.3)
        open_ = close - 0.2 if i % 2 else close + 0.2
        bars.append(
            Bar(
                date=(start + timedelta(days=i)).isoformat(),
                open=open_,
                high=max(open_, close) + 0.4,
                low=min(open_, close) - 0.4,
                close=close,
                volume=150_000 + i * 10,
            )
        )
    return bars


@pytest.fixture
def settings():
    return Settings(ma_periods=[5, 10, 20])


def series_by_name(spec):
    return {s.name: s for s in spec.series}


class TestBuildChart:
    """End-to-end chart building."""

    def test_ma_and_volume(self, settings):
        bars = make_bars(30)
        spec = build_chart(bars, {IndicatorKind.MA, IndicatorKind.VOLUME}, settings=settings)

        assert [p.key for p in spec.panels] == [PanelKey.MAIN, PanelKey.VOLUME]
        assert [p.weight for p in spec.panels] == [2, 1]

        main_names = [s.name for s in spec.series_on(PanelKey.MAIN)]
        assert main_names == [CANDLESTICK_NAME, "ma5", "ma10", "ma20"]

        (volume,) = spec.series_on(PanelKey.VOLUME)
        assert volume.kind is SeriesKind.BAR
        assert volume.values == [b.volume for b in bars]
        assert spec.series_on(PanelKey.OSC) == []

        ma5 = series_by_name(spec)["ma5"]
        assert ma5.values[:4] == [None] * 4
        assert ma5.values[4] == sum(b.close for b in bars[:5]) / 5

    def test_every_series_matches_bar_count(self, settings):
        bars = make_bars(40)
        spec = build_chart(bars, set(IndicatorKind), settings=settings)
        for series in spec.series:
            assert len(series.values) == len(bars)

    def test_series_axis_matches_panel(self, settings):
        spec = build_chart(make_bars(40), set(IndicatorKind), settings=settings)
        axes = {p.key: p.axis_index for p in spec.panels}
        for series in spec.series:
            assert series.axis_index == axes[series.panel]

    def test_oscillators_share_one_panel(self, settings):
        spec = build_chart(make_bars(40), oscillator_kinds(), settings=settings)
        assert [p.key for p in spec.panels] == [PanelKey.MAIN, PanelKey.OSC]
        indicators = {s.indicator for s in spec.series_on(PanelKey.OSC)}
        assert indicators == set(oscillator_kinds())

    def test_canonical_series_order(self, settings):
        spec = build_chart(
            make_bars(30),
            {IndicatorKind.TRIX, IndicatorKind.RSI, IndicatorKind.MA},
            settings=settings,
        )
        names = [s.name for s in spec.series]
        assert names == [CANDLESTICK_NAME, "ma5", "ma10", "ma20", "rsi", "trix", "matrix"]

    def test_candlestick_order(self, settings):
        bars = make_bars(3)
        spec = build_chart(bars, set(), settings=settings)
        candles = series_by_name(spec)[CANDLESTICK_NAME]
        assert candles.values[0] == [bars[0].open, bars[0].close, bars[0].low, bars[0].high]

    def test_empty_bars(self, settings):
        spec = build_chart([], {IndicatorKind.MA, IndicatorKind.VOLUME}, settings=settings)
        assert spec.is_empty
        assert spec.series == []
        option = spec.to_option()
        assert option["title"]["text"] == "No data"
        assert option["series"] == []

    def test_idempotent(self, settings):
        bars = make_bars(30)
        levels = {"shortTerm": {"buy": 10.5, "sell": 12.0}}
        selection = {IndicatorKind.MA, IndicatorKind.MACD, IndicatorKind.VOLUME}
        first = build_chart(bars, selection, levels, settings=settings)
        second = build_chart(bars, selection, levels, settings=settings)
        assert first == second
        assert first.to_option() == second.to_option()

    def test_date_index(self, settings):
        bars = make_bars(5)
        spec = build_chart(bars, set(), settings=settings)
        assert spec.date_index == {b.date: i for i, b in enumerate(bars)}

    def test_explicit_params_override_settings(self, settings):
        spec = build_chart(
            make_bars(30), {IndicatorKind.MA}, settings=settings, params=IndicatorParams(ma_periods=[7])
        )
        assert [s.name for s in spec.series_on(PanelKey.MAIN)] == [CANDLESTICK_NAME, "ma7"]


class TestComposeSeries:
    """Tests for compose_series."""

    def test_volume_colors_follow_candle_direction(self):
        bars = make_bars(6)
        selection = {IndicatorKind.VOLUME}
        panels = plan_panels(selection, Settings())
        series = compose_series(bars, panels, compute_indicators(bars, selection))
        volume = series[-1]
        expected = [UP_COLOR if b.close >= b.open else DOWN_COLOR for b in bars]
        assert volume.item_colors == expected

    def test_macd_colors_follow_sign(self):
        bars = make_bars(40)
        selection = {IndicatorKind.MACD}
        panels = plan_panels(selection, Settings())
        series = compose_series(bars, panels, compute_indicators(bars, selection))
        hist = next(s for s in series if s.name == "macd")
        for value, color in zip(hist.values, hist.item_colors):
            assert color == (DOWN_COLOR if value < 0 else UP_COLOR)

    def test_no_panels(self):
        assert compose_series(make_bars(3), [], {}) == []


class TestTradeLines:
    """Tests for trade-level overlays."""

    def test_short_term_buy_and_sell(self, settings):
        spec = build_chart(
            make_bars(30),
            {IndicatorKind.MA},
            {"shortTerm": {"buy": 10.5, "sell": 12.0}},
            settings=settings,
        )
        assert len(spec.mark_lines) == 2
        buy, sell = spec.mark_lines
        assert (buy.term, buy.side, buy.price) == (TradeTerm.SHORT, TradeSide.BUY, 10.5)
        assert (sell.term, sell.side, sell.price) == (TradeTerm.SHORT, TradeSide.SELL, 12.0)
        assert buy.line_type == "dashed"
        assert sell.line_type == "solid"
        assert buy.color == UP_COLOR
        assert sell.color == DOWN_COLOR

        candles = spec.to_option()["series"][0]
        assert [d["yAxis"] for d in candles["markLine"]["data"]] == [10.5, 12.0]

    def test_all_terms_in_order(self):
        levels = TradeLevels(
            short_term=TradeLevel(term=TradeTerm.SHORT, buy=1.0, sell=2.0),
            mid_term=TradeLevel(term=TradeTerm.MID, buy=3.0),
            long_term=TradeLevel(term=TradeTerm.LONG, sell=4.0),
        )
        lines = build_trade_lines(levels)
        assert [(l.term, l.side) for l in lines] == [
            (TradeTerm.SHORT, TradeSide.BUY),
            (TradeTerm.SHORT, TradeSide.SELL),
            (TradeTerm.MID, TradeSide.BUY),
            (TradeTerm.LONG, TradeSide.SELL),
        ]
        assert lines[2].label == "Mid-term buy 3.00"

    def test_unusable_prices_skipped(self):
        levels = {
            "shortTerm": {"buy": "abc", "sell": float("nan")},
            "midTerm": "garbage",
            "longTerm": {"buy": 0, "sell": None},
        }
        assert build_trade_lines(levels) == []

    def test_none_levels(self):
        assert build_trade_lines(None) == []

    def test_non_mapping_levels_ignored(self):
        assert build_trade_lines(["not", "levels"]) == []


class TestChartOption:
    """Tests for the rendered ECharts option."""

    def test_axes_and_zoom_span_all_panels(self, settings):
        spec = build_chart(
            make_bars(30),
            {IndicatorKind.MA, IndicatorKind.VOLUME, IndicatorKind.KDJ},
            settings=settings,
        )
        option = spec.to_option()

        assert len(option["grid"]) == 3
        assert [axis["gridIndex"] for axis in option["xAxis"]] == [0, 1, 2]
        assert [axis["axisLabel"]["show"] for axis in option["xAxis"]] == [False, False, True]
        assert option["axisPointer"]["link"] == [{"xAxisIndex": "all"}]
        for zoom in option["dataZoom"]:
            assert zoom["xAxisIndex"] == [0, 1, 2]
        assert option["grid"][0]["top"] == f"{spec.panels[0].top}%"

    def test_legend_uses_labels(self, settings):
        spec = build_chart(make_bars(30), {IndicatorKind.MA, IndicatorKind.DMI}, settings=settings)
        legend = spec.to_option()["legend"]["data"]
        assert legend == ["MA5", "MA10", "MA20", "+DI", "-DI", "ADX"]

    def test_json_has_nulls_not_nan(self, settings):
        spec = build_chart(make_bars(30), set(IndicatorKind), settings=settings)
        raw = spec.to_json()
        assert b"NaN" not in raw
        decoded = orjson.loads(raw)
        ma20 = next(s for s in decoded["series"] if s["name"] == "MA20")
        assert ma20["data"][0] is None
        assert ma20["data"][19] is not None


def make_rising_bars(n: int, volume: float = 1_000_000.0) -> list[Bar]:
    """Strictly increasing closes with constant volume."""
    start = date(2024, 1, 1)
    return [
        Bar(
            date=(start + timedelta(days=i)).isoformat(),
            open=10.0 + i - 0.2,
            high=10.0 + i + 0.5,
            low=10.0 + i - 0.5,
            close=10.0 + i,
            volume=volume,
        )
        for i in range(n)
    ]


class TestScenarios:
    """End-to-end scenarios on a 30-day rising series."""

    def test_thirty_days_ma_and_volume(self, settings):
        bars = make_rising_bars(30)
        spec = build_chart(bars, {IndicatorKind.MA, IndicatorKind.VOLUME}, settings=settings)

        assert [(p.key, p.weight) for p in spec.panels] == [(PanelKey.MAIN, 2), (PanelKey.VOLUME, 1)]
        assert spec.panel(PanelKey.OSC) is None

        main = {s.name: s for s in spec.series_on(PanelKey.MAIN)}
        assert {"ma5", "ma20"} <= set(main)
        assert main["ma5"].values[4] == sum(b.close for b in bars[:5]) / 5
        assert main["ma20"].values[18] is None
        assert main["ma20"].values[19] == sum(b.close for b in bars[:20]) / 20

        (volume,) = spec.series_on(PanelKey.VOLUME)
        assert volume.kind is SeriesKind.BAR
        assert volume.values == [1_000_000.0] * 30
        assert volume.item_colors == [UP_COLOR] * 30
        assert spec.series_on(PanelKey.OSC) == []

    def test_thirty_days_trade_levels(self, settings):
        levels = {
            "shortTerm": {"buy": 10.5, "sell": 12.0},
            "midTerm": {"buy": 0, "sell": 0},
            "longTerm": None,
        }
        spec = build_chart(make_rising_bars(30), {IndicatorKind.MA}, levels, settings=settings)

        buys = [line for line in spec.mark_lines if line.side is TradeSide.BUY]
        sells = [line for line in spec.mark_lines if line.side is TradeSide.SELL]
        assert len(buys) == 1
        assert len(sells) == 1
        assert (buys[0].term, buys[0].price) == (TradeTerm.SHORT, 10.5)
        assert (sells[0].term, sells[0].price) == (TradeTerm.SHORT, 12.0)
        assert buys[0].label == "Short-term buy 10.50"

    def test_indicator_config_file_applies(self, tmp_path):
        path = tmp_path / "indicators.yaml"
        path.write_text("ma_periods: [3, 30]\n", encoding="utf-8")
        settings = Settings(_env_file=None, indicator_config_path=str(path))

        spec = build_chart(make_rising_bars(30), {IndicatorKind.MA}, settings=settings)
        assert [s.label for s in spec.series_on(PanelKey.MAIN)][1:] == ["MA3", "MA30"]
