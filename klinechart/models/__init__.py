"""Data models shared by the indicator engine, chart builders and controller."""

from klinechart.models.bar import Bar, validate_bars
from klinechart.models.chart import (
    ChartSpec,
    MarkLine,
    Panel,
    SeriesKind,
    SeriesSpec,
    ValueFormat,
)
from klinechart.models.config import IndicatorParams
from klinechart.models.indicator import (
    IndicatorKind,
    IndicatorSelection,
    PanelKey,
    ordered,
    parse_selection,
)
from klinechart.models.trade import TradeLevel, TradeLevels, TradeSide, TradeTerm

__all__ = [
    "Bar",
    "validate_bars",
    "ChartSpec",
    "MarkLine",
    "Panel",
    "SeriesKind",
    "SeriesSpec",
    "ValueFormat",
    "IndicatorParams",
    "IndicatorKind",
    "IndicatorSelection",
    "PanelKey",
    "ordered",
    "parse_selection",
    "TradeLevel",
    "TradeLevels",
    "TradeSide",
    "TradeTerm",
]
