"""Chart model builders: layout, series composition and tooltips."""

from klinechart.chart.composer import (
    build_chart,
    build_trade_lines,
    candlestick_series,
    compose_series,
)
from klinechart.chart.layout import panel_keys, plan_layout, plan_panels
from klinechart.chart.tooltip import TooltipAggregator

__all__ = [
    "build_chart",
    "build_trade_lines",
    "candlestick_series",
    "compose_series",
    "panel_keys",
    "plan_layout",
    "plan_panels",
    "TooltipAggregator",
]
