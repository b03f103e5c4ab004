"""Technical-analysis chart core.

Pure indicator math, panel layout, series composition and tooltip
aggregation for K-line (candlestick) charts, plus the render controller
that owns the chart sink. No network or storage access lives here; bar
data and trade levels arrive through the provider protocols.
"""

from klinechart.chart import TooltipAggregator, build_chart, plan_layout, plan_panels
from klinechart.models import (
    Bar,
    ChartSpec,
    IndicatorKind,
    Panel,
    PanelKey,
    TradeLevel,
    TradeLevels,
    parse_selection,
)
from klinechart.render import RecordingSink, RenderController, RenderState

__all__ = [
    "Bar",
    "ChartSpec",
    "IndicatorKind",
    "Panel",
    "PanelKey",
    "TradeLevel",
    "TradeLevels",
    "parse_selection",
    "build_chart",
    "plan_layout",
    "plan_panels",
    "TooltipAggregator",
    "RecordingSink",
    "RenderController",
    "RenderState",
]
