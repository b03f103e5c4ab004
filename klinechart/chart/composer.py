"""Series composer and the chart-building pipeline.

``build_chart`` is the single entry point used by every view: bars and an
indicator selection in, a ChartSpec out. It is a pure function; the
render controller calls it on every input change.
"""

import logging
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from klinechart.chart.layout import plan_layout
from klinechart.config import Settings, get_settings
from klinechart.indicator_config import load_indicator_params
from klinechart.indicators.indicators import BarArrays, Series
from klinechart.indicators.registry import compute_indicators, get_indicator
from klinechart.models.bar import Bar
from klinechart.models.chart import (
    DOWN_COLOR,
    UP_COLOR,
    ChartSpec,
    MarkLine,
    Panel,
    SeriesKind,
    SeriesSpec,
)
from klinechart.models.config import IndicatorParams
from klinechart.models.indicator import IndicatorKind, PanelKey, ordered
from klinechart.models.trade import TradeLevels, TradeSide, TradeTerm

logger = logging.getLogger(__name__)

CANDLESTICK_NAME = "kline"

TERM_NAMES = {
    TradeTerm.SHORT: "Short-term",
    TradeTerm.MID: "Mid-term",
    TradeTerm.LONG: "Long-term",
}

# side -> (color, line type)
TRADE_LINE_STYLES = {
    TradeSide.BUY: (UP_COLOR, "dashed"),
    TradeSide.SELL: (DOWN_COLOR, "solid"),
}


def _direction_colors(bars: Sequence[Bar]) -> list[str]:
    return [UP_COLOR if bar.is_bullish else DOWN_COLOR for bar in bars]


def _sign_colors(values: Series) -> list[str]:
    return [DOWN_COLOR if v is not None and v < 0 else UP_COLOR for v in values]


def candlestick_series(bars: Sequence[Bar], axis_index: int = 0) -> SeriesSpec:
    """Price candles in ECharts [open, close, low, high] order."""
    return SeriesSpec(
        name=CANDLESTICK_NAME,
        kind=SeriesKind.CANDLESTICK,
        panel=PanelKey.MAIN,
        axis_index=axis_index,
        values=[[b.open, b.close, b.low, b.high] for b in bars],
    )


def compose_series(
    bars: Sequence[Bar],
    panels: Sequence[Panel],
    indicator_values: Mapping[IndicatorKind, Mapping[str, Series]],
    params: IndicatorParams | None = None,
) -> list[SeriesSpec]:
    """Bind computed indicator lines to their panels.

    Args:
        bars: Bar sequence the values were computed from
        panels: Output of the layout planner
        indicator_values: Output of compute_indicators
        params: Indicator periods (decides the MA lines)

    Returns:
        Candlestick first, then indicator lines in canonical order
    """
    if not panels:
        return []
    params = params or IndicatorParams()
    axes = {panel.key: panel.axis_index for panel in panels}

    series = [candlestick_series(bars, axes[PanelKey.MAIN])]
    for kind in ordered(indicator_values):
        definition = get_indicator(kind)
        axis_index = axes.get(definition.panel)
        if axis_index is None:
            logger.warning("No %s panel planned for %s, skipping", definition.panel.value, kind.value)
            continue
        lines = indicator_values[kind]
        for line in definition.lines(params):
            values = lines.get(line.key)
            if values is None:
                continue
            item_colors = None
            if line.kind is SeriesKind.BAR:
                item_colors = (
                    _direction_colors(bars) if kind is IndicatorKind.VOLUME else _sign_colors(values)
                )
            series.append(
                SeriesSpec(
                    name=line.key,
                    label=line.label,
                    kind=line.kind,
                    panel=definition.panel,
                    axis_index=axis_index,
                    indicator=kind,
                    values=list(values),
                    value_format=line.value_format,
                    color=line.color,
                    item_colors=item_colors,
                )
            )
    return series


def _as_trade_levels(levels: TradeLevels | Mapping[str, Any] | None) -> TradeLevels | None:
    if levels is None or isinstance(levels, TradeLevels):
        return levels
    try:
        return TradeLevels.model_validate(levels)
    except ValidationError as e:
        logger.warning("Ignoring malformed trade levels: %s", e)
        return None


def build_trade_lines(levels: TradeLevels | Mapping[str, Any] | None) -> list[MarkLine]:
    """Horizontal reference lines for recommended buy/sell prices.

    Terms or sides without a usable price are skipped silently.
    """
    parsed = _as_trade_levels(levels)
    if parsed is None:
        return []

    lines = []
    for term, level in parsed.items():
        if level is None:
            continue
        for side in (TradeSide.BUY, TradeSide.SELL):
            price = level.price(side)
            if price is None:
                logger.debug("No %s %s price to draw", term.value, side.value)
                continue
            color, line_type = TRADE_LINE_STYLES[side]
            lines.append(
                MarkLine(
                    term=term,
                    side=side,
                    price=price,
                    label=f"{TERM_NAMES[term]} {side.value} {price:.2f}",
                    color=color,
                    line_type=line_type,
                )
            )
    return lines


def build_chart(
    bars: Sequence[Bar],
    selection: Iterable[IndicatorKind],
    trade_levels: TradeLevels | Mapping[str, Any] | None = None,
    settings: Settings | None = None,
    params: IndicatorParams | None = None,
) -> ChartSpec:
    """Compute indicators and compose the full chart specification.

    An empty bar sequence yields the empty "no data" spec.
    """
    settings = settings or get_settings()
    selection = ordered(selection)
    bars = list(bars)

    panels = plan_layout(bars, selection, settings)
    if not panels:
        return ChartSpec(selection=selection)

    # Periods follow settings.indicator_config_path unless given explicitly
    params = params or load_indicator_params(settings=settings)

    arrays = BarArrays.from_bars(bars)
    values = compute_indicators(arrays, selection, params)
    return ChartSpec(
        dates=arrays.dates,
        bars=bars,
        selection=selection,
        panels=panels,
        series=compose_series(bars, panels, values, params),
        mark_lines=build_trade_lines(trade_levels),
        date_index={date: i for i, date in enumerate(arrays.dates)},
    )
