"""Declarative chart specification handed to the rendering sink.

A ChartSpec is plain data: two specs built from the same bars and the
same selection compare equal. ``to_option`` renders the ECharts option
dict the sink consumes.
"""

from enum import Enum
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, Field

from klinechart.models.bar import Bar
from klinechart.models.indicator import IndicatorKind, PanelKey
from klinechart.models.trade import TradeSide, TradeTerm

UP_COLOR = "#ef232a"
DOWN_COLOR = "#14b143"
GRID_LEFT = 60
GRID_RIGHT = 40


class SeriesKind(str, Enum):
    CANDLESTICK = "candlestick"
    LINE = "line"
    BAR = "bar"


class ValueFormat(str, Enum):
    """How a series value is rendered in tooltips."""

    DECIMAL = "decimal"
    VOLUME = "volume"


class Panel(BaseModel):
    """One vertically stacked chart grid.

    ``top`` and ``height`` are percentages of the container height.
    """

    model_config = ConfigDict(frozen=True)

    key: PanelKey
    weight: int
    axis_index: int
    top: float = 0.0
    height: float = 0.0
    show_x_labels: bool = False


class SeriesSpec(BaseModel):
    """One drawable series bound to a panel's axes.

    ``label`` is the human-readable tooltip name; a series without one is
    left out of tooltips.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str | None = None
    kind: SeriesKind
    panel: PanelKey
    axis_index: int
    indicator: IndicatorKind | None = None
    values: list[Any] = Field(default_factory=list)
    value_format: ValueFormat = ValueFormat.DECIMAL
    color: str | None = None
    item_colors: list[str] | None = None

    def to_option(self, mark_lines: list["MarkLine"] | None = None) -> dict:
        """Render as an ECharts series entry."""
        option: dict[str, Any] = {
            "name": self.label or self.name,
            "type": self.kind.value,
            "xAxisIndex": self.axis_index,
            "yAxisIndex": self.axis_index,
        }
        if self.kind is SeriesKind.CANDLESTICK:
            option["data"] = self.values
            option["itemStyle"] = {
                "color": UP_COLOR,
                "color0": DOWN_COLOR,
                "borderColor": UP_COLOR,
                "borderColor0": DOWN_COLOR,
            }
            if mark_lines:
                option["markLine"] = {
                    "symbol": ["none", "none"],
                    "silent": True,
                    "data": [line.to_option() for line in mark_lines],
                }
        elif self.kind is SeriesKind.LINE:
            option["data"] = self.values
            option["showSymbol"] = False
            option["lineStyle"] = {"width": 1}
            if self.color:
                option["lineStyle"]["color"] = self.color
                option["itemStyle"] = {"color": self.color}
        else:
            if self.item_colors:
                option["data"] = [
                    {"value": value, "itemStyle": {"color": color}}
                    for value, color in zip(self.values, self.item_colors)
                ]
            else:
                option["data"] = self.values
            if self.color:
                option["itemStyle"] = {"color": self.color}
        return option


class MarkLine(BaseModel):
    """Horizontal reference line at a recommended trade price."""

    model_config = ConfigDict(frozen=True)

    term: TradeTerm
    side: TradeSide
    price: float
    label: str
    color: str
    line_type: str

    def to_option(self) -> dict:
        return {
            "name": self.label,
            "yAxis": self.price,
            "lineStyle": {"color": self.color, "type": self.line_type, "width": 1},
            "label": {"formatter": self.label, "position": "insideEndTop", "color": self.color},
        }


class ChartSpec(BaseModel):
    """Everything needed to draw one chart.

    An empty ``panels`` list is the "no data" chart.
    """

    model_config = ConfigDict(frozen=True)

    dates: list[str] = Field(default_factory=list)
    bars: list[Bar] = Field(default_factory=list)
    selection: list[IndicatorKind] = Field(default_factory=list)
    panels: list[Panel] = Field(default_factory=list)
    series: list[SeriesSpec] = Field(default_factory=list)
    mark_lines: list[MarkLine] = Field(default_factory=list)
    date_index: dict[str, int] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.panels

    def panel(self, key: PanelKey) -> Panel | None:
        return next((p for p in self.panels if p.key is key), None)

    def series_on(self, key: PanelKey) -> list[SeriesSpec]:
        return [s for s in self.series if s.panel is key]

    def to_option(self) -> dict:
        """Build the ECharts option dict.

        Every x axis indexes the same bar sequence, so one axis pointer
        link and one pair of dataZoom controls span all of them.
        """
        if self.is_empty:
            return {
                "title": {"text": "No data", "left": "center", "top": "middle"},
                "series": [],
            }

        grid = []
        x_axes = []
        y_axes = []
        for panel in self.panels:
            is_main = panel.key is PanelKey.MAIN
            grid.append(
                {
                    "left": GRID_LEFT,
                    "right": GRID_RIGHT,
                    "top": f"{panel.top}%",
                    "height": f"{panel.height}%",
                    "containLabel": False,
                }
            )
            x_axes.append(
                {
                    "type": "category",
                    "gridIndex": panel.axis_index,
                    "data": self.dates,
                    "boundaryGap": True,
                    "axisLine": {"onZero": False},
                    "axisTick": {"show": panel.show_x_labels},
                    "axisLabel": {"show": panel.show_x_labels, "hideOverlap": True},
                    "splitLine": {"show": False},
                }
            )
            y_axes.append(
                {
                    "gridIndex": panel.axis_index,
                    "scale": True,
                    "splitNumber": 4 if is_main else 2,
                    "splitLine": {"show": is_main},
                    "axisLabel": {"hideOverlap": True},
                }
            )

        axis_indices = [panel.axis_index for panel in self.panels]
        series = [
            s.to_option(self.mark_lines if s.kind is SeriesKind.CANDLESTICK else None)
            for s in self.series
        ]
        legend = [s.label for s in self.series if s.label and s.kind is not SeriesKind.CANDLESTICK]

        return {
            "animation": False,
            "legend": {"top": 0, "data": legend},
            "tooltip": {"trigger": "axis", "axisPointer": {"type": "cross"}},
            "axisPointer": {"link": [{"xAxisIndex": "all"}]},
            "toolbox": {
                "feature": {
                    "dataZoom": {"yAxisIndex": "none"},
                    "restore": {},
                    "saveAsImage": {},
                }
            },
            "dataZoom": [
                {"type": "inside", "xAxisIndex": axis_indices, "start": 0, "end": 100},
                {"type": "slider", "xAxisIndex": axis_indices, "start": 0, "end": 100, "bottom": 10},
            ],
            "grid": grid,
            "xAxis": x_axes,
            "yAxis": y_axes,
            "series": series,
        }

    def to_json(self) -> bytes:
        """Serialize the ECharts option with orjson (None becomes null)."""
        return orjson.dumps(self.to_option())
