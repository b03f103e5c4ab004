"""Cross-hair tooltip aggregation.

Collects every visible series value at the hovered bar into one text
block. The date -> index map is built once per ChartSpec, so each hover
is a dict lookup plus one pass over the series list.
"""

import logging
import numbers
from typing import Iterable

from klinechart.formatting import format_decimal, format_volume
from klinechart.models.chart import ChartSpec, SeriesKind, SeriesSpec, ValueFormat

logger = logging.getLogger(__name__)


class TooltipAggregator:
    """Formats the tooltip for one chart specification.

    Usage:
        tooltip = TooltipAggregator(spec)
        text = tooltip.format("2024-03-01")
    """

    def __init__(
        self,
        spec: ChartSpec,
        volume_units: str = "cn",
        separator: str = "\n",
    ):
        self.spec = spec
        self.volume_units = volume_units
        self.separator = separator
        self._series: list[SeriesSpec] = [
            s for s in spec.series if s.kind is not SeriesKind.CANDLESTICK
        ]

    def resolve_index(self, position: str | int) -> int | None:
        """Map a hovered date (or raw index) to a bar index."""
        if isinstance(position, numbers.Integral) and not isinstance(position, bool):
            index = int(position)
            return index if 0 <= index < len(self.spec.bars) else None
        return self.spec.date_index.get(str(position))

    def _format_value(self, series: SeriesSpec, value: float) -> str:
        if series.value_format is ValueFormat.VOLUME:
            return format_volume(value, self.volume_units)
        return format_decimal(value)

    def lines(
        self,
        position: str | int,
        visible: Iterable[str] | None = None,
    ) -> list[str] | None:
        """Tooltip rows for a position, or None when it matches no bar.

        Args:
            position: Hovered date string or bar index
            visible: Series names currently shown (None means all)
        """
        index = self.resolve_index(position)
        if index is None:
            logger.debug("Tooltip position %r matches no bar", position)
            return None

        bar = self.spec.bars[index]
        rows = [
            bar.date,
            f"Open: {bar.open:.2f}",
            f"High: {bar.high:.2f}",
            f"Low: {bar.low:.2f}",
            f"Close: {bar.close:.2f}",
        ]
        shown = set(visible) if visible is not None else None
        for series in self._series:
            if not series.label:
                continue
            if shown is not None and series.name not in shown and series.label not in shown:
                continue
            value = series.values[index] if index < len(series.values) else None
            if value is None:
                continue
            rows.append(f"{series.label}: {self._format_value(series, value)}")
        return rows

    def format(
        self,
        position: str | int,
        visible: Iterable[str] | None = None,
    ) -> str | None:
        rows = self.lines(position, visible)
        return None if rows is None else self.separator.join(rows)
