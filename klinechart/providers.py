"""Data provider protocols and the chart session view adapter.

Bar data and AI trade levels come from the surrounding application
(backend API, cache, mock data). Any object with the right methods can
be plugged in; the in-memory providers here serve tests and demos.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, Mapping, Protocol, Sequence, runtime_checkable

from klinechart.config import Settings, get_settings
from klinechart.errors import InvalidBarsError, ProviderError
from klinechart.models.bar import Bar, validate_bars
from klinechart.models.chart import ChartSpec
from klinechart.models.indicator import IndicatorKind
from klinechart.models.trade import TradeLevels
from klinechart.render.controller import RenderController

logger = logging.getLogger(__name__)

Period = Literal["daily", "week", "month"]
PERIODS: tuple[str, ...] = ("daily", "week", "month")


@runtime_checkable
class BarDataProvider(Protocol):
    """Source of chronological bars for a symbol."""

    def get_bars(self, symbol: str, period: Period, count: int) -> list[Bar]:
        """Return up to ``count`` newest bars, [] when there is no data.

        Raises:
            ProviderError: On genuine I/O failure only.
        """
        ...


@runtime_checkable
class TradeLevelProvider(Protocol):
    """Source of AI-recommended trade levels for a symbol."""

    def get_trade_levels(self, symbol: str) -> TradeLevels | Mapping[str, Any] | None:
        """Return the recommendation set, or None when there is none."""
        ...


class InMemoryBarProvider:
    """Bars keyed by (symbol, period)."""

    def __init__(self, data: Mapping[tuple[str, str], Sequence[Bar]] | None = None):
        self._data: dict[tuple[str, str], list[Bar]] = {
            key: list(bars) for key, bars in (data or {}).items()
        }

    def put(self, symbol: str, period: Period, bars: Sequence[Bar]) -> None:
        self._data[(symbol, period)] = list(bars)

    def get_bars(self, symbol: str, period: Period, count: int) -> list[Bar]:
        bars = self._data.get((symbol, period), [])
        return bars[-count:] if count > 0 else []


class InMemoryTradeLevelProvider:
    """Trade levels keyed by symbol."""

    def __init__(self, data: Mapping[str, TradeLevels | Mapping[str, Any]] | None = None):
        self._data = dict(data or {})

    def put(self, symbol: str, levels: TradeLevels | Mapping[str, Any] | None) -> None:
        self._data[symbol] = levels

    def get_trade_levels(self, symbol: str) -> TradeLevels | Mapping[str, Any] | None:
        return self._data.get(symbol)


class ChartSession:
    """Thin view adapter: providers in, render controller out.

    One session backs one chart widget. Loading a symbol fetches bars
    and trade levels and hands them to the controller; selection changes
    go straight to the controller.
    """

    def __init__(
        self,
        controller: RenderController,
        bar_provider: BarDataProvider,
        trade_provider: TradeLevelProvider | None = None,
        settings: Settings | None = None,
    ):
        self.controller = controller
        self.bar_provider = bar_provider
        self.trade_provider = trade_provider
        self.settings = settings or get_settings()
        self.symbol: str | None = None
        self.period: Period = "daily"

    def load(
        self,
        symbol: str,
        period: Period = "daily",
        selection: Iterable[str | IndicatorKind] | None = None,
        container: Any = None,
    ) -> ChartSpec | None:
        """Fetch data for a symbol and render it.

        Provider failures and unusable bar data degrade to the empty
        chart; they are logged, not raised.

        Raises:
            ValueError: If ``period`` is not daily, week or month.
        """
        if period not in PERIODS:
            raise ValueError(f"period must be one of {PERIODS}, got '{period}'")
        self.symbol = symbol
        self.period = period

        bars = self._fetch_bars(symbol, period)
        levels = self._fetch_trade_levels(symbol) if bars else None
        selection = self.controller.selection if selection is None else selection
        return self.controller.update(bars, selection, levels, container=container)

    def _fetch_bars(self, symbol: str, period: Period) -> list[Bar]:
        try:
            bars = list(self.bar_provider.get_bars(symbol, period, self.settings.max_bars))
        except ProviderError as e:
            logger.warning("Bar data unavailable for %s %s: %s", symbol, period, e)
            return []

        bars = bars[-self.settings.max_bars:]
        try:
            validate_bars(bars)
        except InvalidBarsError as e:
            logger.error("Discarding bars for %s %s: %s", symbol, period, e)
            return []
        if not bars:
            logger.info("No bar data for %s %s", symbol, period)
        return bars

    def _fetch_trade_levels(self, symbol: str) -> TradeLevels | Mapping[str, Any] | None:
        if self.trade_provider is None:
            return None
        try:
            return self.trade_provider.get_trade_levels(symbol)
        except ProviderError as e:
            logger.warning("Trade levels unavailable for %s: %s", symbol, e)
            return None

    def set_selection(self, selection: Iterable[str | IndicatorKind]) -> ChartSpec | None:
        return self.controller.set_selection(selection)

    def tooltip(self, position: str | int) -> str | None:
        return self.controller.tooltip(position)

    def close(self) -> None:
        """Container torn down."""
        self.controller.dispose()
