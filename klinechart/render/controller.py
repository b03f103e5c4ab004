"""Render controller: owns the chart sink and its lifecycle.

States:

    UNINITIALIZED --(non-empty bars + container)--> ACTIVE
    ACTIVE --(bars/selection/levels change)--> ACTIVE   (new option, same sink)
    ACTIVE --(empty bars | dispose() | sink failure | layout error)--> DISPOSED
    DISPOSED --(reset())--> UNINITIALIZED

The chart is recomputed only when an input actually changed; a resize
re-lays out the current option without recomputing anything. Sink
failures are logged and end in DISPOSED, never in an exception for the
caller and never with a half-initialized sink left behind. The sink
gets the controller's tooltip formatter at initialization, so hover
text always reflects the chart currently shown.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence

from klinechart.chart.composer import build_chart
from klinechart.chart.tooltip import TooltipAggregator
from klinechart.config import Settings, get_settings
from klinechart.indicator_config import load_indicator_params
from klinechart.models.bar import Bar
from klinechart.models.chart import ChartSpec
from klinechart.models.config import IndicatorParams
from klinechart.models.indicator import IndicatorKind, IndicatorSelection, parse_selection
from klinechart.models.trade import TradeLevels
from klinechart.render.sink import ChartSink

logger = logging.getLogger(__name__)

SinkFactory = Callable[[Any], ChartSink]


class RenderState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DISPOSED = "disposed"


class RenderController:
    """Drives one chart sink from bar data and an indicator selection.

    Usage:
        controller = RenderController(lambda container: MySink(container))
        controller.update(bars, {"ma", "volume"}, container=div)
        controller.set_selection({"ma", "macd"})
        text = controller.tooltip("2024-03-01")
        controller.dispose()
    """

    def __init__(
        self,
        sink_factory: SinkFactory,
        settings: Settings | None = None,
        params: IndicatorParams | None = None,
    ):
        self._sink_factory = sink_factory
        self.settings = settings or get_settings()
        self.params = params or load_indicator_params(settings=self.settings)

        self._state = RenderState.UNINITIALIZED
        self._sink: ChartSink | None = None
        self._container: Any = None
        self._resize_callback = self.on_resize

        self._bars: list[Bar] = []
        self._selection: IndicatorSelection = frozenset()
        self._trade_levels: TradeLevels | Mapping[str, Any] | None = None

        self._rendered_inputs: tuple | None = None
        self._spec: ChartSpec | None = None
        self._tooltip: TooltipAggregator | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def spec(self) -> ChartSpec | None:
        """Specification currently shown by the sink."""
        return self._spec

    @property
    def selection(self) -> IndicatorSelection:
        return self._selection

    # ------------------------------------------------------------------
    # Input changes
    # ------------------------------------------------------------------

    def update(
        self,
        bars: Sequence[Bar],
        selection: Iterable[str | IndicatorKind],
        trade_levels: TradeLevels | Mapping[str, Any] | None = None,
        container: Any = None,
    ) -> ChartSpec | None:
        """Replace every input at once and re-render if anything changed.

        Returns:
            The spec now shown, or None when nothing is rendered
        """
        self._bars = list(bars)
        self._selection = parse_selection(selection)
        self._trade_levels = trade_levels
        return self._refresh(container)

    def set_bars(self, bars: Sequence[Bar], container: Any = None) -> ChartSpec | None:
        self._bars = list(bars)
        return self._refresh(container)

    def set_selection(self, selection: Iterable[str | IndicatorKind]) -> ChartSpec | None:
        self._selection = parse_selection(selection)
        return self._refresh(None)

    def set_trade_levels(
        self, trade_levels: TradeLevels | Mapping[str, Any] | None
    ) -> ChartSpec | None:
        self._trade_levels = trade_levels
        return self._refresh(None)

    def _refresh(self, container: Any) -> ChartSpec | None:
        if container is not None:
            self._container = container

        if self._state is RenderState.DISPOSED:
            logger.debug("Controller disposed, ignoring update (call reset() to re-arm)")
            return None

        if not self._bars:
            if self._state is RenderState.ACTIVE:
                logger.info("Bar data became empty, disposing chart")
                self.dispose()
            return None

        inputs = (self._bars, self._selection, self._trade_levels)
        if self._state is RenderState.ACTIVE and inputs == self._rendered_inputs:
            return self._spec

        if self._state is RenderState.UNINITIALIZED and self._container is None:
            logger.debug("No container yet, chart not created")
            return None

        try:
            spec = build_chart(
                self._bars,
                self._selection,
                self._trade_levels,
                settings=self.settings,
                params=self.params,
            )
        except ValueError as e:
            logger.error("Cannot lay out chart: %s", e)
            self.dispose()
            return None

        if self._state is RenderState.UNINITIALIZED and not self._activate():
            return None

        try:
            self._sink.set_option(spec.to_option())
        except Exception as e:
            logger.error("Chart sink rejected the new option: %s", e)
            self.dispose()
            return None

        self._rendered_inputs = inputs
        self._spec = spec
        self._tooltip = TooltipAggregator(spec, volume_units=self.settings.volume_units)
        logger.debug(
            "Rendered %d bars, %d series, panels=%s",
            len(spec.bars),
            len(spec.series),
            [p.key.value for p in spec.panels],
        )
        return spec

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _activate(self) -> bool:
        sink = None
        try:
            sink = self._sink_factory(self._container)
            sink.init()
            sink.on_resize(self._resize_callback)
            # Hover text always comes from the current spec's aggregator
            sink.set_tooltip_formatter(self.tooltip)
        except Exception as e:
            logger.error("Failed to initialize chart sink: %s", e)
            if sink is not None:
                self._release(sink)
            self._state = RenderState.DISPOSED
            return False

        self._sink = sink
        self._state = RenderState.ACTIVE
        logger.info("Chart sink initialized")
        return True

    def _release(self, sink: ChartSink) -> None:
        try:
            sink.off_resize(self._resize_callback)
            sink.set_tooltip_formatter(None)
            sink.dispose()
        except Exception as e:
            logger.error("Error disposing chart sink: %s", e)

    def on_resize(self) -> None:
        """Container size changed: re-layout the same option."""
        if self._state is not RenderState.ACTIVE:
            return
        try:
            self._sink.resize()
        except Exception as e:
            logger.error("Chart sink failed to resize: %s", e)
            self.dispose()

    def dispose(self) -> None:
        """Release the sink; the controller stays DISPOSED until reset()."""
        if self._sink is not None:
            self._release(self._sink)
            logger.info("Chart sink disposed")
        self._sink = None
        self._spec = None
        self._tooltip = None
        self._rendered_inputs = None
        self._state = RenderState.DISPOSED

    def reset(self) -> None:
        """Re-arm a disposed controller for a fresh initialization."""
        if self._state is not RenderState.DISPOSED:
            logger.debug("reset() ignored in state %s", self._state.value)
            return
        self._container = None
        self._state = RenderState.UNINITIALIZED

    # ------------------------------------------------------------------
    # Hover
    # ------------------------------------------------------------------

    def tooltip(self, position: str | int, visible: Iterable[str] | None = None) -> str | None:
        """Tooltip text for a hovered date or index of the current chart."""
        if self._tooltip is None:
            return None
        return self._tooltip.format(position, visible)
