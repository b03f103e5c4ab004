"""Indicator definitions keyed by IndicatorKind.

Each kind carries the panel it draws on, the lines it produces and the
function computing them. Builders look everything up here instead of
branching on indicator names.

Usage:
    @register_indicator(IndicatorKind.RSI, PanelKey.OSC, lines=(...))
    def _rsi(bars, params):
        ...

    definition = get_indicator(IndicatorKind.RSI)
    values = compute_indicators(bars, selection, params)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from klinechart.indicators import indicators as ind
from klinechart.indicators.indicators import BarArrays, Series
from klinechart.models.bar import Bar
from klinechart.models.chart import SeriesKind, ValueFormat
from klinechart.models.config import IndicatorParams
from klinechart.models.indicator import IndicatorKind, PanelKey, ordered

logger = logging.getLogger(__name__)

ComputeFn = Callable[[BarArrays, IndicatorParams], dict[str, Series]]
LinesFn = Callable[[IndicatorParams], tuple["LineDef", ...]]

MA_COLORS = ("#f5a623", "#4a90e2", "#bd10e0", "#50e3c2", "#7ed321", "#9b9b9b")


@dataclass(frozen=True)
class LineDef:
    """One output line of an indicator."""

    key: str
    label: str
    kind: SeriesKind = SeriesKind.LINE
    color: str | None = None
    value_format: ValueFormat = ValueFormat.DECIMAL


@dataclass(frozen=True)
class IndicatorDef:
    """Registry entry for an indicator kind."""

    kind: IndicatorKind
    panel: PanelKey
    compute: ComputeFn
    line_defs: LinesFn

    @property
    def is_oscillator(self) -> bool:
        return self.panel is PanelKey.OSC

    def lines(self, params: IndicatorParams) -> tuple[LineDef, ...]:
        return self.line_defs(params)


# Global registry: kind -> definition
_REGISTRY: dict[IndicatorKind, IndicatorDef] = {}


def register_indicator(
    kind: IndicatorKind,
    panel: PanelKey,
    lines: Sequence[LineDef] | LinesFn,
):
    """Decorator registering a compute function for an indicator kind.

    Args:
        kind: Indicator being defined.
        panel: Panel the indicator draws on.
        lines: Output lines, or a function of the params returning them.

    Raises:
        ValueError: If the kind is already registered.
    """
    line_defs = lines if callable(lines) else (lambda _params, fixed=tuple(lines): fixed)

    def decorator(fn: ComputeFn) -> ComputeFn:
        if kind in _REGISTRY:
            raise ValueError(f"Indicator '{kind.value}' is already registered")
        _REGISTRY[kind] = IndicatorDef(kind=kind, panel=panel, compute=fn, line_defs=line_defs)
        logger.debug("Registered indicator: %s -> %s panel", kind.value, panel.value)
        return fn

    return decorator


def get_indicator(kind: IndicatorKind) -> IndicatorDef:
    return _REGISTRY[kind]


def oscillator_kinds() -> frozenset[IndicatorKind]:
    """Kinds drawn on the oscillator panel."""
    return frozenset(k for k, d in _REGISTRY.items() if d.is_oscillator)


def compute_indicators(
    bars: Sequence[Bar] | BarArrays,
    selection: Iterable[IndicatorKind],
    params: IndicatorParams | None = None,
) -> dict[IndicatorKind, dict[str, Series]]:
    """Compute every selected indicator.

    Returns:
        Mapping kind -> {line key -> series}, in canonical kind order
    """
    params = params or IndicatorParams()
    arrays = bars if isinstance(bars, BarArrays) else BarArrays.from_bars(bars)
    return {kind: _REGISTRY[kind].compute(arrays, params) for kind in ordered(selection)}


# =============================================================================
# Definitions
# =============================================================================

def _ma_lines(params: IndicatorParams) -> tuple[LineDef, ...]:
    return tuple(
        LineDef(f"ma{p}", f"MA{p}", color=MA_COLORS[i % len(MA_COLORS)])
        for i, p in enumerate(params.ma_periods)
    )


@register_indicator(IndicatorKind.MA, PanelKey.MAIN, lines=_ma_lines)
def _ma(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    return {f"ma{p}": ind.ma(bars.closes, p) for p in params.ma_periods}


@register_indicator(
    IndicatorKind.VOLUME,
    PanelKey.VOLUME,
    lines=(LineDef("volume", "Volume", SeriesKind.BAR, value_format=ValueFormat.VOLUME),),
)
def _volume(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    return {"volume": ind.to_series(bars.volumes)}


@register_indicator(
    IndicatorKind.RSI,
    PanelKey.OSC,
    lines=lambda p: (LineDef("rsi", f"RSI{p.rsi_period}", color="#8e44ad"),),
)
def _rsi(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    return {"rsi": ind.rsi(bars.closes, params.rsi_period)}


@register_indicator(
    IndicatorKind.MACD,
    PanelKey.OSC,
    lines=(
        LineDef("dif", "DIF", color="#f5a623"),
        LineDef("dea", "DEA", color="#4a90e2"),
        LineDef("macd", "MACD", SeriesKind.BAR),
    ),
)
def _macd(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    dif, dea, hist = ind.macd(
        bars.closes, params.macd_fast, params.macd_slow, params.macd_signal
    )
    return {"dif": dif, "dea": dea, "macd": hist}


@register_indicator(
    IndicatorKind.KDJ,
    PanelKey.OSC,
    lines=(
        LineDef("k", "K", color="#f5a623"),
        LineDef("d", "D", color="#4a90e2"),
        LineDef("j", "J", color="#bd10e0"),
    ),
)
def _kdj(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    k, d, j = ind.kdj(
        bars.highs, bars.lows, bars.closes,
        params.kdj_period, params.kdj_k_smoothing, params.kdj_d_smoothing,
    )
    return {"k": k, "d": d, "j": j}


@register_indicator(
    IndicatorKind.KD,
    PanelKey.OSC,
    lines=(
        LineDef("kd_k", "KD-K", color="#e67e22"),
        LineDef("kd_d", "KD-D", color="#2980b9"),
    ),
)
def _kd(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    k, d, _ = ind.kdj(
        bars.highs, bars.lows, bars.closes,
        params.kdj_period, params.kdj_k_smoothing, params.kdj_d_smoothing,
    )
    return {"kd_k": k, "kd_d": d}


@register_indicator(
    IndicatorKind.BRAR,
    PanelKey.OSC,
    lines=(LineDef("br", "BR", color="#f5a623"), LineDef("ar", "AR", color="#4a90e2")),
)
def _brar(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    br, ar = ind.brar(bars.opens, bars.highs, bars.lows, bars.closes, params.brar_period)
    return {"br": br, "ar": ar}


@register_indicator(
    IndicatorKind.DMI,
    PanelKey.OSC,
    lines=(
        LineDef("pdi", "+DI", color="#ef232a"),
        LineDef("mdi", "-DI", color="#14b143"),
        LineDef("adx", "ADX", color="#4a90e2"),
    ),
)
def _dmi(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    pdi, mdi, adx = ind.dmi(bars.highs, bars.lows, bars.closes, params.dmi_period)
    return {"pdi": pdi, "mdi": mdi, "adx": adx}


@register_indicator(IndicatorKind.CR, PanelKey.OSC, lines=(LineDef("cr", "CR", color="#16a085"),))
def _cr(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    return {"cr": ind.cr(bars.highs, bars.lows, bars.closes, params.cr_period)}


@register_indicator(
    IndicatorKind.PSY,
    PanelKey.OSC,
    lines=(LineDef("psy", "PSY", color="#f5a623"), LineDef("psyma", "PSYMA", color="#4a90e2")),
)
def _psy(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    value, avg = ind.psy(bars.closes, params.psy_period, params.psy_ma_period)
    return {"psy": value, "psyma": avg}


@register_indicator(
    IndicatorKind.DMA,
    PanelKey.OSC,
    lines=(LineDef("dma", "DMA", color="#f5a623"), LineDef("ama", "AMA", color="#4a90e2")),
)
def _dma(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    diff, avg = ind.dma(bars.closes, params.dma_short, params.dma_long, params.dma_avg)
    return {"dma": diff, "ama": avg}


@register_indicator(
    IndicatorKind.TRIX,
    PanelKey.OSC,
    lines=(LineDef("trix", "TRIX", color="#f5a623"), LineDef("matrix", "MATRIX", color="#4a90e2")),
)
def _trix(bars: BarArrays, params: IndicatorParams) -> dict[str, Series]:
    value, avg = ind.trix(bars.closes, params.trix_period, params.trix_ma_period)
    return {"trix": value, "matrix": avg}


_missing = [k.value for k in IndicatorKind if k not in _REGISTRY]
if _missing:
    raise RuntimeError(f"Indicators without a definition: {', '.join(_missing)}")
