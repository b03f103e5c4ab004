"""Technical indicators (pure math, no I/O)."""

from klinechart.indicators.indicators import (
    BarArrays,
    Series,
    brar,
    cr,
    dma,
    dmi,
    ema,
    kdj,
    ma,
    macd,
    psy,
    rsi,
    trix,
)
from klinechart.indicators.registry import (
    IndicatorDef,
    LineDef,
    compute_indicators,
    get_indicator,
    oscillator_kinds,
    register_indicator,
)
from klinechart.indicators.snapshot import IndicatorSnapshot, build_snapshot, summarize_period

__all__ = [
    "BarArrays",
    "Series",
    "ma",
    "ema",
    "rsi",
    "macd",
    "kdj",
    "brar",
    "dmi",
    "cr",
    "psy",
    "dma",
    "trix",
    "IndicatorDef",
    "LineDef",
    "compute_indicators",
    "get_indicator",
    "oscillator_kinds",
    "register_indicator",
    "IndicatorSnapshot",
    "build_snapshot",
    "summarize_period",
]
