"""Latest-value indicator snapshot and its text summary.

The surrounding application feeds these summaries (one per period
granularity) into its AI recommendation prompts, so the layout is kept
stable: one bullet per indicator family.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from klinechart.formatting import format_volume
from klinechart.indicators import indicators as ind
from klinechart.indicators.indicators import BarArrays, Series
from klinechart.models.bar import Bar
from klinechart.models.config import IndicatorParams

RANGE_LOOKBACK = 30


def _last(series: Series) -> float | None:
    return series[-1] if series else None


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator values at the newest bar (None where undefined)."""

    date: str
    close: float
    change_pct: float
    volume: float
    ma: dict[int, float | None]
    rsi: float | None
    macd_dif: float | None
    macd_dea: float | None
    macd_hist: float | None
    k: float | None
    d: float | None
    j: float | None
    br: float | None
    ar: float | None
    plus_di: float | None
    minus_di: float | None
    adx: float | None
    cr: float | None
    psy: float | None
    psyma: float | None
    dma: float | None
    ama: float | None
    trix: float | None
    matrix: float | None
    range_low: float
    range_high: float


def build_snapshot(
    bars: Sequence[Bar],
    params: IndicatorParams | None = None,
) -> IndicatorSnapshot | None:
    """Compute every indicator and keep the newest value of each.

    Returns:
        Snapshot, or None for an empty bar sequence
    """
    if not bars:
        return None
    params = params or IndicatorParams()
    arrays = BarArrays.from_bars(bars)
    closes = arrays.closes

    latest = bars[-1]
    prev_close = bars[-2].close if len(bars) > 1 else latest.open
    change_pct = (latest.close - prev_close) / prev_close * 100 if prev_close else 0.0

    dif, dea, hist = ind.macd(closes, params.macd_fast, params.macd_slow, params.macd_signal)
    k, d, j = ind.kdj(
        arrays.highs, arrays.lows, closes,
        params.kdj_period, params.kdj_k_smoothing, params.kdj_d_smoothing,
    )
    br, ar = ind.brar(arrays.opens, arrays.highs, arrays.lows, closes, params.brar_period)
    pdi, mdi, adx = ind.dmi(arrays.highs, arrays.lows, closes, params.dmi_period)
    psy, psyma = ind.psy(closes, params.psy_period, params.psy_ma_period)
    dma, ama = ind.dma(closes, params.dma_short, params.dma_long, params.dma_avg)
    trix, matrix = ind.trix(closes, params.trix_period, params.trix_ma_period)

    recent = slice(-RANGE_LOOKBACK, None)
    return IndicatorSnapshot(
        date=latest.date,
        close=latest.close,
        change_pct=change_pct,
        volume=latest.volume,
        ma={p: _last(ind.ma(closes, p)) for p in params.ma_periods},
        rsi=_last(ind.rsi(closes, params.rsi_period)),
        macd_dif=_last(dif),
        macd_dea=_last(dea),
        macd_hist=_last(hist),
        k=_last(k),
        d=_last(d),
        j=_last(j),
        br=_last(br),
        ar=_last(ar),
        plus_di=_last(pdi),
        minus_di=_last(mdi),
        adx=_last(adx),
        cr=_last(ind.cr(arrays.highs, arrays.lows, closes, params.cr_period)),
        psy=_last(psy),
        psyma=_last(psyma),
        dma=_last(dma),
        ama=_last(ama),
        trix=_last(trix),
        matrix=_last(matrix),
        range_low=float(np.min(arrays.lows[recent])),
        range_high=float(np.max(arrays.highs[recent])),
    )


def _fmt(value: float | None, digits: int = 2) -> str:
    return "-" if value is None else f"{value:.{digits}f}"


def summarize_period(
    title: str,
    bars: Sequence[Bar],
    params: IndicatorParams | None = None,
    volume_units: str = "cn",
) -> str:
    """Render a markdown summary of the newest indicator values.

    Args:
        title: Section heading (e.g. "Daily K-line")
        bars: Bars of one period granularity
        params: Indicator periods
        volume_units: "cn" or "en" volume abbreviations

    Returns:
        Markdown block ending with a blank line
    """
    lines = [f"## {title}"]
    snap = build_snapshot(bars, params)
    if snap is None:
        lines.append("- No data")
        return "\n".join(lines) + "\n\n"

    ma_text = " / ".join(f"MA{p} {_fmt(v)}" for p, v in snap.ma.items())
    lines.extend(
        [
            f"- Close: {snap.close:.2f} ({snap.change_pct:.2f}% vs previous), "
            f"volume: {format_volume(snap.volume, volume_units)}",
            f"- Moving averages: {ma_text}",
            f"- RSI: {_fmt(snap.rsi)}",
            f"- MACD: DIF {_fmt(snap.macd_dif, 3)}, DEA {_fmt(snap.macd_dea, 3)}, "
            f"histogram {_fmt(snap.macd_hist, 3)}",
            f"- KDJ: K {_fmt(snap.k)}, D {_fmt(snap.d)}, J {_fmt(snap.j)}",
            f"- KD: K {_fmt(snap.k)} / D {_fmt(snap.d)}",
            f"- BRAR: BR {_fmt(snap.br)}, AR {_fmt(snap.ar)}",
            f"- DMI: +DI {_fmt(snap.plus_di)} / -DI {_fmt(snap.minus_di)}, ADX {_fmt(snap.adx)}",
            f"- CR: {_fmt(snap.cr)}",
            f"- PSY/PSYMA: {_fmt(snap.psy)} / {_fmt(snap.psyma)}",
            f"- DMA/AMA: {_fmt(snap.dma, 3)} / {_fmt(snap.ama, 3)}",
            f"- TRIX/MATRIX: {_fmt(snap.trix, 3)} / {_fmt(snap.matrix, 3)}",
            f"- {RANGE_LOOKBACK}-period range: {snap.range_low:.2f} ~ {snap.range_high:.2f}",
        ]
    )
    return "\n".join(lines) + "\n\n"
