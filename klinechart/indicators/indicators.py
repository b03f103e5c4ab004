"""Technical indicators for K-line charts (pure math, no I/O).

Every function takes plain sequences (``None`` allowed where noted) and
returns lists index-aligned with the input. Values are computed in NumPy
float64 arrays with NaN as the "missing" marker and converted on the way
out, so callers only ever see ``float`` or ``None``: warm-up indices and
degenerate math (zero range, zero denominator) are ``None``, never NaN or
infinity.

Rolling-window indicators are O(n * period), linear in the input length
for a fixed period.
"""

from collections import deque
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from klinechart.models.bar import Bar

Series = list[float | None]


@dataclass
class BarArrays:
    """OHLCV columns of a bar sequence."""

    dates: list[str]
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    @classmethod
    def from_bars(cls, bars: Sequence[Bar]) -> "BarArrays":
        return cls(
            dates=[b.date for b in bars],
            opens=np.array([b.open for b in bars], dtype=np.float64),
            highs=np.array([b.high for b in bars], dtype=np.float64),
            lows=np.array([b.low for b in bars], dtype=np.float64),
            closes=np.array([b.close for b in bars], dtype=np.float64),
            volumes=np.array([b.volume for b in bars], dtype=np.float64),
        )

    def __len__(self) -> int:
        return len(self.closes)


# =============================================================================
# Conversion helpers
# =============================================================================

def _to_array(values: Sequence[float | None] | np.ndarray) -> np.ndarray:
    """Sequence with optional None entries -> float64 array with NaN."""
    if isinstance(values, np.ndarray):
        return values.astype(np.float64, copy=False)
    return np.array(
        [np.nan if v is None else float(v) for v in values], dtype=np.float64
    )


def to_series(arr: np.ndarray) -> Series:
    """float64 array -> list where every non-finite value is None."""
    finite = np.isfinite(arr)
    return [float(v) if ok else None for v, ok in zip(arr.tolist(), finite.tolist())]


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def _rolling_sum(arr: np.ndarray, period: int) -> np.ndarray:
    """Trailing window sums; NaN until the first full window.

    NaN inputs are not allowed here. Each window is added oldest to
    newest, so ``result[i] == sum(arr[i-period+1:i+1])`` bit for bit and a
    window of zeros is exactly 0.0. O(n * period).
    """
    n = len(arr)
    result = np.full(n, np.nan)
    if n < period:
        return result

    count = n - period + 1
    total = arr[:count].astype(np.float64, copy=True)
    for offset in range(1, period):
        total += arr[offset:offset + count]
    result[period - 1:] = total
    return result


def _safe_ratio(numerator: np.ndarray, denominator: np.ndarray, scale: float = 100.0) -> np.ndarray:
    """numerator / denominator * scale, NaN where the denominator is zero."""
    result = np.full(len(numerator), np.nan)
    valid = np.isfinite(numerator) & np.isfinite(denominator) & (denominator != 0)
    result[valid] = numerator[valid] / denominator[valid] * scale
    return result


def _prev_close(closes: np.ndarray) -> np.ndarray:
    """Previous bar's close; the first bar uses its own close."""
    if len(closes) == 0:
        return closes.copy()
    return np.concatenate((closes[:1], closes[:-1]))


# =============================================================================
# Moving averages
# =============================================================================

def _ma_array(arr: np.ndarray, period: int) -> np.ndarray:
    missing = np.isnan(arr)
    sums = _rolling_sum(np.where(missing, 0.0, arr), period)
    gaps = _rolling_sum(missing.astype(np.float64), period)
    result = sums / period
    result[gaps != 0] = np.nan
    return result


def ma(values: Sequence[float | None], period: int) -> Series:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of values (None allowed)
        period: Window length

    Returns:
        List with the mean of values[i-period+1..i]; None for the first
        period-1 entries and for any window containing a None
    """
    _check_period(period)
    return to_series(_ma_array(_to_array(values), period))


def _ema_array(arr: np.ndarray, period: int) -> np.ndarray:
    k = 2.0 / (period + 1)
    result = np.full(len(arr), np.nan)
    prev = np.nan
    for i, value in enumerate(arr):
        if np.isnan(value):
            pass  # carry the previous EMA forward (stays NaN until seeded)
        elif np.isnan(prev):
            prev = value
        else:
            prev = value * k + prev * (1 - k)
        result[i] = prev
    return result


def ema(values: Sequence[float | None], period: int) -> Series:
    """
    Calculate Exponential Moving Average.

    Smoothing factor k = 2/(period+1). The first non-None input seeds the
    average; a None after that carries the previous EMA forward.

    Args:
        values: Sequence of values (None allowed)
        period: EMA period

    Returns:
        List of EMA values, None only before the first defined input
    """
    _check_period(period)
    return to_series(_ema_array(_to_array(values), period))


# =============================================================================
# Momentum
# =============================================================================

def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def rsi(closes: Sequence[float], period: int = 14) -> Series:
    """
    Calculate Relative Strength Index with Wilder smoothing.

    The first RSI sits at index ``period`` and uses the plain average of
    the first ``period`` changes; later values use
    ``avg = (avg * (period - 1) + x) / period``.

    Returns:
        List of RSI values in [0, 100] with exactly ``period`` leading Nones
        (all None when there are not more than ``period`` closes)
    """
    _check_period(period)
    arr = _to_array(closes)
    n = len(arr)
    result = np.full(n, np.nan)
    if n <= period:
        return to_series(result)

    deltas = np.diff(arr)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return to_series(result)


def macd(
    closes: Sequence[float | None],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[Series, Series, Series]:
    """
    MACD (Moving Average Convergence Divergence).

    dif = EMA(fast) - EMA(slow); dea = EMA(dif, signal); macd = (dif - dea) * 2.
    An index where either EMA is undefined yields None.

    Returns: (dif, dea, macd)
    """
    for period in (fast_period, slow_period, signal_period):
        _check_period(period)
    arr = _to_array(closes)
    dif = _ema_array(arr, fast_period) - _ema_array(arr, slow_period)
    dea = _ema_array(dif, signal_period)
    # dea carries forward over a missing dif; the histogram must not
    hist = np.where(np.isnan(dif), np.nan, (dif - dea) * 2)
    return to_series(dif), to_series(dea), to_series(hist)


class _WindowExtreme:
    """Sliding max (or min) over the last ``period`` indices."""

    def __init__(self, period: int, largest: bool):
        self.period = period
        self.largest = largest
        self._idx: deque[int] = deque()
        self._values: list[float] = []

    def push(self, value: float) -> float:
        i = len(self._values)
        self._values.append(value)
        dominated = (lambda old: old <= value) if self.largest else (lambda old: old >= value)
        while self._idx and dominated(self._values[self._idx[-1]]):
            self._idx.pop()
        self._idx.append(i)
        if self._idx[0] <= i - self.period:
            self._idx.popleft()
        return self._values[self._idx[0]]


def kdj(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 9,
    k_smoothing: int = 3,
    d_smoothing: int = 3,
) -> tuple[Series, Series, Series]:
    """
    KDJ stochastic oscillator.

    RSV uses the trailing ``period`` bars (fewer at the start of the
    series) and falls back to 50 when the high-low range is zero.
    K and D start from 50 before the first bar and are smoothed
    recursively, so every index has a value:

        K = ((k_smoothing - 1) * prevK + RSV) / k_smoothing
        D = ((d_smoothing - 1) * prevD + K) / d_smoothing
        J = 3K - 2D

    Returns: (k, d, j)
    """
    for p in (period, k_smoothing, d_smoothing):
        _check_period(p)
    high_arr = _to_array(highs)
    low_arr = _to_array(lows)
    close_arr = _to_array(closes)
    n = len(close_arr)

    k_out = np.full(n, np.nan)
    d_out = np.full(n, np.nan)
    j_out = np.full(n, np.nan)

    highest = _WindowExtreme(period, largest=True)
    lowest = _WindowExtreme(period, largest=False)
    k = 50.0
    d = 50.0
    for i in range(n):
        hh = highest.push(high_arr[i])
        ll = lowest.push(low_arr[i])
        span = hh - ll
        rsv = 50.0
        if span != 0 and np.isfinite(span):
            rsv = (close_arr[i] - ll) / span * 100
        k = ((k_smoothing - 1) * k + rsv) / k_smoothing
        d = ((d_smoothing - 1) * d + k) / d_smoothing
        k_out[i] = k
        d_out[i] = d
        j_out[i] = 3 * k - 2 * d

    return to_series(k_out), to_series(d_out), to_series(j_out)


# =============================================================================
# Sentiment / trend
# =============================================================================

def brar(
    opens: Sequence[float],
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 26,
) -> tuple[Series, Series]:
    """
    BRAR sentiment indicator.

    BR = sum(max(H - prevC, 0)) / sum(max(prevC - L, 0)) * 100
    AR = sum(H - O) / sum(O - L) * 100

    Sums run over the trailing ``period`` bars; the first bar's prevC is
    its own close.

    Returns: (br, ar)
    """
    _check_period(period)
    o, h, lo, c = (_to_array(x) for x in (opens, highs, lows, closes))
    prev = _prev_close(c)

    br = _safe_ratio(
        _rolling_sum(np.maximum(h - prev, 0.0), period),
        _rolling_sum(np.maximum(prev - lo, 0.0), period),
    )
    ar = _safe_ratio(_rolling_sum(h - o, period), _rolling_sum(o - lo, period))
    return to_series(br), to_series(ar)


def dmi(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> tuple[Series, Series, Series]:
    """
    Directional Movement Index (simplified rolling-sum form).

    TR, +DM and -DM come from adjacent bar pairs and are summed over the
    last ``period`` pairs (no Wilder smoothing):

        +DI = sum(+DM) / sum(TR) * 100
        -DI = sum(-DM) / sum(TR) * 100
        DX  = |+DI - -DI| / (+DI + -DI) * 100

    ADX is the mean of the last ``period`` DX samples and is defined only
    once that many samples exist.

    Returns: (plus_di, minus_di, adx)
    """
    _check_period(period)
    h, lo, c = (_to_array(x) for x in (highs, lows, closes))
    n = len(c)
    plus_di = np.full(n, np.nan)
    minus_di = np.full(n, np.nan)
    adx = np.full(n, np.nan)
    if n < 2:
        return to_series(plus_di), to_series(minus_di), to_series(adx)

    up_move = h[1:] - h[:-1]
    down_move = lo[:-1] - lo[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    tr = np.maximum(
        h[1:] - lo[1:],
        np.maximum(np.abs(h[1:] - c[:-1]), np.abs(lo[1:] - c[:-1])),
    )

    # pair j covers bars (j, j+1) and lands on bar index j+1
    plus_di[1:] = _safe_ratio(_rolling_sum(plus_dm, period), _rolling_sum(tr, period))
    minus_di[1:] = _safe_ratio(_rolling_sum(minus_dm, period), _rolling_sum(tr, period))

    samples: deque[float] = deque(maxlen=period)
    total = 0.0
    for i in range(1, n):
        pdi, mdi = plus_di[i], minus_di[i]
        if np.isnan(pdi) or pdi + mdi == 0:
            continue
        dx = abs(pdi - mdi) / (pdi + mdi) * 100
        if len(samples) == period:
            total -= samples[0]
        samples.append(dx)
        total += dx
        if len(samples) == period:
            adx[i] = total / period

    return to_series(plus_di), to_series(minus_di), to_series(adx)


def cr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 26,
) -> Series:
    """
    CR energy indicator.

    mid = previous bar's (H + L + C) / 3
    CR  = sum(max(H - mid, 0)) / sum(max(mid - L, 0)) * 100

    Defined from index ``period`` on, once every bar in the window has a
    real predecessor.
    """
    _check_period(period)
    h, lo, c = (_to_array(x) for x in (highs, lows, closes))
    n = len(c)
    typical = (h + lo + c) / 3
    mid = np.concatenate((typical[:1], typical[:-1])) if n else typical

    result = _safe_ratio(
        _rolling_sum(np.maximum(h - mid, 0.0), period),
        _rolling_sum(np.maximum(mid - lo, 0.0), period),
    )
    result[:period] = np.nan
    return to_series(result)


def psy(
    closes: Sequence[float],
    period: int = 12,
    ma_period: int = 6,
) -> tuple[Series, Series]:
    """
    Psychological line.

    PSY is the share of up-closes among the trailing ``period`` bars,
    scaled to 0-100 and defined from index ``period`` on. PSYMA is the
    ``ma_period`` simple average of PSY.

    Returns: (psy, psyma)
    """
    _check_period(period)
    _check_period(ma_period)
    c = _to_array(closes)
    n = len(c)
    up = np.zeros(n)
    if n > 1:
        up[1:] = (c[1:] > c[:-1]).astype(np.float64)

    psy_arr = _rolling_sum(up, period) / period * 100
    psy_arr[:period] = np.nan
    return to_series(psy_arr), to_series(_ma_array(psy_arr, ma_period))


def dma(
    closes: Sequence[float],
    short_period: int = 10,
    long_period: int = 50,
    avg_period: int = 10,
) -> tuple[Series, Series]:
    """
    Different of Moving Average.

    dma = MA(short) - MA(long); ama = MA(dma, avg_period).

    Returns: (dma, ama)
    """
    for p in (short_period, long_period, avg_period):
        _check_period(p)
    c = _to_array(closes)
    diff = _ma_array(c, short_period) - _ma_array(c, long_period)
    return to_series(diff), to_series(_ma_array(diff, avg_period))


def trix(
    closes: Sequence[float],
    period: int = 12,
    ma_period: int = 9,
) -> tuple[Series, Series]:
    """
    Triple exponential average rate of change.

    ema3 = EMA(EMA(EMA(close)))
    trix[i] = (ema3[i] - ema3[i-1]) / ema3[i-1] * 100
    matrix = MA(trix, ma_period)

    Returns: (trix, matrix)
    """
    _check_period(period)
    _check_period(ma_period)
    c = _to_array(closes)
    ema3 = _ema_array(_ema_array(_ema_array(c, period), period), period)
    n = len(ema3)
    trix_arr = np.full(n, np.nan)
    if n > 1:
        trix_arr[1:] = _safe_ratio(ema3[1:] - ema3[:-1], ema3[:-1])
    return to_series(trix_arr), to_series(_ma_array(trix_arr, ma_period))
