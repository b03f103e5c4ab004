"""K-line (candlestick) bar model."""

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from klinechart.errors import InvalidBarsError


class Bar(BaseModel):
    """One period's open/high/low/close/volume."""

    model_config = ConfigDict(frozen=True)

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (up) candle."""
        return self.close >= self.open

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the candle."""
        return self.high - self.low


def validate_bars(bars: Sequence[Bar]) -> None:
    """Ensure bar dates are strictly ascending.

    Dates are compared as strings, which holds for ISO ``YYYY-MM-DD``
    and the compact ``YYYYMMDD`` form the providers emit.

    Raises:
        InvalidBarsError: On a duplicate or out-of-order date.
    """
    for prev, cur in zip(bars, bars[1:]):
        if cur.date <= prev.date:
            raise InvalidBarsError(
                f"Bars must be strictly chronological: {cur.date!r} follows {prev.date!r}"
            )
