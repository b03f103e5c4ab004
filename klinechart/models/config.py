"""Indicator parameter models."""

from pydantic import BaseModel, Field, field_validator


class IndicatorParams(BaseModel):
    """Periods for every supported indicator.

    Defaults follow the conventional A-share charting settings.
    """

    ma_periods: list[int] = [5, 10, 20]

    rsi_period: int = Field(default=14, ge=1)

    macd_fast: int = Field(default=12, ge=1)
    macd_slow: int = Field(default=26, ge=1)
    macd_signal: int = Field(default=9, ge=1)

    kdj_period: int = Field(default=9, ge=1)
    kdj_k_smoothing: int = Field(default=3, ge=1)
    kdj_d_smoothing: int = Field(default=3, ge=1)

    brar_period: int = Field(default=26, ge=1)
    dmi_period: int = Field(default=14, ge=1)
    cr_period: int = Field(default=26, ge=1)

    psy_period: int = Field(default=12, ge=1)
    psy_ma_period: int = Field(default=6, ge=1)

    dma_short: int = Field(default=10, ge=1)
    dma_long: int = Field(default=50, ge=1)
    dma_avg: int = Field(default=10, ge=1)

    trix_period: int = Field(default=12, ge=1)
    trix_ma_period: int = Field(default=9, ge=1)

    @field_validator("ma_periods")
    @classmethod
    def _positive_unique(cls, periods: list[int]) -> list[int]:
        if not periods:
            raise ValueError("ma_periods must not be empty")
        if any(p < 1 for p in periods):
            raise ValueError(f"ma_periods must be positive, got {periods}")
        return sorted(set(periods))
