"""Library configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``KLINECHART_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KLINECHART_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Maximum bars kept per chart (newest first when trimming)
    max_bars: int = 240

    # Moving-average overlays on the price panel
    ma_periods: list[int] = [5, 10, 20]

    # Vertical band shared by all panels, in percent of the container
    layout_top: float = 8.0
    layout_bottom: float = 88.0
    layout_gap: float = 3.0

    # Tooltip volume abbreviations: "cn" (万/亿) or "en" (K/M/B)
    volume_units: Literal["cn", "en"] = "cn"

    # Optional YAML file overriding indicator periods
    indicator_config_path: str | None = None

    @model_validator(mode="after")
    def _validate(self):
        if self.max_bars < 1:
            raise ValueError(f"max_bars must be positive, got {self.max_bars}")
        if not 0 <= self.layout_top < self.layout_bottom <= 100:
            raise ValueError(
                f"layout band must satisfy 0 <= top < bottom <= 100, "
                f"got {self.layout_top}..{self.layout_bottom}"
            )
        if self.layout_gap < 0:
            raise ValueError(f"layout_gap must not be negative, got {self.layout_gap}")
        # main + volume + osc: two gaps must leave room for the panels
        band = self.layout_bottom - self.layout_top
        if band - 2 * self.layout_gap <= 0:
            raise ValueError(
                f"layout_gap {self.layout_gap}% leaves no room for three panels "
                f"in a {band}% band"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
