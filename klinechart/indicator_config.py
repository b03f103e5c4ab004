"""Indicator periods loaded from an optional YAML file.

Example ``indicators.yaml``::

    ma_periods: [5, 10, 20, 60]
    rsi_period: 6
    kdj_period: 9

Keys left out keep their defaults. No file means all defaults.
"""

import logging
from pathlib import Path

import yaml

from klinechart.config import Settings, get_settings
from klinechart.models.config import IndicatorParams

logger = logging.getLogger(__name__)


def load_indicator_params(
    path: Path | str | None = None,
    settings: Settings | None = None,
) -> IndicatorParams:
    """Load indicator periods.

    Resolution order: explicit ``path``, then ``settings.indicator_config_path``.
    ``settings.ma_periods`` applies unless the file sets ``ma_periods`` itself.

    Raises:
        pydantic.ValidationError: If the file holds invalid periods.
        ValueError: If the file is not a YAML mapping.
    """
    settings = settings or get_settings()
    config_path = Path(path) if path else (
        Path(settings.indicator_config_path) if settings.indicator_config_path else None
    )

    raw: dict = {}
    if config_path is None:
        pass
    elif not config_path.exists():
        logger.info("No indicator config found at %s, using defaults", config_path)
    else:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(loaded).__name__}")
        raw = loaded

    raw.setdefault("ma_periods", list(settings.ma_periods))
    params = IndicatorParams(**raw)
    logger.debug(
        "Indicator params: ma=%s rsi=%d macd=%d/%d/%d kdj=%d",
        params.ma_periods,
        params.rsi_period,
        params.macd_fast,
        params.macd_slow,
        params.macd_signal,
        params.kdj_period,
    )
    return params
