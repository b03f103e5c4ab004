"""Number formatting for tooltips and summaries."""

import math

# (threshold, divisor, suffix), largest first
_VOLUME_UNITS = {
    "cn": ((1e8, 1e8, "亿"), (1e4, 1e4, "万")),
    "en": ((1e9, 1e9, "B"), (1e6, 1e6, "M"), (1e3, 1e3, "K")),
}


def format_volume(volume: float | None, units: str = "cn") -> str:
    """Abbreviate a large volume figure.

    ``cn`` uses 亿 (1e8) and 万 (1e4); ``en`` uses B/M/K. Values below
    the smallest unit are shown as integers.
    """
    if volume is None or not math.isfinite(volume):
        return "-"
    try:
        steps = _VOLUME_UNITS[units]
    except KeyError:
        raise ValueError(f"Unknown volume units '{units}'") from None
    magnitude = abs(volume)
    for threshold, divisor, suffix in steps:
        if magnitude >= threshold:
            return f"{volume / divisor:.2f}{suffix}"
    return f"{volume:.0f}"


def format_decimal(value: float | None, digits: int = 2) -> str:
    if value is None or not math.isfinite(value):
        return "-"
    return f"{value:.{digits}f}"
