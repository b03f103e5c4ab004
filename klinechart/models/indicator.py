"""Indicator vocabulary and chart panel keys."""

from enum import Enum
from typing import Iterable

from klinechart.errors import UnknownIndicatorError


class PanelKey(str, Enum):
    """Chart panels, top to bottom."""

    MAIN = "main"
    VOLUME = "volume"
    OSC = "osc"


class IndicatorKind(str, Enum):
    """Closed set of selectable indicators.

    Declaration order is the canonical draw order.
    """

    MA = "ma"
    VOLUME = "volume"
    RSI = "rsi"
    MACD = "macd"
    KDJ = "kdj"
    KD = "kd"
    BRAR = "brar"
    DMI = "dmi"
    CR = "cr"
    PSY = "psy"
    DMA = "dma"
    TRIX = "trix"


IndicatorSelection = frozenset[IndicatorKind]


def parse_selection(keys: Iterable[str | IndicatorKind]) -> IndicatorSelection:
    """Turn caller-supplied keys into an IndicatorSelection.

    Keys are matched case-insensitively; duplicates collapse.

    Raises:
        UnknownIndicatorError: If a key is not a known indicator.
    """
    selection = set()
    for key in keys:
        if isinstance(key, IndicatorKind):
            selection.add(key)
            continue
        try:
            selection.add(IndicatorKind(str(key).strip().lower()))
        except ValueError:
            raise UnknownIndicatorError(
                str(key), [k.value for k in IndicatorKind]
            ) from None
    return frozenset(selection)


def ordered(selection: Iterable[IndicatorKind]) -> list[IndicatorKind]:
    """Selection members in canonical draw order."""
    members = set(selection)
    return [kind for kind in IndicatorKind if kind in members]
