"""Panel layout planner.

Decides which panels exist for an indicator selection and stacks them in
a fixed vertical band:

    main    always; weight 2 when another panel exists, else 1
    volume  iff the volume indicator is selected; weight 1
    osc     iff any oscillator-class indicator is selected; weight 1

Heights are proportional to weight, with a fixed gap between
consecutive panels. Only the bottom panel shows x-axis labels.
"""

import logging
from typing import Iterable, Sequence

from klinechart.config import Settings, get_settings
from klinechart.indicators.registry import oscillator_kinds
from klinechart.models.bar import Bar
from klinechart.models.chart import Panel
from klinechart.models.indicator import IndicatorKind, PanelKey

logger = logging.getLogger(__name__)


def panel_keys(selection: Iterable[IndicatorKind]) -> list[PanelKey]:
    """Panels needed for a selection, top to bottom."""
    members = set(selection)
    keys = [PanelKey.MAIN]
    if IndicatorKind.VOLUME in members:
        keys.append(PanelKey.VOLUME)
    if members & oscillator_kinds():
        keys.append(PanelKey.OSC)
    return keys


def plan_panels(
    selection: Iterable[IndicatorKind],
    settings: Settings | None = None,
) -> list[Panel]:
    """Lay out the panels for a selection.

    Returns:
        Panels in top-to-bottom order; ``axis_index`` is the position
    """
    settings = settings or get_settings()
    keys = panel_keys(selection)
    weights = [1 if key is not PanelKey.MAIN else (2 if len(keys) > 1 else 1) for key in keys]

    band = settings.layout_bottom - settings.layout_top
    gap = settings.layout_gap if len(keys) > 1 else 0.0
    usable = band - gap * (len(keys) - 1)
    if usable <= 0:
        raise ValueError(
            f"layout band {band}% cannot fit {len(keys)} panels with {gap}% gaps"
        )
    total = sum(weights)

    panels = []
    top = settings.layout_top
    for index, (key, weight) in enumerate(zip(keys, weights)):
        height = usable * weight / total
        panels.append(
            Panel(
                key=key,
                weight=weight,
                axis_index=index,
                top=round(top, 2),
                height=round(height, 2),
                show_x_labels=index == len(keys) - 1,
            )
        )
        top += height + gap

    logger.debug("Planned panels: %s", [(p.key.value, p.weight) for p in panels])
    return panels


def plan_layout(
    bars: Sequence[Bar],
    selection: Iterable[IndicatorKind],
    settings: Settings | None = None,
) -> list[Panel]:
    """Like plan_panels, but an empty bar sequence means "no chart" ([])."""
    if not bars:
        return []
    return plan_panels(selection, settings)
