"""Chart sink lifecycle."""

from klinechart.render.controller import RenderController, RenderState, SinkFactory
from klinechart.render.sink import ChartSink, RecordingSink, ResizeCallback, TooltipFormatter

__all__ = [
    "RenderController",
    "RenderState",
    "SinkFactory",
    "ChartSink",
    "RecordingSink",
    "ResizeCallback",
    "TooltipFormatter",
]
