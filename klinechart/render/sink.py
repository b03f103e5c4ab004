"""Rendering sink protocol.

Any chart library binding (ECharts in a web view, a notebook widget, a
headless recorder) can implement this protocol to be driven by the
RenderController. The controller never reaches past these calls.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

ResizeCallback = Callable[[], None]

# hovered date or bar index -> tooltip text (None: nothing to show)
TooltipFormatter = Callable[[Any], str | None]


@runtime_checkable
class ChartSink(Protocol):
    """Imperative lifecycle of a chart instance bound to a container."""

    def init(self) -> None:
        """Create the chart instance inside its container."""
        ...

    def set_option(self, option: dict[str, Any]) -> None:
        """Replace the whole chart specification."""
        ...

    def resize(self) -> None:
        """Re-layout the current specification for a new container size."""
        ...

    def dispose(self) -> None:
        """Release the chart instance."""
        ...

    def on_resize(self, callback: ResizeCallback) -> None:
        """Register a container-resize listener."""
        ...

    def off_resize(self, callback: ResizeCallback) -> None:
        """Remove a container-resize listener."""
        ...

    def set_tooltip_formatter(self, formatter: TooltipFormatter | None) -> None:
        """Install (or with None, remove) the hover tooltip callback.

        The formatter is bound in-process; it never travels in the option.
        """
        ...


class RecordingSink:
    """In-memory sink that records every lifecycle call.

    Used headless and in tests; ``container`` is whatever the caller
    passed to the controller.
    """

    def __init__(self, container: Any = None):
        self.container = container
        self.calls: list[str] = []
        self.options: list[dict[str, Any]] = []
        self.listeners: list[ResizeCallback] = []
        self.tooltip_formatter: TooltipFormatter | None = None
        self.initialized = False
        self.disposed = False

    @property
    def option(self) -> dict[str, Any] | None:
        """Most recently applied option."""
        return self.options[-1] if self.options else None

    def init(self) -> None:
        self.calls.append("init")
        self.initialized = True

    def set_option(self, option: dict[str, Any]) -> None:
        self.calls.append("set_option")
        self.options.append(option)

    def resize(self) -> None:
        self.calls.append("resize")

    def dispose(self) -> None:
        self.calls.append("dispose")
        self.disposed = True

    def on_resize(self, callback: ResizeCallback) -> None:
        self.listeners.append(callback)

    def off_resize(self, callback: ResizeCallback) -> None:
        if callback in self.listeners:
            self.listeners.remove(callback)

    def set_tooltip_formatter(self, formatter: TooltipFormatter | None) -> None:
        self.tooltip_formatter = formatter

    def fire_resize(self) -> None:
        """Simulate a container resize."""
        for callback in list(self.listeners):
            callback()

    def hover(self, position: Any) -> str | None:
        """Simulate the cross-hair resting on a date or bar index."""
        if self.tooltip_formatter is None:
            return None
        return self.tooltip_formatter(position)
