"""Exceptions raised at the package boundaries.

Sparse or degenerate data never raises; it degrades to ``None`` values or
an empty chart. These are reserved for caller mistakes and provider I/O.
"""


class KlineChartError(Exception):
    """Base exception for klinechart errors."""


class UnknownIndicatorError(KlineChartError, ValueError):
    """Indicator key outside the supported vocabulary."""

    def __init__(self, key: str, available: list[str]):
        self.key = key
        self.available = available
        super().__init__(
            f"Unknown indicator '{key}'. Available: {', '.join(available)}"
        )


class InvalidBarsError(KlineChartError, ValueError):
    """Bar sequence is not strictly chronological."""


class ProviderError(KlineChartError):
    """A data provider failed for a reason other than "no data"."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")
