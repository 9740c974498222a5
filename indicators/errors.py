from __future__ import annotations


class ChartConfigError(ValueError):
    """Raised when a caller wires the core with an invalid mode, chart type or reference year."""
