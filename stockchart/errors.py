from __future__ import annotations


class ChartDataError(ValueError):
    """Raised when candle or indicator input cannot be interpreted."""


class ChartConfigError(ValueError):
    """Raised when a chart or panel configuration is invalid."""


class SingularMatrixError(ArithmeticError):
    """Raised when an affine transform has no inverse."""
