"""src/smoothcast/diagnostics/__init__.py"""

from .residuals import DiagnosticsReport, LjungBoxResult, acf, diagnose, ljung_box, normality_score, qq_points

__all__ = [
    "DiagnosticsReport",
    "LjungBoxResult",
    "acf",
    "diagnose",
    "ljung_box",
    "normality_score",
    "qq_points",
]
