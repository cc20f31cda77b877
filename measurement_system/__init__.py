from .measurement_engine import (
    DEFAULT_OUTPUT_SETTINGS,
    IncompatibleUnits,
    Measurement,
    OutputSettings,
    quadrature_sum,
    relative_quadrature_error,
)
from .propagation import BudgetEntry, DerivedMeasurement
from .report import MeasurementReport

__all__ = [
    "BudgetEntry",
    "DEFAULT_OUTPUT_SETTINGS",
    "DerivedMeasurement",
    "IncompatibleUnits",
    "Measurement",
    "MeasurementReport",
    "OutputSettings",
    "quadrature_sum",
    "relative_quadrature_error",
]
