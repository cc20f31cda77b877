"""
Error propagation through arbitrary formulas of Measurements.

The per-operator rules in measurement_engine cover a single + - * /.
DerivedMeasurement generalises them to any differentiable expression using
symbolic partial derivatives and the first-order propagation law for
uncorrelated inputs:

    e_f² = Σᵢ (∂f/∂xᵢ)² · eᵢ²
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass

import numpy as np
import sympy as sp
from scipy.stats import norm

from measurement_system.measurement_engine import Measurement

logger = logging.getLogger(__name__)


@dataclass
class BudgetEntry:
    """How much one input contributes to the error of a derived quantity."""
    variable: str
    measurement: Measurement
    sensitivity: float       # ∂f/∂x at the measured values
    weighted_error: float    # |∂f/∂x| · e(x)
    share: float             # fraction of the combined variance


class DerivedMeasurement:
    """
    A quantity computed from Measurements via a formula.
    Uses symbolic differentiation for exact partial derivatives.
    """

    def __init__(self, name: str, symbol: str, units: str,
                 formula_str: str, variables: dict):
        """
        Parameters
        ----------
        name : str
            Human-readable name (e.g., "Kinetic energy").
        symbol : str
            Short symbol for the result (e.g., "E").
        units : str
            Units label of the result. Opaque, never derived from the inputs.
        formula_str : str
            Sympy-parseable formula string, e.g. "m * v**2 / 2"
        variables : dict
            Mapping of symbol string → Measurement.
        """
        self.name = name
        self.symbol = symbol
        self.units = units
        self.formula_str = formula_str
        self.variables = OrderedDict(variables)

        self.sym_vars = {k: sp.Symbol(k) for k in self.variables}
        self.expr = sp.sympify(formula_str, locals=self.sym_vars)

        unknown = self.expr.free_symbols - set(self.sym_vars.values())
        if unknown:
            raise ValueError(
                f"Formula '{formula_str}' uses undeclared symbols: "
                f"{sorted(str(s) for s in unknown)}"
            )

        self.partials = {
            var_name: sp.diff(self.expr, sym)
            for var_name, sym in self.sym_vars.items()
        }

        # numpy-backed callables so a zero denominator gives inf/nan, not an exception
        args = list(self.sym_vars.values())
        self._value_fn = sp.lambdify(args, self.expr, "numpy")
        self._partial_fns = {
            k: sp.lambdify(args, partial, "numpy") for k, partial in self.partials.items()
        }
        logger.debug("Derived %s = %s with partials %s", symbol, self.expr, self.partials)

    def _values(self) -> list:
        return [np.float64(m.value) for m in self.variables.values()]

    @property
    def best_value(self) -> float:
        with np.errstate(all="ignore"):
            return float(self._value_fn(*self._values()))

    def sensitivity_coefficients(self) -> dict:
        """Evaluate ∂f/∂xᵢ at the measured values."""
        values = self._values()
        with np.errstate(all="ignore"):
            return {k: float(fn(*values)) for k, fn in self._partial_fns.items()}

    def _weighted_errors(self) -> np.ndarray:
        """|∂f/∂xᵢ| · eᵢ for every input, in declaration order."""
        coeffs = self.sensitivity_coefficients()
        errors = np.array([m.error for m in self.variables.values()], dtype=float)
        with np.errstate(all="ignore"):
            return np.abs(np.array(list(coeffs.values()), dtype=float) * errors)

    @property
    def combined_error(self) -> float:
        with np.errstate(all="ignore"):
            return float(np.sqrt(np.sum(self._weighted_errors()**2)))

    @property
    def relative_error(self) -> float:
        bv = self.best_value
        if bv == 0:
            return float('inf')
        return self.combined_error / abs(bv)

    def uncertainty_budget(self) -> list:
        """
        One BudgetEntry per input. Shares sum to 1 when the combined error is
        finite and non-zero, are all 0 for exact inputs, and are NaN when the
        combined error itself is undefined.
        """
        coeffs = self.sensitivity_coefficients()
        weighted = self._weighted_errors()
        with np.errstate(all="ignore"):
            variance = np.sum(weighted**2)
            if not np.isfinite(variance):
                shares = np.full(len(weighted), np.nan)
            elif variance == 0:
                shares = np.zeros(len(weighted))
            else:
                shares = weighted**2 / variance
        return [
            BudgetEntry(var_name, m, coeffs[var_name], float(w), float(s))
            for (var_name, m), w, s in zip(self.variables.items(), weighted, shares)
        ]

    def expanded_error(self, coverage_p: float = 0.95) -> tuple:
        """
        Expanded error U = k · e_c for the given coverage probability,
        with k taken from the normal distribution.
        """
        if not 0 < coverage_p < 1:
            raise ValueError(f"coverage_p must be in (0, 1), got {coverage_p}")
        k = float(norm.ppf((1 + coverage_p) / 2))
        return k * self.combined_error, k

    def to_measurement(self) -> Measurement:
        return Measurement(self.best_value, self.combined_error, self.units)

    def __repr__(self):
        return f"DerivedMeasurement({self.symbol} = {self.formula_str} [{self.units}])"
