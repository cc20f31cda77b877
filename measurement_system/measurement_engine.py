"""
╔══════════════════════════════════════════════════════════════════════╗
║  MeasurementEngine — Value, Error & Units for Physical Quantities    ║
║                                                                      ║
║  Supports:                                                           ║
║    • Symmetric error bars carried alongside every value              ║
║    • Error propagation through + - * / (uncorrelated inputs)         ║
║    • Unit-checked comparison and addition (strict policy)            ║
║    • Canonical "v +- e units" and flat "v e" text output             ║
╚══════════════════════════════════════════════════════════════════════╝

Units are opaque labels. They are compared by exact string equality and
concatenated on multiplication and division, never parsed or simplified.

Every unit-sensitive operator (==, !=, <, >, <=, >=, +, -, +=, -=) raises
IncompatibleUnits when the labels differ. Nothing degrades silently.

Multiplying or dividing by an operand whose value is exactly zero leaves the
relative-error formula undefined. Arithmetic is done with numpy float
semantics, so the result carries NaN or Infinity rather than raising
ZeroDivisionError. Use Measurement.is_defined() to detect it.
"""

import logging
import numbers
import re
from dataclasses import dataclass, replace

import numpy as np

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# §1  ERRORS & OUTPUT SETTINGS
# ═══════════════════════════════════════════════════════════════════════

class IncompatibleUnits(ValueError):
    """Raised when a unit-sensitive operation receives different unit labels."""

    def __init__(self, lhs_units: str, rhs_units: str):
        self.lhs_units = lhs_units
        self.rhs_units = rhs_units
        super().__init__(
            f"Cannot operate on measurements with different units: "
            f"'{lhs_units}' != '{rhs_units}'"
        )


@dataclass(frozen=True)
class OutputSettings:
    """How numbers are rendered in Measurement text output."""
    precision: int = 6   # digits after the decimal point ("%f" uses 6)

    def __post_init__(self):
        if self.precision < 0:
            raise ValueError(f"precision must be >= 0, got {self.precision}")

    def format_number(self, number: float) -> str:
        return f"{number:.{self.precision}f}"


DEFAULT_OUTPUT_SETTINGS = OutputSettings()

_CANONICAL_RE = re.compile(r"^\s*(\S+)\s+\+-\s+(\S+)(?: (.*))?$")


# ═══════════════════════════════════════════════════════════════════════
# §2  PROPAGATION RULES
# ═══════════════════════════════════════════════════════════════════════

def quadrature_sum(err1: float, err2: float) -> float:
    """sqrt(err1² + err2²), the combined error for addition and subtraction."""
    return float(np.hypot(np.float64(err1), np.float64(err2)))


def relative_quadrature_error(result_value: float, lhs, rhs) -> float:
    """
    Error of a product or quotient:
        |f| · sqrt((e₁/v₁)² + (e₂/v₂)²)

    A zero input value makes this NaN or Infinity; it is not clamped.
    """
    if lhs.value == 0 or rhs.value == 0:
        logger.debug("Relative error undefined for zero-valued operand: %r, %r", lhs, rhs)
    with np.errstate(all="ignore"):
        rel_lhs = np.divide(np.float64(lhs.error), np.float64(lhs.value))
        rel_rhs = np.divide(np.float64(rhs.error), np.float64(rhs.value))
        return float(np.abs(result_value) * np.hypot(rel_lhs, rel_rhs))


# ═══════════════════════════════════════════════════════════════════════
# §3  MEASUREMENT VALUE TYPE
# ═══════════════════════════════════════════════════════════════════════

@dataclass(eq=False)
class Measurement:
    """
    A measured physical quantity: value, symmetric error and units.

    The three attributes are public and may be reassigned freely; no
    validation is performed (a negative error is stored as given).
    Binary operators return new Measurements, compound operators
    (+=, -=, *=, /=) update the left operand in place.
    """
    value: float = 0.0
    error: float = 0.0       # symmetric error bar (radius)
    units: str = ""

    __hash__ = None  # mutable

    def _check_units(self, other: "Measurement"):
        if self.units != other.units:
            logger.warning(
                "You are trying to operate on two measurements that have "
                "different units: %s != %s", self.units, other.units
            )
            raise IncompatibleUnits(self.units, other.units)

    def is_defined(self) -> bool:
        """False when value or error went NaN/Infinity during propagation."""
        return bool(np.isfinite(self.value) and np.isfinite(self.error))

    @property
    def relative_error(self) -> float:
        if self.value == 0:
            return float('inf')
        return abs(self.error / self.value)

    # ── Comparison ──
    # Only == and > check units; the rest are derived from them.

    def __eq__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        self._check_units(other)
        return self.value == other.value

    def __ne__(self, other):
        equal = self.__eq__(other)
        if equal is NotImplemented:
            return NotImplemented
        return not equal

    def __gt__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        self._check_units(other)
        return self.value > other.value

    def __lt__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        return other > self

    def __le__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        return self < other or self == other

    def __ge__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        return self > other or self == other

    # ── Addition / subtraction ──

    def __iadd__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        self._check_units(other)
        self.value = self.value + other.value
        self.error = quadrature_sum(self.error, other.error)
        return self

    def __isub__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        self._check_units(other)
        self.value = self.value - other.value
        self.error = quadrature_sum(self.error, other.error)
        return self

    def __add__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        result = replace(self)
        result += other
        return result

    def __sub__(self, other):
        if not isinstance(other, Measurement):
            return NotImplemented
        result = replace(self)
        result -= other
        return result

    # ── Multiplication / division ──

    def __imul__(self, other):
        with np.errstate(all="ignore"):
            if isinstance(other, Measurement):
                value = float(np.multiply(np.float64(self.value), other.value))
                self.error = relative_quadrature_error(value, self, other)
                self.units = f"{self.units}*{other.units}"
                self.value = value
            elif isinstance(other, numbers.Real):
                # an exact scalar carries no error: scale linearly
                self.value = float(np.multiply(np.float64(self.value), other))
                self.error = float(np.multiply(np.float64(self.error), abs(other)))
            else:
                return NotImplemented
        return self

    def __itruediv__(self, other):
        with np.errstate(all="ignore"):
            if isinstance(other, Measurement):
                value = float(np.divide(np.float64(self.value), other.value))
                self.error = relative_quadrature_error(value, self, other)
                self.units = f"{self.units}/{other.units}"
                self.value = value
            elif isinstance(other, numbers.Real):
                self.value = float(np.divide(np.float64(self.value), other))
                self.error = float(np.divide(np.float64(self.error), abs(other)))
            else:
                return NotImplemented
        return self

    def __mul__(self, other):
        if not isinstance(other, (Measurement, numbers.Real)):
            return NotImplemented
        result = replace(self)
        result *= other
        return result

    def __rmul__(self, other):
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return self * other

    def __truediv__(self, other):
        if not isinstance(other, (Measurement, numbers.Real)):
            return NotImplemented
        result = replace(self)
        result /= other
        return result

    # ── Text output ──

    def output(self, settings: OutputSettings = DEFAULT_OUTPUT_SETTINGS) -> str:
        """Canonical form: '<value> +- <error> <units>'."""
        fmt = settings.format_number
        return f"{fmt(self.value)} +- {fmt(self.error)} {self.units}"

    def output_for_data_file(self, settings: OutputSettings = DEFAULT_OUTPUT_SETTINGS) -> str:
        """Flat form for line-oriented data files: '<value> <error>'."""
        fmt = settings.format_number
        return f"{fmt(self.value)} {fmt(self.error)}"

    def __str__(self):
        return self.output()

    @classmethod
    def parse(cls, text: str) -> "Measurement":
        """Read back the output() form. Everything after the error is the units label."""
        match = _CANONICAL_RE.match(text.rstrip("\n"))
        if match is None:
            raise ValueError(f"Not a '<value> +- <error> <units>' string: {text!r}")
        value, error, units = match.groups()
        return cls(float(value), float(error), units or "")

    @classmethod
    def from_data_file(cls, line: str, units: str = "") -> "Measurement":
        """Read back the output_for_data_file() form; units are not stored there."""
        fields = line.split()
        if len(fields) != 2:
            raise ValueError(f"Expected '<value> <error>', got {line!r}")
        return cls(float(fields[0]), float(fields[1]), units)
