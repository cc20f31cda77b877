"""Plain-text summaries of Measurements and derived-quantity error budgets."""

import numpy as np

from measurement_system.measurement_engine import (
    DEFAULT_OUTPUT_SETTINGS, Measurement, OutputSettings
)
from measurement_system.propagation import DerivedMeasurement


class MeasurementReport:
    """Generates formatted summary reports."""

    @staticmethod
    def _hline(width=72):
        return "─" * width

    @staticmethod
    def _dline(width=72):
        return "═" * width

    @classmethod
    def table(cls, measurements: dict,
              settings: OutputSettings = DEFAULT_OUTPUT_SETTINGS) -> str:
        """Aligned table of named Measurements."""
        fmt = settings.format_number
        lines = [
            f"  {'Name':<12} {'Value':>16} {'Error':>16} {'Units':<12} {'Rel. error'}",
            "  " + "-" * 68,
        ]
        for name, m in measurements.items():
            lines.append(
                f"  {name:<12} {fmt(m.value):>16} {fmt(m.error):>16} "
                f"{m.units:<12} {m.relative_error*100:.3f}%"
            )
        return "\n".join(lines)

    @classmethod
    def _section(cls, heading: str, body: list) -> list:
        return [f"  {heading}", cls._hline(), *body, ""]

    @staticmethod
    def _share_cell(share: float) -> str:
        if not np.isfinite(share):
            return "  n/a"
        return f"{share*100:5.1f}%  " + "▇" * round(share * 20)

    @classmethod
    def generate(cls, derived: DerivedMeasurement, coverage_p: float = 0.95,
                 title: str = "") -> str:
        """
        Error-budget report for a derived quantity. An undefined result
        (zero-valued denominator) renders as inf/nan with no share bars.
        """
        U, k = derived.expanded_error(coverage_p)
        sym, units = derived.symbol, derived.units

        model = [f"    {sym} = {derived.formula_str}"]
        model += [f"    ∂{sym}/∂{var} = {partial}" for var, partial in derived.partials.items()]

        budget = [f"  {'Input':<8} {'∂f/∂x':>12} {'e(x)':>12} {'|∂f/∂x|·e(x)':>14}  Share"]
        budget += [
            f"  {entry.variable:<8} {entry.sensitivity:>12.4g} "
            f"{entry.measurement.error:>12.4g} {entry.weighted_error:>14.4g}  "
            f"{cls._share_cell(entry.share)}"
            for entry in derived.uncertainty_budget()
        ]

        results = [
            ("Value", f"{derived.best_value:.6g} {units}"),
            ("Combined error", f"{derived.combined_error:.4g} {units}"),
            ("Relative error", f"{derived.relative_error*100:.3f}%"),
            (f"Expanded error (p = {coverage_p*100:.0f}%, k = {k:.3f})", f"{U:.4g} {units}"),
        ]

        lines = [cls._dline(), f"  {title or f'ERROR PROPAGATION: {derived.name}'}", cls._dline(), ""]
        lines += cls._section("MODEL", model)
        lines += cls._section("INPUTS", [cls.table(derived.variables)])
        lines += cls._section("ERROR BUDGET", budget)
        lines += cls._section("RESULT", [f"    {label + ':':<40} {text}" for label, text in results])

        # expanded error to 2 significant figures, value to match
        if U > 0 and np.isfinite(U):
            round_to = int(1 - np.floor(np.log10(U)))
            lines.append(f"    {sym} = ({round(derived.best_value, round_to)} ± {round(U, round_to)}) {units}")
        lines.append(cls._dline())
        return "\n".join(lines)

    @classmethod
    def input_summary(cls, name: str, m: Measurement) -> str:
        """Quick summary of a single Measurement."""
        return "\n".join([
            f"  {name}",
            f"    Value:      {m.value:.6g} {m.units}",
            f"    Error:      {m.error:.4g} {m.units}",
            f"    Relative:   {m.relative_error*100:.3f}%",
        ])
