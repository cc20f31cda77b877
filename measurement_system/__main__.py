"""
Command-line demo for the measurement system.

    measurement-system demo
    measurement-system combine "3.0 +- 0.4 MeV" "*" "5.0 +- 0.6 MeV"
    measurement-system combine "3.0 +- 0.4 MeV" / 5 --data-file
    measurement-system combine "-2.0 +- 0.7 MeV" - "5.0 +- 0.6 MeV"
"""

import logging
import sys

import click

from .measurement_engine import IncompatibleUnits, Measurement, OutputSettings

OPERATIONS = {
    "+": lambda lhs, rhs: lhs + rhs,
    "-": lambda lhs, rhs: lhs - rhs,
    "*": lambda lhs, rhs: lhs * rhs,
    "/": lambda lhs, rhs: lhs / rhs,
}


def _configure_logging(verbose_logging: bool, log_file_path: str):
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
        )


def _parse_operand(text: str):
    """A full '<value> +- <error> <units>' string, or a bare scalar."""
    try:
        return Measurement.parse(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        raise click.BadParameter(
            f"{text!r} is neither '<value> +- <error> <units>' nor a number"
        )


@click.group()
@click.option(
    "--verbose-logging",
    is_flag=True,
    help="Also emit debug logs to stderr",
)
@click.option(
    "--log-file-path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def main(verbose_logging: bool, log_file_path: str):
    """Measurements with error bars and units."""
    _configure_logging(verbose_logging, log_file_path)


@main.command(name="demo")
def demo():
    """Construct sample measurements and exercise every operator."""
    var = Measurement(123.45, 0.6789, "keV/MeV")
    var1 = Measurement(123.45, 0.0987, "keV/MeV")
    var2 = Measurement(123.45, 0.6789, "MeV")
    var3 = Measurement(123.45, 3465.84, "keV/MeV")

    click.echo(f"The current information for var: {var.output()}")
    var.value = 987.65
    var.units = "hbar/c/G"
    click.echo(f"The updated information for var: {var.output()}")

    click.echo("")
    for name, other_name, other in (("var1", "var2", var2), ("var1", "var3", var3)):
        click.echo(f"Does {name} = {var1.output()} compare equal to "
                   f"{other_name} = {other.output()}?")
        try:
            click.echo(f"Answer: {var1 == other}")
        except IncompatibleUnits as e:
            click.echo(f"Answer: cannot compare ({e})")

    a = Measurement(3.0, 0.4, "MeV")
    b = Measurement(5.0, 0.6, "MeV")
    click.echo("")
    click.echo(f"a = {a}")
    click.echo(f"b = {b}")
    for symbol, operation in OPERATIONS.items():
        click.echo(f"a {symbol} b = {operation(a, b)}")
    click.echo(f"a * 5 = {a * 5}")
    click.echo(f"a / 5 = {a / 5}")
    click.echo(f"a < b: {a < b}, a == b: {a == b}, a > b: {a > b}")
    click.echo(f"a for a data file: {a.output_for_data_file()}")


@main.command(name="combine", context_settings={"ignore_unknown_options": True})
@click.argument("lhs")
@click.argument("operator", type=click.Choice(list(OPERATIONS)))
@click.argument("rhs")
@click.option(
    "--precision",
    default=6,
    show_default=True,
    type=click.IntRange(min=0),
    help="Digits after the decimal point",
)
@click.option(
    "--data-file",
    is_flag=True,
    help="Print '<value> <error>' instead of the canonical form",
)
def combine(lhs: str, operator: str, rhs: str, precision: int, data_file: bool):
    """
    Apply OPERATOR to two measurements given as '<value> +- <error> <units>'.
    RHS may be a bare number for * and /.
    """
    try:
        lhs_m = Measurement.parse(lhs)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="LHS")
    rhs_operand = _parse_operand(rhs)
    if not isinstance(rhs_operand, Measurement) and operator in ("+", "-"):
        raise click.BadParameter(f"'{operator}' needs a measurement on both sides")

    try:
        result = OPERATIONS[operator](lhs_m, rhs_operand)
    except IncompatibleUnits as e:
        click.echo(f"❌  {e}", err=True)
        sys.exit(1)

    settings = OutputSettings(precision=precision)
    if data_file:
        click.echo(result.output_for_data_file(settings))
    else:
        click.echo(result.output(settings))
    if not result.is_defined():
        logging.warning(f"Result {result!r} is undefined (zero-valued operand)")


if __name__ == "__main__":
    main()
