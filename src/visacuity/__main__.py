"""
Command-line interface for the visacuity toolkit.
Prints Snellen charts, converts between Snellen and LogMAR, and lists a
patient's readings from a FHIR server.
"""

import json
import logging
import os
import sys
import typing

import click

from .conversion import logmar_to_display, parse_snellen, snellen_to_logmar
from .errors import VisualAcuityError
from .gateway import VisualAcuityGateway
from .scales import UnitSystem, scales_for

UNIT_CHOICES = click.Choice([u.value for u in UnitSystem])
EYE_CHOICES = click.Choice(["left", "right"])


@click.group()
@click.option(
    "--verbose-logging",
    is_flag=True,
    help="Emit debug logs to stderr",
)
def main(verbose_logging: bool):
    """visacuity: visual acuity charts, conversions and FHIR readings."""
    if verbose_logging:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[logging.StreamHandler(sys.stderr)],
        )


@main.command(name="scales")
@click.argument("unit", type=UNIT_CHOICES)
@click.option("-j", "--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def scales(unit: str, as_json: bool):
    """
    Print the Snellen chart for UNIT (foot or metre) with LogMAR values.
    """
    entries = scales_for(unit)
    if as_json:
        payload = [
            {
                "display": e.display,
                "numerator": e.numerator,
                "denominator": e.denominator,
                "logMAR": e.logmar,
            }
            for e in entries
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"{'SNELLEN':<10}{'LOGMAR':>8}")
    for e in entries:
        click.echo(f"{e.display:<10}{e.logmar:>8.1f}")


@main.command(name="to-logmar")
@click.argument("snellen")
@click.option(
    "-c",
    "--correction",
    default=-2,
    show_default=True,
    type=int,
    help="Optotypes-read correction (each optotype is 0.02 LogMAR)",
)
def to_logmar(snellen: str, correction: int):
    """
    Convert a Snellen fraction such as 20/40 or 6/9.5 to LogMAR.
    """
    try:
        numerator, denominator = parse_snellen(snellen)
        value = snellen_to_logmar(numerator, denominator, correction)
    except VisualAcuityError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"{value:.1f}")


@main.command(name="to-display")
@click.argument("logmar", type=float)
@click.option("-u", "--unit", default="foot", show_default=True, type=UNIT_CHOICES)
def to_display(logmar: float, unit: str):
    """
    Print the Snellen fraction for a chart LogMAR value.
    """
    try:
        click.echo(logmar_to_display(logmar, unit))
    except VisualAcuityError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command(name="readings")
@click.option(
    "-s",
    "--server",
    default=lambda: os.getenv("VISACUITY_FHIR_BASE_URL", ""),
    help="FHIR base URL (default: $VISACUITY_FHIR_BASE_URL)",
)
@click.option(
    "-t",
    "--token",
    default=lambda: os.getenv("VISACUITY_FHIR_TOKEN", ""),
    help="Bearer token (default: $VISACUITY_FHIR_TOKEN)",
)
@click.option("--subject", required=True, help="Patient reference, e.g. Patient/123")
@click.option("--eye", required=True, type=EYE_CHOICES)
@click.option(
    "-u",
    "--unit",
    type=UNIT_CHOICES,
    default=None,
    help="Resolve results to Snellen fractions of this chart",
)
def readings(server: str, token: str, subject: str, eye: str, unit: typing.Optional[str]):
    """
    List a patient's visual acuity readings for one eye as JSON.
    """
    gateway = VisualAcuityGateway(server or None, token or None)
    try:
        if unit:
            results = gateway.get_readings_with_scale(unit, subject, eye)
        else:
            results = gateway.get_readings(subject, eye)
    except VisualAcuityError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        gateway.close()

    click.echo(json.dumps([r.to_dict() for r in results], indent=2))


if __name__ == "__main__":
    main()
