"""Command‑line interface for the mortgage simulator.

This module uses the ``click`` library to implement a multi‑command
interface. Users can print a baseline plan, run a what-if simulation against
it, import a mortgage from a JSON document into the database, or purge a
mortgage with all its history. Results can be printed to the terminal or
exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .config import Settings, load_settings
from .data_models import Mortgage, ScheduleRow
from .engine import generate
from .errors import MortgageSimError, NotFound
from .formatter import print_comparison, print_schedule, print_summary
from .log import setup_logging
from .payloads import mortgage_from_payload, row_to_payload, scenario_from_payload
from .scenario import compare
from .service import Plan, Simulation, clamp_months
from .store import MortgageStore
from .summary import summarize
from .utils import normalize_period_key

MAX_PRINTED_ROWS = 120


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("5000") and shorthand with ``k``/``m`` suffixes
    (e.g., "2m" meaning 2_000_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_lump_sum_strings(values: Tuple[str, ...]) -> List[Dict[str, Any]]:
    lump_sums: List[Dict[str, Any]] = []
    for item in values:
        parts = item.split(":")
        if len(parts) != 2:
            raise click.BadParameter(f"Lump sum must be in YYYY-MM:AMOUNT format; got {item}")
        ym, amt_str = parts
        lump_sums.append({"periodKey": ym.strip(), "amount": parse_amount(amt_str)})
    return lump_sums


def build_scenario_payload(
    rate: Optional[float],
    rate_from: Optional[str],
    monthly_extra: Optional[str],
    extra_from: Optional[str],
    lump_sum: Tuple[str, ...],
) -> Dict[str, Any]:
    """Translate command-line options into the scenario request shape."""
    payload: Dict[str, Any] = {}
    if rate is not None:
        payload["interest"] = {"mode": "override", "annualRatePct": rate, "fromPeriodKey": rate_from}
    elif rate_from:
        raise click.BadParameter("--rate-from requires --rate")
    if monthly_extra or lump_sum:
        payload["extra"] = {
            "monthlyExtra": parse_amount(monthly_extra) if monthly_extra else 0,
            "fromPeriodKey": extra_from,
            "lumpSums": parse_lump_sum_strings(lump_sum),
        }
    elif extra_from:
        raise click.BadParameter("--extra-from requires --monthly-extra or --lump-sum")
    return payload


def load_mortgage(
    settings: Settings, file: Optional[str], mortgage_id: Optional[str]
) -> Mortgage:
    """Load a mortgage from a JSON document or from the database."""
    if bool(file) == bool(mortgage_id):
        raise click.UsageError("Give exactly one of --file or --mortgage-id")
    try:
        if file:
            with Path(file).open("r", encoding="utf-8") as f:
                return mortgage_from_payload(json.load(f), settings.day_basis)
        return MortgageStore(settings.database_url).load(mortgage_id)
    except NotFound as exc:
        raise click.ClickException(str(exc))
    except (json.JSONDecodeError, ValueError) as exc:
        raise click.ClickException(f"Invalid mortgage document: {exc}")


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, rows: List[ScheduleRow]) -> None:
    """Export schedule rows to a CSV file."""
    header = [
        "periodKey",
        "days",
        "dayBasis",
        "nominalRatePct",
        "paymentTotal",
        "fee",
        "interest",
        "principal",
        "extraPrincipal",
        "balanceStart",
        "balanceEnd",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        writer.writeheader()
        for row in rows:
            writer.writerow(row_to_payload(row))


def _print_rows(rows: List[ScheduleRow]) -> None:
    if len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    print_schedule(rows)


def _source_options(func):
    """Options shared by commands that read one mortgage."""
    func = click.option("--mortgage-id", "mortgage_id", help="Id of a stored mortgage")(func)
    func = click.option(
        "--file",
        "-f",
        "file",
        type=click.Path(exists=True, dir_okay=False),
        help="Mortgage JSON document",
    )(func)
    func = click.option(
        "--from", "-s", "from_period", required=True, help="First month of the horizon (YYYY-MM)"
    )(func)
    func = click.option(
        "--months", "-m", "months", default="360", show_default=True, help="Number of months to generate"
    )(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine activity to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Mortgage amortization and what-if simulation."""
    try:
        settings = load_settings()
    except ValueError as exc:
        raise click.ClickException(str(exc))
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)
    ctx.obj = settings


@cli.command()
@_source_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def plan(
    settings: Settings,
    mortgage_id: Optional[str],
    file: Optional[str],
    from_period: str,
    months: str,
    output: Optional[str],
) -> None:
    """Compute and print the baseline plan."""
    try:
        from_period = normalize_period_key(from_period)
    except MortgageSimError as exc:
        raise click.BadParameter(str(exc), param_hint="--from")
    mortgage = load_mortgage(settings, file, mortgage_id)
    months_count = clamp_months(months, settings)
    try:
        rows = generate(mortgage, from_period, months_count, settings=settings)
    except MortgageSimError as exc:
        raise click.ClickException(str(exc))
    result = Plan(mortgage, from_period, months_count, rows, summarize(rows))
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result.to_payload())
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, rows)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(result.summary, title=f"Plan: {mortgage.title}")
        _print_rows(rows)


@cli.command()
@_source_options
@click.option("--rate", "rate", type=float, help="Override the annual interest rate (percent)")
@click.option("--rate-from", "rate_from", help="First month of the rate override (YYYY-MM)")
@click.option("--monthly-extra", "monthly_extra", help="Extra principal paid every month")
@click.option("--extra-from", "extra_from", help="First month of the monthly extra (YYYY-MM)")
@click.option("--lump-sum", "lump_sum", multiple=True, help="One-off extra payment in YYYY-MM:AMOUNT format")
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def simulate(
    settings: Settings,
    mortgage_id: Optional[str],
    file: Optional[str],
    from_period: str,
    months: str,
    rate: Optional[float],
    rate_from: Optional[str],
    monthly_extra: Optional[str],
    extra_from: Optional[str],
    lump_sum: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Compare a what-if scenario against the baseline plan."""
    try:
        from_period = normalize_period_key(from_period)
        scenario = scenario_from_payload(
            build_scenario_payload(rate, rate_from, monthly_extra, extra_from, lump_sum),
            from_period,
        )
    except MortgageSimError as exc:
        raise click.BadParameter(str(exc))
    mortgage = load_mortgage(settings, file, mortgage_id)
    months_count = clamp_months(months, settings)
    try:
        comparison = compare(mortgage, from_period, months_count, scenario, settings=settings)
    except MortgageSimError as exc:
        raise click.ClickException(str(exc))
    result = Simulation(mortgage, from_period, months_count, scenario, comparison)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Simulation export must use .json extension")
        export_to_json(path, result.to_payload())
        click.echo(f"Simulation exported to {path}")
    else:
        print_summary(comparison.scenario_summary, title=f"Scenario: {mortgage.title}")
        print_comparison(comparison.baseline_summary, comparison.scenario_summary, comparison.diff)
        _print_rows(comparison.scenario_rows)


@cli.command(name="import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def import_mortgage(settings: Settings, file: str) -> None:
    """Store the mortgage described by a JSON document."""
    mortgage = load_mortgage(settings, file, None)
    try:
        mortgage_id = MortgageStore(settings.database_url).add_mortgage(mortgage)
    except (MortgageSimError, ValueError) as exc:
        raise click.ClickException(str(exc))
    click.echo(mortgage_id)


@cli.command()
@click.argument("mortgage_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def purge(settings: Settings, mortgage_id: str, yes: bool) -> None:
    """Delete a mortgage together with its terms history and payments."""
    if not yes:
        click.confirm(f"Delete mortgage {mortgage_id} and all of its history?", abort=True)
    try:
        MortgageStore(settings.database_url).purge(mortgage_id)
    except NotFound as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Purged {mortgage_id}")


if __name__ == "__main__":
    cli()
