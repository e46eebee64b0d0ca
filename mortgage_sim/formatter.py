"""Output helpers for the mortgage simulator.

This module renders schedules, summaries and scenario diffs as plain text
tables for the terminal, using ``click.echo`` so output can be captured in
tests.
"""

from __future__ import annotations

from typing import Iterable

import click

from .data_models import ScenarioDiff, ScheduleRow, Summary


def print_summary(summary: Summary, title: str = "Summary") -> None:
    """Print the aggregate totals of a schedule."""
    click.echo(title)
    click.echo("-" * 72)
    click.echo(f"Total interest     : {summary.total_interest:.2f}")
    click.echo(f"Total fees         : {summary.total_fees:.2f}")
    click.echo(f"Total principal    : {summary.total_principal:.2f}")
    if summary.total_extra:
        click.echo(f"Extra principal    : {summary.total_extra:.2f}")
    click.echo(f"Total paid         : {summary.total_paid:.2f}")
    click.echo(f"Remaining balance  : {summary.final_remaining:.2f}")
    if summary.payoff_period:
        click.echo(f"Paid off in        : {summary.payoff_period} ({summary.months_to_payoff} months)")
    else:
        click.echo("Paid off in        : not within horizon")
    click.echo("-" * 72)


def print_schedule(rows: Iterable[ScheduleRow]) -> None:
    """Print the schedule as a tab-separated table.

    Zero rows after payoff are skipped.
    """
    headers = [
        "Period",
        "Days",
        "Rate",
        "StartBal",
        "Payment",
        "Interest",
        "Fee",
        "Principal",
        "Extra",
        "EndBal",
    ]
    click.echo("\t".join(headers))
    for row in rows:
        if row.balance_start == 0 and row.balance_end == 0 and row.payment_total == 0:
            continue
        click.echo(
            "\t".join(
                [
                    row.period_key,
                    str(row.days),
                    f"{row.nominal_rate_pct:.3f}",
                    f"{row.balance_start:.2f}",
                    f"{row.payment_total:.2f}",
                    f"{row.interest:.2f}",
                    f"{row.fee:.2f}",
                    f"{row.principal:.2f}",
                    f"{row.extra_principal:.2f}",
                    f"{row.balance_end:.2f}",
                ]
            )
        )


def print_comparison(baseline: Summary, scenario: Summary, diff: ScenarioDiff) -> None:
    """Print baseline and scenario side by side.

    The difference column is baseline minus scenario, so a positive value
    means the scenario saves that much.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    click.echo(f"{'Metric':20s} {'Baseline':>15s} {'Scenario':>15s} {'Saved':>15s}")
    lines = [
        ("total_interest", baseline.total_interest, scenario.total_interest, diff.interest_saved),
        ("total_fees", baseline.total_fees, scenario.total_fees, diff.fees_saved),
        ("total_paid", baseline.total_paid, scenario.total_paid, diff.total_paid_delta),
    ]
    for key, v1, v2, saved in lines:
        click.echo(f"{key:20s} {v1:15.2f} {v2:15.2f} {saved:15.2f}")
    click.echo(
        f"{'payoff_month_index':20s} {baseline.payoff_month_index:15d} "
        f"{scenario.payoff_month_index:15d} {diff.months_saved:15d}"
    )
    click.echo(
        f"{'payoff_period':20s} {diff.baseline_payoff_period or '-':>15s} "
        f"{diff.scenario_payoff_period or '-':>15s}"
    )
    click.echo("=" * 72)
