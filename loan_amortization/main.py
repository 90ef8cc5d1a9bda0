"""Command-line interface for the amortization engine.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full schedules, view summaries, compare two loan
scenarios, quote an early repayment or check a bank-provided schedule against
the computed one. Loan terms are given either as options or as a JSON file in
the wire format understood by ``terms_from_dict``; results can be printed to
the terminal or exported to JSON.
"""

from __future__ import annotations

import functools
import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

import click

from . import config
from .data_models import (
    AmortizationMethod,
    DateRule,
    DayCountBasis,
    FeeKind,
    Frequency,
    LoanTerms,
    RepaymentStyle,
    RoundingRule,
)
from .engine import compute_schedule
from .errors import InvalidTermsError
from .formatter import print_comparison, print_payoff, print_schedule, print_summary
from .serialization import (
    discrepancy_to_dict,
    payoff_to_dict,
    schedule_to_dict,
    summary_to_dict,
    terms_from_dict,
)
from .tracking import compare_summaries, payoff_quote, reconcile

logger = logging.getLogger(__name__)


def _choices(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls], case_sensitive=False)


def parse_amount(value: str) -> str:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a decimal string so no precision
    is lost on the way to the engine.
    """
    text = value.strip().lower().replace(",", "")
    factor = 1
    if text.endswith("k"):
        factor = 1_000
        text = text[:-1]
    elif text.endswith("m"):
        factor = 1_000_000
        text = text[:-1]
    try:
        return format(Decimal(text) * factor, "f")
    except InvalidOperation:
        raise click.BadParameter(f"Invalid amount: {value}")


def build_terms_from_options(
    principal: Optional[str],
    rate: Optional[str],
    duration: Optional[int],
    start_date: Optional[str],
    frequency: str = config.DEFAULT_FREQUENCY,
    style: str = RepaymentStyle.AMORTIZABLE.value,
    method: Optional[str] = None,
    day_count: str = config.DEFAULT_DAY_COUNT_BASIS,
    rounding: str = config.DEFAULT_ROUNDING_RULE,
    date_rule: str = config.DEFAULT_DATE_RULE,
    fee: Optional[str] = None,
    fee_kind: str = FeeKind.FLAT.value,
    fee_to_capital: bool = False,
    grace: int = 0,
) -> LoanTerms:
    style = style.upper()
    if style == RepaymentStyle.AMORTIZABLE.value and method is None:
        method = AmortizationMethod.CONSTANT_PAYMENT.value
    data: Dict[str, Any] = {
        "principal": parse_amount(principal) if principal else None,
        "annualRatePercent": rate,
        "durationMonths": duration,
        "startDate": start_date,
        "frequency": frequency.upper(),
        "repaymentStyle": style,
        "amortizationMethod": method.upper() if method else None,
        "dayCountBasis": day_count.upper(),
        "roundingRule": rounding.upper(),
        "dateRule": date_rule.upper(),
        "gracePeriodMonths": grace,
    }
    if fee:
        data["initialFees"] = {
            "amount": parse_amount(fee),
            "kind": fee_kind.upper(),
            "addToCapital": fee_to_capital,
        }
    return terms_from_dict(data)


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    if path.suffix.lower() != ".json":
        raise click.BadParameter("Unsupported output format; use .json")
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def terms_options(func):
    """Attach the loan-term options shared by every command."""
    options = [
        click.option("--terms", "terms_file", type=click.Path(exists=True, dir_okay=False), help="JSON file with loan terms"),
        click.option("--principal", "-p", "principal", help="Loan amount (accepts 500k / 2m)"),
        click.option("--rate", "-r", "rate", help="Annual interest rate in percent"),
        click.option("--duration", "-t", "duration", type=int, help="Loan duration in months"),
        click.option("--start-date", "-s", "start_date", help="Start date (YYYY-MM-DD)"),
        click.option("--frequency", type=_choices(Frequency), default=config.DEFAULT_FREQUENCY, show_default=True),
        click.option("--style", type=_choices(RepaymentStyle), default=RepaymentStyle.AMORTIZABLE.value, show_default=True),
        click.option("--method", type=_choices(AmortizationMethod), help="Amortization method (default CONSTANT_PAYMENT)"),
        click.option("--day-count", type=_choices(DayCountBasis), default=config.DEFAULT_DAY_COUNT_BASIS, show_default=True),
        click.option("--rounding", type=_choices(RoundingRule), default=config.DEFAULT_ROUNDING_RULE, show_default=True),
        click.option("--date-rule", type=_choices(DateRule), default=config.DEFAULT_DATE_RULE, show_default=True),
        click.option("--fee", help="Initial fee: an amount, or a percent with --fee-kind PERCENTAGE_OF_PRINCIPAL"),
        click.option("--fee-kind", type=_choices(FeeKind), default=FeeKind.FLAT.value, show_default=True),
        click.option("--fee-to-capital", is_flag=True, help="Finance the fee with the principal"),
        click.option("--grace", type=int, default=0, show_default=True, help="Interest-only grace period in months"),
    ]
    for option in reversed(options):
        func = option(func)

    @functools.wraps(func)
    def wrapper(**kwargs):
        terms_file = kwargs.pop("terms_file")
        names = [
            "principal", "rate", "duration", "start_date", "frequency", "style", "method",
            "day_count", "rounding", "date_rule", "fee", "fee_kind", "fee_to_capital", "grace",
        ]
        values = {name: kwargs.pop(name) for name in names}
        try:
            if terms_file:
                terms = terms_from_dict(_load_json(terms_file))
            else:
                terms = build_terms_from_options(**values)
        except InvalidTermsError as exc:
            raise click.ClickException(str(exc))
        return func(terms=terms, **kwargs)

    return wrapper


def _compute(terms: LoanTerms):
    try:
        return compute_schedule(terms)
    except InvalidTermsError as exc:
        raise click.ClickException(str(exc))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=config.LOG_LEVEL,
    show_default=True,
)
def cli(log_level: str) -> None:
    """A command-line loan amortization calculator."""
    logging.basicConfig(level=log_level.upper(), format=config.LOG_FORMAT)


@cli.command()
@terms_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def schedule(terms: LoanTerms, output: Optional[str]) -> None:
    """Compute and print the full amortization schedule."""
    schedule_data, summary_data = _compute(terms)
    if output:
        path = Path(output)
        _write_json(path, schedule_to_dict(schedule_data, summary_data))
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(summary_data)
    # Limit schedule length printed to avoid flooding the terminal
    max_rows = config.MAX_PREVIEW_ROWS
    if len(schedule_data) > max_rows:
        click.echo(f"Schedule has {len(schedule_data)} rows; showing first {max_rows} rows.")
        print_schedule(schedule_data[:max_rows])
    else:
        print_schedule(schedule_data)


@cli.command()
@terms_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(terms: LoanTerms, output: Optional[str]) -> None:
    """Compute and print only the summary metrics for a loan."""
    _, summary_data = _compute(terms)
    if output:
        path = Path(output)
        _write_json(path, {"summary": summary_to_dict(summary_data)})
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@click.option("--scenario1", "scenario1", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON terms of the first scenario")
@click.option("--scenario2", "scenario2", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON terms of the second scenario")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios given as JSON terms files."""
    try:
        terms1 = terms_from_dict(_load_json(scenario1))
        terms2 = terms_from_dict(_load_json(scenario2))
    except InvalidTermsError as exc:
        raise click.ClickException(str(exc))
    _, summary1 = _compute(terms1)
    _, summary2 = _compute(terms2)
    print_comparison(summary1, summary2, compare_summaries(summary1, summary2))


@cli.command()
@terms_options
@click.option("--paid-through", type=int, required=True, help="Last installment already paid")
@click.option("--penalty", default="0", show_default=True, help="Early repayment penalty in percent of the outstanding principal")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def payoff(terms: LoanTerms, paid_through: int, penalty: str, output: Optional[str]) -> None:
    """Quote the amount needed to repay the loan early."""
    schedule_data, _ = _compute(terms)
    try:
        quote = payoff_quote(schedule_data, paid_through, penalty)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    if output:
        _write_json(Path(output), payoff_to_dict(quote))
        click.echo(f"Payoff quote exported to {output}")
    else:
        print_payoff(quote)


@cli.command(name="reconcile")
@terms_options
@click.option("--provided", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON list of bank-provided installments")
@click.option("--tolerance", default=config.DEFAULT_RECONCILE_TOLERANCE, show_default=True)
def reconcile_command(terms: LoanTerms, provided: str, tolerance: str) -> None:
    """Check a bank-provided schedule against the computed one."""
    schedule_data, _ = _compute(terms)
    rows = _load_json(provided)
    if isinstance(rows, dict):
        rows = rows.get("installments") or rows.get("schedule") or []
    try:
        discrepancies = reconcile(schedule_data, rows, tolerance)
    except ValueError as exc:
        raise click.ClickException(f"Invalid provided schedule: {exc}")
    if not discrepancies:
        click.echo("Provided schedule matches the computed schedule.")
        return
    logger.info("Found %d discrepancies in provided schedule", len(discrepancies))
    click.echo(json.dumps([discrepancy_to_dict(d) for d in discrepancies], indent=2))
    raise SystemExit(1)


if __name__ == "__main__":
    cli()
