"""Tests for the click command-line interface."""

import json

from click.testing import CliRunner

from loan_amortization.main import cli

BASE_ARGS = ["-p", "10m", "-r", "5.5", "-t", "12", "-s", "2024-01-15"]


def test_schedule_prints_summary_and_rows() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["schedule", *BASE_ARGS])
    assert result.exit_code == 0, result.output
    assert "Summary" in result.output
    assert "Effective principal : 10,000,000.00" in result.output
    assert "2025-01-15" in result.output


def test_schedule_exports_json(tmp_path) -> None:
    output = tmp_path / "schedule.json"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["schedule", *BASE_ARGS, "--style", "IN_FINE", "--fee", "2", "--fee-kind", "PERCENTAGE_OF_PRINCIPAL", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text())
    assert len(payload["schedule"]) == 12
    assert payload["schedule"][-1]["principalPortion"] == "10000000"
    assert payload["summary"]["initialFeesAmount"] == "200000.00"
    assert payload["summary"]["netDisbursed"] == "9800000.00"


def test_invalid_terms_exit_with_code() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["summary", "-p", "1000", "-r", "5", "-t", "0", "-s", "2024-01-01"])
    assert result.exit_code == 1
    assert "DURATION_NOT_POSITIVE" in result.output


def test_summary_from_terms_file(tmp_path) -> None:
    terms_file = tmp_path / "terms.json"
    terms_file.write_text(
        json.dumps(
            {
                "principal": "1000000",
                "annualRatePercent": "0",
                "durationMonths": 4,
                "repaymentStyle": "AMORTIZABLE",
                "amortizationMethod": "CONSTANT_CAPITAL",
                "startDate": "2024-01-01",
            }
        )
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["summary", "--terms", str(terms_file)])
    assert result.exit_code == 0, result.output
    assert "Total interest      : 0.00" in result.output
    assert "Installments        : 4" in result.output


def test_compare_two_scenarios(tmp_path) -> None:
    base = {
        "principal": "100000",
        "annualRatePercent": "6",
        "durationMonths": 24,
        "startDate": "2024-01-01",
        "repaymentStyle": "AMORTIZABLE",
        "amortizationMethod": "CONSTANT_PAYMENT",
    }
    first = tmp_path / "a.json"
    second = tmp_path / "b.json"
    first.write_text(json.dumps(base))
    second.write_text(json.dumps(dict(base, durationMonths=12)))
    runner = CliRunner()
    result = runner.invoke(cli, ["compare", "--scenario1", str(first), "--scenario2", str(second)])
    assert result.exit_code == 0, result.output
    assert "Comparison" in result.output
    assert "installments" in result.output


def test_payoff_quote_json(tmp_path) -> None:
    output = tmp_path / "payoff.json"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["payoff", "-p", "120000", "-r", "12", "-t", "12", "-s", "2024-01-15", "--method", "CONSTANT_CAPITAL",
         "--paid-through", "3", "--penalty", "2", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(output.read_text())
    assert payload["outstandingPrincipal"] == "90000.00"
    assert payload["penalty"] == "1800.00"


def test_reconcile_matching_provided_schedule(tmp_path) -> None:
    export = tmp_path / "schedule.json"
    runner = CliRunner()
    runner.invoke(cli, ["schedule", *BASE_ARGS, "--output", str(export)])
    rows = [
        {
            "installmentNumber": row["periodIndex"],
            "dueDate": row["dueDate"],
            "principalAmount": row["principalPortion"],
            "interestAmount": row["interestPortion"],
            "totalPayment": row["totalPayment"],
            "remainingPrincipal": row["remainingBalance"],
        }
        for row in json.loads(export.read_text())["schedule"]
    ]
    provided = tmp_path / "provided.json"
    provided.write_text(json.dumps(rows))
    result = runner.invoke(cli, ["reconcile", *BASE_ARGS, "--provided", str(provided)])
    assert result.exit_code == 0, result.output
    assert "matches" in result.output

    rows[0]["interestAmount"] = "1.00"
    provided.write_text(json.dumps(rows))
    result = runner.invoke(cli, ["reconcile", *BASE_ARGS, "--provided", str(provided)])
    assert result.exit_code == 1
    assert "interestAmount" in result.output
