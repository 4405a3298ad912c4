"""Tests for the typer command line."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from buy_vs_rent.cli import app
from buy_vs_rent.schemas import DEFAULT_PARAMETERS

# Keep a developer's exported params file out of every invocation.
runner = CliRunner(env={"BUY_VS_RENT_PARAMS": ""})


def _timeline(output: str) -> list:
    return json.loads(output[output.index("\n[") + 1 :])


def test_run_defaults_prints_summary() -> None:
    result = runner.invoke(app, ["run"])
    assert result.exit_code == 0, result.output
    assert "Buy net worth" in result.output
    assert "Rent net worth" in result.output
    assert "Break-even sale price" in result.output
    assert "pinned" not in result.output


def test_run_rejects_invalid_horizon() -> None:
    result = runner.invoke(app, ["run", "--horizon-years", "0"])
    assert result.exit_code == 2
    assert "horizon_years" in result.output


def test_show_timeline_dumps_year_ends() -> None:
    result = runner.invoke(app, ["run", "--horizon-years", "4", "--show-timeline"])
    assert result.exit_code == 0, result.output
    rows = _timeline(result.output)
    assert [row["month"] for row in rows] == [12, 24, 36, 48]
    assert {"property_value", "loan_balance", "buy_invest_asset"} <= set(rows[0])


def test_show_timeline_monthly() -> None:
    result = runner.invoke(
        app, ["run", "--horizon-years", "2", "--show-timeline", "--monthly"]
    )
    assert result.exit_code == 0, result.output
    assert len(_timeline(result.output)) == 24


def test_params_file_and_option_override(tmp_path) -> None:
    path = tmp_path / "params.json"
    path.write_text(
        json.dumps({"horizon_years": 3, "rate_band_policy": "equal_thirds_of_horizon"})
    )
    result = runner.invoke(
        app,
        ["run", "--params-file", str(path), "--horizon-years", "6", "--show-timeline"],
    )
    assert result.exit_code == 0, result.output
    assert "Horizon: 6 years" in result.output
    assert len(_timeline(result.output)) == 6


def test_params_file_from_environment(tmp_path) -> None:
    path = tmp_path / "params.json"
    path.write_text(json.dumps({"horizon_years": 7}))
    result = runner.invoke(app, ["run"], env={"BUY_VS_RENT_PARAMS": str(path)})
    assert result.exit_code == 0, result.output
    assert "Horizon: 7 years" in result.output


def test_params_file_with_unknown_key(tmp_path) -> None:
    path = tmp_path / "params.json"
    path.write_text(json.dumps({"price": 1}))
    result = runner.invoke(app, ["run", "--params-file", str(path)])
    assert result.exit_code == 2
    assert "price" in result.output


def test_params_file_with_bad_json(tmp_path) -> None:
    path = tmp_path / "params.json"
    path.write_text("{not json")
    result = runner.invoke(app, ["run", "--params-file", str(path)])
    assert result.exit_code == 2


def test_pinned_break_even_is_reported() -> None:
    result = runner.invoke(
        app,
        [
            "run",
            "--rent-start",
            "0",
            "--rent-increase",
            "0",
            "--horizon-years",
            "35",
            "--investment-return",
            "10",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "No realistic break-even" in result.output


def test_defaults_command_prints_parameters() -> None:
    result = runner.invoke(app, ["defaults"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == DEFAULT_PARAMETERS.to_dict()
