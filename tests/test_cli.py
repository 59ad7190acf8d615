"""Tests for the fundamentals command line."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from fundamentals import CONFIG_FILE, WorkerFailed, cli


@pytest.fixture
def runner():
    runner = CliRunner()
    with runner.isolated_filesystem():
        yield runner


def test_run_walks_through_every_section(runner) -> None:
    result = runner.invoke(cli, ["run"])

    assert result.exit_code == 0, result.output
    for header in ["Variables and Types", "Ownership and Borrowing", "Lifetimes",
                   "Structs and Enums", "Pattern Matching", "Error Handling",
                   "Traits and Generics", "Concurrency"]:
        assert f"-- {header} --" in result.output
    assert "Rectangle(10×5) — area=50.0, square=false" in result.output
    assert "Some(10) → positive value: 10" in result.output
    assert "None → nothing" in result.output
    assert 'parse("abc") error: "abc" is not a valid number' in result.output
    assert 'parse("") error: input was empty' in result.output
    assert "Sum of 1..=100 using 4 threads: 5050" in result.output
    assert "Mutex counter after 5 threads: 5" in result.output
    assert result.output.rstrip().endswith("Done.")


def test_run_creates_default_config(runner) -> None:
    runner.invoke(cli, ["run"])

    with open(CONFIG_FILE) as f:
        assert json.load(f) == {"worker_count": 4, "range_end": 100}


def test_sum_uses_options(runner) -> None:
    result = runner.invoke(cli, ["sum", "--workers", "3", "--start", "1", "--end", "10"])

    assert result.exit_code == 0
    assert "Sum of 1..=10 using 3 threads: 55" in result.output


def test_sum_verbose_shows_partials(runner) -> None:
    result = runner.invoke(cli, ["sum", "--workers", "4", "--verbose"])

    assert result.exit_code == 0
    assert "sum-worker-0: [0, 25) -> 325" in result.output
    assert "sum-worker-3: [75, 100) -> 2200" in result.output
    assert "Sum of 1..=100 using 4 threads: 5050" in result.output


def test_sum_reads_config(runner) -> None:
    runner.invoke(cli, ["config", "set", "range_end", "10"])
    runner.invoke(cli, ["config", "set", "worker_count", "2"])

    result = runner.invoke(cli, ["sum"])

    assert "Sum of 1..=10 using 2 threads: 55" in result.output


def test_sum_rejects_zero_workers(runner) -> None:
    result = runner.invoke(cli, ["sum", "--workers", "0"])

    assert result.exit_code == 1
    assert "worker count must be at least 1" in result.output


def test_counter_repeated_runs(runner) -> None:
    result = runner.invoke(cli, ["counter", "--iterations", "20"])

    assert result.exit_code == 0
    assert "Mutex counter after 5 threads: 5 (20 run(s))" in result.output


def test_counter_reports_lost_updates(runner) -> None:
    with patch("fundamentals.shared_increment_demo", return_value=4):
        result = runner.invoke(cli, ["counter", "--iterations", "2"])

    assert result.exit_code == 1
    assert "2/2 run(s) lost updates." in result.output


def test_counter_worker_failure_exits(runner) -> None:
    err = WorkerFailed("counter-worker", [RuntimeError("boom")])
    with patch("fundamentals.shared_increment_demo", side_effect=err):
        result = runner.invoke(cli, ["counter"])

    assert result.exit_code == 1
    assert "counter-worker thread(s) failed" in result.output


def test_parse_command(runner) -> None:
    ok = runner.invoke(cli, ["parse", "42", " -7 "])
    assert ok.exit_code == 0
    assert 'parse("42") = 42' in ok.output
    assert 'parse(" -7 ") = -7' in ok.output

    bad = runner.invoke(cli, ["parse", "42", "abc"])
    assert bad.exit_code == 1
    assert '"abc" is not a valid number' in bad.output


def test_classify_command(runner) -> None:
    result = runner.invoke(cli, ["classify", "--", "-5", "0", "42", "200"])

    assert result.exit_code == 0
    assert "-5 → negative" in result.output
    assert "200 → large positive" in result.output


def test_config_set_unknown_key(runner) -> None:
    result = runner.invoke(cli, ["config", "set", "colour", "blue"])

    assert "Unknown config key: colour" in result.output


def test_config_show(runner) -> None:
    runner.invoke(cli, ["init"])
    result = runner.invoke(cli, ["config", "show"])

    assert json.loads(result.output) == {"worker_count": 4, "range_end": 100}


def test_config_set_rejects_non_integer_for_integer_key(runner) -> None:
    result = runner.invoke(cli, ["config", "set", "worker_count", "abc"])

    assert result.exit_code == 1
    assert "worker_count must be an integer" in result.output
    with open(CONFIG_FILE) as f:
        assert json.load(f)["worker_count"] == 4


def test_sum_reports_bad_config_value(runner) -> None:
    with open(CONFIG_FILE, "w") as f:
        json.dump({"worker_count": "abc", "range_end": 100}, f)

    result = runner.invoke(cli, ["sum"])

    assert result.exit_code == 1
    assert "config key worker_count must be an integer" in result.output
    assert not isinstance(result.exception, ValueError)


def test_run_reports_bad_config_value(runner) -> None:
    with open(CONFIG_FILE, "w") as f:
        json.dump({"worker_count": 4, "range_end": [1]}, f)

    result = runner.invoke(cli, ["run"])

    assert result.exit_code == 1
    assert "config key range_end must be an integer" in result.output
