"""
Tests for the tallyaudit CLI (Click).
"""

from __future__ import annotations

import csv
import io
import json

import pytest
from click.testing import CliRunner

from factories import ALICE, BOB, CAROL, log_entry, write_genesis, write_logs
from tallyaudit import __version__
from tallyaudit.cli import cli


@pytest.fixture
def runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def genesis_path(tmp_path):
    return write_genesis(
        tmp_path / "block0.json",
        funds=[(ALICE, 100), (BOB, 300), (CAROL, 500)],
        committees=[CAROL],
    )


@pytest.fixture
def logs_path(tmp_path):
    return write_logs(
        tmp_path / "logs",
        [
            log_entry(ALICE, counter=1, choice=0),
            log_entry(ALICE, counter=2, choice=1),
            log_entry(BOB, proposal=2),
            "not json",
        ],
    )


class TestCliBasic:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "recover" in result.output
        assert "rewards" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestRecoverVotes:
    def test_writes_original_and_filtered(self, runner, genesis_path, logs_path, tmp_path):
        out = tmp_path / "votes.json"
        result = runner.invoke(cli, [
            "recover", "votes",
            "--genesis", str(genesis_path),
            "--logs-path", str(logs_path),
            "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        report = json.loads(out.read_text())
        assert len(report["original"][ALICE]) == 2
        assert [v["spending_counter"] for v in report["filtered"][ALICE]] == [2]
        assert [v["choice"] for v in report["filtered"][ALICE]] == [1]
        assert report["filtered"][BOB][0]["proposal_index"] == 2

    def test_stdout_yaml(self, runner, genesis_path, logs_path):
        result = runner.invoke(cli, [
            "recover", "votes",
            "--genesis", str(genesis_path),
            "--logs-path", str(logs_path),
            "--format", "yaml",
        ])
        assert result.exit_code == 0, result.output
        assert "filtered:" in result.output
        assert "original:" in result.output

    def test_block_range_option(self, runner, genesis_path, logs_path, tmp_path):
        out = tmp_path / "votes.json"
        result = runner.invoke(cli, [
            "recover", "votes",
            "--genesis", str(genesis_path),
            "--logs-path", str(logs_path),
            "--block-range-start", "100",
            "--block-range-end", "200",
            "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["filtered"] == {}

    def test_block_range_from_environment(self, runner, genesis_path, logs_path, tmp_path, monkeypatch):
        from tallyaudit import config

        monkeypatch.setenv("TALLYAUDIT_BLOCK_RANGE_START", "100")
        config.reload()
        out = tmp_path / "votes.json"
        result = runner.invoke(cli, [
            "recover", "votes",
            "--genesis", str(genesis_path),
            "--logs-path", str(logs_path),
            "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["filtered"] == {}

    def test_utxo_vote_aborts(self, runner, genesis_path, tmp_path):
        logs = write_logs(tmp_path / "utxo_logs", [log_entry(ALICE), log_entry(BOB, utxo=True)])
        out = tmp_path / "votes.json"
        result = runner.invoke(cli, [
            "recover", "votes",
            "--genesis", str(genesis_path),
            "--logs-path", str(logs),
            "--output", str(out),
        ])
        assert result.exit_code == 1
        assert "utxo votes not supported" in result.output
        assert not out.exists()

    def test_empty_range_aborts(self, runner, genesis_path, logs_path):
        result = runner.invoke(cli, [
            "recover", "votes",
            "--genesis", str(genesis_path),
            "--logs-path", str(logs_path),
            "--block-range-start", "10",
            "--block-range-end", "10",
        ])
        assert result.exit_code == 1
        assert "LedgerInitError" in result.output

    def test_invalid_genesis_aborts(self, runner, logs_path, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("[]")
        result = runner.invoke(cli, [
            "recover", "votes", "--genesis", str(bad), "--logs-path", str(logs_path),
        ])
        assert result.exit_code == 1
        assert "GenesisError" in result.output


class TestRewardsVoters:
    def test_csv_excludes_committee(self, runner, genesis_path, tmp_path):
        out = tmp_path / "rewards.csv"
        result = runner.invoke(cli, [
            "rewards", "voters",
            "--genesis", str(genesis_path),
            "--total-rewards", "4000000",
            "--output", str(out),
        ])
        assert result.exit_code == 0, result.output
        rows = list(csv.reader(io.StringIO(out.read_text())))
        assert rows[0][0] == "Address"
        by_address = {r[0]: r for r in rows[1:]}
        assert set(by_address) == {ALICE, BOB}
        assert by_address[ALICE][1] == "100"
        assert float(by_address[ALICE][2]) == pytest.approx(1.0)
        assert float(by_address[BOB][3]) == pytest.approx(3_000_000, abs=1)

    def test_zero_rewards_rejected(self, runner, genesis_path):
        result = runner.invoke(cli, [
            "rewards", "voters", "--genesis", str(genesis_path), "--total-rewards", "0",
        ])
        assert result.exit_code == 2

    def test_only_committee_funds(self, runner, tmp_path):
        path = write_genesis(tmp_path / "block0.json", funds=[(CAROL, 500)], committees=[CAROL])
        result = runner.invoke(cli, [
            "rewards", "voters", "--genesis", str(path), "--total-rewards", "10",
        ])
        assert result.exit_code == 0
        assert "No non-committee stake" in result.output
