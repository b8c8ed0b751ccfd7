"""
Tests for loading the genesis snapshot and persisted fragment logs.
"""

import json

import pytest

from factories import (
    ALICE,
    BLOCK0_DATE,
    BOB,
    CAROL,
    PLAN,
    genesis_dict,
    log_entry,
    make_genesis,
    write_genesis,
    write_logs,
)
from tallyaudit.canonical import canonical_json, compute_fragment_id
from tallyaudit.exceptions import FragmentLogError, GenesisError
from tallyaudit.fragments import (
    LogEntryError,
    load_fragment_logs,
    load_persistent_fragments_logs_from_folder_path,
)
from tallyaudit.genesis import GenesisLedger, account_id_from_public_key, load_genesis
from tallyaudit.models import Fragment, FragmentKind


# ─── Canonical Identity ──────────────────────────────────────────


class TestFragmentId:
    def test_canonical_json_sorted(self):
        assert canonical_json({"z": 1, "a": {"y": 2, "b": 3}}) == '{"a":{"b":3,"y":2},"z":1}'

    def test_id_independent_of_key_order(self):
        a = compute_fragment_id({"kind": "transaction", "transaction": {"inputs": []}})
        b = compute_fragment_id({"transaction": {"inputs": []}, "kind": "transaction"})
        assert a == b
        assert len(a) == 64

    def test_explicit_id_kept(self):
        fragment = Fragment.model_validate({"id": "0xABCD", "kind": "transaction"})
        assert fragment.id == "abcd"

    def test_derived_id_matches_body_hash(self):
        body = {"kind": "transaction", "transaction": {"inputs": []}}
        assert Fragment.model_validate(body).id == compute_fragment_id(body)

    def test_vote_cast_requires_body(self):
        with pytest.raises(ValueError):
            Fragment.model_validate({"kind": "vote_cast"})


# ─── Genesis ─────────────────────────────────────────────────────


class TestGenesis:
    def test_load_from_file(self, tmp_path):
        path = write_genesis(tmp_path / "block0.json", committees=[CAROL])
        genesis = load_genesis(path)
        assert genesis.block0_date == BLOCK0_DATE
        assert [(e.address, e.value) for e in genesis.fund_entries()] == [(ALICE, 100), (BOB, 300)]
        assert genesis.committee_accounts() == frozenset({CAROL})
        assert genesis.is_committee(CAROL)
        assert not genesis.is_committee(ALICE)
        assert set(genesis.vote_plans()) == {PLAN}

    def test_committee_set_built_once(self):
        genesis = make_genesis(committees=[CAROL])
        assert genesis.committee_accounts() is genesis.committee_accounts()
        assert genesis.is_committee(CAROL)

    def test_block_height(self):
        genesis = make_genesis()
        assert genesis.block_height_at(BLOCK0_DATE) == 0
        assert genesis.block_height_at(BLOCK0_DATE + 59) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(GenesisError, match="cannot read"):
            load_genesis(tmp_path / "nope.json")

    def test_not_json(self, tmp_path):
        path = tmp_path / "block0.json"
        path.write_text("{oops")
        with pytest.raises(GenesisError, match="not valid JSON"):
            load_genesis(path)

    def test_invalid_address(self, tmp_path):
        data = genesis_dict(funds=[("not-hex", 1)])
        path = tmp_path / "block0.json"
        path.write_text(json.dumps(data))
        with pytest.raises(GenesisError):
            load_genesis(path)

    def test_ambiguous_initial_entry(self):
        data = genesis_dict()
        data["initial"].append({"fund": [], "legacy_fund": []})
        with pytest.raises(GenesisError):
            GenesisLedger.from_dict(data)

    def test_vote_plan_window_must_be_ordered(self):
        plan = {"kind": "vote_plan", "id": PLAN, "vote_start": 10, "vote_end": 10, "proposals": 1}
        with pytest.raises(GenesisError):
            GenesisLedger.from_dict(genesis_dict(plans=[plan]))

    def test_other_certs_skipped(self):
        data = genesis_dict()
        data["initial"].append({"cert": {"kind": "stake_delegation", "pool": "ff"}})
        assert set(GenesisLedger.from_dict(data).vote_plans()) == {PLAN}

    def test_account_id_normalisation(self):
        assert account_id_from_public_key("0xAB") == "ab"


# ─── Fragment Logs ───────────────────────────────────────────────


class TestFragmentLogs:
    def test_files_read_in_name_order(self, tmp_path):
        folder = tmp_path / "logs"
        write_logs(folder, [log_entry(BOB)], name="02.log")
        write_logs(folder, [log_entry(ALICE, proposal=0), log_entry(ALICE, proposal=1)], name="01.log")
        logs = load_fragment_logs(folder)
        voters = [log.fragment.transaction.inputs[0].account for log in logs]
        assert voters == [ALICE, ALICE, BOB]
        assert all(log.fragment.kind is FragmentKind.VOTE_CAST for log in logs)

    def test_bad_lines_reported_then_skipped(self, tmp_path):
        folder = write_logs(tmp_path / "logs", [log_entry(ALICE), "garbage", "", {"time": 1}])
        raw = list(load_persistent_fragments_logs_from_folder_path(folder))
        errors = [r for r in raw if isinstance(r, LogEntryError)]
        assert [e.line_no for e in errors] == [2, 4]
        assert len(load_fragment_logs(folder)) == 1

    def test_glob_pattern(self, tmp_path):
        folder = write_logs(tmp_path / "logs", [log_entry(ALICE)], name="a.log")
        write_logs(folder, [log_entry(BOB)], name="b.txt")
        assert len(load_fragment_logs(folder, "*.log")) == 1

    def test_missing_folder(self, tmp_path):
        with pytest.raises(FragmentLogError):
            load_fragment_logs(tmp_path / "missing")
