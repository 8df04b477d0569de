from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ioflows.cli import cli
from ioflows.utils.config import config

HALF_ADDER = Path(__file__).resolve().parent / "data" / "half_adder.json"

RING = {
    "modules": {
        "ring": {
            "ports": {"y": {"direction": "output", "bits": [2]}},
            "cells": {
                "n0": {"type": "$_NOT_", "connections": {"A": [2], "Y": [3]}},
                "n1": {"type": "$_NOT_", "connections": {"A": [3], "Y": [2]}},
            },
            "netnames": {"y": {"hide_name": 0, "bits": [2]}},
        }
    }
}


@pytest.fixture
def quiet_config(tmp_path):
    path = tmp_path / "quiet.yaml"
    path.write_text("logging:\n  level: WARNING\n")
    yield path
    config.load(tmp_path / "missing.yaml")


def test_analyze_exports_report(tmp_path, quiet_config):
    out = tmp_path / "flows.json"
    result = CliRunner().invoke(
        cli, ["--config", str(quiet_config), "analyze", str(HALF_ADDER), "-o", str(out)]
    )

    assert result.exit_code == 0, result.output
    assert "half_adder" in result.output
    data = json.loads(out.read_text())
    assert data["format"] == "ioflows_v1"
    modules = {m["module"]: m for m in data["modules"]}
    assert len(modules["half_adder"]["dependencies"]["sum[0]"]) == 2
    assert "dependencies" not in modules["toggle"]


def test_analyze_module_filter(tmp_path, quiet_config):
    out = tmp_path / "flows.json"
    result = CliRunner().invoke(
        cli, ["--config", str(quiet_config), "analyze", str(HALF_ADDER), "-m", "tog*", "-o", str(out)]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert [m["module"] for m in data["modules"]] == ["toggle"]


def test_analyze_reports_loops_with_exit_status(tmp_path, quiet_config):
    netlist = tmp_path / "ring.json"
    netlist.write_text(json.dumps(RING))
    out = tmp_path / "flows.json"

    result = CliRunner().invoke(
        cli, ["--config", str(quiet_config), "analyze", str(netlist), "-o", str(out)]
    )

    assert result.exit_code == 2
    data = json.loads(out.read_text())
    assert data["errors"][0]["error"] == "CombinationalLoopError"


def test_unreadable_netlist_fails(tmp_path, quiet_config):
    netlist = tmp_path / "bad.json"
    netlist.write_text("[]")

    result = CliRunner().invoke(cli, ["--config", str(quiet_config), "analyze", str(netlist)])
    assert result.exit_code == 1


def test_inspect_lists_modules(quiet_config):
    result = CliRunner().invoke(cli, ["--config", str(quiet_config), "inspect", str(HALF_ADDER)])

    assert result.exit_code == 0, result.output
    assert "half_adder" in result.output
    assert "sequential" in result.output


def test_trace_shows_paths(quiet_config):
    result = CliRunner().invoke(
        cli, ["--config", str(quiet_config), "trace", str(HALF_ADDER), "half_adder", "carry[0]"]
    )

    assert result.exit_code == 0, result.output
    assert "depends on 2 input bits" in result.output
    assert "carry_buf" in result.output


def test_trace_unknown_bit(quiet_config):
    result = CliRunner().invoke(
        cli, ["--config", str(quiet_config), "trace", str(HALF_ADDER), "half_adder", "nope[0]"]
    )
    assert result.exit_code == 1


def test_analyze_json_stdout_is_parseable(quiet_config):
    result = CliRunner().invoke(cli, ["--config", str(quiet_config), "analyze", str(HALF_ADDER), "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [m["module"] for m in data["modules"]] == ["half_adder", "toggle"]
    assert "Skipping blackbox module cell_lib" in result.stderr


def test_inspect_json_reports_graph_statistics(quiet_config):
    result = CliRunner().invoke(cli, ["--config", str(quiet_config), "inspect", str(HALF_ADDER), "--json"])

    assert result.exit_code == 0, result.output
    records = {r["module"]: r for r in json.loads(result.stdout)}
    adder = records["half_adder"]
    assert adder["is_sequential"] is False
    assert adder["cells"] == {"by_kind": {"XOR": 1, "AND": 1, "BUF": 1}, "annotations": 1}
    assert adder["graph"]["gate_edges"] == 5
    assert records["toggle"] == {"module": "toggle", "is_sequential": True}


def test_unexpected_extension_is_reported_on_stderr(tmp_path, quiet_config):
    netlist = tmp_path / "half_adder.txt"
    netlist.write_text(HALF_ADDER.read_text())

    result = CliRunner().invoke(cli, ["--config", str(quiet_config), "analyze", str(netlist), "--json"])

    assert result.exit_code == 0, result.output
    assert "expected .json" in result.stderr
    json.loads(result.stdout)
