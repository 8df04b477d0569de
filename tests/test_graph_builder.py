from __future__ import annotations

import pytest

from ioflows.exceptions import (
    MultipleDriversError,
    NetlistIntegrityError,
    UnsupportedCellError,
)
from ioflows.graph.gate_kinds import GateKind, parse_gate_kinds
from ioflows.graph.graph_builder import FaninGraphBuilder
from ioflows.parsers.base_parser import Module, PortDirection, SigBit
from ioflows.utils.config import AnalysisSettings


def test_alias_edges_are_bitwise():
    module = Module("bus")
    module.add_wire("DATA", 4, PortDirection.INPUT)
    module.add_wire("OUT", 4, PortDirection.OUTPUT)
    module.connect("OUT", "DATA")

    graph = FaninGraphBuilder().build(module)

    for i in range(4):
        assert graph.fanin(SigBit("OUT", i)) == {SigBit("DATA", i)}
    assert graph.stats.alias_edges == 4
    assert graph.stats.gate_edges == 0


def test_gate_edges_from_every_input(nand_module):
    graph = FaninGraphBuilder().build(nand_module)

    assert graph.fanin(SigBit("t", 0)) == {SigBit("A", 0), SigBit("B", 0)}
    assert graph.fanin(SigBit("Y", 0)) == {SigBit("t", 0)}
    assert graph.edge_data(SigBit("t", 0), SigBit("Y", 0))["cell"] == "g_not"
    assert graph.stats.cells_by_kind == {"AND": 1, "NOT": 1}


def test_unknown_bits_have_no_fanin(passthrough_module):
    graph = FaninGraphBuilder().build(passthrough_module)
    assert graph.fanin(SigBit("nowhere", 0)) == set()
    assert graph.fanin(SigBit("A", 0)) == set()


def test_width_mismatch_raises():
    module = Module("bad")
    module.add_wire("a", 2)
    module.add_wire("b", 3)
    module.connect("a", "b")

    with pytest.raises(NetlistIntegrityError, match="width mismatch"):
        FaninGraphBuilder().build(module)


def test_unrecognized_cell_type_raises():
    module = Module("m")
    module.add_wire("a")
    module.add_wire("y")
    module.add_cell("u0", "$add", A="a", B="a", Y="y")

    with pytest.raises(UnsupportedCellError) as excinfo:
        FaninGraphBuilder().build(module)
    assert excinfo.value.cell_name == "u0"
    assert excinfo.value.cell_type == "$add"


def test_annotation_cells_are_skipped():
    module = Module("m")
    module.add_wire("a", 1, PortDirection.INPUT)
    module.add_wire("y", 1, PortDirection.OUTPUT)
    module.add_cell("scope", "$scopeinfo")
    module.add_cell("n0", "$_NOT_", A="a", Y="y")

    graph = FaninGraphBuilder().build(module)
    assert graph.stats.annotation_cells == 1

    strict = AnalysisSettings(skip_annotations=False)
    with pytest.raises(UnsupportedCellError):
        FaninGraphBuilder(strict).build(module)


def test_restricted_gate_set():
    module = Module("m")
    module.add_wire("a")
    module.add_wire("b")
    module.add_wire("y")
    module.add_cell("x0", "$_NAND_", A="a", B="b", Y="y")

    settings = AnalysisSettings(recognized_gates=["NOT", "AND", "OR", "XOR", "MUX"])
    with pytest.raises(UnsupportedCellError):
        FaninGraphBuilder(settings).build(module)


def test_mux_requires_select():
    module = Module("m")
    for name in ("a", "b", "y"):
        module.add_wire(name)
    module.add_cell("m0", "$_MUX_", A="a", B="b", Y="y")

    with pytest.raises(NetlistIntegrityError, match="expected"):
        FaninGraphBuilder().build(module)


def test_gate_role_must_be_single_bit():
    module = Module("m")
    module.add_wire("a", 2)
    module.add_wire("y")
    module.add_cell("n0", "$_NOT_", A="a", Y="y")

    with pytest.raises(NetlistIntegrityError, match="2 bits"):
        FaninGraphBuilder().build(module)


def _double_driven() -> Module:
    module = Module("dd")
    module.add_wire("a", 1, PortDirection.INPUT)
    module.add_wire("b", 1, PortDirection.INPUT)
    module.add_wire("y", 1, PortDirection.OUTPUT)
    module.add_cell("n0", "$_NOT_", A="a", Y="y")
    module.connect("y", "b")
    return module


def test_multiple_drivers_merge_by_default():
    graph = FaninGraphBuilder().build(_double_driven())
    assert graph.fanin(SigBit("y", 0)) == {SigBit("a", 0), SigBit("b", 0)}
    assert graph.stats.multi_driven_bits == ["y[0]"]


def test_multiple_drivers_error_policy():
    settings = AnalysisSettings(multi_driver_policy="error")
    with pytest.raises(MultipleDriversError):
        FaninGraphBuilder(settings).build(_double_driven())


def test_invalid_policy_is_rejected():
    with pytest.raises(ValueError):
        AnalysisSettings(multi_driver_policy="last")


def test_parse_gate_kinds_accepts_names_and_types():
    assert parse_gate_kinds(None) == frozenset(GateKind)
    assert parse_gate_kinds(["and", "$_MUX_"]) == {GateKind.AND, GateKind.MUX}
    with pytest.raises(ValueError):
        parse_gate_kinds(["FLUX"])
    assert GateKind.MUX.roles == {"A", "B", "S", "Y"}
