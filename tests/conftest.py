from __future__ import annotations

import pytest

from ioflows.parsers.base_parser import Module, PortDirection

IN = PortDirection.INPUT
OUT = PortDirection.OUTPUT


@pytest.fixture
def passthrough_module() -> Module:
    """Y = A"""
    module = Module("passthrough")
    module.add_wire("A", 1, IN)
    module.add_wire("Y", 1, OUT)
    module.connect("Y", "A")
    return module


@pytest.fixture
def nand_module() -> Module:
    """Y = NOT(AND(A, B))"""
    module = Module("nand")
    module.add_wire("A", 1, IN)
    module.add_wire("B", 1, IN)
    module.add_wire("Y", 1, OUT)
    module.add_wire("t", 1)
    module.add_cell("g_and", "$_AND_", A="A", B="B", Y="t")
    module.add_cell("g_not", "$_NOT_", A="t", Y="Y")
    return module


@pytest.fixture
def mux_module() -> Module:
    module = Module("mux")
    module.add_wire("A", 1, IN)
    module.add_wire("B", 1, IN)
    module.add_wire("S", 1, IN)
    module.add_wire("Y", 1, OUT)
    module.add_cell("m0", "$_MUX_", A="A", B="B", S="S", Y="Y")
    return module


@pytest.fixture
def ring_module() -> Module:
    """Two NOT gates feeding each other, driving the output."""
    module = Module("ring")
    module.add_wire("A", 1, IN)
    module.add_wire("Y", 1, OUT)
    module.add_wire("p", 1)
    module.add_wire("q", 1)
    module.add_cell("n0", "$_NOT_", A="p", Y="q")
    module.add_cell("n1", "$_NOT_", A="q", Y="p")
    module.connect("Y", "q")
    return module
