"""Graph builder for constructing the bit-level fan-in graph of a module."""

from dataclasses import dataclass, field
from typing import Optional

import networkx as nx

from .gate_kinds import OUTPUT_ROLE, GateKind, parse_gate_kinds
from ..exceptions import (
    MultipleDriversError,
    NetlistIntegrityError,
    UnsupportedCellError,
)
from ..parsers.base_parser import GateCell, Module, SigBit
from ..utils.config import AnalysisSettings
from ..utils.logger import setup_logger


ALIAS_EDGE = "alias"
GATE_EDGE = "gate"


@dataclass
class GraphStatistics:
    """Statistics about a module's fan-in graph."""
    module: str = ""
    total_bits: int = 0
    total_edges: int = 0

    alias_edges: int = 0
    gate_edges: int = 0

    cells_by_kind: dict[str, int] = field(default_factory=dict)
    annotation_cells: int = 0
    multi_driven_bits: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "module": self.module,
            "graph": {
                "total_bits": self.total_bits,
                "total_edges": self.total_edges,
                "alias_edges": self.alias_edges,
                "gate_edges": self.gate_edges,
            },
            "cells": {
                "by_kind": self.cells_by_kind,
                "annotations": self.annotation_cells,
            },
            "quality": {
                "multi_driven_bits": len(self.multi_driven_bits)
            }
        }


class FaninGraph:
    """Read-only view of a module's fan-in edges.

    Edges run from a driving bit to the bit it drives, so the direct fan-in
    of a bit is its set of predecessors.
    """

    def __init__(self, module: Module, graph: nx.DiGraph, stats: GraphStatistics):
        self.module = module
        self.graph = graph
        self.stats = stats

    def fanin(self, bit: SigBit) -> set[SigBit]:
        """Direct drivers of a bit; empty for bits the graph does not know."""
        if bit not in self.graph:
            return set()
        return set(self.graph.predecessors(bit))

    def edge_data(self, src: SigBit, dest: SigBit) -> dict:
        return dict(self.graph.get_edge_data(src, dest, {}))


class FaninGraphBuilder:
    """Builds the fan-in graph of a module from its connections and gate cells."""

    def __init__(self, settings: Optional[AnalysisSettings] = None):
        """Initialize the graph builder.

        Args:
            settings: Analysis settings (recognized gates, annotation cells,
                multi-driver policy). Defaults are used when omitted.
        """
        self.settings = settings or AnalysisSettings()
        self.recognized = parse_gate_kinds(self.settings.recognized_gates)
        self.annotation_cells = set(self.settings.annotation_cells)
        self.logger = setup_logger("graph_builder")

    def build(self, module: Module) -> FaninGraph:
        """Build the fan-in graph of a module.

        Args:
            module: Module to build the graph for; it is not modified

        Returns:
            FaninGraph with one edge per (driver bit, driven bit) pair

        Raises:
            NetlistIntegrityError: On width-mismatched connections or cells
                that break their role contract
            UnsupportedCellError: On cells whose type is not a recognized gate
            MultipleDriversError: On multi-driven bits when the policy is "error"
        """
        graph = nx.DiGraph()
        stats = GraphStatistics(module=module.name)
        # Which connection or cell drives each bit
        drivers: dict[SigBit, str] = {}

        for index, conn in enumerate(module.connections):
            if len(conn.dest) != len(conn.src):
                raise NetlistIntegrityError(
                    f"Connection #{index} width mismatch: "
                    f"{len(conn.dest)} destination bits, {len(conn.src)} source bits",
                    module=module.name
                )
            for dest_bit, src_bit in zip(conn.dest, conn.src):
                self._claim(module, drivers, stats, dest_bit, f"connection #{index}")
                graph.add_edge(src_bit, dest_bit, kind=ALIAS_EDGE)
                stats.alias_edges += 1

        for cell in module.cells:
            kind = self._classify_cell(module, cell)
            if kind is None:
                stats.annotation_cells += 1
                continue

            stats.cells_by_kind[kind.name] = stats.cells_by_kind.get(kind.name, 0) + 1
            output = cell.bits(OUTPUT_ROLE)[0]
            self._claim(module, drivers, stats, output, f"cell {cell.name}")

            for role in kind.input_roles:
                input_bit = cell.bits(role)[0]
                graph.add_edge(input_bit, output, kind=GATE_EDGE, cell=cell.name, role=role)
                stats.gate_edges += 1

        stats.total_bits = graph.number_of_nodes()
        stats.total_edges = graph.number_of_edges()

        self.logger.debug(
            f"Graph built for {module.name}: {stats.total_bits} bits, {stats.total_edges} edges"
        )
        return FaninGraph(module, graph, stats)

    def _classify_cell(self, module: Module, cell: GateCell) -> Optional[GateKind]:
        """Return the cell's gate kind, or None for a skipped annotation cell."""
        if cell.type in self.annotation_cells and self.settings.skip_annotations:
            return None

        kind = GateKind.from_type(cell.type)
        if kind is None or kind not in self.recognized:
            raise UnsupportedCellError(cell.name, cell.type, module=module.name)

        roles = set(cell.connections)
        if roles != kind.roles:
            raise NetlistIntegrityError(
                f"Cell '{cell.name}' ({cell.type}) connects roles {sorted(roles)}, "
                f"expected {sorted(kind.roles)}",
                module=module.name
            )
        for role, bits in cell.connections.items():
            if len(bits) != 1:
                raise NetlistIntegrityError(
                    f"Cell '{cell.name}' role {role} connects {len(bits)} bits, expected 1",
                    module=module.name
                )
        return kind

    def _claim(
        self,
        module: Module,
        drivers: dict[SigBit, str],
        stats: GraphStatistics,
        bit: SigBit,
        driver: str
    ) -> None:
        """Record the driver of a bit and apply the multi-driver policy."""
        previous = drivers.get(bit)
        if previous is None or previous == driver:
            drivers[bit] = driver
            return

        if self.settings.multi_driver_policy == "error":
            raise MultipleDriversError(
                f"Bit {bit} is driven by both {previous} and {driver}",
                module=module.name
            )

        # Union: fan-in of both drivers is merged
        if bit.label not in stats.multi_driven_bits:
            stats.multi_driven_bits.append(bit.label)
        self.logger.debug(f"{module.name}: bit {bit} driven by {previous} and {driver}, merging")
