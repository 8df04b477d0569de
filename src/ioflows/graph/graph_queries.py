"""Path and cone queries over a module's fan-in graph."""

from dataclasses import dataclass, field
from typing import Optional

import networkx as nx

from .graph_builder import FaninGraph, GATE_EDGE
from ..parsers.base_parser import SigBit


@dataclass
class PathStep:
    """Single step in a driver chain."""
    bit: SigBit
    edge_type: Optional[str] = None  # Edge to next bit
    cell: Optional[str] = None
    role: Optional[str] = None


@dataclass
class PathResult:
    """Result of a path query from an input bit to an output bit."""
    source: str
    target: str
    found: bool
    steps: list[PathStep] = field(default_factory=list)

    @property
    def length(self) -> int:
        return max(len(self.steps) - 1, 0)

    @property
    def cells(self) -> list[str]:
        return [step.cell for step in self.steps if step.cell]

    def format(self) -> str:
        """Format path result for display."""
        if not self.found:
            return f"NO PATH FOUND: {self.source} → {self.target}"

        lines = [f"PATH: {self.source} → {self.target} ({self.length} hops)"]
        for i, step in enumerate(self.steps):
            prefix = f"[{i+1}]" if i == 0 else "    └─"
            lines.append(f"{prefix} {step.bit}")
            if step.edge_type == GATE_EDGE:
                lines.append(f"       via {step.cell}.{step.role}")
        return "\n".join(lines)


class FaninQueries:
    """Query engine for a fan-in graph."""

    def __init__(self, fanin_graph: FaninGraph):
        self.fanin_graph = fanin_graph
        self.graph = fanin_graph.graph

    def find_path(self, source: SigBit, target: SigBit) -> PathResult:
        """Find the shortest driver chain from ``source`` to ``target``.

        Args:
            source: Driving bit, usually a primary input
            target: Driven bit, usually a primary output

        Returns:
            PathResult; ``found`` is False when target does not depend on source
        """
        result = PathResult(source=str(source), target=str(target), found=False)

        if source not in self.graph or target not in self.graph:
            return result

        try:
            nodes = nx.shortest_path(self.graph, source, target)
        except nx.NetworkXNoPath:
            return result

        result.found = True
        for i, bit in enumerate(nodes):
            step = PathStep(bit=bit)
            if i < len(nodes) - 1:
                edge_data = self.graph.get_edge_data(bit, nodes[i + 1], {})
                step.edge_type = edge_data.get("kind")
                step.cell = edge_data.get("cell")
                step.role = edge_data.get("role")
            result.steps.append(step)

        return result

    def transitive_fanin(self, bit: SigBit) -> set[SigBit]:
        """All bits the given bit is reachable from, regardless of port roles."""
        if bit not in self.graph:
            return set()
        return set(nx.ancestors(self.graph, bit))

    def cone_cells(self, bit: SigBit) -> set[str]:
        """Names of the gate cells in the fan-in cone of a bit."""
        cone = self.transitive_fanin(bit) | {bit}
        cells = set()
        for src, dest, data in self.graph.in_edges(cone, data=True):
            if data.get("kind") == GATE_EDGE:
                cells.add(data["cell"])
        return cells

    def find_cycle(self) -> Optional[list[SigBit]]:
        """Return one combinational cycle as a list of bits, or None."""
        try:
            edges = nx.find_cycle(self.graph)
        except nx.NetworkXNoCycle:
            return None
        return [src for src, _ in edges] + [edges[0][0]]
