"""Fan-in graph construction and queries."""

from .gate_kinds import GateKind, parse_gate_kinds
from .graph_builder import FaninGraph, FaninGraphBuilder, GraphStatistics
from .graph_queries import FaninQueries, PathResult, PathStep

__all__ = [
    "GateKind",
    "parse_gate_kinds",
    "FaninGraph",
    "FaninGraphBuilder",
    "GraphStatistics",
    "FaninQueries",
    "PathResult",
    "PathStep"
]
