"""Resolution of primary-input dependencies over a fan-in graph."""

from typing import Iterable, Optional

from ..exceptions import CombinationalLoopError
from ..graph.graph_builder import FaninGraph
from ..parsers.base_parser import Module, SigBit


EMPTY: frozenset = frozenset()


class DependencyResolver:
    """Computes the primary-input bits each signal bit depends on.

    Results are memoized per bit and shared by every query made through the
    same resolver, so each bit of the module is expanded at most once. The
    traversal is an explicit post-order walk rather than recursion, which
    keeps deep gate chains from hitting the interpreter's recursion limit.

    A resolver belongs to one module; create a new one per module.
    """

    def __init__(self, module: Module, fanin_graph: FaninGraph):
        self.module = module
        self.fanin_graph = fanin_graph
        self.memo: dict[SigBit, frozenset] = {}

    def resolve(self, bit: SigBit) -> frozenset:
        """Return the set of primary-input bits that ``bit`` depends on.

        Raises:
            CombinationalLoopError: If the fan-in of ``bit`` contains a cycle
        """
        if bit in self.memo:
            return self.memo[bit]

        # Bits whose drivers are being resolved, in DFS path order
        in_progress: dict[SigBit, None] = {}
        stack: list[tuple[SigBit, bool]] = [(bit, False)]

        while stack:
            current, expanded = stack.pop()

            if expanded:
                deps = set()
                for driver in self.fanin_graph.fanin(current):
                    deps |= self.memo[driver]
                self.memo[current] = frozenset(deps)
                del in_progress[current]
                continue

            if current in self.memo:
                continue

            base = self._base_case(current)
            if base is not None:
                self.memo[current] = base
                continue

            if current in in_progress:
                path = list(in_progress)
                cycle = path[path.index(current):] + [current]
                raise CombinationalLoopError(cycle, module=self.module.name)

            in_progress[current] = None
            stack.append((current, True))
            for driver in sorted(self.fanin_graph.fanin(current), reverse=True):
                if driver not in self.memo:
                    stack.append((driver, False))

        return self.memo[bit]

    def resolve_all(self, bits: Iterable[SigBit]) -> dict[SigBit, list[SigBit]]:
        """Resolve several bits, returning sorted dependency lists."""
        return {bit: sorted(self.resolve(bit)) for bit in bits}

    def _base_case(self, bit: SigBit) -> Optional[frozenset]:
        """Dependencies of a bit that need no traversal, or None."""
        wire = self.module.wire(bit.wire) if bit.is_wire else None
        if wire is None:
            return EMPTY
        if self.module.is_primary_input(bit):
            # Descriptor width comes from the declaration
            return frozenset({SigBit(wire.name, bit.offset, wire.width)})
        return None
