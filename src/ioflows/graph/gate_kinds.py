"""Recognized primitive gate kinds and their port role contracts."""

from enum import Enum
from typing import Iterable, Optional


OUTPUT_ROLE = "Y"


class GateKind(Enum):
    """Single-bit combinational gates of the Yosys internal cell library."""
    BUF = "$_BUF_"
    NOT = "$_NOT_"
    AND = "$_AND_"
    NAND = "$_NAND_"
    OR = "$_OR_"
    NOR = "$_NOR_"
    XOR = "$_XOR_"
    XNOR = "$_XNOR_"
    ANDNOT = "$_ANDNOT_"
    ORNOT = "$_ORNOT_"
    MUX = "$_MUX_"
    NMUX = "$_NMUX_"
    AOI3 = "$_AOI3_"
    OAI3 = "$_OAI3_"
    AOI4 = "$_AOI4_"
    OAI4 = "$_OAI4_"

    @property
    def input_roles(self) -> tuple[str, ...]:
        return GATE_INPUT_ROLES[self]

    @property
    def roles(self) -> frozenset[str]:
        """All roles a cell of this kind must connect, output included."""
        return frozenset(self.input_roles) | {OUTPUT_ROLE}

    @classmethod
    def from_type(cls, cell_type: str) -> Optional["GateKind"]:
        """Look up a kind by cell type name, or None if it is not a gate."""
        try:
            return cls(cell_type)
        except ValueError:
            return None


GATE_INPUT_ROLES: dict[GateKind, tuple[str, ...]] = {
    GateKind.BUF: ("A",),
    GateKind.NOT: ("A",),
    GateKind.AND: ("A", "B"),
    GateKind.NAND: ("A", "B"),
    GateKind.OR: ("A", "B"),
    GateKind.NOR: ("A", "B"),
    GateKind.XOR: ("A", "B"),
    GateKind.XNOR: ("A", "B"),
    GateKind.ANDNOT: ("A", "B"),
    GateKind.ORNOT: ("A", "B"),
    GateKind.MUX: ("A", "B", "S"),
    GateKind.NMUX: ("A", "B", "S"),
    GateKind.AOI3: ("A", "B", "C"),
    GateKind.OAI3: ("A", "B", "C"),
    GateKind.AOI4: ("A", "B", "C", "D"),
    GateKind.OAI4: ("A", "B", "C", "D"),
}


def parse_gate_kinds(names: Optional[Iterable[str]]) -> frozenset[GateKind]:
    """Turn configured gate names into kinds.

    Accepts enum names (``"AND"``) or cell type names (``"$_AND_"``).
    None selects every kind.
    """
    if names is None:
        return frozenset(GateKind)

    kinds = set()
    for name in names:
        kind = GateKind.from_type(name)
        if kind is None:
            try:
                kind = GateKind[name.upper()]
            except KeyError:
                raise ValueError(f"Unknown gate kind: {name!r}") from None
        kinds.add(kind)
    return frozenset(kinds)
