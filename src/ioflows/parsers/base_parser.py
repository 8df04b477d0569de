"""Base parser class and the bit-level netlist data model."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from pathlib import Path
from typing import Optional, Union
import hashlib


class PortDirection(Enum):
    """Direction of a module port."""
    INPUT = "input"
    OUTPUT = "output"
    INOUT = "inout"


@total_ordering
@dataclass(frozen=True)
class SigBit:
    """One bit of a named wire, or a constant/disconnected bit.

    Equality and hashing use the wire name and offset only; the width is
    carried along for reporting. Constant bits have no wire and record
    their logic value ("0", "1", "x" or "z") instead.
    """
    wire: Optional[str]
    offset: int = 0
    width: int = field(default=1, compare=False)
    value: Optional[str] = None

    @classmethod
    def const(cls, value: str) -> "SigBit":
        """Create a constant bit."""
        return cls(wire=None, offset=0, width=1, value=value)

    @property
    def is_wire(self) -> bool:
        return self.wire is not None

    @property
    def label(self) -> str:
        """Label used as a key in dependency records, e.g. ``Y[0]``."""
        if self.wire is None:
            return f"'{self.value}'"
        return f"{self.wire}[{self.offset}]"

    def sort_key(self) -> tuple:
        if self.wire is None:
            return (1, self.value or "", self.offset)
        return (0, self.wire, self.offset)

    def to_dict(self) -> dict:
        """Convert to a ``{name, offset, width}`` descriptor."""
        return {
            "name": self.wire,
            "offset": self.offset,
            "width": self.width
        }

    def __lt__(self, other: "SigBit") -> bool:
        if not isinstance(other, SigBit):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return self.label


# Anything that can be turned into a list of bits
SigLike = Union["Wire", SigBit, str, list]


@dataclass
class Wire:
    """A named multi-bit signal with its port role flags."""
    name: str
    width: int = 1
    port_input: bool = False
    port_output: bool = False
    attributes: dict = field(default_factory=dict)

    def bit(self, offset: int) -> SigBit:
        if not 0 <= offset < self.width:
            raise IndexError(f"Bit {offset} out of range for wire '{self.name}' of width {self.width}")
        return SigBit(self.name, offset, self.width)

    def bits(self) -> list[SigBit]:
        return [SigBit(self.name, offset, self.width) for offset in range(self.width)]

    @property
    def direction(self) -> Optional[PortDirection]:
        if self.port_input and self.port_output:
            return PortDirection.INOUT
        if self.port_input:
            return PortDirection.INPUT
        if self.port_output:
            return PortDirection.OUTPUT
        return None


@dataclass
class Connection:
    """A direct bit-level alias: ``dest = src``."""
    dest: list[SigBit]
    src: list[SigBit]

    @property
    def width(self) -> int:
        return len(self.dest)


@dataclass
class GateCell:
    """An instance of a primitive cell, with bits connected per role."""
    name: str
    type: str
    connections: dict[str, list[SigBit]] = field(default_factory=dict)
    attributes: dict = field(default_factory=dict)

    def bits(self, role: str) -> list[SigBit]:
        return self.connections.get(role, [])


@dataclass
class Module:
    """A flattened module: declared wires and ports, aliases and cells."""
    name: str
    wires: dict[str, Wire] = field(default_factory=dict)
    ports: list[str] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    cells: list[GateCell] = field(default_factory=list)
    attributes: dict = field(default_factory=dict)

    def wire(self, name: str) -> Optional[Wire]:
        return self.wires.get(name)

    def add_wire(
        self,
        name: str,
        width: int = 1,
        direction: Optional[PortDirection] = None
    ) -> Wire:
        """Declare a wire, optionally as a port.

        Args:
            name: Wire name
            width: Number of bits
            direction: Port direction, or None for an internal wire

        Returns:
            The declared wire
        """
        if name in self.wires:
            raise ValueError(f"Wire '{name}' already declared in module '{self.name}'")
        wire = Wire(name=name, width=width)
        self.wires[name] = wire
        if direction is not None:
            self.add_port(name, direction)
        return wire

    def add_port(self, name: str, direction: PortDirection) -> Wire:
        """Mark an existing wire as a port of the module."""
        wire = self.wires.get(name)
        if wire is None:
            raise KeyError(f"No wire '{name}' in module '{self.name}'")

        wire.port_input = direction in (PortDirection.INPUT, PortDirection.INOUT)
        wire.port_output = direction in (PortDirection.OUTPUT, PortDirection.INOUT)
        if name not in self.ports:
            self.ports.append(name)
        return wire

    def connect(self, dest: SigLike, src: SigLike) -> Connection:
        """Add a direct connection ``dest = src``."""
        connection = Connection(dest=self.as_bits(dest), src=self.as_bits(src))
        self.connections.append(connection)
        return connection

    def add_cell(self, name: str, cell_type: str, **connections: SigLike) -> GateCell:
        """Add a cell, connecting each keyword role to a wire, bit or bit list.

        Example:
            module.add_cell("g0", "$_AND_", A="a", B="b", Y="y")
        """
        cell = GateCell(
            name=name,
            type=cell_type,
            connections={role: self.as_bits(sig) for role, sig in connections.items()}
        )
        self.cells.append(cell)
        return cell

    def as_bits(self, sig: SigLike) -> list[SigBit]:
        """Normalize a wire, wire name, bit or list of those to a list of bits."""
        if isinstance(sig, SigBit):
            wire = self.wires.get(sig.wire) if sig.is_wire else None
            if wire is not None and 0 <= sig.offset < wire.width:
                return [wire.bit(sig.offset)]
            return [sig]
        if isinstance(sig, Wire):
            return sig.bits()
        if isinstance(sig, str):
            wire = self.wires.get(sig)
            if wire is None:
                raise KeyError(f"No wire '{sig}' in module '{self.name}'")
            return wire.bits()
        bits = []
        for item in sig:
            bits.extend(self.as_bits(item))
        return bits

    def port_wires(self) -> list[Wire]:
        """Port wires in declaration order."""
        return [self.wires[name] for name in self.ports if name in self.wires]

    def input_bits(self) -> list[SigBit]:
        return [bit for wire in self.port_wires() if wire.port_input for bit in wire.bits()]

    def output_bits(self) -> list[SigBit]:
        return [bit for wire in self.port_wires() if wire.port_output for bit in wire.bits()]

    def is_primary_input(self, bit: SigBit) -> bool:
        wire = self.wires.get(bit.wire) if bit.is_wire else None
        return wire is not None and wire.port_input


@dataclass
class ParseResult:
    """Result of parsing a netlist file."""
    file_path: str
    file_hash: str
    modules: list[Module] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if parsing was successful (no critical errors)."""
        return len(self.errors) == 0

    @property
    def module_count(self) -> int:
        return len(self.modules)

    def get_module(self, name: str) -> Optional[Module]:
        for module in self.modules:
            if module.name == name:
                return module
        return None


class BaseParser(ABC):
    """Base class for all netlist parsers."""

    def __init__(self, config: Optional[dict] = None):
        self.config = config or {}

    @abstractmethod
    def parse_file(self, file_path: Path) -> ParseResult:
        """Parse a single netlist file and return its modules."""
        pass

    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return list of file extensions this parser handles."""
        pass

    def can_parse(self, file_path: Path) -> bool:
        """Check if this parser can handle the given file."""
        return file_path.suffix.lower() in self.supported_extensions()

    def compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file contents for change detection."""
        try:
            content = file_path.read_bytes()
            return hashlib.md5(content).hexdigest()
        except OSError:
            return ""
