"""Parser for netlists written by the Yosys ``write_json`` command."""

import json
from pathlib import Path
from typing import Any, Optional

from .base_parser import (
    BaseParser,
    Connection,
    GateCell,
    Module,
    ParseResult,
    PortDirection,
    SigBit,
    Wire,
)
from ..exceptions import NetlistParseError
from ..utils.logger import setup_logger


DIRECTIONS = {
    "input": PortDirection.INPUT,
    "output": PortDirection.OUTPUT,
    "inout": PortDirection.INOUT,
}

# Ranking used to pick the bit that stands for a shared net id
_RANK_INPUT = 0
_RANK_PUBLIC = 1
_RANK_HIDDEN = 2
_RANK_OUTPUT = 3


def _attr_true(value: Any) -> bool:
    """Yosys writes boolean attributes as binary strings or integers."""
    if isinstance(value, str):
        return "1" in value
    return bool(value)


def _section(data: dict, key: str, module: str) -> dict:
    """Fetch an object-valued entry, rejecting any other JSON type."""
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise NetlistParseError(f"'{key}' must be an object, got {type(value).__name__}", module=module)
    return value


def _bit_refs(entry: Any, what: str, module: str) -> list:
    """Validate the ``bits`` list of a port, netname or cell connection."""
    bits = entry.get("bits", []) if isinstance(entry, dict) else entry
    if not isinstance(bits, list) or not all(
        isinstance(ref, str) or (isinstance(ref, int) and not isinstance(ref, bool)) for ref in bits
    ):
        raise NetlistParseError(f"{what} must list net ids or constants", module=module)
    return bits


class YosysJSONParser(BaseParser):
    """Parser for Yosys JSON netlists (``write_json``).

    Each netname becomes a wire. Yosys identifies nets by integer ids; when
    several names refer to the same id, one canonical bit is chosen and the
    others are recorded as direct connections from it. Input port bits are
    always preferred as the canonical bit, so that they remain the roots of
    the fan-in graph.
    """

    def __init__(self, config: Optional[dict] = None):
        super().__init__(config)
        self.skip_blackboxes = self.config.get("skip_blackboxes", True)
        self.logger = setup_logger("yosys_json_parser")

    def supported_extensions(self) -> list[str]:
        return [".json"]

    def parse_file(self, file_path: Path) -> ParseResult:
        """Parse a Yosys JSON file and extract its modules."""
        file_path = Path(file_path)
        result = ParseResult(
            file_path=str(file_path),
            file_hash=self.compute_file_hash(file_path),
        )

        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            result.errors.append(f"Failed to read file: {e}")
            return result

        try:
            self._parse_design(data, result)
        except NetlistParseError as e:
            result.errors.append(str(e))

        self.logger.debug(f"Parsed {result.module_count} modules from {file_path}")
        return result

    def parse_dict(self, data: dict, source: str = "<memory>") -> ParseResult:
        """Parse an already loaded Yosys JSON document.

        Raises:
            NetlistParseError: If the document is not a Yosys netlist
        """
        result = ParseResult(file_path=source, file_hash="")
        self._parse_design(data, result)
        return result

    def _parse_design(self, data: Any, result: ParseResult) -> None:
        if not isinstance(data, dict) or not isinstance(data.get("modules"), dict):
            raise NetlistParseError("Not a Yosys JSON netlist: missing 'modules' object")

        for name, module_data in data["modules"].items():
            if not isinstance(module_data, dict):
                raise NetlistParseError("module entry must be an object", module=name)
            attributes = _section(module_data, "attributes", name)
            if self.skip_blackboxes and _attr_true(attributes.get("blackbox", 0)):
                result.warnings.append(f"Skipping blackbox module {name}")
                self.logger.warning(f"Skipping blackbox module {name}")
                continue
            result.modules.append(self.parse_module(name, module_data))

    def parse_module(self, name: str, data: dict) -> Module:
        """Convert one entry of the ``modules`` object into a Module."""
        module = Module(name=name, attributes=dict(_section(data, "attributes", name)))
        ports = _section(data, "ports", name)
        netnames = _section(data, "netnames", name)
        cells = _section(data, "cells", name)
        for kind, entries in (("Port", ports), ("Netname", netnames), ("Cell", cells)):
            for entry_name, entry in entries.items():
                if not isinstance(entry, dict):
                    raise NetlistParseError(f"{kind} '{entry_name}' must be an object", module=name)

        for cell_name, cell in cells.items():
            if not isinstance(cell.get("type", ""), str):
                raise NetlistParseError(f"Cell '{cell_name}' has a non-string type", module=name)

        # Every named bit, keyed by the net id or constant it refers to
        named_refs: dict[str, list] = {
            net_name: _bit_refs(net, f"Netname '{net_name}'", name) for net_name, net in netnames.items()
        }
        for port_name, port in ports.items():
            refs = _bit_refs(port, f"Port '{port_name}'", name)
            named_refs.setdefault(port_name, refs)

        # Wires from netnames, plus ports that have no netname entry
        hidden: set[str] = set()
        for net_name, net in netnames.items():
            wire = Wire(
                name=net_name,
                width=len(named_refs[net_name]),
                attributes=dict(_section(net, "attributes", name))
            )
            module.wires[net_name] = wire
            if _attr_true(net.get("hide_name", 0)):
                hidden.add(net_name)

        for port_name, port in ports.items():
            raw_direction = port.get("direction")
            direction = DIRECTIONS.get(raw_direction) if isinstance(raw_direction, str) else None
            if direction is None:
                raise NetlistParseError(
                    f"Port '{port_name}' has unknown direction {raw_direction!r}",
                    module=name
                )
            if port_name not in module.wires:
                module.wires[port_name] = Wire(name=port_name, width=len(named_refs[port_name]))
            module.add_port(port_name, direction)

        canonical = self._choose_canonical_bits(module, named_refs, hidden)

        for net_name, refs in named_refs.items():
            wire = module.wires[net_name]
            for offset, ref in enumerate(refs):
                bit = wire.bit(offset)
                if isinstance(ref, str):
                    module.connections.append(Connection(dest=[bit], src=[SigBit.const(ref)]))
                elif canonical[ref] != bit:
                    module.connections.append(Connection(dest=[bit], src=[canonical[ref]]))

        for cell_name, cell in cells.items():
            connections = {
                role: [
                    self._resolve_ref(module, canonical, ref)
                    for ref in _bit_refs(refs, f"Cell '{cell_name}' role {role}", name)
                ]
                for role, refs in _section(cell, "connections", name).items()
            }
            module.cells.append(GateCell(
                name=cell_name,
                type=cell.get("type", ""),
                connections=connections,
                attributes=dict(_section(cell, "attributes", name))
            ))

        return module

    def _choose_canonical_bits(
        self,
        module: Module,
        named_refs: dict[str, list],
        hidden: set[str]
    ) -> dict[int, SigBit]:
        """Pick one representative bit for every net id."""
        candidates: dict[int, tuple] = {}

        for net_name, refs in named_refs.items():
            wire = module.wires[net_name]
            if wire.port_input:
                rank = _RANK_INPUT
            elif wire.port_output:
                rank = _RANK_OUTPUT
            elif net_name in hidden:
                rank = _RANK_HIDDEN
            else:
                rank = _RANK_PUBLIC

            for offset, ref in enumerate(refs):
                if isinstance(ref, str):
                    continue
                key = (rank, net_name, offset)
                if ref not in candidates or key < candidates[ref]:
                    candidates[ref] = key

        return {
            ref: module.wires[net_name].bit(offset)
            for ref, (_, net_name, offset) in candidates.items()
        }

    def _resolve_ref(self, module: Module, canonical: dict[int, SigBit], ref: Any) -> SigBit:
        """Map a bit reference from a cell connection to a SigBit."""
        if isinstance(ref, str):
            return SigBit.const(ref)
        if ref not in canonical:
            # Net without any name; give it a one-bit wire of its own
            wire = Wire(name=f"$net{ref}", width=1)
            module.wires[wire.name] = wire
            canonical[ref] = wire.bit(0)
        return canonical[ref]
