"""Netlist data model and parsers."""

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
from .yosys_json_parser import YosysJSONParser

__all__ = [
    "BaseParser",
    "Connection",
    "GateCell",
    "Module",
    "ParseResult",
    "PortDirection",
    "SigBit",
    "Wire",
    "YosysJSONParser",
]
