"""Error types raised while loading and analysing netlists."""

from typing import Optional


class IOFlowError(Exception):
    """Base class for all ioflows errors."""

    def __init__(self, message: str, module: Optional[str] = None):
        super().__init__(message)
        self.module = module

    def __str__(self) -> str:
        message = super().__str__()
        if self.module:
            return f"{self.module}: {message}"
        return message


class NetlistParseError(IOFlowError):
    """The netlist file could not be read or is not a valid netlist."""


class NetlistIntegrityError(IOFlowError):
    """A connection or cell violates the structural rules of the netlist."""


class UnsupportedCellError(IOFlowError):
    """A cell uses a primitive type that is not recognized."""

    def __init__(self, cell_name: str, cell_type: str, module: Optional[str] = None):
        super().__init__(f"Unsupported cell '{cell_name}' of type '{cell_type}'", module)
        self.cell_name = cell_name
        self.cell_type = cell_type


class MultipleDriversError(IOFlowError):
    """A signal bit is driven by more than one connection or cell."""


class CombinationalLoopError(IOFlowError):
    """The fan-in of a bit leads back to itself."""

    def __init__(self, cycle: list, module: Optional[str] = None):
        path = " -> ".join(str(bit) for bit in cycle)
        super().__init__(f"Combinational loop detected: {path}", module)
        self.cycle = cycle
