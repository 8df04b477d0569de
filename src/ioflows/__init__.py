"""ioflows - input-to-output dependency extraction for gate-level netlists.

Computes, for every primary output bit of a combinational module, the set of
primary input bits that can influence it.
"""

__version__ = "0.1.0"

from .analyzers import IOFlowAnalyzer, ModuleFlowResult, DesignFlowReport
from .parsers import Module, SigBit, YosysJSONParser

__all__ = [
    "IOFlowAnalyzer",
    "ModuleFlowResult",
    "DesignFlowReport",
    "Module",
    "SigBit",
    "YosysJSONParser",
]
