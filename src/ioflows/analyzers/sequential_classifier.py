"""Name-based detection of state-holding cells."""

from typing import Iterable, Optional

from ..parsers.base_parser import GateCell, Module
from ..utils.config import AnalysisSettings


class SequentialClassifier:
    """Flags modules that contain flip-flops, latches or memories.

    The check is a substring match on cell type names: any cell whose type
    contains one of the markers counts as state-holding, whether or not it
    really is.
    """

    def __init__(self, markers: Optional[Iterable[str]] = None):
        if markers is None:
            markers = AnalysisSettings().sequential_markers
        self.markers = tuple(markers)

    @classmethod
    def from_settings(cls, settings: AnalysisSettings) -> "SequentialClassifier":
        return cls(settings.sequential_markers)

    def is_sequential_cell(self, cell: GateCell) -> bool:
        return any(marker in cell.type for marker in self.markers)

    def find_sequential_cells(self, module: Module) -> list[GateCell]:
        """All cells of a module that match a sequential marker."""
        return [cell for cell in module.cells if self.is_sequential_cell(cell)]

    def is_sequential(self, module: Module) -> bool:
        return any(self.is_sequential_cell(cell) for cell in module.cells)
