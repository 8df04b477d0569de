"""Input-to-output flow analysis for whole modules and designs."""

import json
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Optional

from .dependency_resolver import DependencyResolver
from .sequential_classifier import SequentialClassifier
from ..exceptions import IOFlowError
from ..graph.graph_builder import FaninGraphBuilder, GraphStatistics
from ..parsers.base_parser import Module, SigBit
from ..utils.config import AnalysisSettings
from ..utils.logger import setup_logger


REPORT_FORMAT = "ioflows_v1"


@dataclass
class ModuleFlowResult:
    """Input dependencies of every output bit of one module.

    ``dependencies`` is None when the module is sequential and analysis was
    skipped, which is distinct from an empty mapping.
    """
    module: str
    is_sequential: bool
    inputs: list[SigBit] = field(default_factory=list)
    outputs: list[SigBit] = field(default_factory=list)
    dependencies: Optional[dict[SigBit, list[SigBit]]] = None
    sequential_cells: list[str] = field(default_factory=list)
    stats: Optional[GraphStatistics] = None

    def dependencies_of(self, label: str) -> Optional[list[SigBit]]:
        """Look up an output bit by its ``name[offset]`` label."""
        if self.dependencies is None:
            return None
        for bit, deps in self.dependencies.items():
            if bit.label == label:
                return deps
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "module": self.module,
            "is_sequential": self.is_sequential,
            "inputs": [bit.to_dict() for bit in self.inputs],
            "outputs": [bit.to_dict() for bit in self.outputs],
        }
        if self.is_sequential:
            data["sequential_cells"] = list(self.sequential_cells)
        else:
            data["dependencies"] = {
                bit.label: [dep.to_dict() for dep in deps]
                for bit, deps in (self.dependencies or {}).items()
            }
        return data

    def format(self) -> str:
        """Format result for display."""
        kind = "sequential" if self.is_sequential else "combinational"
        lines = [
            f"MODULE: {self.module} ({kind})",
            f"Inputs: {len(self.inputs)} bits, Outputs: {len(self.outputs)} bits",
            ""
        ]

        if self.is_sequential:
            lines.append("I/O flow analysis skipped for sequential module")
            for cell in self.sequential_cells[:10]:
                lines.append(f"  state cell: {cell}")
            if len(self.sequential_cells) > 10:
                lines.append(f"  ... and {len(self.sequential_cells) - 10} more")
            return "\n".join(lines)

        for bit, deps in (self.dependencies or {}).items():
            if deps:
                lines.append(f"  {bit.label} <- {', '.join(dep.label for dep in deps)}")
            else:
                lines.append(f"  {bit.label} <- (none)")

        return "\n".join(lines)


@dataclass
class DesignFlowReport:
    """Results for every analyzed module of a design."""
    results: list[ModuleFlowResult] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    def get(self, module: str) -> Optional[ModuleFlowResult]:
        for result in self.results:
            if result.module == module:
                return result
        return None

    def to_dict(self) -> dict:
        return {
            "format": REPORT_FORMAT,
            "modules": [result.to_dict() for result in self.results],
            "errors": list(self.errors)
        }

    def export_json(self, output_path: Path) -> None:
        """Export the report to JSON format."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)


class IOFlowAnalyzer:
    """Classifies modules and resolves output dependencies of combinational ones."""

    def __init__(self, settings: Optional[AnalysisSettings] = None):
        self.settings = settings or AnalysisSettings()
        self.classifier = SequentialClassifier.from_settings(self.settings)
        self.builder = FaninGraphBuilder(self.settings)
        self.logger = setup_logger("io_flow_analyzer")

    def analyze_module(self, module: Module) -> ModuleFlowResult:
        """Analyze one module.

        Sequential modules are reported with their state cells and no
        dependency mapping. Combinational modules get their fan-in graph
        built once and every output bit resolved against a shared memo.

        Args:
            module: Module to analyze

        Returns:
            ModuleFlowResult for the module

        Raises:
            IOFlowError: If the module is malformed or contains a loop
        """
        result = ModuleFlowResult(
            module=module.name,
            is_sequential=False,
            inputs=module.input_bits(),
            outputs=module.output_bits()
        )

        # Phase 1: classify
        seq_cells = self.classifier.find_sequential_cells(module)
        if seq_cells:
            self.logger.info(f"Sequential cell found: {seq_cells[0].type}")
            self.logger.info(f"No I/O flow analysis for sequential module {module.name}")
            result.is_sequential = True
            result.sequential_cells = [f"{cell.name} ({cell.type})" for cell in seq_cells]
            return result

        # Phase 2: build and resolve
        self.logger.info(f"Analysing combinational module {module.name}")
        fanin_graph = self.builder.build(module)
        resolver = DependencyResolver(module, fanin_graph)

        result.stats = fanin_graph.stats
        result.dependencies = resolver.resolve_all(result.outputs)
        return result

    def analyze_design(
        self,
        modules: Iterable[Module],
        patterns: Optional[list[str]] = None
    ) -> DesignFlowReport:
        """Analyze every selected module of a design.

        A module that fails analysis is recorded in the report's errors and
        does not stop the remaining modules.

        Args:
            modules: Modules to consider
            patterns: fnmatch patterns selecting modules by name; None = all

        Returns:
            DesignFlowReport with one result per successfully analyzed module
        """
        report = DesignFlowReport()

        for module in modules:
            if patterns and not any(fnmatch(module.name, p) for p in patterns):
                report.skipped.append(module.name)
                continue

            try:
                report.results.append(self.analyze_module(module))
            except IOFlowError as e:
                self.logger.error(str(e))
                report.errors.append({
                    "module": module.name,
                    "error": type(e).__name__,
                    "message": str(e)
                })

        self.logger.info(
            f"Analyzed {len(report.results)} modules "
            f"({len(report.errors)} errors, {len(report.skipped)} not selected)"
        )
        return report
