"""Analysis passes for ioflows."""

from .sequential_classifier import SequentialClassifier
from .dependency_resolver import DependencyResolver
from .io_flow_analyzer import IOFlowAnalyzer, ModuleFlowResult, DesignFlowReport

__all__ = [
    "SequentialClassifier",
    "DependencyResolver",
    "IOFlowAnalyzer",
    "ModuleFlowResult",
    "DesignFlowReport"
]
