from .export import FlowchartData, SubtaskEntry
from .llm import FlowchartItemDict, ExtractedTaskDict

__all__ = [
    "FlowchartData",
    "SubtaskEntry",
    "FlowchartItemDict",
    "ExtractedTaskDict",
]
