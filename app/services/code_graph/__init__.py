"""Граф функций TypeScript/TSX файла."""

from .ast_parser import ASTParser, parse_source
from .call_graph import CallGraph, build_graph, filter_graph, simplify_graph
from .config import AnalysisConfig, GraphFilter, LayoutOptions
from .exceptions import CodeGraphError, SourceSyntaxError, SourceValidationError
from .layout_engine import (
    apply_layout,
    auto_layout,
    calculate_graph_bounds,
    calculate_node_size,
    center_graph,
    create_circular_layout,
    create_hierarchical_layout,
    create_horizontal_layout,
    create_matrix_layout,
    layout_nodes,
)
from .models import (
    AnalysisMetadata,
    AnalysisResult,
    CallInfo,
    FunctionInfo,
    FunctionParameter,
    GraphData,
    GraphEdge,
    GraphNode,
    ParsedFile,
    ParseError,
)
from .service import CodeGraphService

__all__ = [
    "ASTParser",
    "AnalysisConfig",
    "AnalysisMetadata",
    "AnalysisResult",
    "CallGraph",
    "CallInfo",
    "CodeGraphError",
    "CodeGraphService",
    "FunctionInfo",
    "FunctionParameter",
    "GraphData",
    "GraphEdge",
    "GraphFilter",
    "GraphNode",
    "LayoutOptions",
    "ParseError",
    "ParsedFile",
    "SourceSyntaxError",
    "SourceValidationError",
    "apply_layout",
    "auto_layout",
    "build_graph",
    "calculate_graph_bounds",
    "calculate_node_size",
    "center_graph",
    "create_circular_layout",
    "create_hierarchical_layout",
    "create_horizontal_layout",
    "create_matrix_layout",
    "filter_graph",
    "layout_nodes",
    "parse_source",
    "simplify_graph",
]
