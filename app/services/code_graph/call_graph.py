"""Построение графа вызовов."""

import logging
import math
import re

from app.constants import (
    EDGE_TYPE_ASYNC_CALL,
    EDGE_TYPE_FUNCTION_CALL,
    EDGE_TYPE_MULTIPLE_CALLS,
    NODE_TYPE_ASYNC,
    NODE_TYPE_CLASS_METHOD,
    NODE_TYPE_EXPORTED,
    NODE_TYPE_FUNCTION,
)

from .config import AnalysisConfig, GraphFilter
from .models import (
    CallInfo,
    FunctionInfo,
    GraphData,
    GraphEdge,
    GraphNode,
    NodeData,
    ParsedFile,
)

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9]")

MAX_COMPLEXITY = 10


def sanitize_name(name: str) -> str:
    """Заменить всё, кроме [A-Za-z0-9], на '_'."""
    return _UNSAFE_ID_CHARS.sub("_", name)


def create_node_id(name: str) -> str:
    return f"node-{sanitize_name(name)}"


class CallGraph:
    """Граф функций файла."""

    def __init__(self, config: AnalysisConfig | None = None):
        self.config = config if config is not None else AnalysisConfig()

    def build(self, parsed: ParsedFile) -> GraphData:
        """
        Построить граф из распарсенного файла.

        Args:
            parsed: ParsedFile (используются только functions и calls)

        Returns:
            GraphData без раскладки (все позиции в нуле)
        """
        node_ids = self._assign_node_ids(parsed.functions)
        nodes = self._create_nodes(parsed.functions, node_ids)
        edges = self._create_edges(parsed.calls, node_ids)

        logger.info(f"[Graph] Built with {len(nodes)} nodes, {len(edges)} edges")
        return GraphData(nodes=nodes, edges=edges)

    def _assign_node_ids(self, functions: list[FunctionInfo]) -> dict[str, str]:
        """
        Сопоставить имена функций и id узлов.

        Одинаковые имена получают один id. Разные имена, совпавшие после
        замены символов (foo-bar и foo.bar), получают суффикс -2, -3, ...
        """
        ids: dict[str, str] = {}
        owners: dict[str, str] = {}

        for func in functions:
            if func.name in ids:
                continue

            base = create_node_id(func.name)
            node_id = base
            suffix = 2
            while node_id in owners:
                node_id = f"{base}-{suffix}"
                suffix += 1

            if node_id != base:
                logger.warning(
                    f"[Graph] Node id collision: '{func.name}' and '{owners[base]}' "
                    f"both map to '{base}', using '{node_id}'"
                )

            ids[func.name] = node_id
            owners[node_id] = func.name

        return ids

    def _create_nodes(
        self, functions: list[FunctionInfo], node_ids: dict[str, str]
    ) -> list[GraphNode]:
        """Создать узлы графа из функций."""
        nodes = []

        for func in functions:
            nodes.append(
                GraphNode(
                    id=node_ids[func.name],
                    type=node_type(func),
                    data=NodeData(
                        label=func.name,
                        parameters=list(func.parameters),
                        return_type=func.return_type,
                        is_async=func.is_async,
                        is_exported=func.is_exported,
                        location=func.location,
                        documentation=func.documentation,
                        signature=source_preview(func),
                        complexity=calculate_complexity(func),
                        category=categorize_function(func),
                    ),
                    class_name=node_class_name(func),
                )
            )

        return nodes

    def _create_edges(self, calls: list[CallInfo], node_ids: dict[str, str]) -> list[GraphEdge]:
        """Создать рёбра графа: по одному на пару caller -> callee."""
        # dict сохраняет порядок первого появления пары
        groups: dict[tuple[str, str], list[CallInfo]] = {}
        for call in calls:
            groups.setdefault((call.caller, call.callee), []).append(call)

        edges = []
        for (caller, callee), group in groups.items():
            source = node_ids.get(caller) or create_node_id(caller)
            target = node_ids.get(callee) or create_node_id(callee)
            call_count = len(group)
            has_async_call = any(self._is_async_call(call) for call in group)

            if has_async_call:
                kind = EDGE_TYPE_ASYNC_CALL
            elif call_count > 1:
                kind = EDGE_TYPE_MULTIPLE_CALLS
            else:
                kind = EDGE_TYPE_FUNCTION_CALL

            edges.append(
                GraphEdge(
                    id=_edge_id(source, target),
                    source=source,
                    target=target,
                    call_count=call_count,
                    animated=has_async_call,
                    kind=kind,
                    calls=group,
                    label=f"{call_count}x" if call_count > 1 else None,
                )
            )

        return edges

    def _is_async_call(self, call: CallInfo) -> bool:
        """Эвристика по имени вызываемой функции."""
        callee = call.callee.lower()
        return any(pattern in callee for pattern in self.config.async_call_patterns)


def _edge_id(source_id: str, target_id: str) -> str:
    return f"edge-{source_id.removeprefix('node-')}-to-{target_id.removeprefix('node-')}"


def node_type(func: FunctionInfo) -> str:
    """Тип узла: метод > экспорт > async > обычная функция."""
    if func.is_method:
        return NODE_TYPE_CLASS_METHOD
    if func.is_exported:
        return NODE_TYPE_EXPORTED
    if func.is_async:
        return NODE_TYPE_ASYNC
    return NODE_TYPE_FUNCTION


def calculate_complexity(func: FunctionInfo) -> int:
    """Оценка сложности функции (1..10)."""
    complexity = 1.0
    complexity += len(func.parameters) * 0.5

    if "|" in func.return_type or "&" in func.return_type:
        complexity += 1
    if func.is_async:
        complexity += 1
    if func.is_method:
        complexity += 0.5

    return min(math.ceil(complexity), MAX_COMPLEXITY)


def categorize_function(func: FunctionInfo) -> str:
    if func.is_exported:
        return "exported"
    if func.is_async:
        return "async"
    if func.is_method:
        return "method"
    if not func.parameters:
        return "simple"
    if len(func.parameters) > 3:
        return "complex"
    return "function"


def node_class_name(func: FunctionInfo) -> str:
    """CSS-классы узла для рендера."""
    classes = ["function-node"]

    if func.is_exported:
        classes.append("exported")
    if func.is_async:
        classes.append("async")
    if func.is_method:
        classes.append("method")

    complexity = calculate_complexity(func)
    if complexity > 7:
        classes.append("high-complexity")
    elif complexity > 4:
        classes.append("medium-complexity")
    else:
        classes.append("low-complexity")

    return " ".join(classes)


def source_preview(func: FunctionInfo) -> str:
    """Короткая сигнатура: async function name(a?: T = x): R."""
    params = []
    for param in func.parameters:
        text = param.name
        if param.optional:
            text += "?"
        if param.type != "any":
            text += f": {param.type}"
        if param.default_value:
            text += f" = {param.default_value}"
        params.append(text)

    prefix = "async " if func.is_async else ""
    suffix = f": {func.return_type}" if func.return_type != "any" else ""
    return f"{prefix}function {func.name}({', '.join(params)}){suffix}"


def build_graph(parsed: ParsedFile, config: AnalysisConfig | None = None) -> GraphData:
    return CallGraph(config).build(parsed)


def filter_graph(graph: GraphData, criteria: GraphFilter) -> GraphData:
    """
    Оставить узлы, подходящие под все заданные критерии.

    Рёбра сохраняются только между оставшимися узлами,
    заголовки групп матричной раскладки отбрасываются.
    """
    nodes = []
    for node in graph.nodes:
        if node.is_header:
            continue
        data = node.data

        if criteria.show_exported is not None and data.is_exported != criteria.show_exported:
            continue
        if criteria.show_methods is not None and ("." in data.label) != criteria.show_methods:
            continue
        if criteria.show_async is not None and data.is_async != criteria.show_async:
            continue
        if criteria.min_complexity is not None and data.complexity < criteria.min_complexity:
            continue
        if criteria.max_complexity is not None and data.complexity > criteria.max_complexity:
            continue

        nodes.append(node)

    return GraphData(nodes=nodes, edges=_edges_between(graph.edges, nodes))


def simplify_graph(graph: GraphData) -> GraphData:
    """Экспортированные функции и то, что они вызывают напрямую (один шаг)."""
    exported_ids = {
        node.id for node in graph.nodes if not node.is_header and node.data.is_exported
    }
    called_ids = {edge.target for edge in graph.edges if edge.source in exported_ids}
    relevant = exported_ids | called_ids

    nodes = [node for node in graph.nodes if node.id in relevant and not node.is_header]
    return GraphData(nodes=nodes, edges=_edges_between(graph.edges, nodes))


def _edges_between(edges: list[GraphEdge], nodes: list[GraphNode]) -> list[GraphEdge]:
    node_ids = {node.id for node in nodes}
    return [edge for edge in edges if edge.source in node_ids and edge.target in node_ids]
