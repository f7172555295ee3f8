"""Раскладка узлов графа функций."""

import logging
import math
from collections import defaultdict
from dataclasses import replace

import networkx as nx

from app.constants import NODE_TYPE_SECTION_HEADER

from .config import LayoutOptions
from .models import Bounds, GraphEdge, GraphNode, HeaderData, NodeData, Position

logger = logging.getLogger(__name__)

# Порядок групп матричной раскладки и их заголовки
GROUP_ORDER = (
    "exported",
    "async",
    "method",
    "useCallback",
    "useEffect",
    "useMemo",
    "useState",
    "jsxHandler",
    "function",
    "other",
)

GROUP_TITLES = {
    "exported": "Exported Functions",
    "async": "Async Functions",
    "method": "Class Methods",
    "useCallback": "useCallback Hooks",
    "useEffect": "useEffect Hooks",
    "useMemo": "useMemo Hooks",
    "useState": "useState Hooks",
    "jsxHandler": "JSX Event Handlers",
    "function": "Regular Functions",
    "other": "Other Functions",
}


def calculate_node_size(
    node: GraphNode, options: LayoutOptions | None = None
) -> tuple[float, float]:
    """
    Размер узла по его содержимому.

    Ширина растёт с длиной имени, самого длинного параметра, типа
    результата и числом бейджей (async, export, complex); высота растёт
    с числом параметров. Итог ограничивается min/max из options.

    Returns:
        (width, height)
    """
    options = options or LayoutOptions()
    width = options.node_width
    height = options.node_height

    data = node.data
    if not isinstance(data, NodeData):
        return width, height

    if data.label:
        width = max(width, max(len(data.label) * 12, 300))

    if data.parameters:
        longest = max(len(f"{p.name}{p.type}") for p in data.parameters)
        width = max(width, longest * 8 + 100)
        height = max(height, 180 + len(data.parameters) * 30)

    if data.return_type and data.return_type != "any":
        width = max(width, len(data.return_type) * 12 + 120)

    badges = 0
    if data.is_async:
        badges += 120
    if data.is_exported:
        badges += 100
    if data.complexity > 3:
        badges += 100
    width += badges

    # Длинные имена асинхронных функций
    if data.is_async:
        width += 80

    max_width = options.max_async_node_width if data.is_async else options.max_node_width
    width = min(max(width, options.min_node_width), max_width)
    height = min(max(height, options.min_node_height), options.max_node_height)
    return width, height


def _sized(node: GraphNode, position: Position, size: tuple[float, float]) -> GraphNode:
    width, height = size
    return replace(node, position=position, width=width, height=height)


def layout_nodes(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """
    Иерархическая (послойная) раскладка.

    1. Циклы сворачиваются в компоненты сильной связности, каждая
       компонента получает ранг по самому длинному пути от истоков.
    2. Внутри рангов узлы упорядочиваются методом барицентров.
    3. Ранги укладываются вдоль направления (TB/BT/LR/RL) через rank_sep,
       узлы внутри ранга через node_sep.

    Args:
        nodes: узлы графа
        edges: рёбра (с неизвестными концами и петли игнорируются)
        options: параметры раскладки

    Returns:
        новые узлы с позициями (левый верхний угол) и размерами
    """
    options = options or LayoutOptions()
    if not nodes:
        return []

    sizes = [calculate_node_size(node, options) for node in nodes]
    graph = _rank_graph(nodes, edges)
    ranks = _assign_ranks(graph)
    layers = _order_layers(graph, ranks, options.ordering_sweeps)
    positions = _place_layers(layers, sizes, options)

    logger.debug(
        f"[Layout] Hierarchical {options.direction}: {len(nodes)} nodes in {len(layers)} ranks"
    )
    return [_sized(node, positions[i], sizes[i]) for i, node in enumerate(nodes)]


def _rank_graph(nodes: list[GraphNode], edges: list[GraphEdge]) -> nx.DiGraph:
    """Граф по индексам узлов (id может повторяться у одноимённых функций)."""
    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(nodes)))

    indexes: dict[str, list[int]] = defaultdict(list)
    for i, node in enumerate(nodes):
        indexes[node.id].append(i)

    for edge in edges:
        if edge.source == edge.target:
            continue
        for u in indexes.get(edge.source, []):
            for v in indexes.get(edge.target, []):
                graph.add_edge(u, v)

    return graph


def _assign_ranks(graph: nx.DiGraph) -> dict[int, int]:
    """Ранг = длина самого длинного пути до компоненты в конденсации."""
    condensed = nx.condensation(graph)
    component_rank: dict[int, int] = {}

    for component in nx.topological_sort(condensed):
        component_rank[component] = max(
            (component_rank[p] + 1 for p in condensed.predecessors(component)),
            default=0,
        )

    mapping = condensed.graph["mapping"]
    return {node: component_rank[mapping[node]] for node in graph.nodes}


def _order_layers(graph: nx.DiGraph, ranks: dict[int, int], sweeps: int) -> list[list[int]]:
    """Упорядочить узлы внутри рангов проходами вниз и вверх."""
    layer_count = max(ranks.values()) + 1
    layers: list[list[int]] = [[] for _ in range(layer_count)]
    for node in sorted(ranks):
        layers[ranks[node]].append(node)

    undirected = graph.to_undirected(as_view=True)

    for _ in range(sweeps):
        for r in range(1, layer_count):
            layers[r] = _sort_by_barycenter(layers[r], layers[r - 1], undirected)
        for r in range(layer_count - 2, -1, -1):
            layers[r] = _sort_by_barycenter(layers[r], layers[r + 1], undirected)

    return layers


def _sort_by_barycenter(layer: list[int], fixed: list[int], graph) -> list[int]:
    order = {node: i for i, node in enumerate(fixed)}

    def key(item: tuple[int, int]) -> tuple[float, int]:
        index, node = item
        neighbours = [order[n] for n in graph.neighbors(node) if n in order]
        if not neighbours:
            return float(index), index
        return sum(neighbours) / len(neighbours), index

    return [node for _, node in sorted(enumerate(layer), key=key)]


def _place_layers(
    layers: list[list[int]],
    sizes: list[tuple[float, float]],
    options: LayoutOptions,
) -> dict[int, Position]:
    """Координаты левых верхних углов по упорядоченным рангам."""
    horizontal = options.direction in ("LR", "RL")

    def main_size(node: int) -> float:
        return sizes[node][0] if horizontal else sizes[node][1]

    def cross_size(node: int) -> float:
        return sizes[node][1] if horizontal else sizes[node][0]

    # Толщина ранга и длина ряда
    extents = [max(main_size(n) for n in layer) for layer in layers]
    lengths = [
        sum(cross_size(n) for n in layer) + options.node_sep * (len(layer) - 1)
        for layer in layers
    ]
    widest = max(lengths)
    total_main = sum(extents) + options.rank_sep * (len(layers) - 1)

    positions = {}
    rank_start = 0.0
    for layer, extent, length in zip(layers, extents, lengths):
        cross = (widest - length) / 2
        for node in layer:
            main = rank_start + (extent - main_size(node)) / 2
            if options.direction in ("BT", "RL"):
                main = total_main - main - main_size(node)

            if horizontal:
                x, y = main, cross
            else:
                x, y = cross, main
            positions[node] = Position(x=x + options.margin, y=y + options.margin)

            cross += cross_size(node) + options.node_sep
        rank_start += extent + options.rank_sep

    return positions


def create_hierarchical_layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """Сверху вниз (или в направлении options) с плотными отступами."""
    options = options or LayoutOptions()
    return layout_nodes(nodes, edges, options.with_overrides(rank_sep=120, node_sep=80))


def create_horizontal_layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """Компактная раскладка слева направо."""
    options = options or LayoutOptions()
    return layout_nodes(
        nodes, edges, options.with_overrides(direction="LR", rank_sep=150, node_sep=100)
    )


def create_circular_layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """
    Узлы по кругу для маленьких графов.

    Больше circle_max_nodes узлов - иерархическая раскладка.
    """
    options = options or LayoutOptions()

    if len(nodes) <= 1:
        return [
            _sized(node, Position(0, 0), calculate_node_size(node, options)) for node in nodes
        ]

    if len(nodes) > options.circle_max_nodes:
        logger.info(
            f"[Layout] {len(nodes)} nodes is too many for circular layout, using hierarchical"
        )
        return create_hierarchical_layout(nodes, edges, options)

    center_x, center_y = options.circle_center
    radius = max(100, len(nodes) * 30)

    result = []
    for index, node in enumerate(nodes):
        angle = 2 * math.pi * index / len(nodes)
        # Смещение на половину типичного узла
        x = center_x + radius * math.cos(angle) - 125
        y = center_y + radius * math.sin(angle) - 50
        result.append(_sized(node, Position(x, y), calculate_node_size(node, options)))

    return result


def node_group(node: GraphNode) -> str:
    """Группа узла для матричной раскладки (по убыванию приоритета)."""
    data = node.data
    label = data.label or ""

    if data.is_exported:
        return "exported"
    if data.is_async:
        return "async"
    if data.category == "method" or "." in label:
        return "method"
    for hook in ("useCallback", "useEffect", "useMemo", "useState"):
        if f"({hook})" in label:
            return hook
    if ".onClick" in label or "handler" in label or "Handler" in label:
        return "jsxHandler"
    if data.category == "function" or not data.category:
        return "function"
    return "other"


def create_matrix_layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    columns: int = 5,
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """
    Сетка, сгруппированная по типу функций.

    Каждая непустая группа начинается с узла-заголовка и занимает
    ceil(n / columns) рядов; внутри группы узлы отсортированы по имени.
    Заголовки из предыдущей раскладки отбрасываются и строятся заново.

    Args:
        nodes: узлы графа
        edges: рёбра (на позиции не влияют)
        columns: число колонок
        options: параметры раскладки

    Returns:
        заголовки групп и узлы с позициями
    """
    options = options or LayoutOptions()
    if not nodes:
        return []

    if not isinstance(columns, int) or isinstance(columns, bool) or columns < 1:
        logger.warning(f"[Layout] Invalid column count {columns!r}, using hierarchical")
        return create_hierarchical_layout(nodes, edges, options)

    content = [node for node in nodes if not node.is_header]

    groups: dict[str, list[GraphNode]] = defaultdict(list)
    for node in content:
        groups[node_group(node)].append(node)

    # Размер считается от базового узла сетки
    size_options = options.with_overrides(
        node_width=options.grid_node_width, node_height=options.grid_node_height
    )
    start_x, start_y = options.grid_start
    current_y = start_y
    result = []

    ordered = [(group, groups[group]) for group in GROUP_ORDER if groups.get(group)]
    for group_index, (group, members) in enumerate(ordered):
        if group_index > 0:
            current_y += options.grid_group_spacing

        members = sorted(members, key=lambda n: (n.data.label.casefold(), n.data.label))

        result.append(
            GraphNode(
                id=f"section-header-{group}-{group_index}",
                type=NODE_TYPE_SECTION_HEADER,
                data=HeaderData(label=GROUP_TITLES[group], group=group, count=len(members)),
                position=Position(start_x, current_y - 50),
                width=columns * options.grid_horizontal_spacing - 50,
                height=options.header_height,
                draggable=False,
                selectable=False,
            )
        )

        for index, node in enumerate(members):
            row, col = divmod(index, columns)
            position = Position(
                x=start_x + col * options.grid_horizontal_spacing,
                y=current_y + row * options.grid_vertical_spacing,
            )
            result.append(_sized(node, position, calculate_node_size(node, size_options)))

        current_y += math.ceil(len(members) / columns) * options.grid_vertical_spacing

    logger.debug(f"[Layout] Matrix: {len(content)} nodes in {len(ordered)} groups")
    return result


def auto_layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """Раскладка по умолчанию: один узел - фиксированная точка, иначе сетка."""
    options = options or LayoutOptions()

    if not nodes:
        return []

    if len(nodes) == 1:
        x, y = options.single_node_position
        node = nodes[0]
        return [_sized(node, Position(x, y), calculate_node_size(node, options))]

    return create_matrix_layout(nodes, edges, options.grid_columns, options)


def apply_layout(
    nodes: list[GraphNode],
    edges: list[GraphEdge],
    algorithm: str = "auto",
    options: LayoutOptions | None = None,
) -> list[GraphNode]:
    """
    Раскладка выбранным алгоритмом.

    Неизвестный алгоритм - иерархическая раскладка.
    """
    options = options or LayoutOptions()

    if algorithm == "auto":
        return auto_layout(nodes, edges, options)
    if algorithm == "hierarchical":
        return create_hierarchical_layout(nodes, edges, options)
    if algorithm == "horizontal":
        return create_horizontal_layout(nodes, edges, options)
    if algorithm == "grid":
        return create_matrix_layout(nodes, edges, options.grid_columns, options)
    if algorithm == "circular":
        return create_circular_layout(nodes, edges, options)

    logger.warning(f"[Layout] Unknown layout algorithm '{algorithm}', using hierarchical")
    return create_hierarchical_layout(nodes, edges, options)


def calculate_graph_bounds(
    nodes: list[GraphNode], options: LayoutOptions | None = None
) -> Bounds:
    """Габариты разложенных узлов (размеры по умолчанию из options)."""
    options = options or LayoutOptions()
    if not nodes:
        return Bounds()

    min_x = min(node.position.x for node in nodes)
    min_y = min(node.position.y for node in nodes)
    max_x = max(node.position.x + (node.width or options.node_width) for node in nodes)
    max_y = max(node.position.y + (node.height or options.node_height) for node in nodes)

    return Bounds(
        min_x=min_x,
        min_y=min_y,
        max_x=max_x,
        max_y=max_y,
        width=max_x - min_x,
        height=max_y - min_y,
    )


def center_graph(
    nodes: list[GraphNode], viewport_width: float, viewport_height: float
) -> list[GraphNode]:
    """Сдвинуть все узлы так, чтобы граф оказался в центре окна."""
    if not nodes:
        return []

    bounds = calculate_graph_bounds(nodes)
    offset_x = (viewport_width - bounds.width) / 2 - bounds.min_x
    offset_y = (viewport_height - bounds.height) / 2 - bounds.min_y

    return [
        replace(
            node,
            position=Position(node.position.x + offset_x, node.position.y + offset_y),
        )
        for node in nodes
    ]
