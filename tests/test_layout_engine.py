"""Tests for node sizing and layout algorithms."""

import math
from dataclasses import replace

import pytest
from conftest import make_function

from app.services.code_graph import (
    LayoutOptions,
    apply_layout,
    auto_layout,
    build_graph,
    calculate_graph_bounds,
    calculate_node_size,
    center_graph,
    create_circular_layout,
    create_horizontal_layout,
    create_matrix_layout,
    layout_nodes,
)
from app.services.code_graph.models import CallInfo, ParsedFile, Position


def graph_of(functions, calls=()):
    calls = [CallInfo(caller=a, callee=b, line=1) for a, b in calls]
    return build_graph(ParsedFile(functions=list(functions), calls=calls))


def chain_graph():
    return graph_of(
        [make_function("main"), make_function("helper"), make_function("utility")],
        [("main", "helper"), ("helper", "utility")],
    )


def positions(nodes):
    return {n.data.label: (n.position.x, n.position.y) for n in nodes}


class TestNodeSize:
    def test_plain_node_uses_base_size(self):
        node = graph_of([make_function("f")]).nodes[0]
        assert calculate_node_size(node) == (450, 180)

    def test_long_label_is_clamped(self):
        node = graph_of([make_function("x" * 100)]).nodes[0]
        assert calculate_node_size(node) == (700, 180)

    def test_badges_and_async_limit(self):
        node = graph_of([make_function("load", is_async=True, is_exported=True)]).nodes[0]
        # 450 + 120 (async) + 100 (export) + 80 (async extra)
        assert calculate_node_size(node) == (750, 180)

    def test_height_grows_with_parameters(self):
        node = graph_of([make_function("f", params=5)]).nodes[0]
        width, height = calculate_node_size(node)
        assert height == 330
        # complexity badge: 1 + 5 * 0.5 -> 4
        assert width == 550

    def test_height_is_clamped(self):
        node = graph_of([make_function("f", params=20)]).nodes[0]
        assert calculate_node_size(node)[1] == 400

    def test_return_type_width(self):
        node = graph_of([make_function("f", return_type="R" * 40)]).nodes[0]
        assert calculate_node_size(node)[0] == 600

    def test_custom_limits(self):
        node = graph_of([make_function("f")]).nodes[0]
        options = LayoutOptions(node_width=100, min_node_width=200)
        assert calculate_node_size(node, options) == (300, 180)


class TestHierarchical:
    def test_empty(self):
        assert layout_nodes([], []) == []

    def test_chain_top_to_bottom(self):
        graph = chain_graph()
        nodes = layout_nodes(graph.nodes, graph.edges)
        pos = positions(nodes)
        assert pos["main"][1] < pos["helper"][1] < pos["utility"][1]
        assert pos["main"][0] == pos["helper"][0] == pos["utility"][0]
        assert pos["main"][1] == 20
        # rank height 180 + rank_sep 180
        assert pos["helper"][1] == 380

    def test_sizes_are_set(self):
        graph = chain_graph()
        for node in layout_nodes(graph.nodes, graph.edges):
            assert (node.width, node.height) == (450, 180)

    def test_bottom_to_top(self):
        graph = chain_graph()
        pos = positions(layout_nodes(graph.nodes, graph.edges, LayoutOptions(direction="BT")))
        assert pos["main"][1] > pos["helper"][1] > pos["utility"][1]
        assert pos["utility"][1] == 20

    def test_left_to_right(self):
        graph = chain_graph()
        pos = positions(layout_nodes(graph.nodes, graph.edges, LayoutOptions(direction="LR")))
        assert pos["main"][0] < pos["helper"][0] < pos["utility"][0]
        assert pos["main"][1] == pos["helper"][1]

    def test_right_to_left(self):
        graph = chain_graph()
        pos = positions(layout_nodes(graph.nodes, graph.edges, LayoutOptions(direction="RL")))
        assert pos["main"][0] > pos["helper"][0] > pos["utility"][0]

    def test_siblings_share_a_rank(self):
        graph = graph_of(
            [make_function("root"), make_function("left"), make_function("right")],
            [("root", "left"), ("root", "right")],
        )
        pos = positions(layout_nodes(graph.nodes, graph.edges))
        assert pos["left"][1] == pos["right"][1]
        assert pos["left"][0] != pos["right"][0]
        # 450 wide + node_sep 120
        assert abs(pos["left"][0] - pos["right"][0]) == 570

    def test_cycles_are_condensed(self):
        graph = graph_of(
            [make_function("a"), make_function("b"), make_function("c")],
            [("a", "b"), ("b", "a"), ("b", "c")],
        )
        pos = positions(layout_nodes(graph.nodes, graph.edges))
        assert pos["a"][1] == pos["b"][1]
        assert pos["c"][1] > pos["a"][1]

    def test_self_loops_and_unknown_edges_are_ignored(self):
        graph = graph_of(
            [make_function("fib"), make_function("other")],
            [("fib", "fib"), ("fib", "missing")],
        )
        nodes = layout_nodes(graph.nodes, graph.edges)
        assert len(nodes) == 2
        pos = positions(nodes)
        assert pos["fib"][1] == pos["other"][1]

    def test_duplicate_ids_are_positioned_separately(self):
        graph = graph_of([make_function("twice"), make_function("twice", line=9)])
        first, second = layout_nodes(graph.nodes, graph.edges)
        assert first.position != second.position

    def test_inputs_are_untouched(self):
        graph = chain_graph()
        layout_nodes(graph.nodes, graph.edges)
        assert all(n.position == Position(0, 0) and n.width is None for n in graph.nodes)

    def test_deterministic(self):
        graph = graph_of(
            [make_function(name) for name in "abcdef"],
            [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("e", "f")],
        )
        first = layout_nodes(graph.nodes, graph.edges)
        second = layout_nodes(graph.nodes, graph.edges)
        assert positions(first) == positions(second)

    def test_horizontal_layout(self):
        graph = chain_graph()
        pos = positions(create_horizontal_layout(graph.nodes, graph.edges))
        assert pos["main"][0] == 20
        # width 450 + rank_sep 150
        assert pos["helper"][0] == 620


class TestCircular:
    def test_single_node_at_origin(self):
        graph = graph_of([make_function("only")])
        (node,) = create_circular_layout(graph.nodes, graph.edges)
        assert (node.position.x, node.position.y) == (0, 0)

    def test_small_graph_on_circle(self):
        graph = graph_of([make_function(n) for n in ("a", "b", "c")])
        nodes = create_circular_layout(graph.nodes, graph.edges)
        pos = positions(nodes)
        assert pos["a"] == pytest.approx((175, 150))
        # radius max(100, 3 * 30) = 100
        angle = 2 * math.pi / 3
        assert pos["b"] == pytest.approx((200 + 100 * math.cos(angle) - 125, 200 + 100 * math.sin(angle) - 50))

    def test_large_graph_falls_back(self):
        graph = graph_of([make_function(f"f{i}") for i in range(7)])
        nodes = create_circular_layout(graph.nodes, graph.edges)
        assert len(nodes) == 7
        assert all(n.position.x >= 20 and n.position.y >= 20 for n in nodes)


class TestMatrix:
    def build(self):
        return graph_of(
            [
                make_function("zeta", is_exported=True),
                make_function("alpha", is_exported=True),
                make_function("load", is_async=True),
                make_function("Store.save"),
                make_function("anonymous (useEffect)"),
                make_function("onClick handler"),
                make_function("plain", params=1),
                make_function("bare"),
            ]
        )

    def test_groups_and_headers(self):
        graph = self.build()
        nodes = create_matrix_layout(graph.nodes, graph.edges)
        headers = [n for n in nodes if n.is_header]
        assert [h.id for h in headers] == [
            "section-header-exported-0",
            "section-header-async-1",
            "section-header-method-2",
            "section-header-useEffect-3",
            "section-header-jsxHandler-4",
            "section-header-function-5",
            "section-header-other-6",
        ]
        assert all(not h.draggable and not h.selectable for h in headers)
        assert headers[0].data.count == 2
        assert headers[0].width == 5 * 850 - 50
        assert len(nodes) - len(headers) == len(graph.nodes)

    def test_positions(self):
        graph = self.build()
        nodes = create_matrix_layout(graph.nodes, graph.edges)
        pos = positions([n for n in nodes if not n.is_header])
        assert pos["alpha"] == (50, 50)
        assert pos["zeta"] == (900, 50)
        # one row of 350 plus group spacing 100
        assert pos["load"] == (50, 500)
        header = next(n for n in nodes if n.id == "section-header-async-1")
        assert (header.position.x, header.position.y) == (50, 450)

    def test_rows_wrap(self):
        graph = graph_of([make_function(f"f{i}", params=1) for i in range(7)])
        nodes = create_matrix_layout(graph.nodes, graph.edges, columns=3)
        pos = positions([n for n in nodes if not n.is_header])
        assert pos["f3"] == (50, 400)
        assert pos["f6"] == (50, 750)

    def test_case_insensitive_order(self):
        graph = graph_of([make_function(n, params=1) for n in ("beta", "Alpha", "gamma")])
        nodes = create_matrix_layout(graph.nodes, graph.edges)
        labels = [n.data.label for n in nodes if not n.is_header]
        assert labels == ["Alpha", "beta", "gamma"]

    def test_invalid_columns_fall_back(self):
        graph = chain_graph()
        nodes = create_matrix_layout(graph.nodes, graph.edges, columns=0)
        assert len(nodes) == 3
        assert not any(n.is_header for n in nodes)

    def test_relayout_replaces_headers(self):
        graph = self.build()
        once = create_matrix_layout(graph.nodes, graph.edges)
        twice = create_matrix_layout(once, graph.edges)
        assert [n.id for n in once] == [n.id for n in twice]


class TestAutoLayout:
    def test_empty(self):
        assert auto_layout([], []) == []

    def test_single_node(self):
        graph = graph_of([make_function("only")])
        (node,) = auto_layout(graph.nodes, graph.edges)
        assert (node.position.x, node.position.y) == (200, 200)
        assert node.width == 450

    def test_many_nodes_use_grid(self):
        graph = chain_graph()
        nodes = auto_layout(graph.nodes, graph.edges)
        assert any(n.is_header for n in nodes)
        assert len([n for n in nodes if not n.is_header]) == 3

    def test_grid_columns_option(self):
        graph = graph_of([make_function(f"f{i}", params=1) for i in range(4)])
        nodes = auto_layout(graph.nodes, graph.edges, LayoutOptions(grid_columns=2))
        pos = positions([n for n in nodes if not n.is_header])
        assert pos["f2"] == (50, 400)

    @pytest.mark.parametrize("algorithm", ["auto", "hierarchical", "horizontal", "grid", "circular", "bogus"])
    def test_apply_layout_keeps_nodes(self, algorithm):
        graph = chain_graph()
        nodes = apply_layout(graph.nodes, graph.edges, algorithm)
        content = [n for n in nodes if not n.is_header]
        assert len(content) == 3
        for node in nodes:
            assert math.isfinite(node.position.x) and math.isfinite(node.position.y)


class TestBounds:
    def test_empty_bounds(self):
        bounds = calculate_graph_bounds([])
        assert (bounds.width, bounds.height) == (0, 0)

    def test_bounds_and_centering(self):
        graph = graph_of([make_function("a"), make_function("b")])
        first, second = graph.nodes
        nodes = [
            replace(first, position=Position(0, 0), width=100, height=50),
            replace(second, position=Position(200, 100), width=100, height=50),
        ]
        bounds = calculate_graph_bounds(nodes)
        assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (0, 0, 300, 150)
        assert (bounds.width, bounds.height) == (300, 150)

        centered = center_graph(nodes, 1000, 500)
        assert (centered[0].position.x, centered[0].position.y) == (350, 175)
        assert (centered[1].position.x, centered[1].position.y) == (550, 275)

    def test_default_dimensions(self):
        graph = graph_of([make_function("a")])
        bounds = calculate_graph_bounds(graph.nodes)
        assert (bounds.width, bounds.height) == (450, 180)
