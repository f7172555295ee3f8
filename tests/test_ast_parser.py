"""End-to-end parsing scenarios: source text to ParsedFile."""

from app.services.code_graph import build_graph, parse_source
from app.services.code_graph.config import AnalysisConfig


class TestParseOutcome:
    def test_empty_source(self):
        parsed = parse_source("")
        assert [e.type for e in parsed.errors] == ["validation"]
        assert parsed.functions == []
        assert parsed.calls == []

    def test_oversized_source(self):
        parsed = parse_source("a" * (500 * 1024 + 1))
        assert len(parsed.errors) == 1
        assert parsed.errors[0].type == "validation"
        assert parsed.errors[0].message == "File too large for parsing (max 500KB)"

    def test_syntax_error(self):
        parsed = parse_source("function broken(x: number {")
        assert [e.type for e in parsed.errors] == ["syntax"]
        assert parsed.functions == []
        assert parsed.calls == []
        assert parsed.imports == []
        assert parsed.exports == []
        assert parsed.has_syntax_errors
        assert parsed.errors[0].line == 1

    def test_clean_parse_without_functions(self):
        parsed = parse_source("const answer = 42;\nexport default answer;")
        assert parsed.errors == []
        assert parsed.functions == []
        assert not parsed.has_syntax_errors
        assert parsed.exports == ["default"]

    def test_hello_caller_scenario(self):
        source = (
            "function hello(name: string): string { return name; } "
            "function caller(){ hello('x'); hello('y'); }"
        )
        parsed = parse_source(source)
        assert [f.name for f in parsed.functions] == ["hello", "caller"]

        graph = build_graph(parsed)
        assert len(graph.edges) == 1
        edge = graph.edges[0]
        assert (edge.source, edge.target) == ("node-caller", "node-hello")
        assert edge.call_count == 2

    def test_class_scenario(self):
        parsed = parse_source("class C { a(){ this.b(); } b(){} }")
        assert [f.name for f in parsed.functions] == ["C.a", "C.b"]
        graph = build_graph(parsed)
        assert [(e.source, e.target) for e in graph.edges] == [("node-C_a", "node-C_b")]

    def test_custom_config(self):
        parsed = parse_source("function f() {}", AnalysisConfig(max_source_bytes=5))
        assert parsed.errors[0].type == "validation"

    def test_to_dict(self):
        parsed = parse_source("import x from 'x';\nexport function f(a: string) { g(); }\nfunction g() {}")
        data = parsed.to_dict()
        assert data["metadata"] == {
            "totalFunctions": 2,
            "totalCalls": 1,
            "imports": ["x"],
            "exports": ["f"],
        }
        assert data["functions"][0]["exported"] is True
        assert data["calls"][0] == {
            "caller": "f",
            "callee": "g",
            "lineNumber": 2,
            "columnNumber": 31,
        }


class TestFixtures:
    def test_simple(self, parser, load_fixture):
        parsed = parser.parse_source(load_fixture("simple.ts"))
        assert parsed.errors == []
        assert [f.name for f in parsed.functions] == [
            "formatPrice",
            "applyDiscount",
            "totalWithTax",
            "checkout",
        ]
        assert [(c.caller, c.callee) for c in parsed.calls] == [
            ("checkout", "applyDiscount"),
            ("checkout", "totalWithTax"),
            ("checkout", "formatPrice"),
        ]
        assert parsed.exports == ["formatPrice", "totalWithTax"]

    def test_complex(self, parser, load_fixture):
        parsed = parser.parse_source(load_fixture("complex.ts"))
        assert parsed.errors == []
        functions = {f.name: f for f in parsed.functions}
        assert set(functions) == {
            "OrderRepository.load",
            "OrderRepository.remember",
            "OrderRepository.fetchRemote",
            "AuditLog.record",
            "handlers.onCreate",
            "handlers.onDelete",
            "validateOrder",
            "syncOrders",
        }
        assert functions["OrderRepository.load"].is_exported
        assert functions["OrderRepository.load"].documentation == "Loads an order by id."
        assert functions["OrderRepository.fetchRemote"].is_async
        assert not functions["AuditLog.record"].is_exported
        assert functions["AuditLog.record"].parameters[1].optional
        assert functions["syncOrders"].return_type == "Promise"

        calls = {(c.caller, c.callee) for c in parsed.calls}
        assert calls == {
            ("OrderRepository.load", "OrderRepository.fetchRemote"),
            ("OrderRepository.load", "OrderRepository.remember"),
            ("handlers.onCreate", "validateOrder"),
            ("syncOrders", "validateOrder"),
        }
        assert parsed.imports == ["events", "./types"]
        assert parsed.exports == ["syncOrders", "isValidOrder", "handlers"]

    def test_edge_cases(self, parser, load_fixture):
        parsed = parser.parse_source(load_fixture("edge_cases.ts"))
        assert parsed.errors == []
        functions = {f.name: f for f in parsed.functions}
        assert "main" in functions and functions["main"].is_exported
        assert [p.name for p in functions["connect"].parameters] == ["param0"]
        assert [(p.name, p.type) for p in functions["join"].parameters] == [
            ("separator", "string"),
            ("...parts", "string[]"),
        ]
        initial = functions["counter"].parameters[0]
        assert (initial.optional, initial.default_value) == (True, "0")
        assert "increment" in functions
        assert "callback (object.map)" in functions
        assert functions["legacy"].parameters[0].type == "any"

        calls = [(c.caller, c.callee) for c in parsed.calls]
        assert ("main", "describe") in calls
        assert calls.count(("fibonacci", "fibonacci")) == 2

    def test_invalid(self, parser, load_fixture):
        parsed = parser.parse_source(load_fixture("invalid.ts"))
        assert len(parsed.errors) == 1
        assert parsed.errors[0].type == "syntax"
        assert parsed.errors[0].message.startswith("Syntax error:")
        assert parsed.functions == []
