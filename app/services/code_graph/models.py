"""Модели данных для построения графа функций."""

from dataclasses import dataclass, field
from typing import Literal

ErrorType = Literal["syntax", "analysis", "network", "validation"]

AnalysisStatus = Literal[
    "complete", "validation_error", "syntax_error", "no_functions", "internal_error"
]


@dataclass
class FunctionParameter:
    """Параметр функции."""

    name: str
    type: str = "any"
    optional: bool = False
    default_value: str | None = None

    def to_dict(self) -> dict:
        data = {"name": self.name, "type": self.type, "optional": self.optional}
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        return data


@dataclass(frozen=True)
class Location:
    """Положение конструкции в исходнике (строки с 1, колонки с 0)."""

    start_line: int = 0
    end_line: int = 0
    start_column: int = 0
    end_column: int = 0

    def to_dict(self) -> dict:
        return {
            "startLine": self.start_line,
            "endLine": self.end_line,
            "startColumn": self.start_column,
            "endColumn": self.end_column,
        }


@dataclass
class FunctionInfo:
    """Информация о функции."""

    name: str
    parameters: list[FunctionParameter]
    return_type: str
    location: Location
    is_async: bool = False
    is_exported: bool = False
    documentation: str | None = None

    @property
    def is_method(self) -> bool:
        """Метод класса или объекта (имя вида Owner.member)."""
        return "." in self.name

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type,
            "location": self.location.to_dict(),
            "async": self.is_async,
            "exported": self.is_exported,
            "documentation": self.documentation,
        }


@dataclass(frozen=True)
class CallInfo:
    """Вызов одной функции файла из другой."""

    caller: str
    callee: str
    line: int
    column: int | None = None

    def to_dict(self) -> dict:
        return {
            "caller": self.caller,
            "callee": self.callee,
            "lineNumber": self.line,
            "columnNumber": self.column,
        }


@dataclass
class ParseError:
    """Ошибка анализа исходника."""

    type: ErrorType
    message: str
    line: int | None = None
    column: int | None = None

    def to_dict(self) -> dict:
        data: dict = {"type": self.type, "message": self.message}
        if self.line is not None:
            data["line"] = self.line
        if self.column is not None:
            data["column"] = self.column
        return data


@dataclass
class ParsedFile:
    """Результат парсинга файла."""

    functions: list[FunctionInfo] = field(default_factory=list)
    calls: list[CallInfo] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    grammar: str | None = None  # грамматика, которой удалось разобрать файл

    @property
    def has_syntax_errors(self) -> bool:
        return any(e.type == "syntax" for e in self.errors)

    def to_dict(self) -> dict:
        return {
            "functions": [f.to_dict() for f in self.functions],
            "calls": [c.to_dict() for c in self.calls],
            "errors": [e.to_dict() for e in self.errors],
            "metadata": {
                "totalFunctions": len(self.functions),
                "totalCalls": len(self.calls),
                "imports": list(self.imports),
                "exports": list(self.exports),
            },
        }


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class NodeData:
    """Данные узла-функции для отрисовки."""

    label: str
    parameters: list[FunctionParameter]
    return_type: str
    is_async: bool
    is_exported: bool
    location: Location
    documentation: str | None
    signature: str
    complexity: int
    category: str

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "parameters": [p.to_dict() for p in self.parameters],
            "returnType": self.return_type,
            "isAsync": self.is_async,
            "isExported": self.is_exported,
            "documentation": self.documentation,
            "location": self.location.to_dict(),
            "sourceCode": self.signature,
            "complexity": self.complexity,
            "category": self.category,
        }


@dataclass
class HeaderData:
    """Данные заголовка группы в матричной раскладке."""

    label: str
    group: str
    count: int
    is_header: bool = True

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "type": self.group,
            "count": self.count,
            "isHeader": self.is_header,
        }


@dataclass
class GraphNode:
    """Узел графа."""

    id: str
    type: str
    data: NodeData | HeaderData
    position: Position = field(default_factory=Position)
    width: float | None = None
    height: float | None = None
    class_name: str = ""
    draggable: bool = True
    selectable: bool = True

    @property
    def is_header(self) -> bool:
        return isinstance(self.data, HeaderData)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "position": self.position.to_dict(),
            "data": self.data.to_dict(),
            "className": self.class_name,
        }
        if self.width is not None and self.height is not None:
            data["style"] = {"width": self.width, "height": self.height}
        if not self.draggable:
            data["draggable"] = False
        if not self.selectable:
            data["selectable"] = False
        return data


@dataclass
class GraphEdge:
    """Ребро графа: все вызовы caller -> callee."""

    id: str
    source: str
    target: str
    call_count: int
    animated: bool
    kind: str
    calls: list[CallInfo] = field(default_factory=list)
    label: str | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.kind,
            "animated": self.animated,
            "data": {
                "calls": [c.to_dict() for c in self.calls],
                "callCount": self.call_count,
                "isAsync": self.animated,
            },
        }
        if self.label is not None:
            data["label"] = self.label
        return data


@dataclass
class GraphData:
    """Граф функций: узлы и рёбра."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass(frozen=True)
class Bounds:
    """Габариты разложенного графа."""

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict:
        return {
            "minX": self.min_x,
            "minY": self.min_y,
            "maxX": self.max_x,
            "maxY": self.max_y,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class AnalysisMetadata:
    """Сводка по проанализированному файлу."""

    file_name: str
    total_functions: int = 0
    total_calls: int = 0
    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    file_size: int | None = None
    parse_time_ms: float = 0.0
    grammar: str | None = None

    def to_dict(self) -> dict:
        return {
            "fileName": self.file_name,
            "totalFunctions": self.total_functions,
            "totalCalls": self.total_calls,
            "imports": list(self.imports),
            "exports": list(self.exports),
            "fileSize": self.file_size,
            "parseTime": self.parse_time_ms,
            "grammar": self.grammar,
        }


@dataclass
class AnalysisResult:
    """Результат полного анализа: граф с раскладкой или причина отказа."""

    status: AnalysisStatus
    metadata: AnalysisMetadata
    graph: GraphData = field(default_factory=GraphData)
    errors: list[ParseError] = field(default_factory=list)
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.status == "complete"

    def to_dict(self) -> dict:
        if self.success:
            return {
                "success": True,
                "data": {**self.graph.to_dict(), "metadata": self.metadata.to_dict()},
            }
        return {
            "success": False,
            "status": self.status,
            "error": self.message,
            "details": {
                "errors": [e.to_dict() for e in self.errors],
                "metadata": self.metadata.to_dict(),
            },
        }
