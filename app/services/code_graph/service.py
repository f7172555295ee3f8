"""Сервис анализа TypeScript-файла в граф функций (фасад)."""

import os
import logging
import time

from .ast_parser import ASTParser
from .call_graph import CallGraph, simplify_graph
from .config import AnalysisConfig, LayoutOptions
from .file_scanner import FileScanner
from .layout_engine import apply_layout
from .models import AnalysisMetadata, AnalysisResult, GraphData, ParseError, ParsedFile

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "unknown.ts"

NO_FUNCTIONS_MESSAGE = "No functions found in the provided TypeScript file"
SYNTAX_ERROR_MESSAGE = "Failed to parse TypeScript code"
INTERNAL_ERROR_MESSAGE = "Internal error occurred while parsing code"


class CodeGraphService:
    """Исходник -> функции и вызовы -> граф -> раскладка."""

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        layout_options: LayoutOptions | None = None,
        layout_algorithm: str = "auto",
        simplify: bool = False,
    ):
        self.config = config if config is not None else AnalysisConfig()
        self.layout_options = layout_options if layout_options is not None else LayoutOptions()
        self.layout_algorithm = layout_algorithm
        self.simplify = simplify

        self.parser = ASTParser(self.config)
        self.call_graph = CallGraph(self.config)

    def analyze(
        self, source: str, file_name: str | None = None, size_bytes: int | None = None
    ) -> AnalysisResult:
        """
        Проанализировать один исходник.

        Args:
            source: текст TypeScript/TSX
            file_name: имя файла для отчёта
            size_bytes: размер, сообщённый поставщиком исходника

        Returns:
            AnalysisResult; ожидаемые проблемы (пустой вход, размер,
            синтаксис, нет функций) описываются статусом, а не исключением
        """
        started = time.perf_counter()
        metadata = AnalysisMetadata(
            file_name=file_name or DEFAULT_FILE_NAME, file_size=size_bytes
        )

        try:
            parsed = self.parser.parse_source(source)
            result = self._build_result(parsed, metadata)
        except Exception as e:
            logger.exception(f"[Service] Unexpected error while analyzing {metadata.file_name}")
            result = AnalysisResult(
                status="internal_error",
                metadata=metadata,
                errors=[ParseError(type="analysis", message=str(e))],
                message=INTERNAL_ERROR_MESSAGE,
            )

        metadata.parse_time_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"[Service] {metadata.file_name}: {result.status}, "
            f"{metadata.total_functions} functions, {metadata.total_calls} calls "
            f"in {metadata.parse_time_ms}ms"
        )
        return result

    def _build_result(self, parsed: ParsedFile, metadata: AnalysisMetadata) -> AnalysisResult:
        metadata.total_functions = len(parsed.functions)
        metadata.total_calls = len(parsed.calls)
        metadata.imports = list(parsed.imports)
        metadata.exports = list(parsed.exports)
        metadata.grammar = parsed.grammar

        validation_errors = [e for e in parsed.errors if e.type == "validation"]
        if validation_errors:
            return AnalysisResult(
                status="validation_error",
                metadata=metadata,
                errors=validation_errors,
                message=validation_errors[0].message,
            )

        syntax_errors = [e for e in parsed.errors if e.type == "syntax"]
        if syntax_errors:
            return AnalysisResult(
                status="syntax_error",
                metadata=metadata,
                errors=syntax_errors,
                message=SYNTAX_ERROR_MESSAGE,
            )

        if not parsed.functions:
            return AnalysisResult(
                status="no_functions",
                metadata=metadata,
                errors=list(parsed.errors),
                message=NO_FUNCTIONS_MESSAGE,
            )

        graph = self.call_graph.build(parsed)
        if self.simplify:
            graph = simplify_graph(graph)
            logger.info(f"[Service] Simplified graph to {len(graph.nodes)} nodes")

        nodes = apply_layout(graph.nodes, graph.edges, self.layout_algorithm, self.layout_options)
        return AnalysisResult(
            status="complete",
            metadata=metadata,
            graph=GraphData(nodes=nodes, edges=graph.edges),
            errors=list(parsed.errors),
        )

    def analyze_path(self, path: str) -> dict[str, AnalysisResult]:
        """
        Проанализировать файл или все .ts/.tsx файлы директории.

        Каждый файл анализируется независимо, вызовы между файлами
        не связываются.

        Returns:
            словарь {относительный путь: AnalysisResult}
        """
        if os.path.isfile(path):
            return {os.path.basename(path): self.analyze_file(path)}

        scanner = FileScanner(path, self.config)
        results = {}
        for rel_path in scanner.scan():
            results[rel_path] = self.analyze_file(os.path.join(path, rel_path), rel_path)

        complete = sum(1 for r in results.values() if r.success)
        logger.info(f"[Service] Analyzed {len(results)} files, {complete} complete")
        return results

    def analyze_file(self, file_path: str, file_name: str | None = None) -> AnalysisResult:
        """Прочитать файл с диска и проанализировать."""
        with open(file_path, encoding="utf-8", errors="replace") as f:
            content = f.read()

        return self.analyze(
            content,
            file_name=file_name or os.path.basename(file_path),
            size_bytes=os.path.getsize(file_path),
        )
