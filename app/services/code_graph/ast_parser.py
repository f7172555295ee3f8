"""Парсинг AST для извлечения функций, вызовов и импортов."""

import logging

from .call_extractor import CallExtractor
from .config import AnalysisConfig
from .exceptions import CodeGraphError
from .function_extractor import FunctionExtractor
from .metadata_extractor import MetadataExtractor
from .models import ParsedFile
from .source_parser import SourceParser

logger = logging.getLogger(__name__)


class ASTParser:
    """Парсер для извлечения функций и вызовов из AST."""

    def __init__(self, config: AnalysisConfig | None = None):
        self.config = config if config is not None else AnalysisConfig()
        self.source_parser = SourceParser(self.config)
        self.function_extractor = FunctionExtractor(self.config)
        self.call_extractor = CallExtractor()
        self.metadata_extractor = MetadataExtractor()

    def parse_source(self, content: str) -> ParsedFile:
        """
        Парсинг исходника для извлечения функций и вызовов.

        Ожидаемые проблемы (пустой вход, превышение размера, синтаксис)
        возвращаются в errors, а не выбрасываются.

        Returns:
            ParsedFile с функциями, вызовами, импортами и экспортами
        """
        try:
            parsed = self.source_parser.parse(content)
        except CodeGraphError as e:
            logger.info(f"[Parser] {e.error_type} error: {e.message}")
            return ParsedFile(errors=[e.to_parse_error()])

        root = parsed.root
        functions = self.function_extractor.extract(root)
        calls = self.call_extractor.extract(root, [f.name for f in functions])
        imports, exports = self.metadata_extractor.extract(root)

        logger.info(
            f"[Parser] {len(functions)} functions, {len(calls)} calls "
            f"({parsed.grammar} grammar)"
        )

        return ParsedFile(
            functions=functions,
            calls=calls,
            imports=imports,
            exports=exports,
            grammar=parsed.grammar,
        )


def parse_source(content: str, config: AnalysisConfig | None = None) -> ParsedFile:
    """Разобрать исходник с конфигурацией по умолчанию."""
    return ASTParser(config).parse_source(content)
