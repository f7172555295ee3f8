"""Парсинг исходника в синтаксическое дерево с откатом по грамматикам."""

import logging
import re
from dataclasses import dataclass
from typing import cast

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from .config import AnalysisConfig
from .exceptions import SourceSyntaxError, SourceValidationError

logger = logging.getLogger(__name__)

JSX_ERROR_MESSAGE = (
    "JSX/TSX syntax detected but parsing failed. "
    "The file may contain invalid JSX syntax or unsupported React patterns."
)

_POSITION_RE = re.compile(r"\((\d+):(\d+)\)")
_MAX_TOKEN_CHARS = 20


@dataclass
class ParsedTree:
    """Успешно разобранное дерево."""

    tree: Tree
    grammar: str
    source: bytes

    @property
    def root(self) -> Node:
        return self.tree.root_node


class SourceParser:
    """Парсер TypeScript/TSX на tree-sitter с набором запасных грамматик."""

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self.parsers: dict[str, Parser] = {}

    def _get_parser(self, grammar: str) -> Parser:
        """Получить parser для грамматики (с кэшированием)."""
        if grammar not in self.parsers:
            self.parsers[grammar] = get_parser(cast(SupportedLanguage, grammar))
        return self.parsers[grammar]

    def validate(self, source: str) -> bytes:
        """
        Проверить исходник до парсинга.

        Returns:
            исходник в UTF-8

        Raises:
            SourceValidationError: пустой вход или превышен лимит размера
        """
        if not isinstance(source, str) or not source:
            raise SourceValidationError("No code provided for parsing")

        limit = self.config.max_source_bytes
        # Символов не больше, чем байт: дешёвая проверка до кодирования
        if len(source) > limit:
            raise SourceValidationError(self._too_large_message())

        data = source.encode("utf-8", errors="replace")
        if len(data) > limit:
            raise SourceValidationError(self._too_large_message())
        return data

    def _too_large_message(self) -> str:
        return f"File too large for parsing (max {self.config.max_source_bytes // 1024}KB)"

    def parse(self, source: str) -> ParsedTree:
        """
        Разобрать исходник, перебирая грамматики по порядку.

        Первая грамматика, давшая дерево без ошибок, используется дальше.
        Если не подошла ни одна, сообщается ошибка последней попытки.

        Raises:
            SourceValidationError: вход не прошёл валидацию
            SourceSyntaxError: ни одна грамматика не разобрала исходник
        """
        data = self.validate(source)

        last_diagnostic = ""
        for grammar in self.config.parser_tiers:
            tree = self._get_parser(grammar).parse(data)
            last_diagnostic = self._diagnose(tree.root_node)
            if not last_diagnostic:
                logger.debug(f"[Parser] Parsed with '{grammar}' grammar")
                return ParsedTree(tree=tree, grammar=grammar, source=data)

            logger.debug(f"[Parser] '{grammar}' grammar failed: {last_diagnostic}")

        raise build_syntax_error(last_diagnostic)

    @staticmethod
    def _diagnose(root: Node) -> str:
        """Описание первой ошибки дерева или пустая строка."""
        error_node = find_first_error(root)
        if error_node is not None:
            return describe_error(error_node)

        # tree-sitter восстанавливается после несовпадающих JSX-тегов без ERROR-узла
        element = find_mismatched_jsx(root)
        if element is not None:
            return describe_jsx_mismatch(element)
        return ""


def find_first_error(root: Node) -> Node | None:
    """Первый по тексту ERROR- или MISSING-узел дерева."""
    if not root.has_error:
        return None

    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(
            child for child in reversed(node.children) if child.has_error or child.is_missing
        )
    return root


def _jsx_tag_name(tag: Node | None) -> str:
    """Имя JSX-тега; пустая строка для фрагмента."""
    if tag is None:
        return ""
    name = tag.child_by_field_name("name")
    if name is None:
        return ""
    return (name.text or b"").decode("utf-8", errors="replace")


def find_mismatched_jsx(root: Node) -> Node | None:
    """
    Первый по тексту jsx_element, у которого закрывающий тег не совпадает с открывающим.

    Returns:
        узел jsx_element или None
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "jsx_element":
            open_tag = node.child_by_field_name("open_tag")
            close_tag = node.child_by_field_name("close_tag")
            if _jsx_tag_name(open_tag) != _jsx_tag_name(close_tag):
                return node
        stack.extend(reversed(node.children))
    return None


def describe_jsx_mismatch(element: Node) -> str:
    """Описание вида 'Expected corresponding JSX closing tag for <div> (line:column)'."""
    close_tag = element.child_by_field_name("close_tag")
    anchor = close_tag if close_tag is not None else element
    line, column = anchor.start_point
    tag = _jsx_tag_name(element.child_by_field_name("open_tag"))
    return f"Expected corresponding JSX closing tag for <{tag}> ({line + 1}:{column})"


def describe_error(node: Node) -> str:
    """Сырое описание ошибки в виде 'Unexpected token "x" (line:column)'."""
    if node.is_missing:
        line, column = node.start_point
        return f'Missing "{node.type}" ({line + 1}:{column})'

    token = node
    while token.children:
        token = token.children[0]

    line, column = token.start_point
    text = (token.text or b"").decode("utf-8", errors="replace").strip()
    if len(text) > _MAX_TOKEN_CHARS:
        text = text[:_MAX_TOKEN_CHARS] + "..."
    return f'Unexpected token "{text}" ({line + 1}:{column})'


def build_syntax_error(diagnostic: str) -> SourceSyntaxError:
    """Очистить сообщение и вытащить из него строку/колонку."""
    if not diagnostic:
        return SourceSyntaxError("Failed to parse TypeScript code with all fallback strategies")

    if "Unexpected token" in diagnostic and "<" in diagnostic:
        message = JSX_ERROR_MESSAGE
    else:
        message = f"Syntax error: {diagnostic}"

    line = column = None
    match = _POSITION_RE.search(diagnostic)
    if match:
        line, column = int(match.group(1)), int(match.group(2))

    return SourceSyntaxError(message, line=line, column=column)
