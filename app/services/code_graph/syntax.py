"""Вспомогательные функции для работы с узлами tree-sitter."""

import re
from typing import Iterator

from tree_sitter import Node

from .models import Location

FUNCTION_DECLARATION_TYPES = ("function_declaration", "generator_function_declaration")
# "function" - имя функции-выражения в старых версиях грамматики
FUNCTION_EXPRESSION_TYPES = ("function_expression", "function", "generator_function")
ARROW_FUNCTION_TYPES = ("arrow_function",)
FUNCTION_VALUE_TYPES = FUNCTION_EXPRESSION_TYPES + ARROW_FUNCTION_TYPES
FUNCTION_LIKE_TYPES = FUNCTION_DECLARATION_TYPES + FUNCTION_VALUE_TYPES + ("method_definition",)

CLASS_DECLARATION_TYPES = ("class_declaration", "abstract_class_declaration")
CLASS_TYPES = CLASS_DECLARATION_TYPES + ("class",)

DECLARATION_STATEMENT_TYPES = ("lexical_declaration", "variable_declaration")
JSX_ELEMENT_TYPES = ("jsx_element", "jsx_self_closing_element")

_JSDOC_LINE_RE = re.compile(r"^\s*\*\s?")


def node_text(node: Node | None) -> str:
    """Текст узла."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_location(node: Node) -> Location:
    """Положение узла: строки с 1, колонки с 0."""
    return Location(
        start_line=node.start_point[0] + 1,
        end_line=node.end_point[0] + 1,
        start_column=node.start_point[1],
        end_column=node.end_point[1],
    )


def iter_preorder(root: Node) -> Iterator[Node]:
    """Обход дерева в прямом порядке без рекурсии."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def ancestors(node: Node) -> Iterator[Node]:
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def is_async(node: Node) -> bool:
    """Есть ли у функции модификатор async."""
    return any(child.type == "async" for child in node.children)


def identifier_name(node: Node | None) -> str | None:
    """Имя, если узел - простой идентификатор."""
    if node is not None and node.type == "identifier":
        return node_text(node)
    return None


def method_name(node: Node) -> str | None:
    """Имя метода, если ключ - обычный идентификатор (не computed/#private/строка)."""
    name_node = node.child_by_field_name("name")
    if name_node is not None and name_node.type == "property_identifier":
        return node_text(name_node)
    return None


def find_class_name(node: Node) -> str | None:
    """
    Найти имя класса, внутри которого находится узел.

    Поднимаемся по предкам до первого именованного класса
    (объявления или именованного class-выражения).

    Returns:
        имя класса или None, если класс не найден
    """
    for ancestor in ancestors(node):
        if ancestor.type in CLASS_TYPES:
            name_node = ancestor.child_by_field_name("name")
            if name_node is not None:
                return node_text(name_node)
    return None


def find_object_name(method: Node) -> str | None:
    """Имя переменной, которой присвоен объектный литерал с методом."""
    parent = method.parent
    if parent is None or parent.type != "object":
        return None
    grandparent = parent.parent
    if grandparent is not None and grandparent.type == "variable_declarator":
        return identifier_name(grandparent.child_by_field_name("name"))
    return None


def is_class_method(method: Node) -> bool:
    parent = method.parent
    return parent is not None and parent.type == "class_body"


def qualified_method_name(method: Node) -> str | None:
    """Имя метода вида Owner.member (или просто member, если владелец не найден)."""
    name = method_name(method)
    if name is None:
        return None

    if is_class_method(method):
        owner = find_class_name(method)
    else:
        owner = find_object_name(method)

    return f"{owner}.{name}" if owner else name


def is_export_wrapped(node: Node | None) -> bool:
    """Обёрнут ли узел непосредственно в export (в т.ч. export default)."""
    if node is None:
        return False
    parent = node.parent
    return parent is not None and parent.type == "export_statement"


def is_class_exported(method: Node) -> bool:
    """Экспортирован ли ближайший класс, которому принадлежит метод."""
    for ancestor in ancestors(method):
        if ancestor.type in CLASS_DECLARATION_TYPES:
            return is_export_wrapped(ancestor)
        if ancestor.type == "class":
            return False
    return False


def leading_documentation(node: Node) -> str | None:
    """
    Извлечь JSDoc-комментарий, стоящий перед объявлением.

    Комментарий ищется перед самим узлом, а для объявлений внутри
    export/const - перед внешней обёрткой.

    Returns:
        нормализованный текст без маркеров комментария или None
    """
    anchor = node
    while anchor.parent is not None and anchor.parent.type in (
        "export_statement",
        *DECLARATION_STATEMENT_TYPES,
    ):
        anchor = anchor.parent

    comments = []
    sibling = anchor.prev_sibling
    while sibling is not None and sibling.type in ("comment", "decorator"):
        if sibling.type == "comment":
            comments.append(node_text(sibling))
        sibling = sibling.prev_sibling

    # Ближайшие к объявлению комментарии собраны первыми, нужен первый по тексту
    for comment in reversed(comments):
        if comment.startswith("/**"):
            return _normalize_jsdoc(comment)
    return None


def _normalize_jsdoc(comment: str) -> str | None:
    body = comment[2:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = [_JSDOC_LINE_RE.sub("", line).strip() for line in body.split("\n")]
    text = " ".join(line for line in lines if line)
    return text or None


def string_value(node: Node) -> str:
    """Содержимое строкового литерала без кавычек."""
    text = node_text(node)
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def is_named_export_expression(node: Node) -> bool:
    """export default function name() {}, разобранное как выражение."""
    return (
        node.type in FUNCTION_EXPRESSION_TYPES
        and node.child_by_field_name("name") is not None
        and is_export_wrapped(node)
    )
