"""Извлечение вызовов между функциями файла."""

import logging
from typing import Iterable

from tree_sitter import Node

from .models import CallInfo
from .syntax import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_LIKE_TYPES,
    FUNCTION_VALUE_TYPES,
    find_class_name,
    identifier_name,
    is_named_export_expression,
    node_text,
    qualified_method_name,
)

logger = logging.getLogger(__name__)


class CallExtractor:
    """Второй обход дерева: кто кого вызывает."""

    def extract(self, root: Node, function_names: Iterable[str]) -> list[CallInfo]:
        """
        Извлечь вызовы функций, объявленных в этом же файле.

        Каждая запись стека обхода несёт имя функции, внутри которой
        находится поддерево, поэтому после выхода из вложенной функции
        вызовы снова приписываются внешней.

        Args:
            root: корень дерева
            function_names: имена функций, найденных в файле

        Returns:
            список CallInfo в порядке исходника
        """
        known = set(function_names)
        calls = []

        stack: list[tuple[Node, str | None]] = [(root, None)]
        while stack:
            node, current = stack.pop()

            if node.type in FUNCTION_LIKE_TYPES:
                current = resolve_function_name(node) or current
            elif node.type == "call_expression" and current is not None:
                callee = resolve_callee(node)
                if callee is not None and callee in known:
                    calls.append(
                        CallInfo(
                            caller=current,
                            callee=callee,
                            line=node.start_point[0] + 1,
                            column=node.start_point[1],
                        )
                    )

            stack.extend((child, current) for child in reversed(node.children))

        logger.debug(f"[Extract] Found {len(calls)} calls")
        return calls


def resolve_function_name(node: Node) -> str | None:
    """
    Имя функциональной конструкции для атрибуции вызовов.

    Анонимные функции (колбэки, обработчики) имени не получают,
    их вызовы приписываются ближайшей именованной функции.
    """
    if node.type in FUNCTION_DECLARATION_TYPES or is_named_export_expression(node):
        name_node = node.child_by_field_name("name")
        return node_text(name_node) if name_node is not None else None

    if node.type == "method_definition":
        return qualified_method_name(node)

    if node.type in FUNCTION_VALUE_TYPES:
        parent = node.parent
        if parent is not None and parent.type == "variable_declarator":
            return identifier_name(parent.child_by_field_name("name"))

    return None


def resolve_callee(call: Node) -> str | None:
    """
    Имя вызываемой функции.

    foo() -> foo, this.bar() -> Class.bar, obj.baz() -> obj.baz.
    Всё остальное (цепочки, вычисляемые свойства, шаблонные теги) - None.
    """
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return None

    callee = call.child_by_field_name("function")
    if callee is None:
        return None

    if callee.type == "identifier":
        return node_text(callee)

    if callee.type != "member_expression":
        return None

    prop = callee.child_by_field_name("property")
    obj = callee.child_by_field_name("object")
    if prop is None or prop.type != "property_identifier" or obj is None:
        return None

    if obj.type == "this":
        class_name = find_class_name(call)
        return f"{class_name}.{node_text(prop)}" if class_name else None

    obj_name = identifier_name(obj)
    if obj_name:
        return f"{obj_name}.{node_text(prop)}"
    return None
