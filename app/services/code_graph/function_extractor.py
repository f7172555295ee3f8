"""Извлечение функций из синтаксического дерева."""

import logging

from tree_sitter import Node

from .config import AnalysisConfig
from .models import FunctionInfo, FunctionParameter
from .syntax import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_VALUE_TYPES,
    JSX_ELEMENT_TYPES,
    ancestors,
    identifier_name,
    is_async,
    is_class_exported,
    is_class_method,
    is_export_wrapped,
    is_named_export_expression,
    iter_preorder,
    leading_documentation,
    node_location,
    node_text,
    qualified_method_name,
    string_value,
)

logger = logging.getLogger(__name__)

_LITERAL_DEFAULTS = ("true", "false", "null", "undefined")


class FunctionExtractor:
    """Сбор всех функциональных конструкций файла в плоский список."""

    def __init__(self, config: AnalysisConfig):
        self.config = config

    def extract(self, root: Node) -> list[FunctionInfo]:
        """
        Один обход дерева в порядке исходника.

        Распознаются объявления функций, функции в переменных, методы классов
        и объектов, колбэки-аргументы вызовов и обработчики в JSX.

        Returns:
            список FunctionInfo (имена могут повторяться)
        """
        functions = []

        for node in iter_preorder(root):
            if node.type in FUNCTION_DECLARATION_TYPES or is_named_export_expression(node):
                info = self._from_declaration(node)
            elif node.type == "variable_declarator":
                info = self._from_variable(node)
            elif node.type == "method_definition":
                info = self._from_method(node)
            elif node.type == "call_expression":
                info = self._from_callback(node)
            elif node.type == "jsx_expression":
                info = self._from_jsx_handler(node)
            else:
                continue

            if info:
                functions.append(info)

        logger.debug(f"[Extract] Found {len(functions)} functions")
        return functions

    def _from_declaration(self, node: Node) -> FunctionInfo | None:
        """function foo() {} - только именованные."""
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None

        return self._create(
            node_text(name_node),
            node,
            node,
            is_exported=is_export_wrapped(node),
            documentation=leading_documentation(node),
        )

    def _from_variable(self, node: Node) -> FunctionInfo | None:
        """const foo = () => {} / const foo = function () {}."""
        name = identifier_name(node.child_by_field_name("name"))
        value = node.child_by_field_name("value")
        if not name or value is None or value.type not in FUNCTION_VALUE_TYPES:
            return None

        return self._create(
            name,
            value,
            node,
            is_exported=is_export_wrapped(node.parent),
            documentation=leading_documentation(node),
        )

    def _from_method(self, node: Node) -> FunctionInfo | None:
        """Методы классов (Class.method) и объектных литералов (obj.method)."""
        name = qualified_method_name(node)
        if not name:
            return None

        exported = is_class_exported(node) if is_class_method(node) else False
        return self._create(
            name,
            node,
            node,
            is_exported=exported,
            documentation=leading_documentation(node),
        )

    def _from_callback(self, node: Node) -> FunctionInfo | None:
        """Функция, переданная первым аргументом: useEffect(() => {}), items.map(x => x)."""
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee is None or arguments is None or arguments.type != "arguments":
            return None
        if callee.type not in ("identifier", "member_expression"):
            return None

        first = _first_named(arguments)
        if first is None or first.type not in FUNCTION_VALUE_TYPES:
            return None

        return self._create(self._callback_name(node, callee), first, first)

    def _callback_name(self, call: Node, callee: Node) -> str:
        """Синтезировать читаемое имя колбэка по месту вызова."""
        if callee.type == "identifier":
            target = node_text(callee)
            if target not in self.config.hook_names:
                return f"callback ({target})"

            parent = call.parent
            if parent is not None and parent.type == "variable_declarator":
                variable = identifier_name(parent.child_by_field_name("name"))
                if variable:
                    return f"{variable} ({target})"
            return f"anonymous ({target})"

        obj = identifier_name(callee.child_by_field_name("object")) or "object"
        prop_node = callee.child_by_field_name("property")
        if prop_node is not None and prop_node.type == "property_identifier":
            prop = node_text(prop_node)
        else:
            prop = "method"
        return f"callback ({obj}.{prop})"

    def _from_jsx_handler(self, node: Node) -> FunctionInfo | None:
        """<Button onClick={() => ...}> -> Button.onClick."""
        expression = _first_named(node)
        if expression is None or expression.type not in FUNCTION_VALUE_TYPES:
            return None

        name = "JSX event handler"
        attribute = _jsx_attribute_name(node)
        if attribute:
            name = f"{attribute} handler"
            tag = _jsx_element_tag(node)
            if tag:
                name = f"{tag}.{attribute}"

        return self._create(name, expression, expression)

    def _create(
        self,
        name: str,
        function: Node,
        location_node: Node,
        is_exported: bool = False,
        documentation: str | None = None,
    ) -> FunctionInfo:
        return FunctionInfo(
            name=name,
            parameters=extract_parameters(function),
            return_type=render_type_annotation(function.child_by_field_name("return_type")),
            location=node_location(location_node),
            is_async=is_async(function),
            is_exported=is_exported,
            documentation=documentation,
        )


def _first_named(node: Node) -> Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _jsx_attribute_name(container: Node) -> str | None:
    parent = container.parent
    if parent is None or parent.type != "jsx_attribute":
        return None
    name_node = _first_named(parent)
    if name_node is not None and name_node.type in ("property_identifier", "identifier"):
        return node_text(name_node)
    return None


def _jsx_element_tag(container: Node) -> str | None:
    """Имя тега ближайшего JSX-элемента (только простой идентификатор)."""
    for ancestor in ancestors(container):
        if ancestor.type not in JSX_ELEMENT_TYPES:
            continue

        if ancestor.type == "jsx_element":
            opening = ancestor.child_by_field_name("open_tag")
            if opening is None:
                opening = next(
                    (c for c in ancestor.children if c.type == "jsx_opening_element"), None
                )
            name_node = opening.child_by_field_name("name") if opening is not None else None
        else:
            name_node = ancestor.child_by_field_name("name")

        # Фрагменты <>...</> и составные имена (Foo.Bar) не дают тега
        if name_node is not None and name_node.type == "identifier":
            return node_text(name_node)
        return None
    return None


def extract_parameters(function: Node) -> list[FunctionParameter]:
    """Параметры функции по порядку."""
    params_node = function.child_by_field_name("parameters")
    if params_node is not None:
        params = [p for p in params_node.named_children if p.type != "comment"]
    else:
        # Стрелочная функция с одним параметром без скобок: x => x
        single = function.child_by_field_name("parameter")
        params = [single] if single is not None else []

    return [_extract_parameter(param, index) for index, param in enumerate(params)]


def _extract_parameter(param: Node, index: int) -> FunctionParameter:
    if param.type == "identifier":
        return FunctionParameter(name=node_text(param))

    if param.type in ("required_parameter", "optional_parameter"):
        pattern = param.child_by_field_name("pattern")
        type_text = render_type_annotation(param.child_by_field_name("type"))
        value = param.child_by_field_name("value")

        if pattern is not None and pattern.type in ("identifier", "this"):
            if value is not None:
                return FunctionParameter(
                    name=node_text(pattern),
                    type=type_text,
                    optional=True,
                    default_value=render_default_value(value),
                )
            return FunctionParameter(
                name=node_text(pattern),
                type=type_text,
                optional=param.type == "optional_parameter",
            )

        if pattern is not None and pattern.type == "rest_pattern":
            rest_name = identifier_name(_first_named(pattern))
            if rest_name:
                return FunctionParameter(name=f"...{rest_name}", type=type_text)

    # Грамматика JavaScript: параметры без обёрток required_parameter
    if param.type == "assignment_pattern":
        left = identifier_name(param.child_by_field_name("left"))
        right = param.child_by_field_name("right")
        if left and right is not None:
            return FunctionParameter(
                name=left, optional=True, default_value=render_default_value(right)
            )

    if param.type == "rest_pattern":
        rest_name = identifier_name(_first_named(param))
        if rest_name:
            return FunctionParameter(name=f"...{rest_name}")

    # Деструктуризация и прочие шаблоны
    return FunctionParameter(name=f"param{index}")


def render_default_value(node: Node) -> str:
    """Значение по умолчанию: литерал или идентификатор, иначе 'unknown'."""
    if node.type == "string":
        return f'"{string_value(node)}"'
    if node.type == "number":
        return node_text(node)
    if node.type in _LITERAL_DEFAULTS:
        return node.type
    if node.type == "identifier":
        return node_text(node)
    return "unknown"


def render_type_annotation(annotation: Node | None) -> str:
    """Текст типа из аннотации ': T'; предикаты и asserts дают 'any'."""
    if annotation is None or annotation.type != "type_annotation":
        return "any"

    type_node = _first_named(annotation)
    if type_node is None:
        return "any"
    return render_type(type_node)


def render_type(node: Node) -> str:
    """
    Строковое представление типа.

    Поддерживаются примитивы, ссылки на типы (без аргументов дженерика),
    массивы и объединения; всё остальное - 'any'.
    """
    if node.type in ("predefined_type", "type_identifier"):
        return node_text(node)

    if node.type == "generic_type":
        name_node = node.child_by_field_name("name")
        if name_node is not None and name_node.type == "type_identifier":
            return node_text(name_node)
        return "any"

    if node.type == "array_type":
        element = _first_named(node)
        return f"{render_type(element)}[]" if element is not None else "any"

    if node.type == "union_type":
        return " | ".join(render_type(member) for member in _union_members(node))

    if node.type == "literal_type":
        literal = _first_named(node)
        if literal is not None and literal.type in ("null", "undefined"):
            return literal.type
        return "any"

    if node.type in ("null", "undefined"):
        return node.type

    return "any"


def _union_members(node: Node) -> list[Node]:
    """Плоский список членов объединения (в дереве оно бинарное)."""
    members = []
    for child in node.named_children:
        if child.type == "comment":
            continue
        if child.type == "union_type":
            members.extend(_union_members(child))
        else:
            members.append(child)
    return members
