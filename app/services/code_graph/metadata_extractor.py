"""Импорты и экспорты модуля."""

from tree_sitter import Node

from .syntax import (
    DECLARATION_STATEMENT_TYPES,
    FUNCTION_DECLARATION_TYPES,
    identifier_name,
    is_named_export_expression,
    node_text,
    string_value,
)


class MetadataExtractor:
    """Краткая сводка модуля по верхнеуровневым import/export."""

    def extract(self, root: Node) -> tuple[list[str], list[str]]:
        """
        Собрать импорты и экспорты.

        Returns:
            (imports, exports): модули импортов как есть (с повторами)
            и имена экспортов; для export default не-функции - 'default'
        """
        imports = []
        exports = []

        for statement in root.named_children:
            if statement.type == "import_statement":
                source = statement.child_by_field_name("source")
                if source is not None:
                    imports.append(string_value(source))

            elif statement.type == "export_statement":
                exports.extend(self._export_names(statement))

        return imports, exports

    def _export_names(self, statement: Node) -> list[str]:
        declaration = statement.child_by_field_name("declaration")

        if any(child.type == "default" for child in statement.children):
            target = (
                declaration
                if declaration is not None
                else statement.child_by_field_name("value")
            )
            if target is not None and (
                target.type in FUNCTION_DECLARATION_TYPES or is_named_export_expression(target)
            ):
                name_node = target.child_by_field_name("name")
                if name_node is not None:
                    return [node_text(name_node)]
            return ["default"]

        names = []
        if declaration is not None:
            if declaration.type in FUNCTION_DECLARATION_TYPES:
                name_node = declaration.child_by_field_name("name")
                if name_node is not None:
                    names.append(node_text(name_node))
            elif declaration.type in DECLARATION_STATEMENT_TYPES:
                for declarator in declaration.named_children:
                    if declarator.type == "variable_declarator":
                        name = identifier_name(declarator.child_by_field_name("name"))
                        if name:
                            names.append(name)

        # export { a, b as c }
        for child in statement.named_children:
            if child.type != "export_clause":
                continue
            for specifier in child.named_children:
                if specifier.type != "export_specifier":
                    continue
                exported = specifier.child_by_field_name("alias")
                if exported is None:
                    exported = specifier.child_by_field_name("name")
                if exported is not None and exported.type in ("identifier", "default"):
                    names.append(node_text(exported))

        return names
