"""Общие константы анализатора."""

# Расширение файла -> грамматика tree-sitter
LANGUAGE_MAP = {
    "ts": "typescript",
    "tsx": "tsx",
}

# 500KB
MAX_SOURCE_BYTES = 500 * 1024

# Порядок грамматик для парсинга: TSX -> TypeScript без JSX.
# Минимальная TypeScript-грамматика в tree-sitter совпадает с "typescript"
PARSER_TIERS = ("tsx", "typescript")

# React-хуки, первый аргумент которых считается отдельной функцией
HOOK_NAMES = (
    "useCallback",
    "useMemo",
    "useEffect",
    "useLayoutEffect",
    "useState",
    "useReducer",
)

# Подстроки в имени вызываемой функции, по которым вызов считается асинхронным
ASYNC_CALL_PATTERNS = ("async", "fetch", "await", "promise", "then", "catch")

# Типы узлов графа
NODE_TYPE_FUNCTION = "functionNode"
NODE_TYPE_CLASS_METHOD = "classMethodNode"
NODE_TYPE_EXPORTED = "exportedFunctionNode"
NODE_TYPE_ASYNC = "asyncFunctionNode"
NODE_TYPE_SECTION_HEADER = "sectionHeader"

# Типы рёбер графа
EDGE_TYPE_FUNCTION_CALL = "functionCall"
EDGE_TYPE_ASYNC_CALL = "asyncCall"
EDGE_TYPE_MULTIPLE_CALLS = "multipleCalls"
