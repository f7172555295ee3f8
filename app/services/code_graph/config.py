"""Конфигурация анализа и раскладки графа."""

from dataclasses import dataclass, replace
from typing import Literal

from app.constants import (
    ASYNC_CALL_PATTERNS,
    HOOK_NAMES,
    LANGUAGE_MAP,
    MAX_SOURCE_BYTES,
    PARSER_TIERS,
)

LayoutDirection = Literal["TB", "BT", "LR", "RL"]


@dataclass
class AnalysisConfig:
    """Конфигурация анализа исходников."""

    # Максимальный размер исходника в байтах (UTF-8)
    max_source_bytes: int = MAX_SOURCE_BYTES

    # Грамматики tree-sitter (пробуем по порядку)
    parser_tiers: tuple[str, ...] = PARSER_TIERS

    # Хуки, колбэки которых выделяются в отдельные функции
    hook_names: tuple[str, ...] = HOOK_NAMES

    # Эвристика асинхронных вызовов для анимации рёбер
    async_call_patterns: tuple[str, ...] = ASYNC_CALL_PATTERNS

    # Расширения файлов для анализа директорий
    file_extensions: tuple[str, ...] = tuple(f".{ext}" for ext in LANGUAGE_MAP.keys())


@dataclass
class LayoutOptions:
    """Параметры раскладки узлов."""

    direction: LayoutDirection = "TB"
    node_width: float = 450
    node_height: float = 180
    rank_sep: float = 180
    node_sep: float = 120
    margin: float = 20

    # Ограничения размеров узла
    min_node_width: float = 400
    max_node_width: float = 700
    max_async_node_width: float = 800
    min_node_height: float = 180
    max_node_height: float = 400

    # Матричная раскладка
    grid_columns: int = 5
    grid_node_width: float = 500
    grid_node_height: float = 250
    grid_horizontal_spacing: float = 850
    grid_vertical_spacing: float = 350
    grid_start: tuple[float, float] = (50, 50)
    grid_group_spacing: float = 100
    header_height: float = 40

    # Круговая раскладка
    circle_center: tuple[float, float] = (200, 200)
    circle_max_nodes: int = 6

    # Позиция единственного узла
    single_node_position: tuple[float, float] = (200, 200)

    # Сколько проходов упорядочивания внутри рангов
    ordering_sweeps: int = 4

    def with_overrides(self, **overrides) -> "LayoutOptions":
        """Копия параметров с заменой указанных полей (None игнорируется)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


@dataclass
class GraphFilter:
    """Критерии фильтрации узлов графа (None = не фильтровать)."""

    show_exported: bool | None = None
    show_methods: bool | None = None
    show_async: bool | None = None
    min_complexity: int | None = None
    max_complexity: int | None = None
