"""Поиск исходников TypeScript с поддержкой gitignore."""

import os
import logging
from pathlib import Path, PurePosixPath

import pathspec

from .config import AnalysisConfig

logger = logging.getLogger(__name__)

# Служебные папки, которые не сканируются никогда
ALWAYS_SKIPPED_DIRS = frozenset({".git", "node_modules"})

# Декларации типов: тел функций в них нет
DECLARATION_SUFFIX = ".d.ts"


class FileScanner:
    """Обход дерева исходников: .ts/.tsx без деклараций, вендорных папок и игнорируемого."""

    def __init__(self, root_path: str, config: AnalysisConfig):
        self.root = Path(root_path)
        self.config = config
        self._ignored = self._load_gitignore()

    def _load_gitignore(self) -> pathspec.PathSpec | None:
        gitignore_path = self.root / ".gitignore"
        if not gitignore_path.is_file():
            return None

        with open(gitignore_path, encoding="utf-8") as f:
            return pathspec.PathSpec.from_lines("gitwildmatch", f)

    def scan(self) -> list[str]:
        """
        Найти исходники для анализа.

        Returns:
            отсортированный список относительных POSIX-путей
        """
        logger.info(f"[Scanner] Scanning {self.root}...")
        sources = []

        for dirpath, dirs, filenames in os.walk(self.root):
            rel_dir = PurePosixPath(Path(dirpath).relative_to(self.root).as_posix())

            # os.walk не спускается в пропущенные папки
            dirs[:] = sorted(d for d in dirs if not self._skip_dir(rel_dir / d))

            sources.extend(
                str(rel_dir / name)
                for name in filenames
                if self.is_source_file(name) and not self._is_ignored(rel_dir / name)
            )

        sources.sort()
        logger.info(f"[Scanner] Found {len(sources)} source files")
        return sources

    def is_source_file(self, filename: str) -> bool:
        """Файл с исходным кодом, который имеет смысл разбирать."""
        if filename.endswith(DECLARATION_SUFFIX):
            return False
        return filename.endswith(self.config.file_extensions)

    def _skip_dir(self, rel_dir: PurePosixPath) -> bool:
        if rel_dir.name in ALWAYS_SKIPPED_DIRS:
            return True
        return self._is_ignored(rel_dir, is_dir=True)

    def _is_ignored(self, rel_path: PurePosixPath, is_dir: bool = False) -> bool:
        """Совпадение с .gitignore корня сканирования."""
        if self._ignored is None:
            return False
        pattern_path = f"{rel_path}/" if is_dir else str(rel_path)
        return self._ignored.match_file(pattern_path)
