"""Пайплайн построения графов функций для TypeScript-исходников."""

import json
import logging
from datetime import datetime
from pathlib import Path

from app.config import Config
from app.services.code_graph import (
    AnalysisConfig,
    AnalysisResult,
    CodeGraphService,
    LayoutOptions,
)

logger = logging.getLogger(__name__)


class Pipeline:
    """Анализ файла или директории с сохранением графов в артефакты."""

    def __init__(self, config: Config):
        self.config = config
        self.service = CodeGraphService(
            config=AnalysisConfig(max_source_bytes=config.max_source_bytes),
            layout_options=LayoutOptions(
                direction=config.layout_direction, grid_columns=config.grid_columns
            ),
            layout_algorithm=config.layout_algorithm,
            simplify=config.simplify,
        )

        # Папка для артефактов текущего запуска
        source_name = Path(config.source_path).resolve().name or "source"
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.artifacts_dir = Path(config.artifacts_dir) / f"{timestamp}.{source_name}"
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    def run(self) -> dict[str, AnalysisResult]:
        """Запустить пайплайн."""
        logger.info("╔═══════════════════════════════════════════════════════════╗")
        logger.info("║          FUNCTION FLOW PIPELINE                           ║")
        logger.info("╚═══════════════════════════════════════════════════════════╝")
        logger.info(f"Source: {self.config.source_path}")
        logger.info(
            f"Layout: {self.config.layout_algorithm} ({self.config.layout_direction})\n"
        )

        results = self.service.analyze_path(self.config.source_path)

        for rel_path, result in results.items():
            self._save_file(
                f"{_artifact_name(rel_path)}.graph.json",
                json.dumps(result.to_dict(), ensure_ascii=False, indent=2),
            )

        self._log_summary(results)
        logger.info("\n✓ Pipeline completed")
        return results

    def _log_summary(self, results: dict[str, AnalysisResult]) -> None:
        """Вывести сводку по файлам."""
        logger.info("───────────────────────────────────────────────────────────")
        for rel_path, result in results.items():
            if result.success:
                logger.info(
                    f"  ✓ {rel_path}: {len(result.graph.nodes)} nodes, "
                    f"{len(result.graph.edges)} edges"
                )
            else:
                logger.info(f"  ✗ {rel_path}: {result.status} ({result.message})")

        total_functions = sum(r.metadata.total_functions for r in results.values())
        total_calls = sum(r.metadata.total_calls for r in results.values())
        logger.info(
            f"Files: {len(results)} | Functions: {total_functions:,} | Calls: {total_calls:,}"
        )
        logger.info(f"Artifacts: {self.artifacts_dir}")
        logger.info("───────────────────────────────────────────────────────────")

    def _save_file(self, filename: str, content: str) -> None:
        """Сохранить содержимое в файл в папке текущего запуска."""
        file_path = self.artifacts_dir / filename
        file_path.write_text(content, encoding="utf-8")


def _artifact_name(rel_path: str) -> str:
    """src/lib/utils.ts -> src__lib__utils.ts"""
    return Path(rel_path).as_posix().replace("/", "__")


if __name__ == "__main__":
    config = Config.model_validate(
        {}
    )  # https://github.com/pydantic/pydantic/issues/3753
    logging.basicConfig(level=config.log_level.upper(), format="%(message)s")
    pipeline = Pipeline(config)
    pipeline.run()
