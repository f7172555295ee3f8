"""Tests for the pipeline entry point."""

import json

from app.config import Config
from app.main import Pipeline


class TestPipeline:
    def test_writes_graph_artifacts(self, tmp_path):
        source_dir = tmp_path / "project"
        (source_dir / "lib").mkdir(parents=True)
        (source_dir / "lib" / "math.ts").write_text(
            "export function sum(a: number, b: number) { return add(a, b); }\n"
            "function add(a: number, b: number) { return a + b; }\n"
        )
        (source_dir / "broken.ts").write_text("function broken(x: number {\n")

        config = Config(
            source_path=str(source_dir),
            artifacts_dir=str(tmp_path / "out"),
            layout_algorithm="hierarchical",
        )
        results = Pipeline(config).run()

        assert results["lib/math.ts"].success
        assert results["broken.ts"].status == "syntax_error"

        (run_dir,) = (tmp_path / "out").iterdir()
        assert run_dir.name.endswith(".project")
        graph = json.loads((run_dir / "lib__math.ts.graph.json").read_text(encoding="utf-8"))
        assert graph["success"] is True
        assert len(graph["data"]["nodes"]) == 2
        assert graph["data"]["edges"][0]["source"] == "node-sum"

        failed = json.loads((run_dir / "broken.ts.graph.json").read_text(encoding="utf-8"))
        assert failed["status"] == "syntax_error"

    def test_config_defaults(self, monkeypatch):
        monkeypatch.setenv("SOURCE_PATH", "src")
        config = Config.model_validate({})
        assert config.source_path == "src"
        assert config.layout_algorithm == "auto"
        assert config.layout_direction == "TB"
        assert config.grid_columns == 5
        assert config.max_source_bytes == 500 * 1024
        assert config.simplify is False
