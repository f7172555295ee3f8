"""Shared fixtures for function-flow tests."""

import textwrap
from pathlib import Path

import pytest

from app.services.code_graph import ASTParser, FunctionInfo, FunctionParameter
from app.services.code_graph.models import Location

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def parser():
    return ASTParser()


@pytest.fixture
def parse(parser):
    """Parse a dedented snippet."""

    def _parse(source: str):
        return parser.parse_source(textwrap.dedent(source))

    return _parse


@pytest.fixture
def load_fixture():
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


def make_function(
    name: str,
    params: int = 0,
    return_type: str = "any",
    is_async: bool = False,
    is_exported: bool = False,
    line: int = 1,
) -> FunctionInfo:
    """FunctionInfo built by hand, for graph and layout tests."""
    return FunctionInfo(
        name=name,
        parameters=[FunctionParameter(name=f"p{i}", type="string") for i in range(params)],
        return_type=return_type,
        location=Location(start_line=line, end_line=line + 2),
        is_async=is_async,
        is_exported=is_exported,
    )
