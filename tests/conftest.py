"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from lx.core.languages import Grammar, GrammarRegistry

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag every test under tests/unit as "unit"
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# ScriptedOracle — answers generation requests by their task text
# ---------------------------------------------------------------------------


class ScriptedOracle:
    """Oracle double keyed by task text; an exception value is raised instead of returned."""

    def __init__(self, responses: dict[str, str | Exception] | None = None) -> None:
        self.responses = responses or {}
        self.requests: list[str] = []

    @staticmethod
    def task_of(request: str) -> str:
        return request.rsplit("Task: ", 1)[-1]

    @property
    def tasks(self) -> list[str]:
        return [self.task_of(request) for request in self.requests]

    def generate(self, request: str) -> str:
        self.requests.append(request)
        response = self.responses[self.task_of(request)]
        if isinstance(response, Exception):
            raise response
        return response


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def registry() -> GrammarRegistry:
    """Return the registry of all built-in grammars."""
    return GrammarRegistry.from_specs()


@pytest.fixture
def go_grammar(registry: GrammarRegistry) -> Grammar:
    return registry.get("go")


@pytest.fixture
def python_grammar(registry: GrammarRegistry) -> Grammar:
    return registry.get("python")


@pytest.fixture
def c_grammar(registry: GrammarRegistry) -> Grammar:
    return registry.get("c")


@pytest.fixture
def go_parser() -> Parser:
    """Return a tree-sitter parser for Go."""
    return get_parser("go")


@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()
