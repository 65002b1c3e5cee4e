"""Unit tests for the function and directive queries of every supported language."""

import pytest
from tree_sitter import Parser, Query, QueryCursor

from lx.core.languages import GrammarRegistry
from lx.core.scanner import find_directive_calls, parse_source, scan_functions


def get_captures_with_text(query: Query, parser: Parser, source: str) -> dict[str, list[str]]:
    """Parse source and return capture names mapped to their matched text."""
    source_bytes = source.encode("utf-8")
    tree = parser.parse(source_bytes)
    cursor = QueryCursor(query)
    result: dict[str, list[str]] = {}
    for _, matched_captures in cursor.matches(tree.root_node):
        for cap_name, nodes in matched_captures.items():
            result.setdefault(cap_name, [])
            for node in nodes:
                result[cap_name].append(source_bytes[node.start_byte : node.end_byte].decode("utf-8"))
    return result


@pytest.mark.parametrize(
    ("language", "source", "expected_names"),
    [
        (
            "go",
            "package main\n\nfunc Add(a int, b int) int {\n\treturn a + b\n}\n\n"
            "func (s *Stack) Push(v int) {\n}\n",
            ["Add", "Push"],
        ),
        (
            "python",
            "def add(a, b):\n    return a + b\n\n\nclass Greeter:\n    def greet(self) -> str:\n        return 'hi'\n",
            ["add", "greet"],
        ),
        (
            "javascript",
            "function add(a, b) {\n  return a + b;\n}\n\nconst mul = (a, b) => {\n  return a * b;\n};\n",
            ["add", "mul"],
        ),
        (
            "typescript",
            "function add(a: number, b: number): number {\n  return a + b;\n}\n",
            ["add"],
        ),
        (
            "tsx",
            "function add(a: number, b: number): number {\n  return a + b;\n}\n",
            ["add"],
        ),
        (
            "rust",
            "fn add(a: i32, b: i32) -> i32 {\n    a + b\n}\n",
            ["add"],
        ),
        (
            "java",
            "class Calc {\n    int add(int a, int b) {\n        return a + b;\n    }\n}\n",
            ["add"],
        ),
        (
            "c",
            "int add(int a, int b) {\n    return a + b;\n}\n",
            ["add"],
        ),
    ],
    ids=["go", "python", "javascript", "typescript", "tsx", "rust", "java", "c"],
)
def test_function_query_finds_declarations(
    registry: GrammarRegistry, language: str, source: str, expected_names: list[str]
) -> None:
    grammar = registry.get(language)
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, grammar)

    matches = scan_functions(tree, source_bytes, grammar)

    assert [match.name_text for match in matches] == expected_names


@pytest.mark.parametrize(
    ("language", "source"),
    [
        ("go", 'package main\n\nfunc Sort(xs []int) []int {\n\tlx.Generate("sort the slice")\n\treturn nil\n}\n'),
        ("python", 'def sort(xs):\n    lx.Generate("sort the slice")\n'),
        ("javascript", 'function sort(xs) {\n  lx.Generate("sort the slice");\n}\n'),
        ("typescript", 'function sort(xs: number[]): number[] {\n  lx.Generate("sort the slice");\n  return xs;\n}\n'),
        ("rust", 'fn sort(xs: Vec<i32>) -> Vec<i32> {\n    lx.Generate("sort the slice");\n    xs\n}\n'),
        ("java", 'class S {\n    void sort() {\n        lx.Generate("sort the slice");\n    }\n}\n'),
    ],
    ids=["go", "python", "javascript", "typescript", "rust", "java"],
)
def test_directive_query_captures_prompt_literal(registry: GrammarRegistry, language: str, source: str) -> None:
    grammar = registry.get(language)
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, grammar)

    calls = find_directive_calls(tree, source_bytes, grammar)

    assert [(call.literal.text, call.bare) for call in calls] == [('"sort the slice"', False)]


@pytest.mark.parametrize(
    ("language", "source"),
    [
        ("go", 'package main\n\nfunc Sort(xs []int) []int {\n\tlx("sort the slice")\n\treturn nil\n}\n'),
        ("python", 'def sort(xs):\n    lx("sort the slice")\n'),
        ("javascript", 'function sort(xs) {\n  lx("sort the slice");\n}\n'),
        ("typescript", 'function sort(xs: number[]): number[] {\n  lx("sort the slice");\n  return xs;\n}\n'),
        ("rust", 'fn sort(xs: Vec<i32>) -> Vec<i32> {\n    lx("sort the slice");\n    xs\n}\n'),
        ("java", 'class S {\n    void sort() {\n        lx("sort the slice");\n    }\n}\n'),
    ],
    ids=["go", "python", "javascript", "typescript", "rust", "java"],
)
def test_directive_query_captures_bare_call(registry: GrammarRegistry, language: str, source: str) -> None:
    grammar = registry.get(language)
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, grammar)

    calls = find_directive_calls(tree, source_bytes, grammar)

    assert [(call.literal.text, call.bare) for call in calls] == [('"sort the slice"', True)]


@pytest.mark.parametrize(
    ("source", "name", "signature"),
    [
        ("char *dup(const char *s) {\n    return 0;\n}\n", "dup", "char *dup(const char *s)"),
        ("char **split(char *s) {\n    return 0;\n}\n", "split", "char **split(char *s)"),
    ],
    ids=["pointer", "pointer-to-pointer"],
)
def test_c_functions_returning_pointers(registry: GrammarRegistry, source: str, name: str, signature: str) -> None:
    grammar = registry.get("c")
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes, grammar)

    (match,) = scan_functions(tree, source_bytes, grammar)

    assert match.name_text == name
    assert match.header == signature


class TestGoFunctionQueryCaptures:
    """Capture names and texts of the Go function query."""

    def test_captures_signature_parts(self, registry: GrammarRegistry, go_parser: Parser) -> None:
        source = "package main\n\nfunc Divide(a, b float64) (float64, error) {\n\treturn a / b, nil\n}\n"
        captures = get_captures_with_text(registry.get("go").function_query, go_parser, source)
        assert captures["def.func.name"] == ["Divide"]
        assert captures["def.func.params"] == ["(a, b float64)"]
        assert captures["def.func.result"] == ["(float64, error)"]
        assert captures["def.func.body"] == ["{\n\treturn a / b, nil\n}"]

    def test_result_is_optional(self, registry: GrammarRegistry, go_parser: Parser) -> None:
        source = "package main\n\nfunc main() {\n}\n"
        captures = get_captures_with_text(registry.get("go").function_query, go_parser, source)
        assert captures["def.func.name"] == ["main"]
        assert "def.func.result" not in captures


class TestGoDirectiveQuery:
    """The Go directive query only accepts lx.Generate calls with a string first argument."""

    def test_namespace_is_case_insensitive(self, registry: GrammarRegistry, go_parser: Parser) -> None:
        source = 'package main\n\nfunc f() {\n\tLX.Generate("upper")\n}\n'
        captures = get_captures_with_text(registry.get("go").directive_query, go_parser, source)
        assert captures["use.directive.prompt"] == ['"upper"']

    def test_ignores_other_namespaces(self, registry: GrammarRegistry, go_parser: Parser) -> None:
        source = 'package main\n\nfunc f() {\n\tfmt.Generate("nope")\n\tlx.Other("nope")\n}\n'
        captures = get_captures_with_text(registry.get("go").directive_query, go_parser, source)
        assert "use.directive.prompt" not in captures

    def test_accepts_raw_string_literal(self, registry: GrammarRegistry, go_parser: Parser) -> None:
        source = "package main\n\nfunc f() {\n\tlx.Generate(`raw task`)\n}\n"
        captures = get_captures_with_text(registry.get("go").directive_query, go_parser, source)
        assert captures["use.directive.prompt"] == ["`raw task`"]
