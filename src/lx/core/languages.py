import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from tree_sitter import Language, Parser, Query, QueryError
from tree_sitter_language_pack import SupportedLanguage, get_language, get_parser

QUERIES_DIR = Path(__file__).parent.parent / "queries"

FUNCTION_CAPTURE = "def.func"
DIRECTIVE_PROMPT_CAPTURE = "use.directive.prompt"
DIRECTIVE_METHOD_CAPTURE = "use.directive.method"

# lx.Generate("task"), namespace matched case-insensitively.
_GENERATE_MARKER = r"""(?<![\w.])[lL][xX]\s*\.\s*Generate\s*\(\s*(?P<q>["'`])(?P<task>(?:\\.|(?!(?P=q)).)*)(?P=q)"""


class GrammarDefinitionError(ValueError):
    """A grammar's query or language could not be loaded."""


@dataclass(frozen=True)
class GrammarSpec:
    """Static description of a supported language, compiled into a ``Grammar`` at startup."""

    name: str
    extensions: tuple[str, ...]
    comment_prefix: str
    query_name: str
    structural_directives: bool = True
    marker_pattern: str = _GENERATE_MARKER


_GRAMMAR_SPECS: tuple[GrammarSpec, ...] = (
    GrammarSpec("go", (".go",), "//", "go"),
    GrammarSpec("python", (".py",), "#", "python"),
    GrammarSpec("javascript", (".js", ".jsx", ".mjs", ".cjs"), "//", "javascript"),
    GrammarSpec("typescript", (".ts",), "//", "typescript"),
    GrammarSpec("tsx", (".tsx",), "//", "typescript"),
    GrammarSpec("rust", (".rs",), "//", "rust"),
    GrammarSpec("java", (".java",), "//", "java"),
    GrammarSpec("c", (".c",), "//", "c", structural_directives=False),
)


@dataclass(frozen=True)
class Grammar:
    name: str
    extensions: tuple[str, ...]
    language: Language
    function_query: Query
    directive_query: Query | None
    marker_pattern: re.Pattern[str]
    comment_prefix: str

    def parser(self) -> Parser:
        return get_parser(cast(SupportedLanguage, self.name))


def _load_query(language: Language, query_name: str, query_type: str) -> Query:
    query_path = QUERIES_DIR / f"{query_name}_{query_type}.scm"
    if not query_path.exists():
        raise GrammarDefinitionError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    try:
        return Query(language, query_text)
    except QueryError as exc:
        raise GrammarDefinitionError(f"Invalid query {query_path.name}: {exc}") from exc


def compile_grammar(spec: GrammarSpec) -> Grammar:
    try:
        language = get_language(cast(SupportedLanguage, spec.name))
    except LookupError as exc:
        raise GrammarDefinitionError(f"Language '{spec.name}' is not available: {exc}") from exc

    function_query = _load_query(language, spec.query_name, "functions")
    if FUNCTION_CAPTURE not in {function_query.capture_name(i) for i in range(function_query.capture_count)}:
        raise GrammarDefinitionError(f"Function query for '{spec.name}' does not capture @{FUNCTION_CAPTURE}")

    directive_query = _load_query(language, spec.query_name, "directives") if spec.structural_directives else None

    try:
        marker_pattern = re.compile(spec.marker_pattern)
    except re.error as exc:
        raise GrammarDefinitionError(f"Invalid marker pattern for '{spec.name}': {exc}") from exc

    return Grammar(
        name=spec.name,
        extensions=spec.extensions,
        language=language,
        function_query=function_query,
        directive_query=directive_query,
        marker_pattern=marker_pattern,
        comment_prefix=spec.comment_prefix,
    )


class GrammarRegistry:
    """Extension-indexed set of compiled grammars.

    Every grammar is compiled when the registry is built, so a broken query
    surfaces as ``GrammarDefinitionError`` before any file is touched.
    """

    def __init__(self, grammars: Iterable[Grammar]) -> None:
        self._by_extension: dict[str, Grammar] = {}
        self._by_name: dict[str, Grammar] = {}
        for grammar in grammars:
            self._by_name[grammar.name] = grammar
            for extension in grammar.extensions:
                self._by_extension[extension.lower()] = grammar

    @classmethod
    def from_specs(cls, specs: Iterable[GrammarSpec] = _GRAMMAR_SPECS) -> "GrammarRegistry":
        return cls(compile_grammar(spec) for spec in specs)

    def for_extension(self, extension: str) -> Grammar | None:
        return self._by_extension.get(extension.lower())

    def for_path(self, file_path: Path) -> Grammar | None:
        return self.for_extension(file_path.suffix)

    def get(self, name: str) -> Grammar:
        try:
            return self._by_name[name]
        except KeyError:
            raise ValueError(f"Unsupported language '{name}'. Supported: {sorted(self._by_name)}") from None

    @property
    def languages(self) -> list[str]:
        return sorted(self._by_name)
