from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class ByteSpan:
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class DirectiveCall:
    """String literal of a directive call; ``bare`` marks ``lx("...")`` as opposed to ``lx.Generate("...")``."""

    literal: ByteSpan
    bare: bool = False


@dataclass(frozen=True)
class FunctionMatch:
    """One top-level function declaration located by a grammar's function query."""

    start_byte: int
    end_byte: int
    indent: str
    name: ByteSpan
    parameters: ByteSpan | None
    result: ByteSpan | None
    body: ByteSpan | None
    header: str

    @property
    def name_text(self) -> str:
        return self.name.text


@dataclass(frozen=True)
class Directive:
    prompt: str
    function: FunctionMatch


@dataclass(frozen=True)
class ReplacementSpec:
    start: int
    end: int
    prompt: str
    name: str
    parameters: str
    result: str
    signature: str
    indent: str = ""


@dataclass(frozen=True)
class GeneratedArtifact:
    spec: ReplacementSpec
    text: str | None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.text is not None


class FileStatus(str, Enum):
    PARSE_ERROR = "parse_error"
    NO_DIRECTIVES = "no_directives"
    ALL_FAILED = "all_failed"
    WRITTEN = "written"
    WRITE_FAILED = "write_failed"
    FAILED = "failed"


@dataclass
class FileOutcome:
    path: str
    language: str | None
    status: FileStatus
    directives: int = 0
    failed: int = 0
    dependencies: list[str] = field(default_factory=list)


@dataclass
class RunSummary:
    outcomes: list[FileOutcome] = field(default_factory=list)

    def count(self, status: FileStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def files_processed(self) -> int:
        return len(self.outcomes)

    @property
    def directives(self) -> int:
        return sum(outcome.directives for outcome in self.outcomes)

    @property
    def failed_directives(self) -> int:
        return sum(outcome.failed for outcome in self.outcomes)
