import logging
import os
from collections.abc import Iterator
from pathlib import Path

from lx.core.dependencies import collect_dependencies
from lx.core.generation import generate_artifacts
from lx.core.languages import Grammar, GrammarRegistry
from lx.core.planner import plan_rewrites
from lx.core.ports.oracle import CodeOracle
from lx.core.postprocess import PostProcessor, run_formatters
from lx.core.scanner import FileParseError
from lx.core.splicer import splice_artifacts, write_atomic
from lx.models import FileOutcome, FileStatus, RunSummary

logger = logging.getLogger(__name__)


def iter_source_files(target: Path) -> Iterator[Path]:
    """Yield files under ``target`` in a stable order, skipping hidden directories and symlinks."""
    if target.is_file():
        yield target
        return
    for root, dirs, files in os.walk(target):
        dirs[:] = sorted(name for name in dirs if not name.startswith("."))
        for name in sorted(files):
            path = Path(root) / name
            if path.is_symlink():
                logger.debug("Skipping symlink %s", path)
                continue
            yield path


def process_file(
    file_path: Path,
    grammar: Grammar,
    oracle: CodeOracle,
    post_process: PostProcessor = run_formatters,
) -> FileOutcome:
    """Generate code for every directive in one file and write the result back.

    The file is written only when at least one generation succeeded; ranges
    whose generation failed keep their original text.
    """
    path = str(file_path)
    source_bytes = file_path.read_bytes()
    try:
        specs = plan_rewrites(source_bytes, grammar)
    except FileParseError as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return FileOutcome(path=path, language=grammar.name, status=FileStatus.PARSE_ERROR)
    if not specs:
        return FileOutcome(path=path, language=grammar.name, status=FileStatus.NO_DIRECTIVES)

    logger.info("%s: %d directive(s) found", path, len(specs))
    artifacts = generate_artifacts(oracle, specs, grammar)
    failed = sum(1 for artifact in artifacts if not artifact.succeeded)
    dependencies = collect_dependencies(artifacts, grammar.comment_prefix)
    if dependencies:
        logger.info("%s: generated code depends on %s", path, ", ".join(dependencies))

    def _outcome(status: FileStatus) -> FileOutcome:
        return FileOutcome(
            path=path,
            language=grammar.name,
            status=status,
            directives=len(specs),
            failed=failed,
            dependencies=dependencies,
        )

    new_content = splice_artifacts(source_bytes, artifacts)
    if new_content is None:
        logger.warning("%s: every generation failed, file left unchanged", path)
        return _outcome(FileStatus.ALL_FAILED)

    try:
        write_atomic(file_path, new_content)
    except OSError as exc:
        logger.error("Could not write %s: %s", path, exc)
        return _outcome(FileStatus.WRITE_FAILED)
    logger.info("%s: rewrote %d of %d function(s)", path, len(specs) - failed, len(specs))

    try:
        post_process(file_path, grammar.name)
    except Exception:
        logger.exception("Post-processing failed for %s", path)
    return _outcome(FileStatus.WRITTEN)


def run_directory(
    target: Path,
    registry: GrammarRegistry,
    oracle: CodeOracle,
    post_process: PostProcessor = run_formatters,
) -> RunSummary:
    """Walk ``target`` and process every file with a supported extension, one at a time."""
    summary = RunSummary()
    for file_path in iter_source_files(target):
        grammar = registry.for_path(file_path)
        if grammar is None:
            continue
        try:
            outcome = process_file(file_path, grammar, oracle, post_process)
        except Exception:
            logger.exception("Error while processing %s", file_path)
            outcome = FileOutcome(path=str(file_path), language=grammar.name, status=FileStatus.FAILED)
        summary.outcomes.append(outcome)
    return summary
