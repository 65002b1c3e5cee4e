import logging
import os
import re
from collections.abc import Iterable, Sequence

from lx.core.languages import Grammar
from lx.core.ports.oracle import CodeOracle, OracleError
from lx.models import GeneratedArtifact, ReplacementSpec

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^\s*```[^`]*$")
_CLOSING_FENCE = re.compile(r"^\s*```\s*$")

_REQUEST_TEMPLATE = """You are a {language} expert. Implement the ENTIRE function described below.
RULES:
1. Output ONLY the complete {language} function: the signature exactly as given, followed by its full body.
2. DO NOT include import statements or any code outside the function.
3. If the code needs an external package or module, use it directly and declare it inside the function on its own line as a comment: {comment} lx-dep: <name>
4. Do not keep the lx directive call in the generated code.
5. Ensure the code is self-contained and matches the signature.

Signature: {signature}
Task: {task}"""


def build_request(spec: ReplacementSpec, grammar: Grammar) -> str:
    return _REQUEST_TEMPLATE.format(
        language=grammar.name,
        comment=grammar.comment_prefix,
        signature=spec.signature,
        task=spec.prompt,
    )


def strip_fences(text: str) -> str:
    """Drop a leading and a trailing markdown fence line, each optional, and surrounding blank lines.

    Indentation of the first code line is kept so that it can be realigned.
    """
    lines = text.rstrip().split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    if lines and _OPENING_FENCE.match(lines[0]):
        lines.pop(0)
    if lines and _CLOSING_FENCE.match(lines[-1]):
        lines.pop()
    return "\n".join(lines).strip("\n").rstrip()


def sanitize_generated_code(text: str) -> str:
    """Strip markdown fences (with optional language tag) and surrounding whitespace."""
    return strip_fences(text).strip()


def _string_interior_rows(code: str, grammar: Grammar) -> set[int]:
    """Rows that start inside a multi-line string literal of the generated code."""
    tree = grammar.parser().parse(code.encode("utf-8"))
    rows: set[int] = set()
    pending = [tree.root_node]
    while pending:
        node = pending.pop()
        start_row, end_row = node.start_point[0], node.end_point[0]
        if start_row == end_row:
            continue
        if ("string" in node.type and node.type != "concatenated_string") or node.type == "text_block":
            rows.update(range(start_row + 1, end_row + 1))
        else:
            pending.extend(node.children)
    return rows


def _common_margin(lines: Iterable[str]) -> str:
    margins = [line[: len(line) - len(line.lstrip())] for line in lines if line.strip()]
    return os.path.commonprefix(margins) if margins else ""


def align_indentation(code: str, indent: str, grammar: Grammar) -> str:
    """Re-indent generated code for splicing at the declaration's column.

    The common margin is removed and every line after the first gets
    ``indent``. Lines that start inside a multi-line string literal are left
    as they are so the literal's value does not change.
    """
    lines = code.split("\n")
    interior = _string_interior_rows(code, grammar)
    margin = _common_margin(line for row, line in enumerate(lines) if row not in interior)

    aligned: list[str] = []
    for row, line in enumerate(lines):
        if row in interior or not line.strip():
            aligned.append(line)
            continue
        line = line.removeprefix(margin)
        aligned.append(line.lstrip() if row == 0 else indent + line)
    return "\n".join(aligned)


def generate_artifacts(
    oracle: CodeOracle,
    specs: Sequence[ReplacementSpec],
    grammar: Grammar,
) -> list[GeneratedArtifact]:
    """Request code for each spec, one call at a time, in document order.

    A failed request yields an artifact without text; it never raises.
    """
    artifacts: list[GeneratedArtifact] = []
    for spec in specs:
        logger.info("Generating '%s': %s", spec.name, spec.prompt)
        try:
            raw = oracle.generate(build_request(spec, grammar))
        except OracleError as exc:
            logger.warning("Generation failed for '%s': %s", spec.name, exc)
            artifacts.append(GeneratedArtifact(spec=spec, text=None, error=str(exc)))
            continue

        code = strip_fences(raw)
        if not code.strip():
            logger.warning("Generation for '%s' returned no code", spec.name)
            artifacts.append(GeneratedArtifact(spec=spec, text=None, error="empty response"))
            continue
        artifacts.append(GeneratedArtifact(spec=spec, text=align_indentation(code, spec.indent, grammar)))
    return artifacts
