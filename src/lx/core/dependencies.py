import re
from collections.abc import Iterable

from lx.models import GeneratedArtifact


def _annotation_pattern(comment_prefix: str) -> re.Pattern[str]:
    return re.compile(rf"{re.escape(comment_prefix)}\s*lx-dep:\s*(?P<name>[^\s*]+)")


def find_dependencies(text: str, comment_prefix: str) -> list[str]:
    """Return the distinct ``lx-dep:`` names in ``text`` in order of first appearance."""
    pattern = _annotation_pattern(comment_prefix)
    names: dict[str, None] = {}
    for line in text.splitlines():
        match = pattern.search(line)
        if match:
            names.setdefault(match.group("name"), None)
    return list(names)


def collect_dependencies(artifacts: Iterable[GeneratedArtifact], comment_prefix: str) -> list[str]:
    names: dict[str, None] = {}
    for artifact in artifacts:
        if artifact.text is None:
            continue
        for name in find_dependencies(artifact.text, comment_prefix):
            names.setdefault(name, None)
    return list(names)
