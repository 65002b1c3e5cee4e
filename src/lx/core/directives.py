import logging
import re
from collections.abc import Iterable, Sequence

from lx.core.languages import Grammar
from lx.models import ByteSpan, Directive, DirectiveCall, FunctionMatch

logger = logging.getLogger(__name__)

# Bare lx("task") call, for grammars without a directive query.
UNIVERSAL_MARKER = re.compile(r"""(?i)(?<![\w.])lx\s*\(\s*(?P<q>["'`])(?P<task>(?:\\.|(?!(?P=q)).)*)(?P=q)""")

_STRING_PREFIX = re.compile(r"^[A-Za-z]{0,2}(?=[\"'`#])")


def unquote(literal: str) -> str:
    """Strip the enclosing quotes (and any string prefix or raw-string hashes) from a literal."""
    text = _STRING_PREFIX.sub("", literal.strip(), count=1)
    if text.startswith("#"):
        text = text.strip("#")
    for quote in ('"""', "'''", '"', "'", "`"):
        if len(text) >= 2 * len(quote) and text.startswith(quote) and text.endswith(quote):
            return text[len(quote) : -len(quote)]
    return text


def _marker_tasks(pattern: re.Pattern[str], text: str) -> list[str]:
    return [match.group("task") for match in pattern.finditer(text)]


def _non_empty(tasks: Iterable[str]) -> list[str]:
    return [task for task in tasks if task.strip()]


def _structural_tasks(body: ByteSpan, calls: Sequence[DirectiveCall]) -> list[str]:
    inside = [call for call in calls if body.start <= call.literal.start < body.end]
    tasks = _non_empty(unquote(call.literal.text) for call in inside if not call.bare)
    return tasks or _non_empty(unquote(call.literal.text) for call in inside if call.bare)


def extract_prompt(
    function: FunctionMatch,
    grammar: Grammar,
    directive_calls: Sequence[DirectiveCall] = (),
) -> Directive | None:
    """Find the directive inside a function body, if any.

    Grammars with a directive query only see real call expressions found by
    that query, so markers inside comments or string literals never count.
    Grammars without one fall back to the marker patterns over the body text.
    In both cases ``lx.Generate("...")`` wins over a bare ``lx("...")``, and
    only the first marker of the winning kind is honored.
    """
    body = function.body
    if body is None:
        return None

    if grammar.directive_query is not None:
        tasks = _structural_tasks(body, directive_calls)
    else:
        tasks = _non_empty(_marker_tasks(grammar.marker_pattern, body.text))
        if not tasks:
            tasks = _non_empty(_marker_tasks(UNIVERSAL_MARKER, body.text))
    if not tasks:
        return None

    if len(tasks) > 1:
        logger.warning(
            "Function '%s' contains %d directives; only the first one is used",
            function.name_text,
            len(tasks),
        )
    return Directive(prompt=tasks[0], function=function)
