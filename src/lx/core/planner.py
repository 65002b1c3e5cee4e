from lx.core.directives import extract_prompt
from lx.core.languages import Grammar
from lx.core.scanner import find_directive_calls, parse_source, scan_functions
from lx.models import Directive, ReplacementSpec


def to_replacement_spec(directive: Directive) -> ReplacementSpec:
    function = directive.function
    return ReplacementSpec(
        start=function.start_byte,
        end=function.end_byte,
        prompt=directive.prompt,
        name=function.name_text,
        parameters=function.parameters.text if function.parameters else "",
        result=function.result.text if function.result else "",
        signature=function.header,
        indent=function.indent,
    )


def find_directives(source_bytes: bytes, grammar: Grammar) -> list[Directive]:
    """Parse a file and return one directive per directive-bearing top-level function.

    Raises ``FileParseError`` when the source does not parse cleanly.
    """
    tree = parse_source(source_bytes, grammar)
    calls = find_directive_calls(tree, source_bytes, grammar)
    directives: list[Directive] = []
    for function in scan_functions(tree, source_bytes, grammar):
        directive = extract_prompt(function, grammar, calls)
        if directive is not None:
            directives.append(directive)
    return directives


def plan_rewrites(source_bytes: bytes, grammar: Grammar) -> list[ReplacementSpec]:
    """Return the replacements to request for a file, in document order.

    An empty plan means the file needs no change and must not be written.
    """
    return [to_replacement_spec(directive) for directive in find_directives(source_bytes, grammar)]
