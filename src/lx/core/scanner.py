from tree_sitter import Node, QueryCursor, Tree

from lx.core.languages import DIRECTIVE_METHOD_CAPTURE, DIRECTIVE_PROMPT_CAPTURE, FUNCTION_CAPTURE, Grammar
from lx.models import ByteSpan, DirectiveCall, FunctionMatch


class FileParseError(ValueError):
    """The file could not be parsed cleanly; it is skipped as a whole."""


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def parse_source(source_bytes: bytes, grammar: Grammar) -> Tree:
    try:
        source_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileParseError(f"Source is not valid UTF-8: {exc}") from None

    tree = grammar.parser().parse(source_bytes)
    if tree.root_node.has_error:
        error_node = _first_error(tree.root_node)
        row, column = error_node.start_point if error_node is not None else (0, 0)
        raise FileParseError(f"Syntax error in {grammar.name} source at line {row + 1}, column {column + 1}")
    return tree


def _span(node: Node | None, source_bytes: bytes) -> ByteSpan | None:
    if node is None:
        return None
    text = source_bytes[node.start_byte : node.end_byte].decode("utf-8")
    return ByteSpan(start=node.start_byte, end=node.end_byte, text=text)


def _line_indent(source_bytes: bytes, offset: int) -> str:
    line_start = source_bytes.rfind(b"\n", 0, offset) + 1
    prefix = source_bytes[line_start:offset].decode("utf-8")
    return prefix[: len(prefix) - len(prefix.lstrip())]


def _first(captures: dict[str, list[Node]], name: str) -> Node | None:
    nodes = captures.get(name)
    return nodes[0] if nodes else None


def scan_functions(tree: Tree, source_bytes: bytes, grammar: Grammar) -> list[FunctionMatch]:
    """Return the top-level function declarations of a parsed file in document order.

    A declaration nested inside another matched declaration (an inner function,
    a closure bound to a name) is dropped so that no two matches overlap.
    """
    cursor = QueryCursor(grammar.function_query)
    found: list[FunctionMatch] = []
    for _, captures in cursor.matches(tree.root_node):
        decl = _first(captures, FUNCTION_CAPTURE)
        name = _span(_first(captures, f"{FUNCTION_CAPTURE}.name"), source_bytes)
        if decl is None or name is None:
            continue
        body = _span(_first(captures, f"{FUNCTION_CAPTURE}.body"), source_bytes)
        header_end = body.start if body is not None else decl.end_byte
        found.append(
            FunctionMatch(
                start_byte=decl.start_byte,
                end_byte=decl.end_byte,
                indent=_line_indent(source_bytes, decl.start_byte),
                name=name,
                parameters=_span(_first(captures, f"{FUNCTION_CAPTURE}.params"), source_bytes),
                result=_span(_first(captures, f"{FUNCTION_CAPTURE}.result"), source_bytes),
                body=body,
                header=source_bytes[decl.start_byte : header_end].decode("utf-8").rstrip(),
            )
        )

    found.sort(key=lambda match: (match.start_byte, -match.end_byte))
    top_level: list[FunctionMatch] = []
    for match in found:
        if top_level and match.start_byte < top_level[-1].end_byte:
            continue
        top_level.append(match)
    return top_level


def find_directive_calls(tree: Tree, source_bytes: bytes, grammar: Grammar) -> list[DirectiveCall]:
    """Return every structural directive call, in document order.

    Calls matched without a method capture are bare ``lx("...")`` calls.
    """
    if grammar.directive_query is None:
        return []
    cursor = QueryCursor(grammar.directive_query)
    calls: list[DirectiveCall] = []
    for _, captures in cursor.matches(tree.root_node):
        literal = _span(_first(captures, DIRECTIVE_PROMPT_CAPTURE), source_bytes)
        if literal is not None:
            calls.append(DirectiveCall(literal=literal, bare=DIRECTIVE_METHOD_CAPTURE not in captures))
    calls.sort(key=lambda call: call.literal.start)
    return calls
