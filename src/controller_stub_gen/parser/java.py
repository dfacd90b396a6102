"""Spring controller source scanner.

Reads Java sources and reports one Fact per supported annotation on a
class, method or method parameter, the way an annotation processor reports
annotated elements.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from controller_stub_gen.parser.facts import SUPPORTED_ANNOTATIONS, Fact, FactKind, kind_for

logger = logging.getLogger(__name__)

PACKAGE = re.compile(r"^\s*package\s+([\w.]+)\s*;", re.MULTILINE)
IMPORT = re.compile(r"^\s*import\s+(?!static\b)([\w.]+(?:\.\*)?)\s*;", re.MULTILINE)
TYPE_DECL = re.compile(r"^(?:class|interface|enum|record)\s+(\w+)")
METHOD_DECL = re.compile(r"^(?:<[^>]*>\s*)?(?P<type>[^(=]+?)\s+(?P<name>\w+)\s*\(")
PARAM_DECL = re.compile(r"^(?P<type>.+?)\s*\b(?P<name>\w+)\s*$", re.DOTALL)
NAMED_ATTRIBUTE = re.compile(r"^\s*(\w+)\s*=\s*(.*)$", re.DOTALL)
STRING_LITERAL = re.compile(r'"((?:[^"\\]|\\.)*)"')
ANNOTATION_NAME = re.compile(r"@\s*([\w.]+)")

MODIFIERS = {
    "public", "protected", "private", "static", "final", "abstract",
    "synchronized", "native", "transient", "volatile", "strictfp",
    "default", "sealed", "non-sealed",
}

PAIRS = {"(": ")", "{": "}"}

# Which fact kinds make sense on each declaration site; anything else is reported as UNKNOWN.
TYPE_KINDS = (FactKind.CONTROLLER,)
METHOD_KINDS = (FactKind.GET_ROUTE, FactKind.POST_ROUTE)
PARAMETER_KINDS = (FactKind.REQUEST_PARAM, FactKind.PATH_VARIABLE, FactKind.REQUEST_BODY)


def scan_file(file_path: Path, encoding: str = "utf-8") -> list[Fact]:
    """Scan one Java source file. Unreadable files yield no facts."""
    try:
        text = file_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Skipping %s: %s", file_path, e)
        return []
    facts = scan_source(text)
    logger.debug("%s: %d facts", file_path, len(facts))
    return facts


def scan_paths(paths: Iterable[Path], encoding: str = "utf-8") -> list[Fact]:
    facts: list[Fact] = []
    for path in paths:
        facts.extend(scan_file(path, encoding=encoding))
    return facts


def scan_source(text: str) -> list[Fact]:
    """Scan Java source text and return the facts in declaration order."""
    text = strip_comments(text)
    match = PACKAGE.search(text)
    package = match.group(1) if match else ""
    imports = IMPORT.findall(text)

    facts: list[Fact] = []
    for header_start, header_end, body in _members(text, 0, len(text)):
        if body is None:
            continue
        annotations, rest = _split_header(text[header_start:header_end])
        decl = TYPE_DECL.match(rest)
        if decl:
            qualified = f"{package}.{decl.group(1)}" if package else decl.group(1)
            _scan_type(text, qualified, annotations, body, facts, package, imports)
    return facts


def strip_comments(text: str) -> str:
    """Remove // and /* */ comments, leaving string and char literals intact."""
    out = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'":
            end = _skip_literal(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            out.append(" ")
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def parse_attributes(content: str | None) -> dict[str, list[str]]:
    """Extract the string attributes of an annotation.

    '"/a"' -> {"value": ["/a"]}
    'path = {"/a", "/b"}, produces = "application/json"' ->
        {"path": ["/a", "/b"], "produces": ["application/json"]}
    Attributes without string literals map to an empty list.
    """
    attributes: dict[str, list[str]] = {}
    if not content or not content.strip():
        return attributes
    for piece in _split_top_level(content):
        match = NAMED_ATTRIBUTE.match(piece)
        if match and not piece.lstrip().startswith('"'):
            name, expr = match.group(1), match.group(2).strip()
        else:
            name, expr = "value", piece.strip()
        literals = STRING_LITERAL.findall(expr)
        if expr.startswith("{"):
            attributes[name] = literals
        else:
            # "/a" + "/b" style concatenation
            attributes[name] = ["".join(literals)] if literals else []
    return attributes


def _scan_type(
    text: str,
    qualified: str,
    annotations,
    body: tuple[int, int],
    facts: list[Fact],
    package: str = "",
    imports: list[str] | None = None,
) -> None:
    for name, _ in annotations:
        if name in SUPPORTED_ANNOTATIONS:
            kind = _restrict(kind_for(name), TYPE_KINDS)
            fact = Fact(kind=kind, annotation=name, element=qualified, controller=qualified)
            if kind == FactKind.CONTROLLER:
                fact.package = package
                fact.imports = list(imports or [])
            facts.append(fact)

    body_start, body_end = body
    for header_start, header_end, member_body in _members(text, body_start + 1, body_end):
        header = text[header_start:header_end]
        member_annotations, rest = _split_header(header)
        decl = TYPE_DECL.match(rest)
        if decl:
            if member_body is not None:
                _scan_type(
                    text, f"{qualified}.{decl.group(1)}", member_annotations, member_body, facts, package, imports
                )
            continue
        method = METHOD_DECL.match(rest)
        if not method:
            continue
        open_paren = header_start + len(header) - len(rest) + method.end() - 1
        close_paren = _find_closing(text, open_paren)
        if close_paren == -1:
            continue
        _scan_method(
            qualified,
            member_annotations,
            _compact(method.group("type")),
            method.group("name"),
            text[open_paren + 1:close_paren],
            facts,
        )


def _scan_method(controller: str, annotations, return_type: str, name: str, params_text: str, facts: list[Fact]) -> None:
    params = []
    for piece in _split_top_level(params_text):
        param_annotations, rest = _split_header(piece)
        match = PARAM_DECL.match(rest.strip())
        if match:
            params.append((param_annotations, _compact(match.group("type")), match.group("name")))

    signature = ",".join(re.sub(r"\s+", "", type_text) for _, type_text, _ in params)
    method_key = f"{controller}.{name}({signature})"

    for annotation, content in annotations:
        if annotation not in SUPPORTED_ANNOTATIONS:
            continue
        kind = _restrict(kind_for(annotation), METHOD_KINDS)
        fact = Fact(
            kind=kind,
            annotation=annotation,
            element=method_key,
            controller=controller,
            method_key=method_key,
            method_name=name,
        )
        if kind != FactKind.UNKNOWN:
            attributes = parse_attributes(content)
            fact.path = attributes.get("path", [])
            fact.value = attributes.get("value", [])
            fact.type_text = return_type
        facts.append(fact)

    for param_annotations, type_text, param_name in params:
        for annotation, content in param_annotations:
            if annotation not in SUPPORTED_ANNOTATIONS:
                continue
            kind = _restrict(kind_for(annotation), PARAMETER_KINDS)
            facts.append(
                Fact(
                    kind=kind,
                    annotation=annotation,
                    element=param_name,
                    controller=controller,
                    method_key=method_key,
                    method_name=name,
                    type_text=type_text,
                    name=param_name,
                    alias=_parameter_alias(content),
                )
            )


def _members(text: str, start: int, end: int) -> Iterator[tuple[int, int, tuple[int, int] | None]]:
    """Split a class body (or a whole file) into member declarations.

    Yields (header_start, header_end, body) where body is the (open, close)
    brace span for members with a block and None for ';'-terminated ones.
    """
    seg = start
    depth = 0
    i = start
    while i < end:
        ch = text[i]
        if ch in "\"'":
            i = _skip_literal(text, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and ch == ";":
            yield seg, i, None
            seg = i + 1
        elif depth == 0 and ch == "{":
            close = _find_closing(text, i)
            if close == -1:
                return
            yield seg, i, (i, close)
            i = seg = close + 1
            continue
        i += 1


def _split_header(header: str) -> tuple[list[tuple[str, str | None]], str]:
    """Peel leading annotations and modifiers off a declaration.

    Returns ([(simple annotation name, raw argument text or None)], remainder),
    where the remainder is the unstripped tail of ``header``.
    """
    annotations = []
    i = 0
    n = len(header)
    while i < n:
        if header[i].isspace():
            i += 1
            continue
        if header[i] == "@":
            match = ANNOTATION_NAME.match(header, i)
            if not match or match.group(1) == "interface":
                break
            name = match.group(1).rsplit(".", 1)[-1]
            i = match.end()
            j = i
            while j < n and header[j].isspace():
                j += 1
            content = None
            if j < n and header[j] == "(":
                close = _find_closing(header, j)
                if close == -1:
                    break
                content = header[j + 1:close]
                i = close + 1
            annotations.append((name, content))
            continue
        word = re.match(r"[\w-]+", header[i:])
        if word and word.group(0) in MODIFIERS:
            i += word.end()
            continue
        break
    return annotations, header[i:]


def _split_top_level(text: str) -> list[str]:
    """Split on commas outside of brackets, generics and literals."""
    pieces = []
    depth = 0
    seg = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            i = _skip_literal(text, i)
            continue
        if ch in "({<":
            depth += 1
        elif ch in ")}>":
            depth -= 1
        elif ch == "," and depth == 0:
            pieces.append(text[seg:i])
            seg = i + 1
        i += 1
    pieces.append(text[seg:])
    return [p for p in pieces if p.strip()]


def _find_closing(text: str, start: int) -> int:
    opener = text[start]
    closer = PAIRS[opener]
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            i = _skip_literal(text, i)
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _skip_literal(text: str, start: int) -> int:
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or ch == "\n":
            return i + 1
        i += 1
    return len(text)


def _parameter_alias(content: str | None) -> str | None:
    """``"q"`` or ``name = "q", required = false`` -> ``q``."""
    attributes = parse_attributes(content)
    for key in ("value", "name"):
        if attributes.get(key):
            return attributes[key][0]
    return None


def _restrict(kind: FactKind, allowed: tuple[FactKind, ...]) -> FactKind:
    return kind if kind in allowed else FactKind.UNKNOWN


def _compact(type_text: str) -> str:
    return re.sub(r"\s+", " ", type_text).strip()
