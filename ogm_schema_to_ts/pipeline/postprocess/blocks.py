"""
Declaration stream splitting.

Splits rendered TypeScript text into top-level blocks (declarations with
their documentation comment, plain statements, and unattached documentation
comments) so later passes can reason about whole declarations.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

DECLARATION_PATTERN = re.compile(
    r"^(?:export\s+)?(?:declare\s+)?(?:default\s+)?"
    r"(?P<kind>interface|type|const\s+enum|enum|abstract\s+class|class|const|let|function|namespace)"
    r"\s+(?P<name>[A-Za-z_$][\w$]*)"
)

# Statements a documentation comment may attach to
ATTACHABLE_PREFIXES = (
    "export ",
    "declare ",
    "interface ",
    "type ",
    "const ",
    "let ",
    "var ",
    "function ",
    "class ",
    "abstract ",
    "enum ",
    "namespace ",
)

_OPENERS = {"{": "}", "(": ")", "[": "]", "<": ">"}
_CLOSERS = set(_OPENERS.values())
_CONTINUATION_ENDINGS = ("=", "|", "&", ",", "<", "(", "[", "{", ":", "=>", " extends")
_CONTINUATION_STARTS = ("|", "&", ">", ".", "?", ":", "=")


class BlockKind(Enum):
    """Kind of top-level block."""

    DECLARATION = "declaration"
    STATEMENT = "statement"
    DOC = "doc"  # Documentation comment not attached to anything


@dataclass
class Block:
    """A top-level block of a declaration stream.

    Attributes:
        kind: Block kind
        text: Code text (without the attached documentation comment)
        doc: Attached documentation comment, if any
        name: Declared name (declarations only)
        decl_kind: Declaration keyword, e.g. "interface" or "type"
    """

    kind: BlockKind
    text: str
    doc: str | None = None
    name: str | None = None
    decl_kind: str | None = None

    @property
    def body(self) -> str:
        """Whitespace-normalized code text, used to compare declarations."""
        return " ".join(self.text.split())

    def render(self) -> str:
        if self.doc:
            return f"{self.doc}\n{self.text}"
        return self.text

    def header_span(self) -> tuple[int, int] | None:
        """Span of the declared name inside `text`."""
        if self.kind != BlockKind.DECLARATION:
            return None
        match = DECLARATION_PATTERN.match(self.text)
        return match.span("name") if match else None


def protected_spans(text: str) -> list[tuple[int, int]]:
    """Spans of comments and string literals in a piece of code."""
    spans = []
    i = 0
    n = len(text)
    while i < n:
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            spans.append((i, end))
            i = end
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
            spans.append((i, end))
            i = end
            continue
        c = text[i]
        if c in "'\"`":
            j = i + 1
            while j < n and text[j] != c:
                if text[j] == "\\":
                    j += 1
                elif text[j] == "\n" and c != "`":
                    break
                j += 1
            end = min(j + 1, n)
            spans.append((i, end))
            i = end
            continue
        i += 1
    return spans


def _line_states(lines: list[str]) -> list[tuple[int, bool]]:
    """Bracket depth and open-comment state at the end of every line."""
    states = []
    depth = 0
    in_comment = False
    for line in lines:
        i = 0
        n = len(line)
        while i < n:
            if in_comment:
                end = line.find("*/", i)
                if end == -1:
                    i = n
                    continue
                in_comment = False
                i = end + 2
                continue
            if line.startswith("/*", i):
                in_comment = True
                i += 2
                continue
            if line.startswith("//", i):
                break
            c = line[i]
            if c in "'\"`":
                j = i + 1
                while j < n and line[j] != c:
                    j += 2 if line[j] == "\\" else 1
                i = j + 1
                continue
            if c in _OPENERS:
                depth += 1
            elif c in _CLOSERS:
                # `=>` is an arrow, not a closing bracket
                if not (c == ">" and i > 0 and line[i - 1] == "="):
                    depth = max(depth - 1, 0)
            i += 1
        states.append((depth, in_comment))
    return states


def _code_part(line: str) -> str:
    """A line without its trailing line comment."""
    for start, end in protected_spans(line):
        if line.startswith("//", start):
            return line[:start].rstrip()
    return line.rstrip()


def _next_code_line(lines: list[str], start: int) -> str | None:
    for line in lines[start:]:
        if line.strip():
            return line.strip()
    return None


def _block_end(lines: list[str], states: list[tuple[int, bool]], start: int) -> int:
    """Index of the last line of the block starting at `start`."""
    for j in range(start, len(lines)):
        depth, in_comment = states[j]
        if depth or in_comment:
            continue
        code = _code_part(lines[j])
        if code.endswith(_CONTINUATION_ENDINGS):
            continue
        following = _next_code_line(lines, j + 1)
        if following is not None and following.startswith(_CONTINUATION_STARTS):
            continue
        return j
    return len(lines) - 1


def _comment_end(lines: list[str], start: int) -> int:
    first = lines[start]
    if "*/" in first[first.find("/*") + 2 :]:
        return start
    for j in range(start + 1, len(lines)):
        if "*/" in lines[j]:
            return j
    return len(lines) - 1


def is_attachable(line: str) -> bool:
    stripped = line.lstrip()
    return bool(DECLARATION_PATTERN.match(stripped)) or stripped.startswith(ATTACHABLE_PREFIXES)


def split_blocks(text: str) -> list[Block]:
    """
    Split a declaration stream into top-level blocks.

    A documentation comment attaches to the block that immediately follows
    it (blank lines allowed) when that block is a declaration or an
    attachable statement; otherwise it becomes a standalone DOC block.

    Args:
        text: Rendered TypeScript source

    Returns:
        Blocks in source order
    """
    lines = text.splitlines()
    states = _line_states(lines)
    blocks: list[Block] = []
    pending_doc: str | None = None

    def flush_pending() -> None:
        nonlocal pending_doc
        if pending_doc is not None:
            blocks.append(Block(kind=BlockKind.DOC, text=pending_doc))
            pending_doc = None

    i = 0
    while i < len(lines):
        stripped = lines[i].strip()
        if not stripped:
            i += 1
            continue

        if stripped.startswith("/**"):
            end = _comment_end(lines, i)
            flush_pending()
            pending_doc = "\n".join(lines[i : end + 1])
            i = end + 1
            continue

        if stripped.startswith("/*"):
            end = _comment_end(lines, i)
        elif stripped.startswith("//"):
            end = i
        else:
            end = _block_end(lines, states, i)

        block_text = "\n".join(lines[i : end + 1])
        match = DECLARATION_PATTERN.match(stripped)
        if match:
            block = Block(
                kind=BlockKind.DECLARATION,
                text=block_text,
                name=match.group("name"),
                decl_kind=" ".join(match.group("kind").split()),
            )
        else:
            block = Block(kind=BlockKind.STATEMENT, text=block_text)

        if pending_doc is not None:
            if is_attachable(stripped):
                block.doc = pending_doc
                pending_doc = None
            else:
                flush_pending()

        blocks.append(block)
        i = end + 1

    flush_pending()
    return blocks


def join_blocks(blocks: list[Block]) -> str:
    """Render blocks back to text, one blank line between blocks."""
    return "\n\n".join(block.render() for block in blocks)
