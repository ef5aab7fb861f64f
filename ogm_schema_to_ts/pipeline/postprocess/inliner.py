"""
Alias inlining.

Second post-processing pass: every plain `type X = <expr>` alias that is
not otherwise needed is substituted at each usage site and removed.
Generic aliases, self-referencing aliases, preserved aliases and aliases
with no usage are kept. Documentation comments left without a declaration
to attach to are pruned.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from .blocks import Block, BlockKind, join_blocks, protected_spans, split_blocks

logger = logging.getLogger(__name__)

_ALIAS_PATTERN = re.compile(r"^(?:export\s+)?(?:declare\s+)?type\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?P<generic><)?")


def prune_orphan_docs(blocks: list[Block]) -> list[Block]:
    """Drop documentation comments not attached to a declaration or statement."""
    kept = [block for block in blocks if block.kind != BlockKind.DOC]
    if len(kept) != len(blocks):
        logger.debug("Pruned %d orphaned documentation comment(s)", len(blocks) - len(kept))
    return kept


def alias_expression(block: Block) -> str | None:
    """The aliased expression of a plain (non-generic) type alias block."""
    if block.kind != BlockKind.DECLARATION or block.decl_kind != "type":
        return None
    match = _ALIAS_PATTERN.match(block.text)
    if not match or match.group("generic"):
        return None
    _, sep, expr = block.text.partition("=")
    if not sep:
        return None
    return expr.strip().rstrip(";").strip()


def _token_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w$.]){re.escape(name)}(?![\w$])")


def _is_property_key(text: str, end: int) -> bool:
    """Whether the token ending at `end` is an object/interface property name."""
    rest = text[end:].lstrip(" \t")
    return rest.startswith(":") or rest.startswith("?:")


def _usage_spans(block: Block, pattern: re.Pattern[str]) -> list[tuple[int, int]]:
    """Spans of type usages of a name inside a block's code text."""
    if block.kind == BlockKind.DOC:
        return []
    skip = protected_spans(block.text)
    header = block.header_span()
    if header is not None:
        skip.append(header)

    spans = []
    for match in pattern.finditer(block.text):
        start, end = match.span()
        if any(s <= start < e for s, e in skip):
            continue
        if _is_property_key(block.text, end):
            continue
        spans.append((start, end))
    return spans


def _needs_parentheses(expr: str) -> bool:
    """Whether an expression has a top-level union or intersection."""
    depth = 0
    masked = list(expr)
    for start, end in protected_spans(expr):
        masked[start:end] = " " * (end - start)
    for c in masked:
        if c in "{([<":
            depth += 1
        elif c in "})]>":
            depth = max(depth - 1, 0)
        elif c in "|&" and depth == 0:
            return True
    return False


def _substitute(text: str, spans: list[tuple[int, int]], expr: str) -> str:
    wrapped = f"({expr})" if _needs_parentheses(expr) else expr
    result = []
    last = 0
    for start, end in spans:
        result.append(text[last:start])
        # Array suffixes bind tighter than unions
        result.append(wrapped if text[end:].startswith("[") else expr)
        last = end
    result.append(text[last:])
    return "".join(result)


def inline_alias_blocks(blocks: list[Block], preserve: Iterable[str] = ()) -> list[Block]:
    """
    Inline plain type aliases into the blocks that use them.

    Args:
        blocks: Blocks of a deduplicated declaration stream
        preserve: Alias names that must be kept

    Returns:
        Blocks with inlined aliases removed
    """
    preserved = set(preserve)
    blocks = prune_orphan_docs(blocks)
    candidates = [
        block.name
        for block in blocks
        if block.name and block.name not in preserved and alias_expression(block) is not None
    ]

    for name in candidates:
        alias = next((b for b in blocks if b.name == name and b.decl_kind == "type"), None)
        if alias is None:
            continue
        expr = alias_expression(alias)
        if expr is None:
            continue

        pattern = _token_pattern(name)
        if any(_usage_spans(Block(kind=BlockKind.STATEMENT, text=expr), pattern)):
            logger.debug("Keeping recursive alias %s", name)
            continue

        usages = [(block, _usage_spans(block, pattern)) for block in blocks if block is not alias]
        usages = [(block, spans) for block, spans in usages if spans]
        if not usages:
            logger.debug("Keeping unused alias %s", name)
            continue

        for block, spans in usages:
            block.text = _substitute(block.text, spans, expr)

        blocks = [block for block in blocks if block is not alias]
        logger.debug("Inlined alias %s at %d site(s)", name, sum(len(s) for _, s in usages))

    return blocks


def inline_aliases(text: str, preserve: Iterable[str] = ()) -> str:
    """
    Inline plain type aliases in a declaration stream.

    Args:
        text: Rendered declaration stream
        preserve: Alias names that must be kept

    Returns:
        The stream with inlined aliases removed
    """
    return join_blocks(inline_alias_blocks(split_blocks(text), preserve))
