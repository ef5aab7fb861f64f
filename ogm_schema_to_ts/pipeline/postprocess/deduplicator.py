"""
Declaration deduplication.

First post-processing pass: every declared name keeps its first occurrence.
Names that occur more than once are considered cross-cutting and their kept
declaration is hoisted into a "common" bucket emitted ahead of the rest of
the stream.

The comparison is textual (whitespace-normalized), not structural, and the
choice of which occurrence is kept depends on emission order; reordering the
input entity set may change which body wins a name conflict.
"""

from __future__ import annotations

import logging

from .blocks import Block, BlockKind, join_blocks, split_blocks

logger = logging.getLogger(__name__)


def _is_header(block: Block) -> bool:
    """Comments and imports leading a module stay in front of hoisted blocks."""
    if block.kind != BlockKind.STATEMENT:
        return False
    text = block.text.lstrip()
    return text.startswith(("//", "/*", "import ", "'use ", '"use '))


def deduplicate_blocks(blocks: list[Block]) -> list[Block]:
    """
    Deduplicate a list of blocks.

    Args:
        blocks: Blocks in emission order

    Returns:
        Header blocks, then the hoisted common bucket, then the remaining blocks
    """
    first: dict[str, Block] = {}
    recurring: set[str] = set()
    kept: list[Block] = []

    for block in blocks:
        if block.name is None:
            kept.append(block)
            continue

        existing = first.get(block.name)
        if existing is None:
            first[block.name] = block
            kept.append(block)
            continue

        recurring.add(block.name)
        if block.body == existing.body:
            logger.debug("Dropping duplicate declaration %s", block.name)
        else:
            logger.warning(
                "Conflicting declarations for %s; keeping the first one",
                block.name,
            )

    if not recurring:
        return kept

    header: list[Block] = []
    index = 0
    while index < len(kept) and _is_header(kept[index]):
        header.append(kept[index])
        index += 1

    rest = kept[index:]
    common = [block for block in rest if block.name in recurring]
    remainder = [block for block in rest if block.name not in recurring]

    logger.debug("Hoisting common declarations: %s", ", ".join(b.name for b in common))
    return header + common + remainder


def deduplicate(text: str) -> str:
    """
    Remove duplicate declarations from a declaration stream.

    Args:
        text: Rendered declaration stream

    Returns:
        The deduplicated stream
    """
    return join_blocks(deduplicate_blocks(split_blocks(text)))
