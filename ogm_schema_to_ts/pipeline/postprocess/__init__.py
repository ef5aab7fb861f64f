"""
Post-processing of rendered declaration streams.

1. Dedupe: drop repeated declarations, hoist cross-cutting ones
2. Inline: substitute plain type aliases at their usage sites
"""

from __future__ import annotations

from ..config import GeneratorConfig
from .blocks import Block, BlockKind, join_blocks, split_blocks
from .deduplicator import deduplicate, deduplicate_blocks
from .inliner import inline_alias_blocks, inline_aliases, prune_orphan_docs


def postprocess(text: str, config: GeneratorConfig) -> str:
    """
    Run both post-processing passes over a declaration stream.

    Args:
        text: Rendered declaration stream
        config: Generation configuration

    Returns:
        The final text, ending with a newline
    """
    blocks = deduplicate_blocks(split_blocks(text))
    if config.inline_aliases:
        blocks = inline_alias_blocks(blocks, config.preserve_aliases)
    else:
        blocks = prune_orphan_docs(blocks)
    return join_blocks(blocks) + "\n"


__all__ = [
    "Block",
    "BlockKind",
    "deduplicate",
    "deduplicate_blocks",
    "inline_alias_blocks",
    "inline_aliases",
    "join_blocks",
    "postprocess",
    "prune_orphan_docs",
    "split_blocks",
]
