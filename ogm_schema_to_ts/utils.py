"""
Utility functions for the OGM schema to TypeScript generator.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")

_INVALID_IDENTIFIER_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens) to spaces."""
    return text.replace("_", " ").replace("-", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def sanitize_name(name: str) -> str:
    """Replace every character that is not valid in a TypeScript identifier with '_'.

    Examples:
        "ResourceEdge_Task_Link_" -> "ResourceEdge_Task_Link_"
        "Task-Resource" -> "Task_Resource"
    """
    return _INVALID_IDENTIFIER_CHARS.sub("_", name)


def loose_key(text: str) -> str:
    """Lowercase and drop underscores, for case- and underscore-insensitive matching.

    Examples:
        "Task" -> "task"
        "chat_message" -> "chatmessage"
    """
    return text.lower().replace("_", "")
