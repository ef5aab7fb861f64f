"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from pathlib import Path

from ...errors import OutputValidationError
from ..postprocess.blocks import protected_spans

_PAIRS = {"}": "{", ")": "(", "]": "["}


def validate_typescript(content: str, source: str = "") -> None:
    """Check that brackets are balanced outside comments and strings.

    Raises:
        OutputValidationError: If brackets are unbalanced
    """
    masked = list(content)
    for start, end in protected_spans(content):
        masked[start:end] = " " * (end - start)

    stack: list[str] = []
    for index, c in enumerate(masked):
        if c in "{([":
            stack.append(c)
        elif c in _PAIRS:
            if not stack or stack.pop() != _PAIRS[c]:
                line = content.count("\n", 0, index) + 1
                raise OutputValidationError(f"Unbalanced {c!r} at line {line}", source)

    if stack:
        raise OutputValidationError(f"Unclosed {stack[-1]!r} in generated TypeScript", source, details=stack)


def validate_json(content: str, source: str = "") -> None:
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        raise OutputValidationError(f"Generated JSON is not valid: {e}", source) from e


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(
        self,
        typescript_validator: Callable[[str, str], None] | None = None,
        json_validator: Callable[[str, str], None] | None = None,
    ):
        """Initialize the atomic writer.

        Args:
            typescript_validator: Optional validation function for TypeScript code
            json_validator: Optional validation function for JSON documents
        """
        self._validators = {
            "ts": typescript_validator or validate_typescript,
            "json": json_validator or validate_json,
        }

    def write(
        self,
        path: Path,
        content: str,
        language: str,
        validate: bool = True,
    ) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            language: Language for validation ("ts" or "json")
            validate: Whether to validate before finalizing

        Raises:
            OutputValidationError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )

        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self.validate(content, language, str(path))

            temp_path.replace(path)

        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def write_if_not_exists(
        self,
        path: Path,
        content: str,
        language: str,
        validate: bool = True,
    ) -> bool:
        """Write content only if the file doesn't exist.

        Returns:
            True if the file was written

        Raises:
            FileExistsError: If the file already exists
            OutputValidationError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use --force to overwrite.")

        self.write(path, content, language, validate)
        return True

    def validate(self, content: str, language: str, source: str = "") -> None:
        """Validate content based on language. Unknown languages are not checked."""
        validator = self._validators.get(language)
        if validator is not None:
            validator(content, source)
