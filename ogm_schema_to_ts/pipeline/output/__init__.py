"""
Output handling for generated buffers.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, validate_typescript

__all__ = [
    "AtomicWriter",
    "validate_typescript",
]
