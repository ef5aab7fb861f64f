"""
Code generation backends.

Contains the TypeScript declaration generator.
"""

from __future__ import annotations

from .base import CodeBackend
from .declarations import Declaration, DeclarationKind, FieldDecl
from .typescript_backend import BASE_TYPE, LINK_TYPE, RUNTIME_IMPORTS, TypeScriptBackend

__all__ = [
    "BASE_TYPE",
    "LINK_TYPE",
    "RUNTIME_IMPORTS",
    "CodeBackend",
    "Declaration",
    "DeclarationKind",
    "FieldDecl",
    "TypeScriptBackend",
]
