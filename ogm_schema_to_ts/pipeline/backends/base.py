"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.type_expr import TypeExpr
from ..config import GeneratorConfig
from .declarations import Declaration


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Type mapping from schema primitive kinds to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=False,
        )

    def get_template(self, name: str) -> jinja2.Template:
        return self.jinja_env.get_template(f"{name}.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def render(self, declaration: Declaration) -> str:
        """
        Render one declaration.

        Args:
            declaration: The declaration

        Returns:
            Declaration source text
        """

    @abstractmethod
    def translate_type(self, type_expr: TypeExpr) -> str:
        """
        Translate a type expression to a language-specific type string.

        Args:
            type_expr: The type expression

        Returns:
            Language-specific type string
        """

    def _get_comment_prefix(self) -> str:
        """Get the comment prefix for the language."""
        return "//"

    def generation_comment(self) -> str:
        """Generate a simplified command line comment for the generated file"""
        if not self.config.add_generation_comment:
            return ""

        from ... import __version__
        from ...cli_utils import reconstruct_command_line

        # Reconstruct command line using CLI utilities
        try:
            from ...ogm_schema_to_ts import ogm_schema_to_ts as click_command  # noqa

            command_line = reconstruct_command_line(click_command)
        except (ImportError, AttributeError):
            command_line = "ogm_schema_to_ts"

        return f"{self._get_comment_prefix()} Generated by ogm_schema_to_ts v{__version__} : {command_line}"
