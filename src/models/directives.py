"""
Directive specification and metadata models

Defines the structure and categories of shortdown directives for
arity validation, listing, and registry management.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional, Tuple


class DirectiveCategory(Enum):
    """
    Categories of shortdown directives

    Used for organization and for --listDirectives output.
    """
    LINK = "link"          # {{< external-link >}}
    DATA = "data"          # {{< table >}}
    EMBED = "embed"        # {{< subscribe >}}


@dataclass(frozen=True)
class DirectiveSpec:
    """
    Specification for a shortdown directive

    Defines metadata, arity contract, and handler for a directive.
    Used by DirectiveRegistry to resolve and validate invocations.

    Attributes:
        name: Directive name as written after the opening marker
        category: Category for organization
        description: Human-readable description
        handler: Rendering function (directive, context) -> str
        min_args: Minimum number of positional arguments
        max_args: Maximum number of positional arguments (None = unbounded)
        required_named: key=value arguments that must be present
        optional_named: key=value arguments that may be present
        examples: Example usage strings
        aliases: Alternative names for the directive
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
    min_args: int = 0
    max_args: Optional[int] = 0
    required_named: FrozenSet[str] = frozenset()
    optional_named: FrozenSet[str] = frozenset()
    examples: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()

    def arity_describe(self) -> str:
        """
        Summarize the accepted argument shape

        Example:
            >>> spec.arity_describe()   # external-link
            'exactly 2 positional'
        """
        if self.max_args is None:
            positional = f"at least {self.min_args} positional"
        elif self.min_args == self.max_args:
            positional = f"exactly {self.min_args} positional"
        else:
            positional = f"{self.min_args}-{self.max_args} positional"

        parts = [positional]
        if self.required_named:
            parts.append("requires " + ", ".join(sorted(self.required_named)))
        if self.optional_named:
            parts.append("accepts " + ", ".join(sorted(self.optional_named)))
        return "; ".join(parts)

    @property
    def allowed_named(self) -> FrozenSet[str]:
        """All key=value argument names this directive accepts"""
        return self.required_named | self.optional_named
