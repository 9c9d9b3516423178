"""
Directive implementations for shortdown

Each directive turns a parsed invocation into an HTML fragment.
Uses DirectiveSpec for metadata and arity validation.

Handlers have the signature handler(directive, context) -> str, where
context is the per-call RenderContext built by the Expander.
"""

import html
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..models.directives import DirectiveSpec, DirectiveCategory
from ..models.errors import ArityError, UnknownDirectiveError
from ..models.tokens import Directive
from .tables import table_render


class DirectiveRegistry:
    """
    Registry of directive specifications and handlers

    Maps directive names to DirectiveSpec objects containing metadata,
    arity contracts and rendering handlers. The registry is frozen after
    construction unless frozen=False is passed; a frozen registry is
    read-only and safe to share between concurrent expansions.

    Example:
        >>> registry = DirectiveRegistry(frozen=False)
        >>> registry.register(DirectiveSpec(name='hr', ...))
        >>> registry.freeze()
    """

    def __init__(self, frozen: bool = True) -> None:
        """Initialize the registry and register all built-in directives"""
        self.specs: Mapping[str, DirectiveSpec] = {}
        self.frozen = False
        self.linkDirectives_register()
        self.dataDirectives_register()
        self.embedDirectives_register()
        if frozen:
            self.freeze()

    def register(self, spec: DirectiveSpec) -> None:
        """
        Register a directive specification

        Raises:
            RuntimeError: If the registry is frozen
        """
        if self.frozen:
            raise RuntimeError(f"Cannot register '{spec.name}': registry is frozen")
        specs: Dict[str, DirectiveSpec] = dict(self.specs)
        specs[spec.name] = spec
        # Also register aliases
        for alias in spec.aliases:
            specs[alias] = spec
        self.specs = specs

    def freeze(self) -> "DirectiveRegistry":
        """Make the registry read-only; returns self"""
        self.specs = MappingProxyType(dict(self.specs))
        self.frozen = True
        return self

    def get(self, name: str) -> Optional[Callable[[Any, Any], str]]:
        """
        Get directive handler by name

        Args:
            name: Directive name to look up

        Returns:
            Handler function or None if not found
        """
        spec = self.specs.get(name)
        return spec.handler if spec else None

    def spec_get(self, name: str) -> Optional[DirectiveSpec]:
        """Get full directive specification by name"""
        return self.specs.get(name)

    def lookup(self, name: str) -> DirectiveSpec:
        """
        Resolve a directive name to its specification

        Raises:
            UnknownDirectiveError: If no directive is registered under name
        """
        spec = self.specs.get(name)
        if spec is None:
            raise UnknownDirectiveError(f"Unknown directive '{name}'", directive=name)
        return spec

    def validate(
        self, spec: DirectiveSpec, args: Sequence[str], namedArgs: Mapping[str, str]
    ) -> None:
        """
        Check an invocation against the directive's arity contract

        Args:
            spec: Resolved directive specification
            args: Positional arguments
            namedArgs: key=value arguments

        Raises:
            ArityError: Wrong positional count, missing required named
                        argument, or unexpected named argument
        """
        count = len(args)
        if count < spec.min_args or (spec.max_args is not None and count > spec.max_args):
            raise ArityError(
                f"'{spec.name}' takes {spec.arity_describe()}, got {count} positional",
                directive=spec.name,
            )

        missing = sorted(spec.required_named - set(namedArgs))
        if missing:
            raise ArityError(
                f"'{spec.name}' is missing required argument(s): {', '.join(missing)}",
                directive=spec.name,
            )

        unexpected = sorted(set(namedArgs) - spec.allowed_named)
        if unexpected:
            raise ArityError(
                f"'{spec.name}' does not accept argument(s): {', '.join(unexpected)}",
                directive=spec.name,
            )

    def directives_list(self) -> List[DirectiveSpec]:
        """Get all registered specs (aliases folded), sorted by name"""
        unique = {spec.name: spec for spec in self.specs.values()}
        return [unique[name] for name in sorted(unique)]

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DirectiveSpec]:
        """Get all directives in a category"""
        return [spec for spec in self.directives_list() if spec.category == category]

    def linkDirectives_register(self) -> None:
        """Register link directives"""

        def external_link_handler(directive: Directive, context: Any) -> str:
            """Handle external-link - anchor marked for the external-link affordance"""
            url, label = directive.args
            css_class = html.escape(context.site.externalClass_get())
            href = html.escape(url, quote=True)
            return (
                f'<a class="{css_class}" href="{href}" '
                f'target="_blank" rel="noopener noreferrer">{html.escape(label)}</a>'
            )

        self.register(DirectiveSpec(
            name='external-link',
            category=DirectiveCategory.LINK,
            description='Link to another site, marked with an external indicator',
            handler=external_link_handler,
            min_args=2,
            max_args=2,
            examples=('{{< external-link "https://example.com" "Example" >}}',),
        ))

    def dataDirectives_register(self) -> None:
        """Register data-driven directives"""

        def table_handler(directive: Directive, context: Any) -> str:
            """Handle table - render a CSV data file as an HTML table"""
            src = directive.namedArgs['src']
            # An explicit class="" means no class, not the site default
            css_class = directive.namedArgs.get('class', context.site.tableClass_get())
            table = context.table_get(src)
            return table_render(table, css_class)

        self.register(DirectiveSpec(
            name='table',
            category=DirectiveCategory.DATA,
            description='HTML table from a CSV file; first row is the header',
            handler=table_handler,
            required_named=frozenset({'src'}),
            optional_named=frozenset({'class'}),
            examples=(
                '{{< table src="sales.csv" >}}',
                '{{< table src="sales.csv" class="compact" >}}',
            ),
        ))

    def embedDirectives_register(self) -> None:
        """Register fixed-content embeds"""

        def subscribe_handler(directive: Directive, context: Any) -> str:
            """Handle subscribe - site-configured subscription block"""
            return context.site.subscribeHtml_get()

        self.register(DirectiveSpec(
            name='subscribe',
            category=DirectiveCategory.EMBED,
            description='Subscription form embed point',
            handler=subscribe_handler,
            examples=('{{< subscribe >}}',),
        ))


# Shared, frozen registry of the built-in directives
directive_registry = DirectiveRegistry()
