"""
Expander for shortdown directives

Drives the scanner, resolves each directive through the registry, renders
it, and splices the fragment back in place of the directive. Literal text
passes through unchanged.

Expansion is all-or-nothing: the first error aborts the call and no
partially expanded text is returned.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import AppSettings, appsettings
from ..models.errors import ExpansionError
from ..models.tokens import Directive, Literal
from .directives import DirectiveRegistry, directive_registry
from .log import LOG
from .scanner import Scanner
from .siteconfig import SiteConfig
from .tables import CsvTable, path_resolve, table_load


class RenderContext:
    """
    Per-call state handed to directive handlers

    Holds the base directory for table src paths, the site configuration,
    and a table cache that lives only as long as one expand() call.
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        site: SiteConfig,
        settings: AppSettings,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.site = site
        self.settings = settings
        self.tables: Dict[Path, CsvTable] = {}

    def table_get(self, src: str) -> CsvTable:
        """
        Load the table for a src value

        Repeated src values within one call are parsed once when
        settings.dedupe_tables is on.
        """
        path = path_resolve(src, self.base_dir)
        if path in self.tables:
            LOG(f"Reusing parsed table {path}", level=3)
            return self.tables[path]

        table = table_load(path, self.settings.csv_encoding)
        if self.settings.dedupe_tables:
            self.tables[path] = table
        return table


class Expander:
    """
    Expands directives in article source

    Responsibilities:
    - Scan source into tokens
    - Resolve and arity-check each directive
    - Render fragments and reassemble text in source order
    - Attach directive name and position to handler errors

    An Expander holds only read-only configuration, so one instance may
    serve concurrent expand() calls.
    """

    def __init__(
        self,
        registry: Optional[DirectiveRegistry] = None,
        base_dir: Union[str, Path] = ".",
        site: Optional[SiteConfig] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Initialize expander

        Args:
            registry: Directive table (defaults to the shared built-in registry)
            base_dir: Directory against which table src paths are resolved
            site: Site configuration (defaults to an empty SiteConfig)
            settings: Syntax and rendering settings (defaults to appsettings)
        """
        self.settings = settings or appsettings
        self.registry = registry or directive_registry
        self.base_dir = Path(base_dir)
        self.site = site or SiteConfig(settings=self.settings)

    def expand(self, source: str) -> str:
        """
        Expand every directive in source

        Args:
            source: Raw article text

        Returns:
            source with each directive replaced by its rendered fragment

        Raises:
            DirectiveSyntaxError: Malformed directive syntax
            UnknownDirectiveError: Directive name not registered
            ArityError: Wrong argument shape for a known directive
            MalformedTableError: Non-rectangular or unparsable CSV
            ResourceNotFoundError: Missing table data file
        """
        context = RenderContext(self.base_dir, self.site, self.settings)
        parts: List[str] = []
        directive_count = 0

        for token in Scanner(source, self.settings).scan():
            if isinstance(token, Literal):
                parts.append(token.text)
            else:
                parts.append(self.directive_render(token, context, source))
                directive_count += 1

        LOG(f"Expanded {directive_count} directive(s) in {len(source)} characters", level=2)
        return ''.join(parts)

    def directive_render(self, directive: Directive, context: RenderContext, source: str) -> str:
        """
        Resolve, validate and render a single directive

        Args:
            directive: Parsed directive token
            context: Per-call render context
            source: Full document (for error positions)

        Returns:
            Rendered fragment
        """
        try:
            spec = self.registry.lookup(directive.name)
            self.registry.validate(spec, directive.args, directive.namedArgs)
            fragment = spec.handler(directive, context)
        except ExpansionError as e:
            e.locate(source, directive.name, directive.start)
            raise

        LOG(f"Rendered '{directive.name}' at offset {directive.start}", level=3)
        return fragment


def expand(
    source: str,
    base_dir: Union[str, Path] = ".",
    registry: Optional[DirectiveRegistry] = None,
    site: Optional[SiteConfig] = None,
    settings: Optional[AppSettings] = None,
) -> str:
    """
    Expand directives in source

    Convenience wrapper around Expander(...).expand(source).

    Example:
        >>> expand('Visit {{< external-link "https://example.com" "here" >}} now.')
        'Visit <a class="external-link" href="https://example.com" target="_blank" rel="noopener noreferrer">here</a> now.'
    """
    return Expander(registry=registry, base_dir=base_dir, site=site, settings=settings).expand(source)
