"""
shortdown library - directive scanning, rendering and expansion
"""

from .. import __version__
from .scanner import Scanner, tokens_scan
from .expander import Expander, RenderContext, expand
from .directives import DirectiveRegistry, directive_registry
from .tables import CsvTable, table_load, table_render
from .siteconfig import SiteConfig, SiteConfigError
from .log import LOG, state_connectToLogger

__all__ = [
    "Scanner",
    "tokens_scan",
    "Expander",
    "RenderContext",
    "expand",
    "DirectiveRegistry",
    "directive_registry",
    "CsvTable",
    "table_load",
    "table_render",
    "SiteConfig",
    "SiteConfigError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
