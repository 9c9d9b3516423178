"""
shortdown - Directive expansion for markdown articles

Expands {{< shortcode >}} directives (external links, CSV tables,
subscription blocks) in article sources before markdown rendering.
"""

__version__ = "1.0.0"

from .lib import (
    Scanner,
    Expander,
    expand,
    DirectiveRegistry,
    SiteConfig,
    LOG,
    state_connectToLogger,
)
from .models import (
    ErrorKind,
    ExpansionError,
    DirectiveSyntaxError,
    UnknownDirectiveError,
    ArityError,
    MalformedTableError,
    ResourceNotFoundError,
)

__all__ = [
    "Scanner",
    "Expander",
    "expand",
    "DirectiveRegistry",
    "SiteConfig",
    "LOG",
    "state_connectToLogger",
    "ErrorKind",
    "ExpansionError",
    "DirectiveSyntaxError",
    "UnknownDirectiveError",
    "ArityError",
    "MalformedTableError",
    "ResourceNotFoundError",
    "__version__",
]
