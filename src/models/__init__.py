"""
Models package for shortdown

Contains data structures and type definitions for the expansion pipeline.
"""

from .state import ProgramState, pipeline
from .directives import DirectiveSpec, DirectiveCategory
from .tokens import Literal, Directive, Token
from .errors import (
    ErrorKind,
    ExpansionError,
    DirectiveSyntaxError,
    UnknownDirectiveError,
    ArityError,
    MalformedTableError,
    ResourceNotFoundError,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "Literal",
    "Directive",
    "Token",
    "ErrorKind",
    "ExpansionError",
    "DirectiveSyntaxError",
    "UnknownDirectiveError",
    "ArityError",
    "MalformedTableError",
    "ResourceNotFoundError",
]
