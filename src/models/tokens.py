"""
Scanner token models

Type-safe structures yielded by Scanner.scan(). A scanned document is an
ordered stream of Literal and Directive tokens whose [start, end) spans
tile the source exactly.
"""

from dataclasses import dataclass, field
from typing import Mapping, Tuple, Union


@dataclass(frozen=True)
class Literal:
    """
    A run of source text outside any directive

    Attributes:
        text: Text to emit unchanged
        start: Offset of the first backing character in the source
        end: Offset one past the last backing character

    Example:
        For source "Visit {{< subscribe >}}" the first token is:
        Literal(text="Visit ", start=0, end=6)

    ``text`` equals ``source[start:end]`` except for displayed directives
    written as ``{{</* ... */>}}``, whose text is ``{{< ... >}}``.
    """
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class Directive:
    """
    A parsed directive invocation

    Attributes:
        name: Directive name (e.g., "external-link", "table")
        args: Positional arguments, unquoted and unescaped
        namedArgs: key=value arguments, unquoted and unescaped
        start: Offset of the opening marker
        end: Offset one past the closing marker

    Example:
        For source '{{< table src="a.csv" >}}':
        Directive(name="table", args=(), namedArgs={"src": "a.csv"},
                  start=0, end=25)
    """
    name: str
    args: Tuple[str, ...] = ()
    namedArgs: Mapping[str, str] = field(default_factory=dict)
    start: int = 0
    end: int = 0


Token = Union[Literal, Directive]
