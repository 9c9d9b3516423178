"""
Error taxonomy for directive expansion

Every failure during expansion is an ExpansionError subclass carrying a
kind plus whatever positional context the raising component knows: the
directive name, the source offset (with 1-based line/column), the CSV row
index, and the offending path. The expander fills in directive name and
offset for errors raised from inside handlers.

All kinds are authoring faults. None is retried.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union


class ErrorKind(Enum):
    """Kinds of expansion failure, as reported to callers"""
    SYNTAX = "SyntaxError"
    UNKNOWN_DIRECTIVE = "UnknownDirective"
    ARITY = "ArityError"
    MALFORMED_TABLE = "MalformedTableError"
    RESOURCE_NOT_FOUND = "ResourceNotFoundError"


class ExpansionError(Exception):
    """
    Base class for all expansion failures

    Attributes:
        message: Human-readable description (without location suffix)
        directive: Name of the directive being processed, if any
        offset: Character offset into the source document, if known
        line: 1-based line of offset, if known
        column: 1-based column of offset, if known
        row: CSV row index (header is row 0), for table errors
        path: File path involved, for table errors
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        directive: Optional[str] = None,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        row: Optional[int] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        self.message = message
        self.directive = directive
        self.offset = offset
        self.line = line
        self.column = column
        self.row = row
        self.path = str(path) if path is not None else None
        super().__init__(self.describe())

    def describe(self) -> str:
        """Render message with whatever location context is known"""
        details = []
        if self.directive is not None:
            details.append(f"directive '{self.directive}'")
        if self.line is not None and self.column is not None:
            details.append(f"line {self.line}, column {self.column}")
        if self.offset is not None:
            details.append(f"offset {self.offset}")
        if self.row is not None:
            details.append(f"row {self.row}")
        if self.path is not None:
            details.append(f"path {self.path}")
        if not details:
            return self.message
        return f"{self.message} ({'; '.join(details)})"

    def locate(self, source: str, directive: Optional[str], offset: int) -> "ExpansionError":
        """
        Attach directive name and source position if not already set.

        Called by the expander when a handler raises without positional
        context. Existing values are kept.

        Args:
            source: Document being expanded (for line/column computation)
            directive: Name of the directive whose handler failed
            offset: Offset of that directive's opening marker

        Returns:
            self, to allow ``raise error.locate(...)``
        """
        if self.directive is None:
            self.directive = directive
        if self.offset is None:
            self.offset = offset
            self.line, self.column = position_compute(source, offset)
        self.args = (self.describe(),)
        return self

    def asDict(self) -> Dict[str, Any]:
        """
        Structured error value for callers that report rather than raise.

        Example:
            >>> ArityError("too many", directive="subscribe").asDict()["kind"]
            'ArityError'
        """
        return {
            "kind": self.kind.value,
            "message": self.message,
            "directive": self.directive,
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
            "row": self.row,
            "path": self.path,
        }

    def __str__(self) -> str:
        return self.describe()


class DirectiveSyntaxError(ExpansionError, SyntaxError):
    """Malformed directive delimiters, names, arguments or quoting"""
    kind = ErrorKind.SYNTAX


class UnknownDirectiveError(ExpansionError):
    """Directive name not present in the registry"""
    kind = ErrorKind.UNKNOWN_DIRECTIVE


class ArityError(ExpansionError):
    """Known directive invoked with the wrong argument count or shape"""
    kind = ErrorKind.ARITY


class MalformedTableError(ExpansionError):
    """CSV data that cannot be rendered as a rectangular table"""
    kind = ErrorKind.MALFORMED_TABLE


class ResourceNotFoundError(ExpansionError):
    """Referenced data file does not exist or is not a regular file"""
    kind = ErrorKind.RESOURCE_NOT_FOUND


def position_compute(source: str, offset: int) -> tuple[int, int]:
    """
    Convert a character offset into 1-based (line, column).

    Example:
        >>> position_compute("ab\\ncd", 4)
        (2, 2)
    """
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1
