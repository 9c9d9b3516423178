r"""
Scanner for {{< directive >}} syntax

Turns article source into an ordered stream of Literal and Directive tokens.

Grammar (markers configurable via AppSettings):

    directive  := "{{<" ws? NAME (ws argument)* ws? ">}}"
    argument   := KEY "=" value | value
    value      := QUOTED | BARE
    QUOTED     := '"' ( "\" any | [^"\] )* '"'
    BARE       := run of non-whitespace, no '"', not containing ">}}" or "{{<"
    NAME, KEY  := [A-Za-z_][A-Za-z0-9_-]*

Inside quotes the escape character (default backslash) makes the next
character literal, so '\"' is a quote and '\\' a backslash. Marker
sequences inside quotes never end the directive. Outside quotes the first
closing marker ends the directive.

A directive written as {{</* name args */>}} is not expanded: it becomes a
Literal whose text is {{< name args >}}, so articles can show directive
usage.

Key features:
- Lazy: tokens are yielded as they are found
- Lossless: token spans tile the source with no gaps
- Strict: malformed syntax raises DirectiveSyntaxError with the offset of
  the fault; there is no partial recovery

Example:
    >>> tokens = list(Scanner('Visit {{< external-link "https://a.b" "here" >}}!').scan())
    >>> [type(t).__name__ for t in tokens]
    ['Literal', 'Directive', 'Literal']
    >>> tokens[1].args
    ('https://a.b', 'here')
"""

import re
from types import MappingProxyType
from typing import Dict, Iterator, List, NoReturn, Optional, Tuple

from ..config import AppSettings, appsettings
from ..models.errors import DirectiveSyntaxError, position_compute
from ..models.tokens import Directive, Literal, Token
from .log import LOG


NAME_PATTERN = r'[A-Za-z_][\w-]*'


class Scanner:
    """
    Tokenizer for shortdown directive markup

    Handles:
    - Positional and key=value arguments
    - Quoted arguments with escaped quotes and embedded markers
    - Back-to-back directives
    - Displayed (non-expanded) directives
    - Error reporting with offset, line and column
    """

    def __init__(self, source: str, settings: Optional[AppSettings] = None):
        """
        Initialize scanner with source text

        Args:
            source: Raw article source
            settings: Marker/escape configuration (defaults to appsettings)
        """
        self.source = source
        self.settings = settings or appsettings
        self.opening = self.settings.opening_marker
        self.closing = self.settings.closing_marker
        self.escape = self.settings.escape_char
        self.shownOpening = self.settings.escapedOpening_make()
        self.shownClosing = self.settings.escapedClosing_make()
        self.name_re = re.compile(NAME_PATTERN)
        self.key_re = re.compile(rf'({NAME_PATTERN})=')

    def scan(self) -> Iterator[Token]:
        """
        Yield tokens in source order

        Each call starts a fresh pass over the (immutable) source, so
        rescanning gives the same tokens. A source without directives
        yields exactly one Literal, even when empty.

        Raises:
            DirectiveSyntaxError: On the first malformed construct
        """
        source = self.source
        pos = 0
        literal_start = 0
        emitted = False

        while True:
            next_open = source.find(self.opening, pos)
            next_close = source.find(self.closing, pos)

            if next_close != -1 and (next_open == -1 or next_close < next_open):
                self.error("Closing marker without matching opening marker", next_close)

            if next_open == -1:
                break

            if next_open > literal_start:
                yield Literal(source[literal_start:next_open], literal_start, next_open)
                emitted = True

            if source.startswith(self.shownOpening, next_open):
                token: Token = self.shown_parse(next_open)
            else:
                token = self.directive_parse(next_open)
                LOG(f"Directive '{token.name}' at offset {token.start}", level=3)

            yield token
            emitted = True
            pos = literal_start = token.end

        if literal_start < len(source) or not emitted:
            yield Literal(source[literal_start:], literal_start, len(source))

    def shown_parse(self, start: int) -> Literal:
        """
        Convert a {{</* ... */>}} region into a Literal showing {{< ... >}}

        Args:
            start: Offset of the opening marker

        Returns:
            Literal spanning the whole region
        """
        inner_start = start + len(self.shownOpening)
        close = self.source.find(self.shownClosing, inner_start)
        if close == -1:
            self.error("Unterminated displayed directive", start)

        end = close + len(self.shownClosing)
        text = f"{self.opening}{self.source[inner_start:close]}{self.closing}"
        return Literal(text, start, end)

    def directive_parse(self, start: int) -> Directive:
        """
        Parse one directive beginning at the opening marker

        Args:
            start: Offset of the opening marker

        Returns:
            Directive token spanning opening through closing marker

        Raises:
            DirectiveSyntaxError: If the name, arguments or closing marker
                                  are malformed or missing
        """
        source = self.source
        pos = self.whitespace_skip(start + len(self.opening))

        if pos >= len(source):
            self.error("Unterminated directive: missing closing marker", start)
        if source.startswith(self.closing, pos):
            self.error("Directive has no name", start)

        name_match = self.name_re.match(source, pos)
        if not name_match:
            self.error("Invalid directive name", pos)
        name = name_match.group(0)
        pos = name_match.end()

        args: List[str] = []
        named: Dict[str, str] = {}

        while True:
            if source.startswith(self.closing, pos):
                break
            if pos >= len(source):
                self.error("Unterminated directive: missing closing marker", start, name)
            if not source[pos].isspace():
                self.error("Expected whitespace or closing marker", pos, name)

            pos = self.whitespace_skip(pos)
            if source.startswith(self.closing, pos):
                break
            if pos >= len(source):
                self.error("Unterminated directive: missing closing marker", start, name)

            key_match = self.key_re.match(source, pos)
            if key_match:
                key = key_match.group(1)
                if key in named:
                    self.error(f"Duplicate argument '{key}'", pos, name)
                named[key], pos = self.value_parse(key_match.end(), start, name)
            else:
                value, pos = self.value_parse(pos, start, name)
                args.append(value)

        return Directive(
            name=name,
            args=tuple(args),
            namedArgs=MappingProxyType(named),
            start=start,
            end=pos + len(self.closing),
        )

    def value_parse(self, pos: int, start: int, name: str) -> Tuple[str, int]:
        """
        Parse a quoted or bare argument value

        Args:
            pos: Offset of the first character of the value
            start: Offset of the enclosing directive (for unterminated errors)
            name: Enclosing directive name (for error context)

        Returns:
            (value, offset just past the value)
        """
        source = self.source
        if pos >= len(source):
            self.error("Unterminated directive: missing closing marker", start, name)
        if source[pos] == '"':
            return self.quoted_parse(pos, name)

        end = pos
        while end < len(source) and not source[end].isspace():
            if source.startswith(self.closing, end):
                break
            if source.startswith(self.opening, end):
                self.error("Opening marker inside directive", end, name)
            if source[end] == '"':
                self.error("Unexpected quote in unquoted argument", end, name)
            end += 1

        if end == pos:
            self.error("Missing argument value", pos, name)
        return source[pos:end], end

    def quoted_parse(self, pos: int, name: str) -> Tuple[str, int]:
        r"""
        Parse a double-quoted value starting at the opening quote

        Example:
            For source '"say \"hi\""' at position 0:
            Returns ('say "hi"', 12)
        """
        source = self.source
        chars: List[str] = []
        i = pos + 1
        while i < len(source):
            ch = source[i]
            if ch == self.escape:
                if i + 1 >= len(source):
                    break
                chars.append(source[i + 1])
                i += 2
            elif ch == '"':
                return ''.join(chars), i + 1
            else:
                chars.append(ch)
                i += 1

        self.error("Unterminated quoted argument", pos, name)

    def whitespace_skip(self, pos: int) -> int:
        """Return the first offset at or after pos that is not whitespace"""
        while pos < len(self.source) and self.source[pos].isspace():
            pos += 1
        return pos

    def error(self, message: str, offset: int, directive: Optional[str] = None) -> NoReturn:
        """
        Report scanner error with source position

        Raises:
            DirectiveSyntaxError: Always (this is an error reporting function)
        """
        line, column = position_compute(self.source, offset)
        raise DirectiveSyntaxError(
            message, directive=directive, offset=offset, line=line, column=column
        )


def tokens_scan(source: str, settings: Optional[AppSettings] = None) -> Iterator[Token]:
    """
    Scan source into tokens

    Convenience wrapper around Scanner(source).scan().
    """
    return Scanner(source, settings).scan()
