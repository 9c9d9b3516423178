"""
Pygments lexer for shortdown directive markup

Highlights {{< directive >}} syntax when articles show shortcode usage in
code fences (```shortdown).

Token types:
- Punctuation: Opening and closing markers, '='
- Name.Tag: Directive names (e.g., external-link, table)
- Name.Attribute: Named argument keys (e.g., src, class)
- String.Double: Quoted argument values
- String.Escape: Escaped characters inside quotes
- Literal.String: Bare argument values
- Comment: Displayed (non-expanded) directives {{</* ... */>}}
- Text: Everything outside directives
"""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Literal,
    Comment,
    Whitespace,
)


class ShortdownLexer(RegexLexer):
    """
    Lexer for shortdown directive markup

    Example:
        {{< table src="sales.csv" >}}

    Tokens:
        {{< → Punctuation
        table → Name.Tag
        src → Name.Attribute
        = → Punctuation
        "sales.csv" → String.Double
        >}} → Punctuation
    """

    name = 'Shortdown'
    aliases = ['shortdown', 'shortcode']
    filenames = []

    tokens = {
        'root': [
            # Displayed directives are shown, not expanded
            (r'\{\{</\*.*?\*/>\}\}', Comment),

            # Opening marker followed by the directive name
            (r'(\{\{<)(\s*)([A-Za-z_][\w-]*)',
             bygroups(Punctuation, Whitespace, Name.Tag), 'directive'),

            # Everything else is text
            (r'[^{]+', Text),
            (r'\{', Text),
        ],

        'directive': [
            (r'>\}\}', Punctuation, '#pop'),
            (r'\s+', Whitespace),

            # key=value
            (r'([A-Za-z_][\w-]*)(=)', bygroups(Name.Attribute, Punctuation)),

            (r'"', String.Double, 'quoted'),

            # Bare value
            (r'[^\s">]+', Literal.String),
            (r'>', Literal.String),
        ],

        'quoted': [
            (r'\\.', String.Escape),
            (r'"', String.Double, '#pop'),
            (r'[^"\\]+', String.Double),
        ],
    }


def get_lexer() -> ShortdownLexer:
    """
    Get the ShortdownLexer instance

    Returns:
        ShortdownLexer instance ready for use with Pygments
    """
    return ShortdownLexer()
