"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use SHORTDOWN_ prefix (e.g., SHORTDOWN_DEDUPE_TABLES=false).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use SHORTDOWN_ prefix.

    Examples:
        SHORTDOWN_DEFAULT_DATA_DIR=content/data
        SHORTDOWN_EXTERNAL_LINK_CLASS=ext
        SHORTDOWN_SUBSCRIBE_HTML='<div id="newsletter"></div>'
    """

    model_config = SettingsConfigDict(
        env_prefix="SHORTDOWN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Directive syntax
    opening_marker: str = Field(
        default="{{<",
        description="Sequence that opens a directive",
    )

    closing_marker: str = Field(
        default=">}}",
        description="Sequence that closes a directive",
    )

    escape_char: str = Field(
        default="\\",
        description="Character that makes the next character literal inside quoted arguments",
    )

    comment_open: str = Field(
        default="/*",
        description="Sequence after the opening marker that turns a directive into displayed text",
    )

    comment_close: str = Field(
        default="*/",
        description="Sequence before the closing marker that ends a displayed directive",
    )

    # Table configuration
    default_data_dir: str = Field(
        default="data",
        description="Directory (relative to inputdir) used to resolve table src paths",
    )

    csv_encoding: str = Field(
        default="utf-8-sig",
        description="Encoding used to read CSV files (utf-8-sig strips a byte-order mark)",
    )

    dedupe_tables: bool = Field(
        default=True,
        description="Parse each distinct table src only once per expanded document",
    )

    # Fragment configuration
    external_link_class: str = Field(
        default="external-link",
        description="CSS class marking anchors produced by external-link",
    )

    subscribe_html: str = Field(
        default='<div class="subscribe" data-subscribe></div>',
        description="Fragment emitted by subscribe when the site config does not provide one",
    )

    # CLI configuration
    default_pattern: str = Field(
        default="**/*.md",
        description="Glob used to find article sources when no --inputFile is given",
    )

    @field_validator("opening_marker", "closing_marker", "comment_open", "comment_close")
    @classmethod
    def marker_validate(cls, value: str) -> str:
        """Markers must be non-empty and free of whitespace"""
        if not value or any(ch.isspace() for ch in value):
            raise ValueError("markers must be non-empty and contain no whitespace")
        return value

    @field_validator("escape_char")
    @classmethod
    def escapeChar_validate(cls, value: str) -> str:
        """The escape character must be a single non-quote character"""
        if len(value) != 1 or value == '"':
            raise ValueError("escape_char must be a single character other than '\"'")
        return value

    def escapedOpening_make(self) -> str:
        """
        Build the sequence that opens a displayed (non-expanded) directive.

        Returns:
            Opening marker followed by the comment opener

        Example:
            >>> AppSettings().escapedOpening_make()
            '{{</*'
        """
        return f"{self.opening_marker}{self.comment_open}"

    def escapedClosing_make(self) -> str:
        """
        Build the sequence that closes a displayed (non-expanded) directive.

        Example:
            >>> AppSettings().escapedClosing_make()
            '*/>}}'
        """
        return f"{self.comment_close}{self.closing_marker}"


# Singleton instance - import this in your code
appsettings = AppSettings()
