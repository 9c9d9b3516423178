"""
Site configuration loader for shortdown.

A site may ship a YAML file that customizes the fragments directives emit
without changing their argument shape:

    subscribe:
      html: '<div id="newsletter-embed"></div>'
    links:
      external_class: external-link
    tables:
      default_class: data-table

Every key is optional; missing keys fall back to AppSettings.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..config import AppSettings, appsettings


class SiteConfigError(Exception):
    """Raised when site configuration loading or validation fails"""
    pass


class SiteConfig:
    """
    Represents a site's directive configuration.

    Wraps the parsed YAML mapping with dotted-key lookup and typed accessors
    for the values directive handlers need.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        settings: Optional[AppSettings] = None,
        path: Optional[Path] = None,
    ):
        """
        Args:
            config: Parsed configuration mapping (empty if None)
            settings: Fallback settings (defaults to appsettings)
            path: File the configuration came from, if any
        """
        self.config: Dict[str, Any] = config or {}
        self.settings = settings or appsettings
        self.path = path

    @classmethod
    def config_load(
        cls, config_path: Union[str, Path], settings: Optional[AppSettings] = None
    ) -> "SiteConfig":
        """
        Load site configuration from a YAML file

        Args:
            config_path: Path to the YAML file
            settings: Fallback settings

        Raises:
            SiteConfigError: If the file is missing, unparsable, or not a mapping
        """
        path = Path(config_path)
        if not path.is_file():
            raise SiteConfigError(f"Site config not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SiteConfigError(f"Failed to parse {path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise SiteConfigError(f"Site config {path} must be a mapping at top level")

        return cls(config, settings=settings, path=path)

    def config_get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Supports nested keys with dot notation:
          site.config_get('subscribe.html', '')

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        value: Any = self.config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def subscribeHtml_get(self) -> str:
        """Fragment emitted by the subscribe directive"""
        return str(self.config_get('subscribe.html', self.settings.subscribe_html))

    def externalClass_get(self) -> str:
        """CSS class marking external-link anchors"""
        return str(self.config_get('links.external_class', self.settings.external_link_class))

    def tableClass_get(self) -> Optional[str]:
        """Class applied to tables whose directive gives none"""
        value = self.config_get('tables.default_class')
        return str(value) if value else None

    def __repr__(self) -> str:
        return f"SiteConfig(path='{self.path}')"
