"""
YAML loader for the source definition.

source.yml describes where the listing lives and how hard the crawler
may hit it. Crawl tuning comes from the environment (FETCH_MAX_PAGES,
DETAIL_CONCURRENCY, DETAIL_DELAY_MS) through ${VAR:-default}
placeholders, filled in before the YAML is parsed.
"""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
import structlog

from law_scraper.navigators.base import SourceConfig

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE = "source.yml"

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Fill ${NAME} and ${NAME:-fallback} placeholders from os.environ.

    A bare ${NAME} that is unset becomes "" and logs env_var_not_set;
    SourceConfig then falls back to its own default for that field.
    """
    def fill(match):
        name, sep, fallback = match.group(1).partition(":-")
        value = os.getenv(name)
        if value is not None:
            return value
        if not sep:
            logger.warning("env_var_not_set", var=name)
        return fallback

    return PLACEHOLDER.sub(fill, text)


class ConfigLoader:
    """Reads source YAML files from one directory."""

    def __init__(self, config_dir: Optional[str] = None):
        """config_dir defaults to the package's own config/ directory, where source.yml ships."""
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Read filename from config_dir, substitute placeholders and parse it.

        An empty file yields {}.

        Raises:
            FileNotFoundError: If filename is not in config_dir
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        content = substitute_env_vars(filepath.read_text(encoding="utf-8"))
        return yaml.safe_load(content) or {}

    def load_source(self, filename: str = DEFAULT_CONFIG_FILE) -> SourceConfig:
        """
        Load the source definition from YAML.

        Args:
            filename: Config file name

        Returns:
            SourceConfig object

        Raises:
            ValueError: If the source section or a required field is missing
        """
        config = self.load_file(filename)
        data = config.get("source")
        if not isinstance(data, dict):
            raise ValueError(f"Missing 'source' section in {filename}")

        source = self._parse_source(data)
        logger.info(
            "source_loaded",
            source_id=source.source_id,
            max_pages=source.max_pages,
            detail_concurrency=source.detail_concurrency,
            detail_delay=source.detail_delay,
        )
        return source

    def _parse_source(self, data: dict) -> SourceConfig:
        """
        Parse source definition into SourceConfig.

        Raises:
            ValueError: If required fields missing
        """
        required = ["source_id", "source_name", "base_url", "listing_url"]
        for field in required:
            if field not in data:
                raise ValueError(f"Missing required field: {field}")

        return SourceConfig.from_dict(data)


def load_source(config_path: Optional[str] = None) -> SourceConfig:
    """
    Convenience function to load the source config.

    Args:
        config_path: Optional path to a source YAML file

    Returns:
        SourceConfig object
    """
    if config_path:
        path = Path(config_path)
        return ConfigLoader(str(path.parent)).load_source(path.name)
    return ConfigLoader().load_source()
