"""Configuration management for hactdoc extraction."""

from dataclasses import dataclass
from pathlib import Path

import yaml

from hactdoc.parsers import CPP_EXTENSIONS


@dataclass
class ExtractConfig:
    """Configuration for documentation extraction.

    Attributes:
        source_dir: Directory that file locations are reported relative to.
            None reports paths as given.
        extensions: File suffixes handled by the C++ parser.
        sort_top_level: Sort the top-level entities alphabetically after all
            files are parsed.
    """
    source_dir: str | None = None
    extensions: tuple[str, ...] = CPP_EXTENSIONS
    sort_top_level: bool = True


def load_extract_config(project_root: Path | None = None) -> ExtractConfig:
    """Load extraction configuration from the .hactdoc file in the project root.

    Args:
        project_root: Path to the project root. If None, uses current directory.

    Returns:
        ExtractConfig object with loaded or default values.

    Notes:
        If .hactdoc file doesn't exist or can't be parsed, returns default config.
        Expected YAML structure:

        ```yaml
        extract:
          source_dir: src
          extensions: [.h, .cpp]
          sort_top_level: true
        ```
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path = project_root / ".hactdoc"

    if not config_path.exists():
        return ExtractConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            return ExtractConfig()

        extract_config = data.get("extract", {})
        if not isinstance(extract_config, dict):
            return ExtractConfig()

        extensions = extract_config.get("extensions", ExtractConfig.extensions)
        if isinstance(extensions, str):
            extensions = [extensions]

        source_dir = extract_config.get("source_dir", ExtractConfig.source_dir)
        if source_dir is not None:
            # Relative source directories are relative to the project root
            source_dir = str(project_root / source_dir)

        return ExtractConfig(
            source_dir=source_dir,
            extensions=tuple(str(extension) for extension in extensions),
            sort_top_level=bool(
                extract_config.get("sort_top_level", ExtractConfig.sort_top_level)
            ),
        )
    except (yaml.YAMLError, OSError, KeyError, TypeError, ValueError):
        # Return default config on any parsing errors
        return ExtractConfig()
