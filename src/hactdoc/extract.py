"""Run driver: parse a list of source files into one hierarchy."""

import logging
import time
from pathlib import Path
from typing import Iterable

from hactdoc.config import ExtractConfig
from hactdoc.hierarchy import Hierarchy
from hactdoc.parsers import get_parser_for_file

logger = logging.getLogger(__name__)


def read_lines(file_path: Path) -> list[str]:
    """Read a source file into a list of lines without line terminators.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return file_path.read_text(errors="replace").splitlines()


def display_path(file_path: Path, source_dir: str | None = None) -> str:
    """Path of a file as it appears in entity locations.

    Files inside ``source_dir`` are shown relative to it, anything else is
    shown as given.
    """
    if source_dir is None:
        return file_path.as_posix()

    try:
        return file_path.resolve().relative_to(Path(source_dir).resolve()).as_posix()
    except ValueError:
        return file_path.as_posix()


def extract_documentation(
    files: Iterable[Path | str],
    config: ExtractConfig | None = None,
    hierarchy: Hierarchy | None = None,
) -> Hierarchy:
    """Parse source files, in order, into a documentation hierarchy.

    Later files may refer to scopes declared in earlier ones, so the order
    matters (headers before sources).

    Args:
        files: Source files to parse
        config: Extraction settings (defaults if None)
        hierarchy: Existing hierarchy to extend (a new one if None)

    Returns:
        The hierarchy holding every documented entity

    Raises:
        FileNotFoundError: If a file doesn't exist
        UnresolvedScopeError: If an entity refers to an undeclared scope
        CommandSyntaxError: If a docstring command string is malformed
    """
    if config is None:
        config = ExtractConfig()
    if hierarchy is None:
        hierarchy = Hierarchy()

    start = time.perf_counter()

    for file in files:
        file_path = Path(file)
        parser = get_parser_for_file(file_path, config.extensions)
        if parser is None:
            logger.warning(f"Skipping unsupported file: {file_path}")
            continue

        logger.info(f"Parsing file: {file_path}")
        file_start = time.perf_counter()

        lines = read_lines(file_path)
        entities = parser.parse_lines(lines, display_path(file_path, config.source_dir), hierarchy)

        logger.info(
            f"Parsing done, found {len(entities)} entities, "
            f"took {time.perf_counter() - file_start:.3f} s"
        )

    if config.sort_top_level:
        hierarchy.sort_top_level()

    logger.info(f"Parsed all files, took {time.perf_counter() - start:.3f} s")
    return hierarchy
