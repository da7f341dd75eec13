from pathlib import Path

from hactdoc.parsers.base import BaseParser
from hactdoc.parsers.cpp_parser import CppParser

CPP_EXTENSIONS: tuple[str, ...] = (".h", ".hh", ".hpp", ".hxx", ".c", ".cc", ".cpp", ".cxx")


def get_parser_for_file(
    file_path: Path,
    extensions: tuple[str, ...] = CPP_EXTENSIONS
) -> BaseParser | None:
    """Get the parser for a file based on its suffix.

    Args:
        file_path: Path to the source file
        extensions: Suffixes handled by the C++ parser (compared case-insensitively)

    Returns:
        A parser instance, or None if the file type is not supported
    """
    suffix = file_path.suffix.lower()
    if suffix in {extension.lower() for extension in extensions}:
        return CppParser()
    return None
