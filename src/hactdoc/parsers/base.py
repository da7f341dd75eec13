from abc import ABC, abstractmethod

from hactdoc.hierarchy import Hierarchy
from hactdoc.models import Entity


class BaseParser(ABC):
    """Abstract base class for language-specific documentation parsers."""

    @abstractmethod
    def parse_lines(self, lines: list[str], file_path: str, hierarchy: Hierarchy) -> list[Entity]:
        """Extract all documented entities from a file and place them.

        Args:
            lines: The file's lines, without line terminators
            file_path: Path of the file as it should appear in locations
            hierarchy: The hierarchy to place entities into (shared by files)

        Returns:
            The placed entities in source order. An entity merged into an
            earlier declaration is reported as the merged node.
        """
        pass
