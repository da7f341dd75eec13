import logging

from hactdoc.commands import requests_include_as_is
from hactdoc.docstrings import collect_docstring, is_docstring_start, strip_docstring, summarize
from hactdoc.hierarchy import Hierarchy
from hactdoc.models import Entity, Location
from hactdoc.parsers.base import BaseParser
from hactdoc.signatures import (
    classify_signature,
    collect_signature,
    parse_identifier,
    strip_signature,
    strip_template,
)

logger = logging.getLogger(__name__)


class CppParser(BaseParser):
    """Parser for ``//!`` and ``/*!`` documented C++ declarations."""

    def parse_lines(self, lines: list[str], file_path: str, hierarchy: Hierarchy) -> list[Entity]:
        """Extract documented entities from C++ source lines.

        The cursor (the parent for entities without explicit placement)
        starts at the root for every file.

        Args:
            lines: The file's lines, without line terminators
            file_path: Path of the file as it should appear in locations
            hierarchy: The hierarchy to place entities into

        Returns:
            The placed entities in source order
        """
        # Commands are stripped from docstring lines in place
        lines = list(lines)
        placed = []
        cursor = None

        index = 0
        while index < len(lines):
            if not is_docstring_start(lines[index]):
                index += 1
                continue

            index, entity = self.parse_entity(lines, index, file_path)
            logger.debug(
                f"Collected {entity.kind.value if entity.kind else 'docstring'} "
                f"'{entity.qualified_name or ''}' at {entity.locations[0]}"
            )

            placement = hierarchy.place(entity, cursor)
            cursor = placement.cursor
            placed.append(placement.node)

        return placed

    def parse_entity(self, lines: list[str], index: int, file_path: str) -> tuple[int, Entity]:
        """Collect the docstring at ``lines[index]`` and the signature after it.

        Args:
            lines: The file's lines (the docstring's command token is removed
                in place)
            index: 0-based index of the first docstring line
            file_path: Path of the file for the entity's location

        Returns:
            Tuple of (index of the first unconsumed line, unplaced entity)
        """
        entity = Entity(locations=[Location(file=file_path, line=index + 1)])

        index, doc_raw, command_string = collect_docstring(lines, index)
        entity.doc_raw = doc_raw
        entity.doc_text = strip_docstring(doc_raw)
        entity.summary = summarize(entity.doc_text)
        entity.command_string = command_string

        if requests_include_as_is(command_string):
            entity.include_as_is = True
            return index, entity

        index, signature = collect_signature(lines, index)
        if signature is None:
            return index, entity

        entity.signature_raw = signature
        entity.kind = classify_signature(signature)
        entity.qualified_name = parse_identifier(signature) or None
        _, entity.template_parameters = strip_template(signature)
        entity.signature_display = strip_signature(signature)

        return index, entity
