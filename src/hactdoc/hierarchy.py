"""The scoped documentation hierarchy.

Entities are placed below the scope their qualified name points at
(``Foo::bar`` goes below ``Foo``), starting from the parent selected by the
docstring commands. Repeated declarations of the same entity, typically a
declaration in a header and its definition in a source file, are merged into
one node.
"""

import logging
import re
from dataclasses import dataclass, fields
from typing import Any, Iterator

from hactdoc.commands import find_by_path, parse_commands
from hactdoc.errors import UnresolvedScopeError
from hactdoc.models import Entity, EntityKind
from hactdoc.signatures import find_operator_keyword, minimize_signature

logger = logging.getLogger(__name__)

_TEMPLATE_ARGUMENTS = re.compile(r"<.*>$")


def split_scopes(qualified_name: str) -> list[str]:
    """Split a qualified name at its top-level ``::`` separators.

    Separators inside template argument lists and inside the target type of a
    conversion operator are not split on.

    Examples:
        >>> split_scopes("Outer::Inner::method")
        ['Outer', 'Inner', 'method']
        >>> split_scopes("::Global")
        ['', 'Global']
        >>> split_scopes("Map<std::string, int>::operator std::string")
        ['Map<std::string, int>', 'operator std::string']
    """
    operator = find_operator_keyword(qualified_name)
    head = qualified_name if operator < 0 else qualified_name[:operator]
    tail = "" if operator < 0 else qualified_name[operator:]

    segments = []
    depth = 0
    start = 0
    index = 0
    while index < len(head):
        char = head[index]
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        elif depth == 0 and head.startswith("::", index):
            segments.append(head[start:index])
            index += 2
            start = index
            continue
        index += 1

    segments.append(head[start:] + tail)
    return segments


def _scope_pattern(scope: str) -> re.Pattern:
    # "Scope::" or "Scope<T>::", not as the tail of a longer name
    return re.compile(r"(?<![\w:])(?:::)?" + re.escape(scope) + r"(?:<[^;{}]*?>)?::")


def strip_scopes(entity: Entity, parent: Entity) -> None:
    """Remove the qualification that the entity's position already implies.

    Every ``Ancestor::`` from the root down to ``parent`` is removed from the
    qualified name, which gives ``entity.name``, and from the display
    signature.
    """
    chain = []
    node = parent
    while node is not None and not node.is_root:
        if node.name:
            chain.append(node.name)
        node = node.parent
    chain.reverse()

    name = entity.qualified_name or ""
    signature = entity.signature_display
    for scope in chain:
        pattern = _scope_pattern(scope)
        name = pattern.sub("", name)
        if signature:
            signature = pattern.sub("", signature)

    if name.startswith("::"):
        name = name[2:]

    entity.name = name or None
    entity.signature_display = signature


def merge_entities(existing: Entity, new: Entity) -> None:
    """Merge a newly parsed entity into an existing one.

    Locations are combined (without duplicates). For text fields the longer
    value is kept, list fields are concatenated and any other field takes the
    new value, as the later declaration is usually the definition. The
    existing entity keeps its position and children.
    """
    for entity_field in fields(Entity):
        if not entity_field.init:
            continue

        key = entity_field.name
        old_value = getattr(existing, key)
        new_value = getattr(new, key)

        if key == "locations":
            merged = list(old_value)
            merged.extend(location for location in new_value if location not in merged)
            setattr(existing, key, merged)
        elif isinstance(old_value, (EntityKind, bool)) or isinstance(new_value, (EntityKind, bool)):
            setattr(existing, key, new_value)
        elif isinstance(old_value, str) or isinstance(new_value, str):
            if old_value is None or (new_value is not None and len(new_value) > len(old_value)):
                setattr(existing, key, new_value)
        elif isinstance(old_value, list):
            setattr(existing, key, old_value + list(new_value or []))
        else:
            setattr(existing, key, new_value)


def _describe(entity: Entity) -> str:
    if entity.is_root:
        return "<root>"
    return entity.qualified_name or entity.name or "<unnamed>"


def _first_location(entity: Entity) -> str | None:
    return str(entity.locations[0]) if entity.locations else None


@dataclass
class Placement:
    """Result of placing an entity into the hierarchy."""
    node: Entity  # The entity itself, or the node it was merged into
    cursor: Entity | None  # Parent for the following entities, None for root


class Hierarchy:
    """Tree of documented entities, shared by all parsed files.

    The "cursor" threaded through ``place`` is the parent that entities go
    below when they carry no explicit placement. It is owned by the caller
    (one per file) and None stands for the root.
    """

    def __init__(self):
        self.root = Entity.create_root()

    def place(self, entity: Entity, cursor: Entity | None = None) -> Placement:
        """Insert or merge an entity and compute the cursor for the next one.

        Args:
            entity: A freshly parsed entity (not yet in the tree)
            cursor: The current parent, None for the root

        Returns:
            Placement holding the node the entity ended up as (itself, or the
            existing node it was merged into) and the next cursor: that node
            if its commands ask for it to become the parent of the following
            entities, otherwise ``cursor``

        Raises:
            UnresolvedScopeError: If a scope in the qualified name or in the
                commands does not exist
            CommandSyntaxError: If the command string is malformed
        """
        try:
            commands = parse_commands(entity.command_string, self.root, cursor)
        except UnresolvedScopeError as e:
            raise UnresolvedScopeError(
                e.segment,
                e.path,
                signature=entity.signature_raw,
                location=_first_location(entity),
            ) from e
        entity.include_as_is = commands.include_as_is

        parent = self.resolve_parent(entity, commands.parent or self.root)

        if entity.qualified_name:
            strip_scopes(entity, parent)

        if entity.signature_display is not None:
            entity.signature_minimal = minimize_signature(entity.signature_display)

        placed = self._insert(entity, parent)

        if commands.inherit_parent:
            logger.debug(f"'{_describe(placed)}' is the new parent")
            return Placement(node=placed, cursor=placed)
        return Placement(node=placed, cursor=cursor)

    def resolve_parent(self, entity: Entity, start: Entity) -> Entity:
        """Walk the scopes of the entity's qualified name down from ``start``.

        A leading ``::`` restarts from the root. Scopes written with template
        arguments (``Container<T>::add``) match the entity without them.

        Raises:
            UnresolvedScopeError: If a scope is not a child of the one before
        """
        if not entity.qualified_name:
            return start

        node = start
        for segment in split_scopes(entity.qualified_name)[:-1]:
            if not segment:
                node = self.root
                continue

            child = node.get_child(_TEMPLATE_ARGUMENTS.sub("", segment))
            if child is None or child.is_function:
                raise UnresolvedScopeError(
                    segment,
                    entity.qualified_name,
                    signature=entity.signature_raw,
                    location=_first_location(entity),
                )
            node = child
        return node

    def _insert(self, entity: Entity, parent: Entity) -> Entity:
        key = entity.lookup_key
        if key:
            existing = parent.get_child(key)
            if existing is not None:
                if existing.signature_minimal == entity.signature_minimal:
                    logger.debug(f"Merging '{_describe(entity)}' into existing entity")
                    merge_entities(existing, entity)
                    return existing
                if not entity.is_function:
                    # Names are unique per scope for everything but functions
                    logger.warning(
                        f"'{_describe(entity)}' redeclared with a different signature "
                        f"({existing.signature_minimal!r} vs {entity.signature_minimal!r}), merging"
                    )
                    merge_entities(existing, entity)
                    return existing

        logger.debug(
            f"Placing {entity.kind.value if entity.kind else 'text'} "
            f"'{_describe(entity)}' under '{_describe(parent)}'"
        )
        parent.add_child(entity)
        return entity

    def find(self, path: str) -> Entity:
        """Find a non-function entity by its dot-separated path from the root.

        Raises:
            UnresolvedScopeError: If the path does not resolve
        """
        return find_by_path(path, self.root)

    def entities(self) -> Iterator[Entity]:
        """Iterate over all entities depth first."""
        return self.root.walk()

    def top_level_names(self) -> list[str]:
        """Names of the top-level entities, in order (unnamed ones skipped)."""
        return [child.name for child in self.root.children if child.name]

    def sort_top_level(self) -> None:
        """Sort the top-level entities alphabetically by name."""
        self.root.sort_children()

    def to_dict(self) -> dict[str, Any]:
        """Convert the whole hierarchy into JSON-ready data."""
        return {"entities": [child.to_dict() for child in self.root.children]}

