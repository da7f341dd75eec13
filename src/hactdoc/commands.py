"""Docstring placement commands.

A command string is taken from the first docstring line, e.g. ``//![Foo]>``:

- ``~``       include the docstring as is (no signature), keep the current parent
- ``>``       the documented entity becomes the parent of the following ones
- ``<``       move one level up from the current parent
- ``^``       move to the hierarchy root
- ``[a.b]``   move to the child ``b`` of child ``a`` of the current parent
"""

import logging
from dataclasses import dataclass

from hactdoc.errors import CommandSyntaxError, UnresolvedScopeError
from hactdoc.models import Entity

logger = logging.getLogger(__name__)


@dataclass
class Commands:
    """The outcome of interpreting a command string."""
    parent: Entity | None  # None means the hierarchy root
    include_as_is: bool = False
    inherit_parent: bool = False


def requests_include_as_is(command_string: str) -> bool:
    """Check whether a command string asks for the docstring to be kept as is.

    This is decided before any signature is collected, since an as-is
    docstring has no signature.
    """
    end = command_string.rfind("]")
    return "~" in command_string[end + 1:]


def find_by_path(path: str, start: Entity) -> Entity:
    """Resolve a dot-separated path of names below ``start``.

    Args:
        path: Names separated by dots, e.g. ``"Outer.Inner"``
        start: Entity to start the lookup from

    Returns:
        The entity named by the last segment

    Raises:
        CommandSyntaxError: If the path has empty segments
        UnresolvedScopeError: If a segment does not name an existing child
    """
    node = start
    for segment in path.split("."):
        if not segment:
            raise CommandSyntaxError(f"[{path}]", "empty path segment")

        child = node.get_child(segment)
        if child is None or child.is_function:
            raise UnresolvedScopeError(segment, path)
        node = child
    return node


def parse_commands(command_string: str, root: Entity, parent: Entity | None) -> Commands:
    """Interpret a command string.

    Args:
        command_string: Commands from the first docstring line
        root: The hierarchy root
        parent: The current parent before this docstring (None for root)

    Returns:
        Commands holding the target parent and the flags

    Raises:
        CommandSyntaxError: If a ``[`` is never closed
        UnresolvedScopeError: If a bracketed path does not resolve
    """
    commands = Commands(parent=parent)

    index = 0
    while index < len(command_string):
        char = command_string[index]

        if char == "~":
            logger.debug("~ Include docstring as is")
            commands.include_as_is = True
            # Changing the parent in the same docstring is not allowed
            commands.parent = parent
            commands.inherit_parent = False
            break
        elif char == ">":
            logger.debug("> Documented entity becomes the new parent")
            commands.inherit_parent = True
        elif char == "<":
            logger.debug("< Parent is the parent's parent")
            if commands.parent is not None:
                commands.parent = commands.parent.parent
                if commands.parent is not None and commands.parent.is_root:
                    commands.parent = None
        elif char == "^":
            logger.debug("^ Reset parent to root")
            commands.parent = None
        elif char == "[":
            end = command_string.find("]", index + 1)
            if end < 0:
                raise CommandSyntaxError(command_string, "unterminated '['")

            path = command_string[index + 1:end]
            logger.debug(f"[{path}] Parent is '{path}'")
            commands.parent = find_by_path(path, commands.parent or root)
            index = end

        index += 1

    return commands
