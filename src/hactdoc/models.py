import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


@dataclass(frozen=True)
class Location:
    """A position in a source file (line is 1-indexed)."""
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


class EntityKind(str, Enum):
    """Kind of a documented declaration."""
    NAMESPACE = "namespace"
    CLASS = "class"
    STRUCT = "struct"  # struct and union
    ENUM = "enum"
    ENUM_CLASS = "enum-class"  # enum class and enum struct
    TYPEDEF = "typedef"
    USING = "using"
    FUNCTION = "function"


@dataclass(eq=False)
class Entity:
    """A documented declaration node in the documentation hierarchy.

    Entities own their children. The parent is held through a weak reference
    so a node never keeps its owner alive. The hierarchy root is an Entity
    with no name, qualified name or kind (see ``Entity.create_root``).
    """
    name: str | None = None  # Identifier local to the parent scope
    qualified_name: str | None = None  # Identifier as written in the signature
    kind: EntityKind | None = None
    doc_raw: str | None = None
    doc_text: str | None = None
    summary: str | None = None
    command_string: str = ""
    signature_raw: str | None = None
    signature_display: str | None = None
    signature_minimal: str | None = None
    template_parameters: str | None = None  # Stripped "<...>", never re-attached
    locations: list[Location] = field(default_factory=list)
    include_as_is: bool = False
    children: list["Entity"] = field(default_factory=list, init=False, repr=False)
    _lookup: dict[str, "Entity"] = field(default_factory=dict, init=False, repr=False)
    _parent_ref: "weakref.ref[Entity] | None" = field(default=None, init=False, repr=False)
    _root: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create_root(cls) -> "Entity":
        """Create an empty hierarchy root."""
        root = cls()
        root._root = True
        return root

    @property
    def is_root(self) -> bool:
        return self._root

    @property
    def parent(self) -> "Entity | None":
        """The owning node, or None for the root and for unplaced entities."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_function(self) -> bool:
        return self.kind is EntityKind.FUNCTION

    @property
    def lookup_key(self) -> str | None:
        """Key under which the parent indexes this entity.

        Functions are keyed by their minimal signature so overloads can
        coexist; everything else is keyed by its short name.
        """
        if self.is_function:
            return self.signature_minimal
        return self.name

    @property
    def depth(self) -> int:
        """Number of parent links between this entity and the root."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    @property
    def scope_chain(self) -> list[str]:
        """Names of the named ancestors, root first."""
        chain = []
        node = self.parent
        while node is not None and not node.is_root:
            if node.name:
                chain.append(node.name)
            node = node.parent
        chain.reverse()
        return chain

    def add_child(self, child: "Entity") -> None:
        """Append a child and register it under its lookup key, if any."""
        child._parent_ref = weakref.ref(self)
        self.children.append(child)

        key = child.lookup_key
        if key:
            self._lookup[key] = child

    def get_child(self, key: str) -> "Entity | None":
        """Find a direct child by lookup key."""
        return self._lookup.get(key)

    def walk(self) -> Iterator["Entity"]:
        """Yield all descendants depth first, in insertion order."""
        for child in self.children:
            yield child
            yield from child.walk()

    def sort_children(self) -> None:
        """Sort the children alphabetically by name (unnamed entries last)."""
        self.children.sort(key=lambda child: (child.name is None, child.name or ""))

    def to_dict(self) -> dict[str, Any]:
        """Convert the entity and its subtree into plain JSON-ready data."""
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "kind": self.kind.value if self.kind else None,
            "signature": self.signature_display,
            "summary": self.summary,
            "doc": self.doc_text,
            "locations": [str(location) for location in self.locations],
            "include_as_is": self.include_as_is,
            "children": [child.to_dict() for child in self.children],
        }
