from dataclasses import replace

import pytest

from hactdoc.errors import UnresolvedScopeError
from hactdoc.hierarchy import Hierarchy, merge_entities, split_scopes, strip_scopes
from hactdoc.models import Entity, EntityKind, Location
from hactdoc.signatures import classify_signature, parse_identifier, strip_signature


def make_entity(signature, command_string="", file="a.h", line=1, doc="Docs."):
    """Build an unplaced entity the way the parser does."""
    return Entity(
        qualified_name=parse_identifier(signature) or None,
        kind=classify_signature(signature),
        doc_text=doc,
        summary=doc.split("\n")[0],
        command_string=command_string,
        signature_raw=signature,
        signature_display=strip_signature(signature),
        locations=[Location(file, line)],
    )


def assert_tree_invariants(hierarchy):
    for entity in hierarchy.entities():
        parent = entity.parent
        assert parent is not None
        assert sum(1 for child in parent.children if child is entity) == 1

        steps = 0
        node = entity
        while not node.is_root:
            node = node.parent
            steps += 1
        assert steps == entity.depth


class TestSplitScopes:
    """Tests for split_scopes."""

    def test_unqualified(self):
        assert split_scopes("Foo") == ["Foo"]

    def test_qualified(self):
        assert split_scopes("Outer::Inner::method") == ["Outer", "Inner", "method"]

    def test_leading_separator(self):
        assert split_scopes("::Global") == ["", "Global"]

    def test_template_arguments_not_split(self):
        assert split_scopes("Map<std::string, int>::find") == ["Map<std::string, int>", "find"]

    def test_conversion_operator_target_not_split(self):
        assert split_scopes("Foo::operator std::string") == ["Foo", "operator std::string"]
        assert split_scopes("operator std::string") == ["operator std::string"]


class TestPlace:
    """Tests for Hierarchy.place."""

    def test_class_at_root(self):
        hierarchy = Hierarchy()

        placement = hierarchy.place(make_entity("class Foo"))

        assert placement.node.name == "Foo"
        assert placement.node.kind == EntityKind.CLASS
        assert placement.node.parent is hierarchy.root
        assert placement.cursor is None
        assert hierarchy.root.children == [placement.node]

    def test_inherit_parent_moves_cursor(self):
        hierarchy = Hierarchy()

        placement = hierarchy.place(make_entity("class Foo", ">"))

        assert placement.cursor is placement.node

    def test_entities_go_below_cursor(self):
        hierarchy = Hierarchy()
        foo = hierarchy.place(make_entity("class Foo", ">")).cursor

        placement = hierarchy.place(make_entity("void bar()"), foo)

        assert placement.node.parent is foo
        assert placement.node.name == "bar"
        assert placement.cursor is foo

    def test_qualified_name_selects_parent(self):
        hierarchy = Hierarchy()
        bar = hierarchy.place(make_entity("class Bar")).node

        baz = hierarchy.place(make_entity("void Bar::Baz(int x = 5)")).node

        assert baz.parent is bar
        assert baz.name == "Baz"
        assert baz.qualified_name == "Bar::Baz"
        assert baz.signature_display == "void Baz(int x = 5)"
        assert baz.signature_minimal == "void Baz(int x)"

    def test_command_path_selects_parent(self):
        hierarchy = Hierarchy()
        bar = hierarchy.place(make_entity("class Bar")).node

        qux = hierarchy.place(make_entity("void Qux()", "[Bar]")).node

        assert qux.parent is bar
        assert qux.name == "Qux"

    def test_leading_separator_resolves_from_root(self):
        hierarchy = Hierarchy()
        foo = hierarchy.place(make_entity("class Foo", ">")).cursor

        placement = hierarchy.place(make_entity("void ::helper()"), foo)

        assert placement.node.parent is hierarchy.root
        assert placement.node.name == "helper"

    def test_template_scope_arguments_ignored(self):
        hierarchy = Hierarchy()
        container = hierarchy.place(make_entity("template<typename T>\nclass Container")).node

        add = hierarchy.place(
            make_entity("template<typename T>\nvoid Container<T>::add(const T& value)")
        ).node

        assert add.parent is container
        assert add.name == "add"
        assert add.signature_display == "void add(const T& value)"

    def test_unresolved_scope_is_fatal(self):
        hierarchy = Hierarchy()

        with pytest.raises(UnresolvedScopeError) as exc_info:
            hierarchy.place(make_entity("void Missing::f()", file="src/x.cpp", line=7))

        message = str(exc_info.value)
        assert "Missing" in message
        assert "Missing::f" in message
        assert "void Missing::f()" in message
        assert "src/x.cpp:7" in message

    def test_unresolved_command_path_names_the_docstring(self):
        hierarchy = Hierarchy()

        with pytest.raises(UnresolvedScopeError) as exc_info:
            hierarchy.place(make_entity("void Qux()", "[Missing]", file="src/qux.h", line=4))

        assert exc_info.value.segment == "Missing"
        assert exc_info.value.signature == "void Qux()"
        assert exc_info.value.location == "src/qux.h:4"
        assert "src/qux.h:4" in str(exc_info.value)

    def test_functions_are_not_scopes(self):
        hierarchy = Hierarchy()
        hierarchy.place(make_entity("void f()"))

        with pytest.raises(UnresolvedScopeError):
            hierarchy.place(make_entity("void f::g()"))

    def test_include_as_is_entity(self):
        hierarchy = Hierarchy()
        foo = hierarchy.place(make_entity("class Foo", ">")).cursor
        text = Entity(doc_text="Free text.", command_string="~", locations=[Location("a.h", 9)])

        placement = hierarchy.place(text, foo)

        assert placement.node is text
        assert text.include_as_is
        assert text.parent is foo
        assert text.name is None
        assert placement.cursor is foo

    def test_entity_without_signature_is_kept(self):
        hierarchy = Hierarchy()
        text = Entity(doc_text="Section.", locations=[Location("a.h", 1)])

        placement = hierarchy.place(text)

        assert placement.node.parent is hierarchy.root
        assert placement.node.signature_display is None

    def test_function_pointer_typedefs_are_separate(self):
        hierarchy = Hierarchy()

        hierarchy.place(make_entity("typedef void (*Callback)(int)"))
        hierarchy.place(make_entity("typedef void (*Handler)(int, int)"))

        assert hierarchy.top_level_names() == ["Callback", "Handler"]

    def test_overloads_are_separate(self):
        hierarchy = Hierarchy()

        first = hierarchy.place(make_entity("void f(int)")).node
        second = hierarchy.place(make_entity("void f(double)")).node

        assert first is not second
        assert [child.name for child in hierarchy.root.children] == ["f", "f"]


class TestMerge:
    """Tests for merging repeated declarations."""

    def test_same_function_in_two_files(self):
        hierarchy = Hierarchy()

        first = hierarchy.place(make_entity("int Compute(int)", file="a.h", line=3)).node
        second = hierarchy.place(make_entity("int Compute(int)", file="b.cpp", line=5)).node

        assert first is second
        assert len(hierarchy.root.children) == 1
        assert first.locations == [Location("a.h", 3), Location("b.cpp", 5)]

    def test_declaration_and_definition(self):
        hierarchy = Hierarchy()
        foo = hierarchy.place(make_entity("class Foo", ">")).cursor
        declaration = hierarchy.place(
            make_entity("void bar(int x = 1)", file="foo.h", line=4, doc="Short."), foo
        ).node

        definition = hierarchy.place(
            make_entity("void Foo::bar(int x)", file="foo.cpp", line=12, doc="Longer docs.")
        ).node

        assert definition is declaration
        assert foo.children == [declaration]
        assert declaration.qualified_name == "Foo::bar"
        assert declaration.signature_display == "void bar(int x = 1)"
        assert declaration.doc_text == "Longer docs."
        assert declaration.locations == [Location("foo.h", 4), Location("foo.cpp", 12)]

    def test_merged_node_keeps_position(self):
        hierarchy = Hierarchy()
        hierarchy.place(make_entity("class Foo"))
        hierarchy.place(make_entity("class Bar"))

        merged = hierarchy.place(make_entity("class Foo", file="b.h")).node

        assert hierarchy.root.children[0] is merged
        assert [child.name for child in hierarchy.root.children] == ["Foo", "Bar"]

    def test_merged_node_can_become_cursor(self):
        hierarchy = Hierarchy()
        foo = hierarchy.place(make_entity("class Foo")).node

        placement = hierarchy.place(make_entity("class Foo", ">", file="foo.cpp"))

        assert placement.cursor is foo

    def test_merge_with_itself_keeps_fields(self):
        entity = make_entity("void f(int x = 1)")
        entity.signature_minimal = "void f(int x)"
        twin = replace(entity, locations=[Location("b.cpp", 2)])
        before = replace(entity)

        merge_entities(entity, twin)

        assert entity.locations == [Location("a.h", 1), Location("b.cpp", 2)]
        assert entity.signature_display == before.signature_display
        assert entity.signature_minimal == before.signature_minimal
        assert entity.doc_text == before.doc_text
        assert entity.kind == before.kind

    def test_merge_same_object_keeps_locations(self):
        entity = make_entity("void f()")

        merge_entities(entity, entity)

        assert entity.locations == [Location("a.h", 1)]

    def test_missing_values_never_win(self):
        existing = make_entity("class Foo")
        new = make_entity("class Foo")
        new.doc_text = None

        merge_entities(existing, new)

        assert existing.doc_text == "Docs."


class TestStripScopes:
    """Tests for scope stripping."""

    def test_nested_scopes_removed(self):
        hierarchy = Hierarchy()
        outer = hierarchy.place(make_entity("namespace A", ">")).cursor
        inner = hierarchy.place(make_entity("class B", ">"), outer).cursor

        f = hierarchy.place(make_entity("void A::B::f(A::B::Type t)")).node

        assert f.parent is inner
        assert f.name == "f"
        assert f.signature_display == "void f(Type t)"
        assert "::".join(f.scope_chain + [f.name]) == f.qualified_name

    def test_longer_names_are_not_stripped(self):
        hierarchy = Hierarchy()
        bar = hierarchy.place(make_entity("class Bar", ">")).cursor
        entity = make_entity("FooBar::Type make(Bar::Type t)")

        strip_scopes(entity, bar)

        assert entity.name == "make"
        assert entity.signature_display == "FooBar::Type make(Type t)"


def test_invariants_after_mixed_placements():
    hierarchy = Hierarchy()
    ns = hierarchy.place(make_entity("namespace Hact", ">")).cursor
    audio = hierarchy.place(make_entity("class Audio", ">"), ns).cursor
    hierarchy.place(make_entity("void play()"), audio)
    hierarchy.place(make_entity("void stop()"), audio)
    hierarchy.place(make_entity("void Hact::Audio::play()", file="audio.cpp"))
    hierarchy.place(make_entity("enum class Format"), ns)

    assert_tree_invariants(hierarchy)
    assert [child.name for child in audio.children] == ["play", "stop"]
    assert [child.name for child in ns.children] == ["Audio", "Format"]


def test_find_and_top_level_names():
    hierarchy = Hierarchy()
    foo = hierarchy.place(make_entity("class Foo", ">")).cursor
    bar = hierarchy.place(make_entity("class Bar"), foo).node
    hierarchy.place(make_entity("namespace Alpha"))

    assert hierarchy.find("Foo.Bar") is bar
    assert hierarchy.top_level_names() == ["Foo", "Alpha"]

    hierarchy.sort_top_level()

    assert hierarchy.top_level_names() == ["Alpha", "Foo"]


def test_to_dict():
    hierarchy = Hierarchy()
    foo = hierarchy.place(make_entity("class Foo", ">", doc="A foo.")).cursor
    hierarchy.place(make_entity("void bar()"), foo)

    data = hierarchy.to_dict()

    assert data["entities"][0]["name"] == "Foo"
    assert data["entities"][0]["kind"] == "class"
    assert data["entities"][0]["summary"] == "A foo."
    assert data["entities"][0]["locations"] == ["a.h:1"]
    assert data["entities"][0]["children"][0]["signature"] == "void bar()"
