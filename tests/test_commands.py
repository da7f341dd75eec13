import pytest

from hactdoc.commands import Commands, find_by_path, parse_commands, requests_include_as_is
from hactdoc.errors import CommandSyntaxError, UnresolvedScopeError
from hactdoc.models import Entity, EntityKind


@pytest.fixture
def tree():
    """Root -> Foo -> Bar, plus a function f() at the root."""
    root = Entity.create_root()
    foo = Entity(name="Foo", kind=EntityKind.CLASS)
    bar = Entity(name="Bar", kind=EntityKind.CLASS)
    function = Entity(name="f", kind=EntityKind.FUNCTION, signature_minimal="void f()")
    root.add_child(foo)
    root.add_child(function)
    foo.add_child(bar)
    return root, foo, bar


def test_empty_command_string_keeps_cursor(tree):
    root, foo, _ = tree

    commands = parse_commands("", root, foo)

    assert commands == Commands(parent=foo, include_as_is=False, inherit_parent=False)


def test_inherit_parent(tree):
    root, _, _ = tree

    commands = parse_commands(">", root, None)

    assert commands.inherit_parent
    assert commands.parent is None


def test_reset_to_root(tree):
    root, _, bar = tree

    assert parse_commands("^", root, bar).parent is None


def test_one_level_up(tree):
    root, foo, bar = tree

    assert parse_commands("<", root, bar).parent is foo


def test_one_level_up_to_root(tree):
    root, foo, _ = tree

    assert parse_commands("<", root, foo).parent is None


def test_one_level_up_from_root_stays_at_root(tree):
    root, _, _ = tree

    assert parse_commands("<", root, None).parent is None


def test_two_levels_up(tree):
    root, _, bar = tree

    assert parse_commands("<<", root, bar).parent is None


def test_bracket_path_from_root(tree):
    root, foo, bar = tree

    assert parse_commands("[Foo]", root, None).parent is foo
    assert parse_commands("[Foo.Bar]", root, None).parent is bar


def test_bracket_path_relative_to_cursor(tree):
    root, foo, bar = tree

    assert parse_commands("[Bar]", root, foo).parent is bar


def test_bracket_path_after_reset(tree):
    root, foo, bar = tree

    assert parse_commands("^[Foo]", root, bar).parent is foo


def test_bracket_path_with_inherit(tree):
    root, foo, _ = tree

    commands = parse_commands("[Foo]>", root, None)

    assert commands.parent is foo
    assert commands.inherit_parent


def test_include_as_is(tree):
    root, foo, _ = tree

    commands = parse_commands("~", root, foo)

    assert commands.include_as_is
    assert commands.parent is foo
    assert not commands.inherit_parent


def test_include_as_is_restores_cursor(tree):
    root, _, _ = tree

    commands = parse_commands("[Foo]~", root, None)

    assert commands.include_as_is
    assert commands.parent is None


def test_include_as_is_clears_inherit(tree):
    root, _, _ = tree

    assert not parse_commands(">~", root, None).inherit_parent


def test_include_as_is_stops_processing(tree):
    root, _, _ = tree

    commands = parse_commands("~>[Missing]", root, None)

    assert commands.include_as_is
    assert not commands.inherit_parent


def test_unknown_characters_ignored(tree):
    root, foo, _ = tree

    assert parse_commands("x", root, foo) == Commands(parent=foo)


def test_missing_path_segment(tree):
    root, _, _ = tree

    with pytest.raises(UnresolvedScopeError) as exc_info:
        parse_commands("[Foo.Missing]", root, None)

    assert exc_info.value.segment == "Missing"
    assert exc_info.value.path == "Foo.Missing"
    assert "Missing" in str(exc_info.value)


def test_functions_are_not_scopes(tree):
    root, _, _ = tree

    with pytest.raises(UnresolvedScopeError):
        parse_commands("[f]", root, None)


def test_unterminated_bracket_fails(tree):
    root, _, _ = tree

    with pytest.raises(CommandSyntaxError) as exc_info:
        parse_commands("[Foo>", root, None)

    assert "[Foo>" in str(exc_info.value)


@pytest.mark.parametrize("command_string", ["[]", "[Foo..Bar]", "[.Foo]"])
def test_empty_path_segment_fails(tree, command_string):
    root, _, _ = tree

    with pytest.raises(CommandSyntaxError):
        parse_commands(command_string, root, None)


def test_find_by_path(tree):
    root, _, bar = tree

    assert find_by_path("Foo.Bar", root) is bar


@pytest.mark.parametrize(
    "command_string,expected",
    [
        ("~", True),
        ("[Foo]~", True),
        (">~", True),
        ("[a~b]", False),
        (">", False),
        ("", False),
    ],
)
def test_requests_include_as_is(command_string, expected):
    assert requests_include_as_is(command_string) is expected
