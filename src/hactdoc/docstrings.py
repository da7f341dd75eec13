"""Detection, collection and normalization of documentation comments.

A documentation block starts with ``//!`` (line form) or ``/*!`` (block
form). Placement commands may follow the bang directly, e.g.
``//![Foo]> Text`` or ``/*!~``. Only the token glued to the bang is read, so
``//! [Bar] text`` (with a space) is prose, not a command.
"""

import re

_DOCSTRING_START = re.compile(r"\s*(?://!|/\*!)")
_LINE_COMMENT = re.compile(r"\s*//")
_COMMAND_TOKEN = re.compile(r"(?P<marker>//!|/\*!)(?P<token>[^\s*]*)")
_COMMAND_GROUP = re.compile(r"\[[^\]]*\]?")
_COMMAND_RUN = re.compile(r"[<>^~]+")

# "//!", "//", "/*!", "/*" or a continuation "*", then one optional space
_LINE_PREFIX = re.compile(r"^\s*(?://!?|/\*!?|\*(?!/))[ \t]?")
_BLOCK_END = re.compile(r"\s*\*/\s*$")


def is_docstring_start(line: str) -> bool:
    """Check whether a line begins a documentation block.

    Args:
        line: A single source line

    Returns:
        True if the line starts (after whitespace) with ``//!`` or ``/*!``
    """
    return _DOCSTRING_START.match(line) is not None


def extract_commands(line: str) -> tuple[str, str]:
    """Split the command token off the first line of a docstring.

    The command token is the text directly after the bang, up to the first
    whitespace or ``*``. The command string is its first bracketed group
    followed by its first run of ``< > ^ ~`` characters. An unterminated
    bracket is kept as is so the command parser can reject it.

    Args:
        line: First line of a documentation block

    Returns:
        Tuple of (command string, line with the command token removed)

    Examples:
        >>> extract_commands("//![Foo.Bar]> Text")
        ('[Foo.Bar]>', '//! Text')
        >>> extract_commands("//! Does a thing.")
        ('', '//! Does a thing.')
    """
    match = _COMMAND_TOKEN.search(line)
    if match is None or not match.group("token"):
        return "", line

    token = match.group("token")
    group = _COMMAND_GROUP.search(token)
    remainder = token
    command_string = ""
    if group:
        command_string = group.group(0)
        remainder = token[:group.start()] + token[group.end():]

    run = _COMMAND_RUN.search(remainder)
    if run:
        command_string += run.group(0)

    stripped_line = line[:match.start("token")] + line[match.end("token"):]
    return command_string, stripped_line


def collect_docstring(lines: list[str], index: int) -> tuple[int, str, str]:
    """Collect a documentation block starting at ``lines[index]``.

    Block comments are consumed up to and including the line holding ``*/``.
    Line comments are consumed while lines keep starting with ``//``. The
    command token on the first line is removed from ``lines`` in place, so
    the block is never detected twice.

    Args:
        lines: Lines of the file (modified in place)
        index: 0-based index of the first docstring line

    Returns:
        Tuple of (index of the first unconsumed line, raw docstring text,
        command string)
    """
    command_string, lines[index] = extract_commands(lines[index])
    first_line = lines[index]
    marker = _DOCSTRING_START.match(first_line)
    is_block = marker is not None and first_line[:marker.end()].endswith("/*!")

    collected = []
    if is_block:
        # The closing marker may already sit on the opening line
        if "*/" in first_line[marker.end():]:
            return index + 1, first_line.rstrip("\n"), command_string

        while index < len(lines):
            line = lines[index]
            collected.append(line)
            index += 1
            if "*/" in line:
                break
    else:
        while index < len(lines) and _LINE_COMMENT.match(lines[index]):
            collected.append(lines[index])
            index += 1

    doc_raw = "\n".join(collected).rstrip("\n")
    return index, doc_raw, command_string


def strip_docstring(doc_raw: str) -> str:
    """Reduce a raw documentation block to plain text.

    Comment markers (``//!``, ``//``, ``/*!``, ``/*``, a leading ``*`` and a
    trailing ``*/``) are removed from every line along with one space after
    the marker. Leading and trailing blank lines of the block are dropped.
    """
    stripped = []
    for line in doc_raw.split("\n"):
        line = _LINE_PREFIX.sub("", line, count=1)
        line = _BLOCK_END.sub("", line)
        stripped.append(line.rstrip())

    return "\n".join(stripped).strip()


def summarize(doc_text: str) -> str:
    """Return the first line of a stripped docstring."""
    return doc_text.split("\n", 1)[0]
