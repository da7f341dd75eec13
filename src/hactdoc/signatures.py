"""Heuristic C++ signature handling.

There is no lexer here: signatures are scanned character by character,
tracking angle-bracket nesting (templates), bracket nesting (parameter lists
and initializers), string literals and ``operator`` tokens, which are the
constructs that make naive splitting go wrong.
"""

import re

from hactdoc.docstrings import is_docstring_start
from hactdoc.models import EntityKind

_TEMPLATE_KEYWORD = re.compile(r"template\b\s*")
_ENUM_SCOPED = re.compile(r"^enum\s+(class|struct)\b")
_LEADING_KEYWORD = re.compile(r"\s*\b(?:enum|class|using|namespace|struct|union|typedef)\s+")
_KEYWORD_LED = re.compile(r"(?:namespace|class|struct|union|enum_class|enum_struct|enum|using)\b")
# "(*Callback)" or "(&Ref)" right where a parameter list would start
_POINTER_DECLARATOR = re.compile(r"\(\s*[*&]+\s*([\w:~]+)\s*\)")

# Checked in order; "enum class" must win over plain "enum"
_KIND_PATTERNS: list[tuple[re.Pattern, EntityKind]] = [
    (re.compile(r"\s*namespace\b"), EntityKind.NAMESPACE),
    (re.compile(r"\s*class\b"), EntityKind.CLASS),
    (re.compile(r"\s*enum\s+(?:class|struct)\b"), EntityKind.ENUM_CLASS),
    (re.compile(r"\s*enum\b"), EntityKind.ENUM),
    (re.compile(r"\s*(?:struct|union)\b"), EntityKind.STRUCT),
    (re.compile(r"\s*typedef\b"), EntityKind.TYPEDEF),
    (re.compile(r"\s*using\b"), EntityKind.USING),
]

_OPERATOR_SYMBOLS = set("+-*/%^&|~!=<>,")
_OPERATOR = "operator"


def _is_identifier_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def _operator_at(text: str, index: int) -> bool:
    """Check whether the keyword ``operator`` starts at ``index``."""
    if not text.startswith(_OPERATOR, index):
        return False
    if index > 0 and _is_identifier_char(text[index - 1]):
        return False
    end = index + len(_OPERATOR)
    return end >= len(text) or not _is_identifier_char(text[end])


def skip_operator(text: str, index: int) -> int:
    """Skip an ``operator`` token starting at ``index``.

    Symbolic operators (``operator<<``, ``operator()``, ``operator[]``) are
    skipped together with their symbol so their brackets are never mistaken
    for templates or parameter lists. For conversion operators only the
    keyword itself is skipped.

    Returns:
        Index just past the operator token, or ``index`` if none starts there
    """
    if not _operator_at(text, index):
        return index

    keyword_end = index + len(_OPERATOR)
    end = keyword_end
    while end < len(text) and text[end] in " \t":
        end += 1

    if text.startswith("()", end) or text.startswith("[]", end):
        return end + 2

    symbol_start = end
    while end < len(text) and text[end] in _OPERATOR_SYMBOLS:
        end += 1

    if end > symbol_start:
        return end
    return keyword_end


def find_operator_keyword(text: str) -> int:
    """Return the index of the first ``operator`` keyword in text, or -1."""
    index = text.find(_OPERATOR)
    while index >= 0:
        if _operator_at(text, index):
            return index
        index = text.find(_OPERATOR, index + 1)
    return -1


def _find_top_level(text: str, targets: str) -> int:
    """Find the first target character outside angle groups and operators."""
    depth = 0
    index = 0
    while index < len(text):
        end = skip_operator(text, index)
        if end != index:
            index = end
            continue

        char = text[index]
        if char == "<":
            depth += 1
        elif char == ">":
            depth = max(depth - 1, 0)
        elif depth == 0 and char in targets:
            return index
        index += 1
    return -1


def _match_angle(text: str, start: int) -> int:
    """Return the index of the ``>`` closing the ``<`` at ``start``, or -1.

    Angle brackets inside parentheses are comparisons, not nesting.
    """
    depth = 0
    parens = 0
    for index in range(start, len(text)):
        char = text[index]
        if char in "([":
            parens += 1
        elif char in ")]":
            parens -= 1
        elif parens == 0:
            if char == "<":
                depth += 1
            elif char == ">":
                depth -= 1
                if depth == 0:
                    return index
    return -1


def split_words(text: str) -> list[str]:
    """Split text on whitespace, keeping template argument lists whole.

    Examples:
        >>> split_words("std::map<int, Foo> Bar::get")
        ['std::map<int, Foo>', 'Bar::get']
        >>> split_words("bool operator< ")
        ['bool', 'operator<']
    """
    words = []
    depth = 0
    start = None
    index = 0
    while index < len(text):
        end = skip_operator(text, index)
        if end != index:
            if start is None:
                start = index
            index = end
            continue

        char = text[index]
        if depth <= 0 and char.isspace():
            if start is not None:
                words.append(text[start:index])
                start = None
        else:
            if start is None:
                start = index
            if char == "<":
                depth += 1
            elif char == ">":
                depth -= 1
        index += 1

    if start is not None:
        words.append(text[start:])
    return words


def strip_template(signature: str) -> tuple[str, str | None]:
    """Remove a leading ``template<...>`` preamble.

    Args:
        signature: Raw signature text

    Returns:
        Tuple of (signature without the preamble, the stripped parameter list
        or None if there was no preamble). Nested preambles (member templates
        of class templates) are all removed; their parameter lists are joined
        with a space.
    """
    remaining = signature.lstrip()
    parameters = []

    while True:
        match = _TEMPLATE_KEYWORD.match(remaining)
        if not match:
            break

        start = match.end()
        if start >= len(remaining) or remaining[start] != "<":
            # Explicit instantiation: "template class Foo<int>"
            remaining = remaining[start:]
            break

        end = _match_angle(remaining, start)
        if end < 0:
            break

        parameters.append(remaining[start:end + 1])
        remaining = remaining[end + 1:].lstrip()

    if not parameters and remaining == signature.lstrip():
        return signature, None
    return remaining, " ".join(parameters) if parameters else None


def classify_signature(signature: str) -> EntityKind:
    """Determine the entity kind from a raw signature.

    Args:
        signature: Raw signature text

    Returns:
        The matching EntityKind; anything not led by a declaration keyword
        is a function
    """
    stripped, _ = strip_template(signature)
    for pattern, kind in _KIND_PATTERNS:
        if pattern.match(stripped):
            return kind
    return EntityKind.FUNCTION


def _is_conversion_operator(word: str) -> bool:
    if not word.endswith(_OPERATOR):
        return False
    prefix = word[:-len(_OPERATOR)]
    return not prefix or not _is_identifier_char(prefix[-1])


def parse_identifier(signature: str) -> str:
    """Extract the qualified identifier from a raw signature.

    The text is cut at the parameter list. Declarations led by a keyword
    (``class Foo``, ``enum class Color``, ``using Alias = ...``) take the word
    after the keyword. Everything else (functions, variables, typedefs) takes
    the last word, which skips return types and specifiers. Function pointer
    declarators (``typedef void (*Callback)(int)``) take the name inside the
    parentheses. A single word (constructors and destructors) is the
    identifier itself. One leading ``*`` or ``&`` is stripped.

    Conversion operators keep their target type: ``operator bool`` and
    ``Foo::operator std::string`` are identifiers.

    Args:
        signature: Raw signature text

    Returns:
        The identifier, still qualified with any scopes written in the source
    """
    text, _ = strip_template(signature.lstrip())
    text = _ENUM_SCOPED.sub(r"enum_\1", text.strip(), count=1)
    keyword_led = _KEYWORD_LED.match(text) is not None
    if keyword_led:
        # "using Callback = void (*)(int)" names the alias before the "="
        assignment = _find_top_level(text, "=")
        if assignment >= 0:
            text = text[:assignment]

    paren = _find_top_level(text, "(")
    declarator = _POINTER_DECLARATOR.match(text, paren) if paren >= 0 else None
    if declarator:
        # Function pointers: "typedef void (*Callback)(int)"
        text = declarator.group(1)
    elif paren >= 0:
        text = text[:paren]
    elif not keyword_led:
        # Variables: "int counter = 5"
        assignment = _find_top_level(text, "=")
        if assignment >= 0:
            text = text[:assignment]

    words = split_words(text)
    if not words:
        return ""

    conversion = next((n for n, word in enumerate(words) if _is_conversion_operator(word)), None)
    if len(words) == 1:
        # Constructors and destructors; a lone keyword is an anonymous scope
        identifier = "" if keyword_led and paren < 0 else words[0]
    elif conversion is not None:
        identifier = " ".join(words[conversion:])
    elif paren < 0 and keyword_led:
        identifier = words[1]
    else:
        identifier = words[-1]

    if identifier[:1] in ("*", "&"):
        identifier = identifier[1:]
    return identifier


def strip_signature(signature: str) -> str:
    """Produce the display signature.

    Removes the template preamble and leading declaration keywords
    (``class``, ``enum class``, ``typedef``, ...), then trailing whitespace.
    """
    text, _ = strip_template(signature)
    while True:
        match = _LEADING_KEYWORD.match(text)
        if not match:
            break
        text = text[match.end():]
    return text.rstrip()


def minimize_signature(signature: str) -> str:
    """Canonicalize a signature for duplicate detection.

    Whitespace runs (line breaks included) become single spaces and default
    argument values in the outermost bracket level are removed. String and
    character literals are skipped while scanning, and commas inside the
    template argument lists of a default value do not end it.

    Examples:
        >>> minimize_signature("void Bar::Baz(int x = 5,\\n    int y = compute(1,2));")
        'void Bar::Baz(int x, int y);'
    """
    text = " ".join(signature.split())

    result: list[str] = []
    depth = 0
    quote = None
    escaped = False
    removing = False
    angle = 0  # Template nesting inside the default being removed

    for index, char in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            if not removing:
                result.append(char)
            continue

        if char in "\"'":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            if depth == 1 and removing:
                removing = False
                angle = 0
            depth -= 1
        elif removing and depth == 1 and char == "<":
            angle += 1
        elif removing and depth == 1 and char == ">" and angle:
            angle -= 1
        elif char == "," and depth == 1 and removing and not angle:
            removing = False
        elif char == "=" and depth == 1 and not removing:
            previous = text[index - 1] if index > 0 else ""
            following = text[index + 1] if index + 1 < len(text) else ""
            if previous not in "=!<>" and following != "=":
                while result and result[-1] == " ":
                    result.pop()
                removing = True
                continue

        if not removing:
            result.append(char)

    return "".join(result)


class _TerminatorScanner:
    """Finds the end of a declaration across lines.

    Parenthesis depth and string state carry over between lines, so
    terminators inside parameter lists or literals are ignored. The ":" of a
    conditional expression (``a ? b : c``) does not end a declaration.
    """

    def __init__(self):
        self.depth = 0
        self.quote = None
        self.ternaries = 0  # Open "?" whose ":" is still to come

    def find(self, line: str) -> int:
        """Return the index of the terminator in ``line``, or -1."""
        escaped = False
        for index, char in enumerate(line):
            if self.quote:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == self.quote:
                    self.quote = None
                continue

            if char in "\"'":
                self.quote = char
            elif char == "/" and line.startswith("//", index):
                break
            elif char in "([":
                self.depth += 1
            elif char in ")]":
                self.depth = max(self.depth - 1, 0)
            elif self.depth == 0:
                if char in ";{":
                    return index
                if char == "?":
                    self.ternaries += 1
                elif char == ":" and not self._is_scope_operator(line, index):
                    if not self.ternaries:
                        return index
                    self.ternaries -= 1

        # Character literals never span lines
        if self.quote == "'":
            self.quote = None
        return -1

    @staticmethod
    def _is_scope_operator(line: str, index: int) -> bool:
        before = line[index - 1] if index > 0 else ""
        after = line[index + 1] if index + 1 < len(line) else ""
        return before == ":" or after == ":"


def _remove_indent(line: str, indent: int) -> str:
    """Remove up to ``indent`` leading whitespace characters."""
    removable = len(line) - len(line.lstrip())
    return line[min(indent, removable):]


def collect_signature(lines: list[str], index: int) -> tuple[int, str | None]:
    """Collect the declaration that follows a docstring.

    Lines are consumed until one holds a terminator: ``;``, ``{`` or a lone
    ``:`` (constructor initializer lists, base class lists). That line is cut
    before the terminator. The indentation of the first line is removed from
    every line.

    Args:
        lines: Lines of the file
        index: 0-based index of the line right after the docstring

    Returns:
        Tuple of (index of the first unconsumed line, raw signature). The
        signature is None when the next line is blank, missing or another
        docstring; nothing is consumed in that case.
    """
    if index >= len(lines):
        return index, None

    first = lines[index]
    if not first.strip() or is_docstring_start(first):
        return index, None

    indent = len(first) - len(first.lstrip())
    scanner = _TerminatorScanner()
    parts = []

    while index < len(lines):
        line = _remove_indent(lines[index], indent)
        index += 1

        end = scanner.find(line)
        if end < 0:
            parts.append(line)
        else:
            parts.append(line[:end].rstrip())
            break

    return index, "\n".join(parts).rstrip()
