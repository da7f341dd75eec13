"""Exceptions raised while building the documentation hierarchy."""


class HactDocError(Exception):
    """Base class for all hactdoc errors."""


class UnresolvedScopeError(HactDocError, ValueError):
    """Raised when a scope segment does not name an existing entity.

    Attributes:
        segment: The segment that could not be found
        path: The full qualified name or command path being resolved
        signature: Raw signature of the entity being placed, if any
        location: "file:line" of the entity being placed, if known
    """

    def __init__(
        self,
        segment: str,
        path: str,
        signature: str | None = None,
        location: str | None = None,
    ):
        self.segment = segment
        self.path = path
        self.signature = signature
        self.location = location

        message = f"Undeclared identifier '{segment}' in '{path}'"
        if signature:
            message += f" ({' '.join(signature.split())})"
        if location:
            message += f" at {location}"
        super().__init__(message)


class CommandSyntaxError(HactDocError, ValueError):
    """Raised when a docstring command string cannot be parsed."""

    def __init__(self, command_string: str, reason: str):
        self.command_string = command_string
        self.reason = reason
        super().__init__(f"Invalid command string '{command_string}': {reason}")
