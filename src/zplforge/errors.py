"""
Error Types for ZPL Compilation and Rendering.

Every error raised by the package derives from ZplError so callers can
catch the whole family with a single except clause.
"""


class ZplError(Exception):
    """Base exception for all ZPL errors."""

    pass


class ParseError(ZplError):
    """Malformed command, missing mandatory parameter, or leftover input."""

    def __init__(self, line: int, message: str):
        self.line = line
        self.message = message
        super().__init__(f"Parse error at line {line}: {message}")


class EmptyInputError(ZplError):
    """Input produced no commands after parsing."""

    def __init__(self, message: str = "Empty or invalid ZPL input"):
        super().__init__(message)


class BuilderError(ZplError):
    """Structural inconsistency while building instructions."""

    pass


class SecurityLimitExceeded(ZplError):
    """A decoded payload would exceed the configured size cap."""

    pass


class ImageError(ZplError):
    """Image data could not be decoded or is out of bounds."""

    pass


class FontError(ZplError):
    """Font data could not be loaded or registered."""

    pass


class BackendError(ZplError):
    """Rendering backend failed to draw or serialize an instruction."""

    pass
