"""
Errors raised by the library store and the editor session.
Both are recoverable: the operation that raised them left state untouched.
"""

from __future__ import annotations


class LyricPadError(Exception):
    """Base class for all recoverable store errors."""


class NotFound(LyricPadError):
    def __init__(self, kind: str, ident: str | None = None) -> None:
        self.kind = kind
        self.ident = ident
        if ident is None:
            super().__init__(f"{kind} not found")
        else:
            super().__init__(f"{kind} not found: {ident}")


class InvalidArgument(LyricPadError):
    pass
