"""Exceptions raised while reading column type declarations."""

from __future__ import annotations


class TypeDeclarationError(ValueError):
    """Base class for all failures to read a type declaration.

    Carries the declaration text and the offending span (when known) so
    callers can point at the exact part of the input that was rejected.
    """

    def __init__(
        self,
        message: str,
        text: str | None = None,
        start: int | None = None,
        end: int | None = None,
    ) -> None:
        self.message = message
        self.text = text
        self.start = start
        self.end = end
        if start is not None:
            message = f"{message} at position {start}"
        super().__init__(message)

    @property
    def span(self) -> str | None:
        """Return the rejected part of the input, if known."""
        if self.text is None or self.start is None:
            return None
        end = self.end if self.end is not None else len(self.text)
        return self.text[self.start:end]


class TypeSyntaxError(TypeDeclarationError):
    """Malformed input: unterminated quote or paren, unexpected token."""


class UnknownTypeError(TypeDeclarationError):
    """A type keyword that is not in the keyword registry."""


class TypeValidationError(TypeDeclarationError):
    """Well-formed input describing an invalid type (bad enum, wrong arity)."""
