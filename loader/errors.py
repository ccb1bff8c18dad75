"""Errors raised while turning a directory into a type-checked package."""

from typing import Optional

from model.syntax import Position


class LoadError(Exception):
    """The directory could not be loaded as exactly one Go package."""


class ParseError(LoadError):
    """A source file is not syntactically valid."""

    def __init__(self, pos: Position, message: str):
        super().__init__(f"{pos}: {message}")
        self.pos = pos
        self.message = message


class TypeCheckError:
    """A type error in an otherwise parseable package.

    Type errors do not abort loading; they are collected and the affected
    constants are left with an unknown value.
    """

    def __init__(self, message: str, pos: Optional[Position] = None):
        self.message = message
        self.pos = pos

    def __str__(self) -> str:
        if self.pos is None:
            return self.message
        return f"{self.pos}: {self.message}"

    def __repr__(self) -> str:
        return f"TypeCheckError({str(self)!r})"
