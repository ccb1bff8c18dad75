"""Loader that turns a Go package directory into type-checked compilation units."""

from .builder import load_package
from .errors import LoadError, ParseError, TypeCheckError
from .parser import parse_source, parse_file
from .resolver import check_package

__all__ = [
    "load_package",
    "parse_source",
    "parse_file",
    "check_package",
    "LoadError",
    "ParseError",
    "TypeCheckError",
]
