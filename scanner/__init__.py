"""Scanner that lists the named constants of a type in a Go package."""

from .errors import ScanError, NotFoundError, InternalInconsistencyError
from .values import Package, parse_package, scan_unit, scan_const_decl

__all__ = [
    "Package",
    "parse_package",
    "scan_unit",
    "scan_const_decl",
    "ScanError",
    "NotFoundError",
    "InternalInconsistencyError",
]
