"""Compilation units handed from the loader to the scanner."""

from dataclasses import dataclass
from pathlib import Path

from .objects import SymbolOracle
from .syntax import File


@dataclass(eq=False)
class CompilationUnit:
    """One parsed, type-checked source file.

    ``info`` is shared by all units of a package: it resolves identifiers
    defined in any of its files.
    """

    path: Path
    file: File
    info: SymbolOracle

    @property
    def package_name(self) -> str:
        return self.file.package.name
