"""Extraction of the named constants declared for a type.

This scanner is based on the constant walk of the ``stringer`` tool: it
looks at each ``const`` declaration, works out which type every line of the
declaration has, and asks the type checker for the values of the lines that
have the requested type.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from loader.builder import load_package
from model.objects import UINT64_MASK, Basic, BasicInfo, Const, SymbolOracle, ValueKind
from model.records import ConstantRecord
from model.syntax import CallExpr, DeclKind, GenDecl, Ident, ValueSpec
from model.unit import CompilationUnit
from .errors import InternalInconsistencyError, NotFoundError


BLANK = "_"


class Package:
    """All the information related to a loaded package."""

    def __init__(self, name: str, units: Sequence[CompilationUnit]):
        self.name = name
        self.units = list(units)

    def values_of_type(self, type_name: str) -> List[str]:
        """
        Return the names of the constants declared with a type.

        Args:
            type_name: Name of the type, as spelled in the declarations.

        Returns:
            Constant names in file, declaration and name order.

        Raises:
            NotFoundError: If no constant has this type.
            InternalInconsistencyError: If a matching constant has no integer
                value in the symbol information.
        """
        return [record.name for record in self.constants_of_type(type_name)]

    def constants_of_type(self, type_name: str) -> List[ConstantRecord]:
        """Like ``values_of_type`` but with each constant's value."""
        if not type_name:
            raise ValueError("type name must not be empty")
        records: List[ConstantRecord] = []
        for unit in self.units:
            records.extend(scan_unit(unit, type_name))
        if not records:
            raise NotFoundError(type_name)
        return records

    def __repr__(self) -> str:
        return f"Package({self.name!r}, units={len(self.units)})"


def parse_package(
    directory: Union[str, Path],
    include_tests: bool = False,
    build_tags: Optional[Iterable[str]] = None,
) -> Package:
    """Load the package in the given directory and return it."""
    name, units = load_package(directory, include_tests=include_tests, build_tags=build_tags)
    return Package(name, units)


def scan_unit(unit: CompilationUnit, type_name: str) -> List[ConstantRecord]:
    """Collect the constants of one compilation unit that have the type."""
    records: List[ConstantRecord] = []
    for decl in unit.file.decls:
        # We only care about const declarations.
        if isinstance(decl, GenDecl) and decl.tok is DeclKind.CONST:
            records.extend(scan_const_decl(decl, type_name, unit.info))
    return records


def _conversion_type(spec: ValueSpec) -> str:
    """Return the callee of ``X = T(...)`` when it is a bare identifier.

    A qualified call is a selector, not an identifier, so it never matches.
    Only unusual code has a plain function call that looks like a
    conversion here, and the type checker rejects it anyway.
    """
    first = spec.values[0]
    if isinstance(first, CallExpr) and isinstance(first.fun, Ident):
        return first.fun.name
    return ""


def scan_const_decl(decl: GenDecl, type_name: str, info: SymbolOracle) -> List[ConstantRecord]:
    """
    Interpret one const declaration.

    The type of a line carries down to the following lines that have
    neither a type nor values, exactly as Go repeats the previous line.

    Args:
        decl: A ``const`` declaration, grouped or standalone.
        type_name: The requested type name.
        info: Symbol information for the package.

    Returns:
        Records for the matching names, in source order.
    """
    records: List[ConstantRecord] = []
    typ = ""
    for spec in decl.specs:
        if spec.type is None and spec.values:
            # "X = 1". With no type but a value the remembered type no
            # longer applies, unless this is a simple type conversion.
            typ = _conversion_type(spec)
        elif spec.type is not None:
            # "X T". Only a plain identifier names the type we look for.
            if isinstance(spec.type, Ident):
                typ = spec.type.name
            else:
                continue
        if typ != type_name:
            continue
        for name in spec.names:
            if name.name == BLANK:
                continue
            records.append(resolve_constant(name, typ, info))
    return records


def resolve_constant(name: Ident, type_name: str, info: SymbolOracle) -> ConstantRecord:
    """Look up a declared constant and extract its 64-bit value."""
    obj = info.lookup(name)
    if obj is None:
        raise InternalInconsistencyError(name.name, f"no value for constant {name.name}")
    underlying = obj.type.underlying()
    if not isinstance(underlying, Basic) or not underlying.info & BasicInfo.IS_INTEGER:
        raise InternalInconsistencyError(name.name, f"can't handle non-integer constant type {type_name}")
    if not isinstance(obj, Const) or obj.val.kind is not ValueKind.INT:
        raise InternalInconsistencyError(name.name, f"can't happen: constant is not an integer {name.name}")

    value = obj.val
    i64, is_int = value.int64_val()
    u64, is_uint = value.uint64_val()
    if not is_int and not is_uint:
        raise InternalInconsistencyError(
            name.name, f"internal error: value of {name.name} is not an integer: {value}"
        )
    bits = i64 & UINT64_MASK if is_int else u64
    return ConstantRecord(
        name=name.name,
        value=bits,
        signed=not underlying.info & BasicInfo.IS_UNSIGNED,
        literal=str(value),
    )
