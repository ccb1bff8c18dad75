"""Syntax tree for the declaration level of a Go source file.

Only the parts needed to interpret constant declarations are modelled in
detail. Function bodies, variable initializers and composite types are kept
as opaque markers so that a file can still be walked declaration by
declaration.

All nodes compare by identity: two ``Ident`` nodes with the same spelling
are different definitions and key different symbol table entries.
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union


class DeclKind(enum.Enum):
    """Syntactic kind of a top-level declaration."""

    CONST = "const"
    VAR = "var"
    TYPE = "type"
    IMPORT = "import"
    FUNC = "func"


class LitKind(enum.Enum):
    INT = "INT"
    FLOAT = "FLOAT"
    IMAG = "IMAG"
    CHAR = "CHAR"
    STRING = "STRING"


@dataclass(frozen=True)
class Position:
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Ident:
    name: str
    pos: Optional[Position] = None

    def __repr__(self) -> str:
        return f"Ident({self.name!r})"


@dataclass(eq=False)
class BasicLit:
    kind: LitKind
    value: str  # Literal text exactly as written in the source.
    pos: Optional[Position] = None


@dataclass(eq=False)
class ParenExpr:
    x: "Expr"
    pos: Optional[Position] = None


@dataclass(eq=False)
class SelectorExpr:
    """A qualified reference such as ``pkg.Name`` or ``x.field``."""

    x: "Expr"
    sel: Ident
    pos: Optional[Position] = None


@dataclass(eq=False)
class CallExpr:
    fun: "Expr"
    args: List["Expr"] = field(default_factory=list)
    pos: Optional[Position] = None


@dataclass(eq=False)
class IndexExpr:
    x: "Expr"
    index: "Expr"
    pos: Optional[Position] = None


@dataclass(eq=False)
class UnaryExpr:
    op: str
    x: "Expr"
    pos: Optional[Position] = None


@dataclass(eq=False)
class BinaryExpr:
    op: str
    x: "Expr"
    y: "Expr"
    pos: Optional[Position] = None


@dataclass(eq=False)
class CompositeType:
    """A type expression other than a (qualified) name.

    ``description`` names the kind of type, e.g. ``struct``, ``pointer``,
    ``slice`` or ``map``. Non-constant operands such as composite literals
    are kept the same way.
    """

    description: str
    pos: Optional[Position] = None


Expr = Union[
    Ident, BasicLit, ParenExpr, SelectorExpr, CallExpr, IndexExpr,
    UnaryExpr, BinaryExpr, CompositeType,
]


def node_pos(node: Expr) -> Optional[Position]:
    return getattr(node, "pos", None)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ImportSpec:
    path: str
    name: Optional[Ident] = None
    pos: Optional[Position] = None


@dataclass(eq=False)
class ValueSpec:
    """One line of a ``const`` or ``var`` declaration.

    ``names`` is never empty. ``type`` and ``values`` are both optional; a
    const line with neither repeats the previous line's type and values.
    """

    names: List[Ident]
    type: Optional[Expr] = None
    values: List[Expr] = field(default_factory=list)
    pos: Optional[Position] = None


@dataclass(eq=False)
class TypeSpec:
    name: Ident
    type: Expr
    alias: bool = False
    type_params: bool = False
    pos: Optional[Position] = None


Spec = Union[ImportSpec, ValueSpec, TypeSpec]


@dataclass(eq=False)
class GenDecl:
    """A ``const``, ``var``, ``type`` or ``import`` declaration.

    A parenthesized group holds any number of specs; a standalone
    declaration holds exactly one.
    """

    tok: DeclKind
    specs: List[Spec] = field(default_factory=list)
    grouped: bool = False
    pos: Optional[Position] = None


@dataclass(eq=False)
class FuncDecl:
    name: Ident
    method: bool = False
    pos: Optional[Position] = None

    tok = DeclKind.FUNC


Decl = Union[GenDecl, FuncDecl]


@dataclass(eq=False)
class File:
    """A parsed source file: its package clause and top-level declarations."""

    filename: str
    package: Ident
    decls: List[Decl] = field(default_factory=list)

    @property
    def imports(self) -> List[ImportSpec]:
        specs: List[ImportSpec] = []
        for decl in self.decls:
            if isinstance(decl, GenDecl) and decl.tok is DeclKind.IMPORT:
                specs.extend(decl.specs)  # type: ignore[arg-type]
        return specs

    def __repr__(self) -> str:
        return f"File({self.filename!r}, package={self.package.name!r}, decls={len(self.decls)})"
