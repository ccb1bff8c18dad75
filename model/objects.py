"""Type-checked symbol information for a loaded package.

These classes are what the resolver produces and what the constant scanner
consumes: a table from every defining identifier to the object it declares,
each object carrying its type and, for constants, its exact value.
"""

import enum
import decimal
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple, Union

from .syntax import Ident, Position


MAX_INT64 = (1 << 63) - 1
MIN_INT64 = -(1 << 63)
MAX_UINT64 = (1 << 64) - 1
UINT64_MASK = MAX_UINT64


class BasicInfo(enum.IntFlag):
    """Properties of a basic type."""

    NONE = 0
    IS_BOOLEAN = 1
    IS_INTEGER = 2
    IS_UNSIGNED = 4
    IS_FLOAT = 8
    IS_COMPLEX = 16
    IS_STRING = 32
    IS_UNTYPED = 64

    IS_NUMERIC = IS_INTEGER | IS_FLOAT | IS_COMPLEX
    IS_CONST_TYPE = IS_BOOLEAN | IS_NUMERIC | IS_STRING


class BasicKind(enum.Enum):
    INVALID = "invalid type"

    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINTPTR = "uintptr"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"
    STRING = "string"

    UNTYPED_BOOL = "untyped bool"
    UNTYPED_INT = "untyped int"
    UNTYPED_RUNE = "untyped rune"
    UNTYPED_FLOAT = "untyped float"
    UNTYPED_STRING = "untyped string"


class Basic:
    """A predeclared type, an untyped constant kind, or the invalid type."""

    def __init__(self, kind: BasicKind, info: BasicInfo, bits: int = 0, name: Optional[str] = None):
        self.kind = kind
        self.info = info
        self.bits = bits
        self.name = name or kind.value

    def underlying(self) -> "Basic":
        return self

    def is_untyped(self) -> bool:
        return bool(self.info & BasicInfo.IS_UNTYPED)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Basic({self.name})"


class Named:
    """A defined type such as ``type Color int``."""

    def __init__(self, name: str, underlying_type: Optional["Type"] = None):
        self.name = name
        self._underlying = underlying_type

    def set_underlying(self, typ: "Type") -> None:
        self._underlying = typ.underlying() if typ is not None else None

    def underlying(self) -> Union[Basic, "Composite"]:
        if self._underlying is None:
            return INVALID
        return self._underlying.underlying()

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Named({self.name})"


class Composite:
    """Any non-basic underlying type (struct, pointer, slice, map, ...)."""

    def __init__(self, description: str):
        self.description = description

    def underlying(self) -> "Composite":
        return self

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"Composite({self.description})"


Type = Union[Basic, Named, Composite]


_I = BasicInfo
INVALID = Basic(BasicKind.INVALID, _I.NONE)

UNIVERSE_TYPES: Dict[str, Basic] = {
    "bool": Basic(BasicKind.BOOL, _I.IS_BOOLEAN),
    "int": Basic(BasicKind.INT, _I.IS_INTEGER, 64),
    "int8": Basic(BasicKind.INT8, _I.IS_INTEGER, 8),
    "int16": Basic(BasicKind.INT16, _I.IS_INTEGER, 16),
    "int32": Basic(BasicKind.INT32, _I.IS_INTEGER, 32),
    "int64": Basic(BasicKind.INT64, _I.IS_INTEGER, 64),
    "uint": Basic(BasicKind.UINT, _I.IS_INTEGER | _I.IS_UNSIGNED, 64),
    "uint8": Basic(BasicKind.UINT8, _I.IS_INTEGER | _I.IS_UNSIGNED, 8),
    "uint16": Basic(BasicKind.UINT16, _I.IS_INTEGER | _I.IS_UNSIGNED, 16),
    "uint32": Basic(BasicKind.UINT32, _I.IS_INTEGER | _I.IS_UNSIGNED, 32),
    "uint64": Basic(BasicKind.UINT64, _I.IS_INTEGER | _I.IS_UNSIGNED, 64),
    "uintptr": Basic(BasicKind.UINTPTR, _I.IS_INTEGER | _I.IS_UNSIGNED, 64),
    "float32": Basic(BasicKind.FLOAT32, _I.IS_FLOAT, 32),
    "float64": Basic(BasicKind.FLOAT64, _I.IS_FLOAT, 64),
    "complex64": Basic(BasicKind.COMPLEX64, _I.IS_COMPLEX, 64),
    "complex128": Basic(BasicKind.COMPLEX128, _I.IS_COMPLEX, 128),
    "string": Basic(BasicKind.STRING, _I.IS_STRING),
}
# byte and rune are aliases, not distinct types.
UNIVERSE_TYPES["byte"] = UNIVERSE_TYPES["uint8"]
UNIVERSE_TYPES["rune"] = UNIVERSE_TYPES["int32"]

UNTYPED_BOOL = Basic(BasicKind.UNTYPED_BOOL, _I.IS_BOOLEAN | _I.IS_UNTYPED)
UNTYPED_INT = Basic(BasicKind.UNTYPED_INT, _I.IS_INTEGER | _I.IS_UNTYPED)
UNTYPED_RUNE = Basic(BasicKind.UNTYPED_RUNE, _I.IS_INTEGER | _I.IS_UNTYPED)
UNTYPED_FLOAT = Basic(BasicKind.UNTYPED_FLOAT, _I.IS_FLOAT | _I.IS_UNTYPED)
UNTYPED_STRING = Basic(BasicKind.UNTYPED_STRING, _I.IS_STRING | _I.IS_UNTYPED)


# ---------------------------------------------------------------------------
# Constant values
# ---------------------------------------------------------------------------


class ValueKind(enum.Enum):
    UNKNOWN = "unknown"
    BOOL = "bool"
    STRING = "string"
    INT = "int"
    FLOAT = "float"


@dataclass(frozen=True)
class ConstValue:
    """An exact constant value.

    Integers are arbitrary precision and floats are exact fractions, so no
    precision is lost until a value is converted to a sized type. Strings
    are ``bytes``, as Go strings may hold any byte sequence.
    """

    kind: ValueKind
    value: Any = None

    @classmethod
    def unknown(cls) -> "ConstValue":
        return cls(ValueKind.UNKNOWN)

    @classmethod
    def make_int(cls, value: int) -> "ConstValue":
        return cls(ValueKind.INT, int(value))

    @classmethod
    def make_float(cls, value: Union[int, Fraction]) -> "ConstValue":
        return cls(ValueKind.FLOAT, Fraction(value))

    @classmethod
    def make_bool(cls, value: bool) -> "ConstValue":
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def make_string(cls, value: bytes) -> "ConstValue":
        return cls(ValueKind.STRING, value)

    def int64_val(self) -> Tuple[int, bool]:
        """Return the value as an int64 and whether that is exact."""
        if self.kind is not ValueKind.INT:
            return 0, False
        if MIN_INT64 <= self.value <= MAX_INT64:
            return self.value, True
        return _wrap_signed(self.value), False

    def uint64_val(self) -> Tuple[int, bool]:
        """Return the value as a uint64 and whether that is exact."""
        if self.kind is not ValueKind.INT:
            return 0, False
        if 0 <= self.value <= MAX_UINT64:
            return self.value, True
        return self.value & UINT64_MASK, False

    def __str__(self) -> str:
        if self.kind is ValueKind.INT:
            return str(self.value)
        if self.kind is ValueKind.FLOAT:
            return _format_float(self.value)
        if self.kind is ValueKind.STRING:
            quoted = _quote(self.value)
            if len(quoted) > 72:
                quoted = quoted[:69] + "..."
            return quoted
        if self.kind is ValueKind.BOOL:
            return "true" if self.value else "false"
        return "unknown"


def _wrap_signed(value: int) -> int:
    value &= UINT64_MASK
    return value - (1 << 64) if value > MAX_INT64 else value


def _format_float(value: Fraction) -> str:
    """Format like ``%.6g`` without going through a machine float."""
    if value.denominator == 1 and abs(value.numerator) < 10 ** 21:
        return str(value.numerator)
    with decimal.localcontext() as ctx:
        ctx.prec = 6
        ctx.Emax = decimal.MAX_EMAX
        ctx.Emin = decimal.MIN_EMIN
        d = (decimal.Decimal(value.numerator) / decimal.Decimal(value.denominator)).normalize()
    exponent = d.adjusted()
    if -4 <= exponent < 6:
        return format(d, "f")
    sign, digits, _ = d.as_tuple()
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(map(str, digits[1:]))
    return f"{'-' if sign else ''}{mantissa}e{'-' if exponent < 0 else '+'}{abs(exponent):02d}"


_QUOTE_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def _quote(value: bytes) -> str:
    # Bytes that are not UTF-8 come back as lone surrogates U+DC80..U+DCFF.
    parts = ['"']
    for char in value.decode("utf-8", errors="surrogateescape"):
        code = ord(char)
        if 0xDC80 <= code <= 0xDCFF:
            parts.append(f"\\x{code - 0xDC00:02x}")
        elif char in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[char])
        elif char.isprintable():
            parts.append(char)
        elif code < 0x80:
            parts.append(f"\\x{code:02x}")
        else:
            parts.append(f"\\u{code:04x}" if code <= 0xFFFF else f"\\U{code:08x}")
    parts.append('"')
    return "".join(parts)


# ---------------------------------------------------------------------------
# Objects and the symbol table
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Const:
    name: str
    type: Type
    val: ConstValue
    pos: Optional[Position] = None


@dataclass(eq=False)
class TypeName:
    name: str
    type: Type
    pos: Optional[Position] = None


Object = Union[Const, TypeName]


class SymbolOracle(Protocol):
    """Read-only lookup from a defining identifier to its object."""

    def lookup(self, ident: Ident) -> Optional[Object]:
        ...


class SymbolTable:
    """Definitions of one package, keyed by identifier node identity."""

    def __init__(self, defs: Optional[Dict[Ident, Object]] = None):
        self._defs: Dict[Ident, Object] = dict(defs or {})

    def define(self, ident: Ident, obj: Object) -> None:
        self._defs[ident] = obj

    def lookup(self, ident: Ident) -> Optional[Object]:
        return self._defs.get(ident)

    def items(self) -> Iterator[Tuple[Ident, Object]]:
        return iter(self._defs.items())

    def __len__(self) -> int:
        return len(self._defs)

    def __contains__(self, ident: Ident) -> bool:
        return ident in self._defs

    def __repr__(self) -> str:
        return f"SymbolTable(defs={len(self._defs)})"
