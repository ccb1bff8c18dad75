"""Type checking of package-level constants.

The resolver computes what the Go type checker would record for every
package-level constant and type name: the type of each constant and its
exact value. Constants may refer to each other across files and in any
order, so they are evaluated lazily with cycle detection.

Type errors never stop the check. Each one is recorded as a
``TypeCheckError`` and the offending constant keeps an unknown value, so a
later consumer can decide whether it matters.
"""

import math
import struct
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Optional, Set, Tuple, Union

from model.objects import (
    INVALID,
    UNIVERSE_TYPES,
    UNTYPED_BOOL,
    UNTYPED_FLOAT,
    UNTYPED_INT,
    UNTYPED_RUNE,
    UNTYPED_STRING,
    Basic,
    BasicInfo,
    Composite,
    Const,
    ConstValue,
    Named,
    SymbolTable,
    Type,
    TypeName,
    ValueKind,
)
from model.syntax import (
    BasicLit,
    BinaryExpr,
    CallExpr,
    CompositeType,
    DeclKind,
    Expr,
    File,
    FuncDecl,
    GenDecl,
    Ident,
    IndexExpr,
    LitKind,
    ParenExpr,
    Position,
    SelectorExpr,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
    node_pos,
)
from .errors import TypeCheckError
from .literals import MAX_RUNE, unquote_char, unquote_string


# Largest shift count accepted for untyped constants.
MAX_SHIFT = 1074

_UNTYPED_RANK = {UNTYPED_INT: 0, UNTYPED_RUNE: 1, UNTYPED_FLOAT: 2}
_COMPARISONS = {"==", "!=", "<", "<=", ">", ">="}
_BUILTINS = {"len", "min", "max"}


class CheckFailed(Exception):
    """Raised while evaluating a declaration that contains a type error.

    ``silent`` marks failures caused by an operand whose own error has
    already been reported.
    """

    def __init__(self, message: str, pos: Optional[Position] = None, silent: bool = False):
        super().__init__(message)
        self.message = message
        self.pos = pos
        self.silent = silent


@dataclass
class Operand:
    type: Type
    val: ConstValue


@dataclass(eq=False)
class ConstEntry:
    """One constant name together with the expression that initializes it."""

    ident: Ident
    type_expr: Optional[Expr]
    init: Optional[Expr]
    iota: int


@dataclass(eq=False)
class TypeEntry:
    spec: TypeSpec


_OTHER = "other"  # Package-level vars and funcs; never constant.
ScopeEntry = Union[ConstEntry, TypeEntry, str]


def _basic(typ: Type) -> Optional[Basic]:
    under = typ.underlying()
    return under if isinstance(under, Basic) else None


def _info(typ: Type) -> BasicInfo:
    basic = _basic(typ)
    return basic.info if basic is not None else BasicInfo.NONE


def _unparen(expr: Expr) -> Expr:
    while isinstance(expr, ParenExpr):
        expr = expr.x
    return expr


def _describe(x: Operand) -> str:
    if _info(x.type) & BasicInfo.IS_UNTYPED:
        return f"{x.val} ({x.type} constant)"
    return f"{x.val} (constant of type {x.type})"


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


def parse_int_literal(text: str) -> int:
    text = text.replace("_", "")
    if len(text) > 1 and text[0] == "0" and text[1].isdigit():
        return int(text, 8)
    return int(text, 0)


def parse_float_literal(text: str) -> Fraction:
    text = text.replace("_", "")
    if text[:2].lower() != "0x":
        return Fraction(text)
    # Hexadecimal mantissa with a binary exponent, kept exact.
    mantissa, _, exponent = text[2:].lower().partition("p")
    whole, _, frac = mantissa.partition(".")
    digits = int(whole + frac or "0", 16)
    return Fraction(digits) * Fraction(2) ** (int(exponent or "0") - 4 * len(frac))


class Resolver:
    """Type-checks the constant and type declarations of one package."""

    def __init__(self, files: List[File]):
        self.files = files
        self.info = SymbolTable()
        self.errors: List[TypeCheckError] = []
        self._scope: Dict[str, ScopeEntry] = {}
        self._const_entries: List[ConstEntry] = []
        self._type_entries: List[TypeEntry] = []
        self._consts: Dict[ConstEntry, Const] = {}
        self._types: Dict[TypeEntry, TypeName] = {}
        self._in_progress: Set[object] = set()

    def check(self) -> SymbolTable:
        """Resolve every declaration and return the filled symbol table."""
        for file in self.files:
            self._collect(file)
        for entry in self._type_entries:
            self._type_object(entry)
        for entry in self._const_entries:
            self._const_object(entry)
        return self.info

    # -- collection -------------------------------------------------------

    def _declare(self, ident: Ident, entry: ScopeEntry) -> None:
        if ident.name == "_":
            return
        if ident.name in self._scope:
            self._error(f"{ident.name} redeclared in this block", ident.pos)
            return
        self._scope[ident.name] = entry

    def _collect(self, file: File) -> None:
        for decl in file.decls:
            if isinstance(decl, FuncDecl):
                if not decl.method and decl.name.name != "init":
                    self._declare(decl.name, _OTHER)
                continue
            if decl.tok is DeclKind.CONST:
                self._collect_consts(decl)
            elif decl.tok is DeclKind.TYPE:
                for spec in decl.specs:
                    entry = TypeEntry(spec)
                    self._type_entries.append(entry)
                    self._declare(spec.name, entry)
            elif decl.tok is DeclKind.VAR:
                for spec in decl.specs:
                    for name in spec.names:
                        self._declare(name, _OTHER)

    def _collect_consts(self, decl: GenDecl) -> None:
        last_type: Optional[Expr] = None
        last_values: List[Expr] = []
        for iota, spec in enumerate(decl.specs):
            if not isinstance(spec, ValueSpec):
                raise TypeError(f"const declaration holds {type(spec).__name__}, expected ValueSpec")
            if spec.values or spec.type is not None:
                last_type, last_values = spec.type, spec.values
                if not spec.values:
                    self._error("missing init expr for const declaration", spec.pos)
            elif iota == 0:
                self._error("missing init expr for const declaration", spec.pos)
            if len(last_values) > len(spec.names):
                self._error("extra init expr", node_pos(last_values[len(spec.names)]) or spec.pos)
            for i, name in enumerate(spec.names):
                init = last_values[i] if i < len(last_values) else None
                if init is None and last_values:
                    self._error(f"missing init expr for {name.name}", name.pos)
                entry = ConstEntry(name, last_type, init, iota)
                self._const_entries.append(entry)
                self._declare(name, entry)

    # -- diagnostics ------------------------------------------------------

    def _error(self, message: str, pos: Optional[Position]) -> None:
        self.errors.append(TypeCheckError(message, pos))

    def _report(self, failure: CheckFailed, fallback: Optional[Position]) -> None:
        if not failure.silent:
            self._error(failure.message, failure.pos or fallback)

    # -- types ------------------------------------------------------------

    def _type_object(self, entry: TypeEntry) -> TypeName:
        if entry in self._in_progress:
            raise CheckFailed(f"invalid recursive type {entry.spec.name.name}", entry.spec.pos)
        if entry in self._types:
            return self._types[entry]

        spec = entry.spec
        self._in_progress.add(entry)
        try:
            if spec.alias:
                try:
                    typ = self.resolve_type(spec.type)
                except CheckFailed as e:
                    self._report(e, spec.pos)
                    typ = INVALID
                obj = TypeName(spec.name.name, typ, spec.pos)
            else:
                named = Named(spec.name.name)
                obj = TypeName(spec.name.name, named, spec.pos)
                try:
                    named.set_underlying(self.resolve_type(spec.type))
                except CheckFailed as e:
                    self._report(e, spec.pos)
                    named.set_underlying(INVALID)
        finally:
            self._in_progress.discard(entry)

        self._types[entry] = obj
        self.info.define(spec.name, obj)
        return obj

    def lookup_type(self, ident: Ident) -> Optional[Type]:
        """Return the type an identifier names, or None if it is not a type."""
        entry = self._scope.get(ident.name)
        if isinstance(entry, TypeEntry):
            return self._type_object(entry).type
        if entry is None:
            return UNIVERSE_TYPES.get(ident.name)
        return None

    def resolve_type(self, expr: Expr) -> Type:
        expr = _unparen(expr)
        if isinstance(expr, Ident):
            typ = self.lookup_type(expr)
            if typ is not None:
                return typ
            if expr.name in self._scope:
                raise CheckFailed(f"{expr.name} is not a type", expr.pos)
            raise CheckFailed(f"undefined: {expr.name}", expr.pos)
        if isinstance(expr, SelectorExpr) and isinstance(expr.x, Ident):
            raise CheckFailed(f"cannot resolve imported type {expr.x.name}.{expr.sel.name}", expr.pos)
        if isinstance(expr, CompositeType):
            return Composite(expr.description)
        raise CheckFailed("expression is not a type", node_pos(expr))

    # -- constants --------------------------------------------------------

    def _const_object(self, entry: ConstEntry) -> Const:
        if entry in self._consts:
            return self._consts[entry]
        if entry in self._in_progress:
            raise CheckFailed(f"initialization cycle involving {entry.ident.name}", entry.ident.pos)

        self._in_progress.add(entry)
        typ: Optional[Type] = None
        try:
            if entry.type_expr is not None:
                typ = self.resolve_type(entry.type_expr)
                if not _info(typ) & BasicInfo.IS_CONST_TYPE:
                    raise CheckFailed(f"invalid constant type {typ}", node_pos(entry.type_expr))
            if entry.init is None:
                raise CheckFailed(f"missing init expr for {entry.ident.name}", entry.ident.pos, silent=True)
            x = self.evaluate(entry.init, entry.iota)
            if typ is not None:
                x = self.assign(x, typ, node_pos(entry.init))
            obj = Const(entry.ident.name, x.type, x.val, entry.ident.pos)
        except CheckFailed as e:
            self._report(e, entry.ident.pos)
            obj = Const(entry.ident.name, typ or INVALID, ConstValue.unknown(), entry.ident.pos)
        finally:
            self._in_progress.discard(entry)

        self._consts[entry] = obj
        self.info.define(entry.ident, obj)
        return obj

    def evaluate(self, expr: Expr, iota: Optional[int] = None) -> Operand:
        """Evaluate a constant expression to its type and exact value."""
        if isinstance(expr, ParenExpr):
            return self.evaluate(expr.x, iota)
        if isinstance(expr, Ident):
            return self._ident(expr, iota)
        if isinstance(expr, BasicLit):
            return self._literal(expr)
        if isinstance(expr, UnaryExpr):
            return self._unary(expr.op, self.evaluate(expr.x, iota), expr.pos)
        if isinstance(expr, BinaryExpr):
            x = self.evaluate(expr.x, iota)
            y = self.evaluate(expr.y, iota)
            if expr.op in ("<<", ">>"):
                return self._shift(expr.op, x, y, expr.pos)
            return self._binary(expr.op, x, y, expr.pos)
        if isinstance(expr, CallExpr):
            return self._call(expr, iota)
        if isinstance(expr, SelectorExpr) and isinstance(expr.x, Ident):
            raise CheckFailed(f"cannot resolve imported constant {expr.x.name}.{expr.sel.name}", expr.pos)
        if isinstance(expr, (IndexExpr, SelectorExpr, CompositeType)):
            raise CheckFailed("expression is not constant", node_pos(expr))
        raise CheckFailed(f"unexpected expression {expr!r}", node_pos(expr))

    def _ident(self, ident: Ident, iota: Optional[int]) -> Operand:
        name = ident.name
        entry = self._scope.get(name)
        if isinstance(entry, ConstEntry):
            obj = self._const_object(entry)
            if obj.val.kind is ValueKind.UNKNOWN:
                raise CheckFailed(f"{name} has an invalid value", ident.pos, silent=True)
            return Operand(obj.type, obj.val)
        if isinstance(entry, TypeEntry):
            raise CheckFailed(f"{name} (type) is not an expression", ident.pos)
        if entry == _OTHER:
            raise CheckFailed(f"{name} is not constant", ident.pos)

        if name == "iota" and iota is not None:
            return Operand(UNTYPED_INT, ConstValue.make_int(iota))
        if name in ("true", "false"):
            return Operand(UNTYPED_BOOL, ConstValue.make_bool(name == "true"))
        if name == "_":
            raise CheckFailed("cannot use _ as value", ident.pos)
        if name in UNIVERSE_TYPES:
            raise CheckFailed(f"{name} (type) is not an expression", ident.pos)
        if name in _BUILTINS or name == "nil":
            raise CheckFailed(f"{name} is not constant", ident.pos)
        raise CheckFailed(f"undefined: {name}", ident.pos)

    def _literal(self, lit: BasicLit) -> Operand:
        try:
            if lit.kind is LitKind.INT:
                return Operand(UNTYPED_INT, ConstValue.make_int(parse_int_literal(lit.value)))
            if lit.kind is LitKind.FLOAT:
                return Operand(UNTYPED_FLOAT, ConstValue.make_float(parse_float_literal(lit.value)))
            if lit.kind is LitKind.CHAR:
                return Operand(UNTYPED_RUNE, ConstValue.make_int(unquote_char(lit.value)))
            if lit.kind is LitKind.STRING:
                return Operand(UNTYPED_STRING, ConstValue.make_string(unquote_string(lit.value)))
        except (ValueError, ArithmeticError) as e:
            raise CheckFailed(f"invalid literal {lit.value}: {e}", lit.pos) from e
        raise CheckFailed(f"unsupported constant literal {lit.value}", lit.pos)

    # -- representation and conversion ------------------------------------

    def represent(self, val: ConstValue, typ: Type, pos: Optional[Position]) -> ConstValue:
        """Return ``val`` as a value of ``typ`` or fail if it does not fit."""
        basic = _basic(typ)
        if basic is None:
            raise CheckFailed(f"cannot represent {val} as {typ}", pos)
        info = basic.info

        if info & BasicInfo.IS_INTEGER:
            if val.kind is ValueKind.FLOAT:
                if val.value.denominator != 1:
                    raise CheckFailed(f"cannot use {val} as {typ} value (truncated)", pos)
                val = ConstValue.make_int(val.value.numerator)
            if val.kind is not ValueKind.INT:
                raise CheckFailed(f"cannot use {val} as {typ} value", pos)
            if info & BasicInfo.IS_UNTYPED:
                return val
            if info & BasicInfo.IS_UNSIGNED:
                low, high = 0, (1 << basic.bits) - 1
            else:
                low, high = -(1 << (basic.bits - 1)), (1 << (basic.bits - 1)) - 1
            if not low <= val.value <= high:
                raise CheckFailed(f"constant {val} overflows {typ}", pos)
            return val

        if info & BasicInfo.IS_FLOAT:
            if val.kind not in (ValueKind.INT, ValueKind.FLOAT):
                raise CheckFailed(f"cannot use {val} as {typ} value", pos)
            value = Fraction(val.value)
            if info & BasicInfo.IS_UNTYPED:
                return ConstValue.make_float(value)
            return ConstValue.make_float(self._round_float(value, basic.bits, typ, pos))

        if info & BasicInfo.IS_STRING and val.kind is ValueKind.STRING:
            return val
        if info & BasicInfo.IS_BOOLEAN and val.kind is ValueKind.BOOL:
            return val
        raise CheckFailed(f"cannot use {val} as {typ} value", pos)

    @staticmethod
    def _round_float(value: Fraction, bits: int, typ: Type, pos: Optional[Position]) -> Fraction:
        try:
            rounded = float(value)
            if bits == 32:
                rounded = struct.unpack("f", struct.pack("f", rounded))[0]
        except OverflowError:
            rounded = math.inf
        if math.isinf(rounded):
            raise CheckFailed(f"constant {ConstValue.make_float(value)} overflows {typ}", pos)
        return Fraction(rounded)

    def implicit(self, x: Operand, target: Type, pos: Optional[Position]) -> Operand:
        """Convert an untyped operand to ``target`` as an assignment would."""
        x_info = _info(x.type)
        t_info = _info(target)
        compatible = (
            (t_info & BasicInfo.IS_NUMERIC and x_info & BasicInfo.IS_NUMERIC)
            or (t_info & BasicInfo.IS_STRING and x_info & BasicInfo.IS_STRING)
            or (t_info & BasicInfo.IS_BOOLEAN and x_info & BasicInfo.IS_BOOLEAN)
        )
        if not compatible:
            raise CheckFailed(f"cannot use {_describe(x)} as {target} value", pos)
        return Operand(target, self.represent(x.val, target, pos))

    def assign(self, x: Operand, target: Type, pos: Optional[Position]) -> Operand:
        """Check that ``x`` may initialize a constant declared with ``target``."""
        if _info(x.type) & BasicInfo.IS_UNTYPED:
            return self.implicit(x, target, pos)
        if x.type is not target:
            raise CheckFailed(
                f"cannot use {_describe(x)} as {target} value in constant declaration", pos
            )
        return x

    def convert(self, x: Operand, target: Type, pos: Optional[Position]) -> Operand:
        """Evaluate the explicit conversion ``target(x)``."""
        t_info = _info(target)
        if not t_info & BasicInfo.IS_CONST_TYPE:
            raise CheckFailed(f"{target}({x.val}) is not constant", pos)
        if t_info & BasicInfo.IS_COMPLEX:
            raise CheckFailed(f"complex constants are not supported: {target}({x.val})", pos)

        x_info = _info(x.type)
        if t_info & BasicInfo.IS_STRING and x_info & BasicInfo.IS_INTEGER:
            code = x.val.value
            text = chr(code) if 0 <= code <= MAX_RUNE and not 0xD800 <= code <= 0xDFFF else "\ufffd"
            return Operand(target, ConstValue.make_string(text.encode("utf-8")))
        if (t_info & BasicInfo.IS_NUMERIC and not x_info & BasicInfo.IS_NUMERIC) or (
            not t_info & BasicInfo.IS_NUMERIC and (t_info & x_info) == 0
        ):
            raise CheckFailed(f"cannot convert {_describe(x)} to type {target}", pos)
        return Operand(target, self.represent(x.val, target, pos))

    # -- operators --------------------------------------------------------

    def _unify(self, x: Operand, y: Operand, op: str, pos: Optional[Position]) -> Tuple[Operand, Operand]:
        x_untyped = bool(_info(x.type) & BasicInfo.IS_UNTYPED)
        y_untyped = bool(_info(y.type) & BasicInfo.IS_UNTYPED)
        if not x_untyped and not y_untyped:
            if x.type is not y.type:
                raise CheckFailed(f"invalid operation: mismatched types {x.type} and {y.type}", pos)
            return x, y
        if not x_untyped:
            return x, self.implicit(y, x.type, pos)
        if not y_untyped:
            return self.implicit(x, y.type, pos), y

        if x.type in _UNTYPED_RANK and y.type in _UNTYPED_RANK:
            target = x.type if _UNTYPED_RANK[x.type] >= _UNTYPED_RANK[y.type] else y.type
            return (
                Operand(target, self.represent(x.val, target, pos)),
                Operand(target, self.represent(y.val, target, pos)),
            )
        if x.type is not y.type:
            raise CheckFailed(
                f"invalid operation: {x.val} {op} {y.val} (mismatched types {x.type} and {y.type})", pos
            )
        return x, y

    def _typed_result(self, typ: Type, val: ConstValue, pos: Optional[Position]) -> Operand:
        if _info(typ) & BasicInfo.IS_UNTYPED:
            return Operand(typ, val)
        return Operand(typ, self.represent(val, typ, pos))

    def _unary(self, op: str, x: Operand, pos: Optional[Position]) -> Operand:
        info = _info(x.type)
        if op == "+" and info & BasicInfo.IS_NUMERIC:
            return x
        if op == "-" and info & BasicInfo.IS_NUMERIC:
            value = -x.val.value
            val = ConstValue.make_int(value) if x.val.kind is ValueKind.INT else ConstValue.make_float(value)
            return self._typed_result(x.type, val, pos)
        if op == "!" and info & BasicInfo.IS_BOOLEAN:
            return Operand(x.type, ConstValue.make_bool(not x.val.value))
        if op == "^" and info & BasicInfo.IS_INTEGER and x.val.kind is ValueKind.INT:
            if info & BasicInfo.IS_UNSIGNED:
                mask = (1 << _basic(x.type).bits) - 1
                return Operand(x.type, ConstValue.make_int(x.val.value ^ mask))
            return self._typed_result(x.type, ConstValue.make_int(~x.val.value), pos)
        if op in ("&", "*", "<-"):
            raise CheckFailed(f"{op}{x.val} is not constant", pos)
        raise CheckFailed(f"invalid operation: operator {op} not defined on {_describe(x)}", pos)

    def _shift(self, op: str, x: Operand, y: Operand, pos: Optional[Position]) -> Operand:
        try:
            count = self.represent(y.val, UNTYPED_INT, pos)
        except CheckFailed:
            raise CheckFailed(f"invalid shift count {y.val}", pos) from None
        if not _info(y.type) & (BasicInfo.IS_INTEGER | BasicInfo.IS_UNTYPED) or count.value < 0:
            raise CheckFailed(f"invalid shift count {y.val}", pos)
        if count.value > MAX_SHIFT:
            raise CheckFailed(f"invalid shift count {y.val} (too large)", pos)

        x_info = _info(x.type)
        if x_info & BasicInfo.IS_UNTYPED and x_info & BasicInfo.IS_NUMERIC:
            target = UNTYPED_RUNE if x.type is UNTYPED_RUNE else UNTYPED_INT
            try:
                x = Operand(target, self.represent(x.val, target, pos))
            except CheckFailed:
                raise CheckFailed(f"invalid operation: shifted operand {x.val} must be integer", pos) from None
        elif not x_info & BasicInfo.IS_INTEGER:
            raise CheckFailed(f"invalid operation: shifted operand {_describe(x)} must be integer", pos)

        if op == "<<":
            value = x.val.value << count.value
        else:
            value = x.val.value >> count.value
        return self._typed_result(x.type, ConstValue.make_int(value), pos)

    def _binary(self, op: str, x: Operand, y: Operand, pos: Optional[Position]) -> Operand:
        x, y = self._unify(x, y, op, pos)
        typ = x.type
        info = _info(typ)
        a, b = x.val.value, y.val.value

        if op in ("&&", "||"):
            if not info & BasicInfo.IS_BOOLEAN:
                raise CheckFailed(f"invalid operation: operator {op} not defined on {_describe(x)}", pos)
            return Operand(typ, ConstValue.make_bool((a and b) if op == "&&" else (a or b)))

        if op in _COMPARISONS:
            if info & BasicInfo.IS_BOOLEAN and op not in ("==", "!="):
                raise CheckFailed(f"invalid operation: operator {op} not defined on {_describe(x)}", pos)
            result = {
                "==": a == b, "!=": a != b, "<": a < b,
                "<=": a <= b, ">": a > b, ">=": a >= b,
            }[op]
            return Operand(UNTYPED_BOOL, ConstValue.make_bool(result))

        if op == "+" and info & BasicInfo.IS_STRING:
            return Operand(typ, ConstValue.make_string(a + b))
        if not info & BasicInfo.IS_NUMERIC:
            raise CheckFailed(f"invalid operation: operator {op} not defined on {_describe(x)}", pos)

        integer = bool(info & BasicInfo.IS_INTEGER)
        if op in ("%", "&", "|", "^", "&^") and not integer:
            raise CheckFailed(f"invalid operation: operator {op} not defined on {_describe(x)}", pos)
        if op in ("/", "%") and b == 0:
            raise CheckFailed("invalid operation: division by zero", pos)

        if op == "+":
            value = a + b
        elif op == "-":
            value = a - b
        elif op == "*":
            value = a * b
        elif op == "/":
            value = _trunc_div(a, b) if integer else Fraction(a) / Fraction(b)
        elif op == "%":
            value = a - b * _trunc_div(a, b)
        elif op == "&":
            value = a & b
        elif op == "|":
            value = a | b
        elif op == "^":
            value = a ^ b
        elif op == "&^":
            value = a & ~b
        else:
            raise CheckFailed(f"unknown operator {op}", pos)

        val = ConstValue.make_int(value) if integer else ConstValue.make_float(value)
        return self._typed_result(typ, val, pos)

    # -- calls ------------------------------------------------------------

    def _call(self, call: CallExpr, iota: Optional[int]) -> Operand:
        fun = _unparen(call.fun)
        if isinstance(fun, Ident):
            target = self.lookup_type(fun)
            if target is not None:
                if len(call.args) != 1:
                    raise CheckFailed(f"wrong argument count in conversion to {fun.name}", call.pos)
                return self.convert(self.evaluate(call.args[0], iota), target, call.pos)
            if fun.name in _BUILTINS and fun.name not in self._scope:
                args = [self.evaluate(arg, iota) for arg in call.args]
                return self._builtin(fun.name, args, call.pos)
            if fun.name in self._scope or fun.name in ("iota", "true", "false"):
                raise CheckFailed(f"{fun.name}(...) is not constant", call.pos)
            raise CheckFailed(f"undefined: {fun.name}", fun.pos)
        if isinstance(fun, SelectorExpr) and isinstance(fun.x, Ident):
            raise CheckFailed(
                f"cannot resolve imported function or type {fun.x.name}.{fun.sel.name}", call.pos
            )
        raise CheckFailed("call expression is not constant", call.pos)

    def _builtin(self, name: str, args: List[Operand], pos: Optional[Position]) -> Operand:
        if name == "len":
            if len(args) != 1:
                raise CheckFailed("wrong argument count for len", pos)
            if args[0].val.kind is not ValueKind.STRING:
                raise CheckFailed(f"len({args[0].val}) is not constant", pos)
            return Operand(UNIVERSE_TYPES["int"], ConstValue.make_int(len(args[0].val.value)))

        if not args:
            raise CheckFailed(f"not enough arguments for {name}()", pos)
        best = args[0]
        if not _info(best.type) & (BasicInfo.IS_NUMERIC | BasicInfo.IS_STRING):
            raise CheckFailed(f"invalid argument: {_describe(best)} cannot be ordered", pos)
        for arg in args[1:]:
            best, arg = self._unify(best, arg, name, pos)
            better = arg.val.value < best.val.value if name == "min" else arg.val.value > best.val.value
            if better:
                best = arg
        return best


def check_package(files: List[File]) -> Tuple[SymbolTable, List[TypeCheckError]]:
    """
    Type-check the package-level constants and types of a package.

    Args:
        files: The parsed files of one package, in load order.

    Returns:
        The symbol table and the type errors found, in discovery order.
    """
    resolver = Resolver(files)
    info = resolver.check()
    return info, resolver.errors
