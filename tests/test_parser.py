"""Tests for the tree-sitter based declaration parser."""

import textwrap

import pytest

from loader.errors import LoadError, ParseError
from loader.parser import parse_file, parse_source
from model.syntax import (
    BasicLit,
    BinaryExpr,
    CallExpr,
    CompositeType,
    DeclKind,
    FuncDecl,
    GenDecl,
    Ident,
    LitKind,
    ParenExpr,
    SelectorExpr,
    UnaryExpr,
)


def parse(source):
    return parse_source(textwrap.dedent(source).lstrip(), "test.go")


def const_specs(source):
    file = parse(source)
    return [spec for decl in file.decls if decl.tok is DeclKind.CONST for spec in decl.specs]


class TestFileStructure:
    """Tests for package clauses and top-level declarations."""

    def test_package_clause(self):
        """The package name is recorded."""
        file = parse("package color\n")

        assert file.package.name == "color"
        assert file.filename == "test.go"
        assert file.decls == []

    def test_missing_package_clause(self):
        """A file must start with a package clause."""
        with pytest.raises(ParseError, match="expected 'package'"):
            parse("const A = 1\n")

    def test_parse_error_message_has_position(self):
        """Parse errors name the file, line and column."""
        with pytest.raises(ParseError) as excinfo:
            parse("package p\n\nx := 1\n")

        assert str(excinfo.value).startswith("test.go:3:1: ")
        assert isinstance(excinfo.value, LoadError)

    def test_imports(self):
        """Single, grouped, named and dot imports are recorded."""
        file = parse("""
            package p

            import "fmt"

            import (
                str "strings"
                . "math"
                _ "embed"
            )
        """)

        assert [(spec.path, spec.name.name if spec.name else None) for spec in file.imports] == [
            ("fmt", None),
            ("strings", "str"),
            ("math", "."),
            ("embed", "_"),
        ]

    def test_declaration_kinds_in_order(self):
        """Declarations keep their source order."""
        file = parse("""
            package p

            type T int

            var v = 1

            func f() {}

            const C = 1
        """)

        assert [decl.tok for decl in file.decls] == [
            DeclKind.TYPE, DeclKind.VAR, DeclKind.FUNC, DeclKind.CONST,
        ]

    def test_function_bodies_skipped(self):
        """Function bodies are skipped, whatever they contain."""
        file = parse("""
            package p

            func (r *Recv) Method(a, b int) (int, error) {
                const local = 1
                if a > b {
                    return a, nil
                }
                return b, nil
            }

            func Generic[T any](v T) T { return v }

            const After = 1
        """)

        funcs = [decl for decl in file.decls if isinstance(decl, FuncDecl)]
        assert [(f.name.name, f.method) for f in funcs] == [("Method", True), ("Generic", False)]
        assert [spec.names[0].name for spec in const_specs("""
            package p

            func f() { const x = 1 }

            const After = 1
        """)] == ["After"]

    def test_function_declaration_without_body(self):
        """Functions implemented elsewhere have no body."""
        file = parse("""
            package p

            func nanotime() int64

            const C = 1
        """)

        assert isinstance(file.decls[0], FuncDecl)
        assert file.decls[1].tok is DeclKind.CONST

    def test_var_initializers_skipped(self):
        """Variable initializers of any shape are skipped."""
        file = parse("""
            package p

            var (
                a, b = 1, 2
                m = map[string]int{"x": 1}
                s struct{ x int }
            )
        """)

        decl = file.decls[0]
        assert decl.grouped
        assert [[n.name for n in spec.names] for spec in decl.specs] == [["a", "b"], ["m"], ["s"]]

    def test_type_declarations(self):
        """Type specs record aliases, generics and composite underlying types."""
        file = parse("""
            package p

            type (
                Color int
                Alias = Color
                List[T any] []T
                Point struct {
                    X, Y int
                }
                Remote pkg.Type
                Grid [4][4]int
            )
        """)

        specs = file.decls[0].specs
        assert [spec.name.name for spec in specs] == ["Color", "Alias", "List", "Point", "Remote", "Grid"]
        assert isinstance(specs[0].type, Ident) and specs[0].type.name == "int"
        assert specs[1].alias
        assert specs[2].type_params
        assert isinstance(specs[3].type, CompositeType)
        assert isinstance(specs[4].type, SelectorExpr)
        assert isinstance(specs[5].type, CompositeType)
        assert not specs[5].type_params

    def test_statement_outside_function(self):
        """Statements at top level are rejected."""
        with pytest.raises(ParseError, match="non-declaration statement"):
            parse("package p\n\nfmt.Println()\n")

    def test_unclosed_group(self):
        """A group without its closing parenthesis is rejected."""
        with pytest.raises(ParseError, match="syntax error"):
            parse("package p\n\nconst (\n    A = 1\n")

    def test_syntax_error_position(self):
        """Syntax errors point at the first offending node."""
        with pytest.raises(ParseError) as excinfo:
            parse("package p\n\nconst A = 1\nconst = 2\n")

        assert str(excinfo.value).startswith("test.go:4:")

    def test_byte_order_mark_ignored(self):
        """A leading byte order mark is not part of the source."""
        file = parse_source("\ufeffpackage p\n", "test.go")

        assert file.package.name == "p"

    def test_positions_are_one_based(self):
        """Lines and columns count from one, columns in bytes."""
        spec = const_specs("package p\n\nconst (\n\tRed = 1\n)\n")[0]

        assert (spec.names[0].pos.line, spec.names[0].pos.column) == (4, 2)
        assert str(spec.values[0].pos) == "test.go:4:8"


class TestConstSpecs:
    """Tests for const declarations."""

    def test_grouped_and_standalone(self):
        """Standalone and grouped const declarations are told apart."""
        file = parse("""
            package p

            const A = 1

            const (
                B = 2
                C = 3
            )
        """)

        standalone, group = file.decls
        assert isinstance(standalone, GenDecl) and not standalone.grouped
        assert group.grouped
        assert len(group.specs) == 2

    def test_spec_shapes(self):
        """Specs keep names, optional type and values as written."""
        specs = const_specs("""
            package p

            const (
                A Color = iota
                B
                C, D = 1, 2
                E time.Duration = 3
                F (Color) = 4
            )
        """)

        a, b, cd, e, f = specs
        assert a.type.name == "Color" and len(a.values) == 1
        assert b.type is None and b.values == []
        assert [n.name for n in cd.names] == ["C", "D"] and cd.type is None and len(cd.values) == 2
        assert isinstance(e.type, SelectorExpr) and e.type.sel.name == "Duration"
        assert e.type.x.name == "time"
        assert isinstance(f.type, ParenExpr)

    def test_type_without_value_rejected(self):
        """A typed const spec needs an initializer."""
        with pytest.raises(ParseError):
            parse("package p\n\nconst G int\n")

    def test_semicolon_separated_specs(self):
        """Specs may share a line when separated by semicolons."""
        specs = const_specs("package p\nconst (A = 1; B = 2)\n")

        assert [spec.names[0].name for spec in specs] == ["A", "B"]


class TestExpressions:
    """Tests for constant initializer expressions."""

    def value(self, expr_text):
        return const_specs(f"package p\nconst X = {expr_text}\n")[0].values[0]

    def test_precedence(self):
        """Multiplicative operators bind tighter than additive ones."""
        expr = self.value("1 + 2*3")

        assert isinstance(expr, BinaryExpr) and expr.op == "+"
        assert isinstance(expr.y, BinaryExpr) and expr.y.op == "*"

    def test_left_associative(self):
        """Operators of equal precedence associate to the left."""
        expr = self.value("1 - 2 - 3")

        assert expr.op == "-"
        assert isinstance(expr.x, BinaryExpr)
        assert isinstance(expr.y, BasicLit) and expr.y.value == "3"

    def test_shift_binds_like_multiplication(self):
        """Shifts share precedence with multiplication."""
        expr = self.value("1 << 10 * iota")

        assert expr.op == "*"
        assert expr.x.op == "<<"

    def test_unary_and_parens(self):
        """Unary operators apply to the operand that follows."""
        expr = self.value("-(1 + 2)")

        assert isinstance(expr, UnaryExpr) and expr.op == "-"
        assert isinstance(expr.x, ParenExpr)

    def test_literal_kinds(self):
        """Literals carry their kind and source text."""
        values = const_specs("package p\nconst A, B, C, D = 1.5, 'x', \"s\", 0x10\n")[0].values

        assert [(v.kind, v.value) for v in values] == [
            (LitKind.FLOAT, "1.5"),
            (LitKind.CHAR, "'x'"),
            (LitKind.STRING, '"s"'),
            (LitKind.INT, "0x10"),
        ]

    def test_conversion_call(self):
        """T(x) parses as a call with an identifier callee."""
        expr = self.value("Color(1)")

        assert isinstance(expr, CallExpr)
        assert isinstance(expr.fun, Ident) and expr.fun.name == "Color"
        assert len(expr.args) == 1

    def test_qualified_call(self):
        """pkg.F(x) parses as a call through a selector."""
        expr = self.value("time.Duration(5)")

        assert isinstance(expr, CallExpr)
        assert isinstance(expr.fun, SelectorExpr)

    def test_call_with_trailing_comma(self):
        """A trailing comma in an argument list is accepted."""
        expr = self.value("max(\n\t1,\n\t2,\n)")

        assert isinstance(expr, CallExpr) and len(expr.args) == 2

    def test_predeclared_names_are_identifiers(self):
        """iota, true and false come through as plain identifiers."""
        values = const_specs("package p\nconst A, B, C = iota, true, false\n")[0].values

        assert all(isinstance(v, Ident) for v in values)
        assert [v.name for v in values] == ["iota", "true", "false"]

    def test_composite_operand(self):
        """Composite literals parse as non-constant placeholders."""
        expr = self.value("[]int{1, 2}")

        assert isinstance(expr, CompositeType)


class TestParseFile:
    """Tests for parse_file."""

    def test_reads_file(self, tmp_path):
        """The file is read as UTF-8 and named by its path."""
        path = tmp_path / "a.go"
        path.write_text("package a\n\nconst S = \"\u00e9\"\n", encoding="utf-8")

        file = parse_file(path)

        assert file.filename == str(path)
        assert file.package.name == "a"

    def test_missing_file(self, tmp_path):
        """A missing file is a load error."""
        with pytest.raises(LoadError, match="cannot read"):
            parse_file(tmp_path / "missing.go")
