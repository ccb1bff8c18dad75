"""Tests for the constant scanner."""

from pathlib import Path

import pytest

from loader.parser import parse_source
from model.objects import SymbolTable
from model.unit import CompilationUnit
from scanner import InternalInconsistencyError, NotFoundError, Package


COLOR_HEADER = """
package color

type Color int
"""


class TestTypePropagation:
    """Tests for how a line's type carries down a const block."""

    def test_untyped_lines_inherit_type(self, make_package):
        """Lines with neither type nor values repeat the previous line's type."""
        pkg = make_package(COLOR_HEADER + """
            const (
                A Color = 0
                B
                C
            )
        """)

        assert pkg.values_of_type("Color") == ["A", "B", "C"]

    def test_conversion_sets_type(self, make_package):
        """A bare-identifier call in the first value counts as a conversion."""
        pkg = make_package(COLOR_HEADER + """
            const (
                A = Color(0)
                B = Color(1)
            )
        """)

        assert pkg.values_of_type("Color") == ["A", "B"]

    def test_conversion_type_carried_by_bare_lines(self, make_package):
        """Bare lines after a conversion line repeat it, type included."""
        pkg = make_package(COLOR_HEADER + """
            const (
                A = Color(iota)
                B
                C
            )
        """)

        assert pkg.values_of_type("Color") == ["A", "B", "C"]
        assert [r.int_value for r in pkg.constants_of_type("Color")] == [0, 1, 2]

    def test_plain_value_resets_type(self, make_package):
        """An untyped value that is not a conversion ends the carried type."""
        pkg = make_package(COLOR_HEADER + """
            const (
                A Color = 0
                B = 1
                C Color = 2
            )
        """)

        assert pkg.values_of_type("Color") == ["A", "C"]

    def test_reset_line_is_carried_too(self, make_package):
        """Lines after a reset inherit the reset, not the earlier type."""
        pkg = make_package(COLOR_HEADER + """
            const (
                A Color = iota
                B = 10 + iota
                C
                D Color = iota
            )
        """)

        assert pkg.values_of_type("Color") == ["A", "D"]

    def test_type_does_not_cross_declarations(self, make_package):
        """Each const declaration starts without a type."""
        pkg = make_package(COLOR_HEADER + """
            const A Color = 1

            const B = 2
        """)

        assert pkg.values_of_type("Color") == ["A"]

    def test_qualified_conversion_is_not_recognized(self, make_package):
        """A call through a selector never sets the type."""
        pkg = make_package(COLOR_HEADER + """
            const (
                A Color = 1
                B = other.Color(2)
                C
            )
        """)

        assert pkg.values_of_type("Color") == ["A"]

    def test_qualified_type_line_is_skipped(self, make_package):
        """A line typed with a qualified name is skipped."""
        pkg = make_package("""
            package color

            import "time"

            type Color int

            const (
                A Color = 1
                B time.Duration = 2
                C Color = 3
            )
        """)

        assert pkg.values_of_type("Color") == ["A", "C"]

    def test_function_local_consts_not_reported(self, make_package):
        """Only package-level const declarations are scanned."""
        pkg = make_package(COLOR_HEADER + """
            func f() Color {
                const Local Color = 5
                return Local
            }

            const Red Color = 1
        """)

        assert pkg.values_of_type("Color") == ["Red"]

    def test_unrelated_block_contributes_nothing(self, make_package):
        """A const group of another type is never reported."""
        pkg = make_package(COLOR_HEADER + """
            type Weekday int

            const (
                Sunday Weekday = iota
                Monday
            )

            const (
                Red Color = iota
                Green
            )
        """)

        assert pkg.values_of_type("Color") == ["Red", "Green"]
        assert pkg.values_of_type("Weekday") == ["Sunday", "Monday"]


class TestOrdering:
    """Tests for output ordering and blank identifiers."""

    def test_blank_identifier_excluded(self, make_package):
        """The blank identifier is skipped wherever it appears."""
        pkg = make_package(COLOR_HEADER + """
            const (
                _ Color = iota
                Red
                _
                Blue
                X, _, Y Color = 10, 11, 12
            )
        """)

        assert pkg.values_of_type("Color") == ["Red", "Blue", "X", "Y"]

    def test_names_on_one_line_keep_order(self, make_package):
        """Several names on one line are reported left to right."""
        pkg = make_package(COLOR_HEADER + """
            const Z, Y, X Color = 1, 2, 3
        """)

        assert pkg.values_of_type("Color") == ["Z", "Y", "X"]

    def test_file_order_is_outermost(self, load_package):
        """Files are visited in the order the loader supplies them."""
        pkg = load_package({
            "b.go": """
                package color

                const (
                    First Color = iota
                    Second
                )
            """,
            "a.go": """
                package color

                type Color int

                const Third Color = 7
            """,
        })

        assert [unit.path.name for unit in pkg.units] == ["a.go", "b.go"]
        assert pkg.values_of_type("Color") == ["Third", "First", "Second"]

    def test_repeated_scans_are_identical(self, make_package):
        """Scanning twice for the same type gives the same result."""
        pkg = make_package(COLOR_HEADER + """
            const (
                Red Color = iota
                Green
                Blue
            )
        """)

        first = pkg.constants_of_type("Color")
        second = pkg.constants_of_type("Color")

        assert first == second
        assert [r.name for r in first] == ["Red", "Green", "Blue"]


class TestValues:
    """Tests for the resolved values in each record."""

    def test_iota_values(self, make_package):
        """Values come from the type checker, including iota."""
        pkg = make_package("""
            package size

            type ByteSize uint64

            const (
                _           = iota
                KB ByteSize = 1 << (10 * iota)
                MB
                GB
            )
        """)

        records = pkg.constants_of_type("ByteSize")

        assert [r.name for r in records] == ["KB", "MB", "GB"]
        assert [r.value for r in records] == [1 << 10, 1 << 20, 1 << 30]
        assert all(not r.signed for r in records)
        assert [r.literal for r in records] == ["1024", "1048576", "1073741824"]

    def test_negative_signed_value(self, make_package):
        """Negative values are stored as their 64-bit pattern."""
        pkg = make_package(COLOR_HEADER + """
            const (
                Unknown Color = -1
                Red Color = 0
            )
        """)

        unknown, red = pkg.constants_of_type("Color")

        assert unknown.value == (1 << 64) - 1
        assert unknown.signed
        assert unknown.int_value == -1
        assert unknown.literal == "-1"
        assert red.int_value == 0

    def test_large_unsigned_value_is_exact(self, make_package):
        """Values above the int64 range keep their exact bits and are unsigned."""
        pkg = make_package("""
            package big

            type Big uint64

            const (
                Max  Big = 1<<64 - 1
                High Big = 1 << 63
            )
        """)

        max_value, high = pkg.constants_of_type("Big")

        assert max_value.value == (1 << 64) - 1
        assert max_value.signed is False
        assert max_value.int_value == (1 << 64) - 1
        assert max_value.literal == "18446744073709551615"
        assert high.value == 1 << 63
        assert high.signed is False

    def test_rune_type_is_signed(self, make_package):
        """Types based on rune are signed 32-bit integers."""
        pkg = make_package("""
            package letters

            type Letter rune

            const (
                LA Letter = 'a' + iota
                LB
            )
        """)

        records = pkg.constants_of_type("Letter")

        assert [(r.name, r.value, r.signed) for r in records] == [("LA", 97, True), ("LB", 98, True)]

    def test_constant_defined_in_another_file(self, load_package):
        """Initializers may refer to constants declared in other files."""
        pkg = load_package({
            "base.go": """
                package color

                const Base = 100
            """,
            "color.go": """
                package color

                type Color int

                const (
                    Red Color = Base + iota
                    Green
                )
            """,
        })

        assert [r.value for r in pkg.constants_of_type("Color")] == [100, 101]


class TestErrors:
    """Tests for scan failures."""

    def test_not_found(self, make_package):
        """A type without constants raises NotFoundError."""
        pkg = make_package(COLOR_HEADER + """
            const Red Color = 0
        """)

        with pytest.raises(NotFoundError) as excinfo:
            pkg.values_of_type("Weekday")

        assert excinfo.value.type_name == "Weekday"
        assert str(excinfo.value) == "no values defined for type Weekday"

    def test_empty_type_name_rejected(self, make_package):
        """An empty type name is a caller error."""
        pkg = make_package(COLOR_HEADER)

        with pytest.raises(ValueError):
            pkg.values_of_type("")

    def test_non_integer_matching_type(self, make_package):
        """A matching constant of a float type is an inconsistency, not a skip."""
        pkg = make_package("""
            package ratio

            type Ratio float64

            const (
                Half Ratio = 0.5
            )
        """)

        with pytest.raises(InternalInconsistencyError) as excinfo:
            pkg.values_of_type("Ratio")

        assert excinfo.value.name == "Half"
        assert "non-integer constant type Ratio" in str(excinfo.value)

    def test_string_matching_type(self, make_package):
        """A matching constant of a string type is an inconsistency."""
        pkg = make_package("""
            package label

            type Label string

            const X Label = "x"
        """)

        with pytest.raises(InternalInconsistencyError) as excinfo:
            pkg.values_of_type("Label")

        assert excinfo.value.name == "X"
        assert "non-integer constant type Label" in str(excinfo.value)

    def test_out_of_range_floats_elsewhere_do_not_stop_scan(self, load_package):
        """Huge float constants of other types load and leave the scan intact."""
        pkg = load_package(COLOR_HEADER + """
            const (
                Huge = 0x1p2000
                F float64 = 1e400
                Red Color = 1
            )
        """)

        assert pkg.values_of_type("Color") == ["Red"]

    def test_non_integer_constants_of_other_types_are_ignored(self, make_package):
        """Float and string constants of other types do not disturb a scan."""
        pkg = make_package(COLOR_HEADER + """
            type Label string

            const (
                Pi = 3.14159
                Name Label = "name"
                Red Color = 1
            )
        """)

        assert pkg.values_of_type("Color") == ["Red"]

    def test_missing_symbol_entry(self):
        """A declared name the symbol table does not know aborts the scan."""
        file = parse_source("package color\n\nconst Red Color = 0\n", "color.go")
        pkg = Package("color", [CompilationUnit(Path("color.go"), file, SymbolTable())])

        with pytest.raises(InternalInconsistencyError) as excinfo:
            pkg.values_of_type("Color")

        assert excinfo.value.name == "Red"
        assert "no value for constant Red" in str(excinfo.value)

    def test_unknown_value_aborts_scan(self, make_package):
        """A matching constant whose value failed to type-check is an inconsistency."""
        pkg = make_package("""
            package bits

            type Byte uint8

            const (
                Low Byte = 1
                Over Byte = 256
            )
        """)

        with pytest.raises(InternalInconsistencyError) as excinfo:
            pkg.constants_of_type("Byte")

        assert excinfo.value.name == "Over"
        assert "not an integer" in excinfo.value.detail

    def test_inconsistency_in_later_file_gives_no_partial_result(self, make_package):
        """An inconsistency in any unit fails the whole scan."""
        pkg = make_package({
            "a.go": """
                package color

                type Color int

                const Red Color = 0
            """,
            "b.go": """
                package color

                const Broken Color = undefinedName
            """,
        })

        with pytest.raises(InternalInconsistencyError):
            pkg.values_of_type("Color")
