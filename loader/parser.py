"""Go source parsing with tree-sitter.

tree-sitter-go builds a concrete syntax tree for the whole file. This module
converts the declaration level of that tree into ``model.syntax`` nodes.
Constant declarations are converted completely, including their initializer
expressions. Function bodies, variable initializers and composite types are
only kept as opaque markers.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

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
    ImportSpec,
    IndexExpr,
    LitKind,
    ParenExpr,
    Position,
    SelectorExpr,
    Spec,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
)
from .errors import LoadError, ParseError
from .literals import unquote_string


logger = logging.getLogger(__name__)

_LITERAL_KINDS = {
    "int_literal": LitKind.INT,
    "float_literal": LitKind.FLOAT,
    "imaginary_literal": LitKind.IMAG,
    "rune_literal": LitKind.CHAR,
    "interpreted_string_literal": LitKind.STRING,
    "raw_string_literal": LitKind.STRING,
}

# Predeclared identifiers that the grammar gives node types of their own.
_PREDECLARED_NODES = {"iota", "true", "false", "nil"}

_IDENTIFIER_NODES = {"identifier", "type_identifier", "field_identifier", "package_identifier"}

_TYPE_DESCRIPTIONS = {
    "struct_type": "struct",
    "interface_type": "interface",
    "map_type": "map",
    "channel_type": "chan",
    "function_type": "func",
    "pointer_type": "pointer",
    "array_type": "array",
    "implicit_length_array_type": "array",
    "slice_type": "slice",
    "generic_type": "generic type",
    "negated_type": "constraint",
}

_DECLARATIONS = {
    "const_declaration": DeclKind.CONST,
    "var_declaration": DeclKind.VAR,
    "type_declaration": DeclKind.TYPE,
    "import_declaration": DeclKind.IMPORT,
}

_SPEC_NODES = {
    DeclKind.CONST: {"const_spec"},
    DeclKind.VAR: {"var_spec"},
    DeclKind.TYPE: {"type_spec", "type_alias"},
    DeclKind.IMPORT: {"import_spec"},
}


@lru_cache(maxsize=None)
def go_parser() -> Parser:
    """The shared tree-sitter parser for Go."""
    return Parser(get_language("go"))


def _named(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


class SyntaxConverter:
    """Converts a tree-sitter-go tree into ``model.syntax`` nodes."""

    def __init__(self, filename: str):
        self.filename = filename

    def pos(self, node: Node) -> Position:
        row, column = node.start_point
        return Position(self.filename, row + 1, column + 1)

    def error(self, node: Node, message: str) -> ParseError:
        return ParseError(self.pos(node), message)

    def ident(self, node: Node) -> Ident:
        return Ident(_text(node), self.pos(node))

    # -- file level -------------------------------------------------------

    def convert(self, root: Node) -> File:
        if root.has_error:
            bad = _first_error(root) or root
            if bad.is_missing:
                raise self.error(bad, f"syntax error: missing {bad.type}")
            snippet = _text(bad).split("\n", 1)[0][:20]
            raise self.error(bad, f"syntax error: unexpected {snippet!r}")

        package: Optional[Ident] = None
        decls = []
        for child in _named(root):
            if child.type == "package_clause":
                if package is not None:
                    raise self.error(child, "unexpected second package clause")
                package = self.ident(_named(child)[0])
                continue
            if package is None:
                raise self.error(child, f"expected 'package', found {child.type}")
            if child.type in _DECLARATIONS:
                decls.append(self.convert_gen_decl(child, _DECLARATIONS[child.type]))
            elif child.type in ("function_declaration", "method_declaration"):
                decls.append(FuncDecl(
                    name=self.ident(child.child_by_field_name("name")),
                    method=child.type == "method_declaration",
                    pos=self.pos(child),
                ))
            else:
                raise self.error(child, f"non-declaration statement outside function body: {child.type}")

        if package is None:
            raise self.error(root, "expected 'package', found EOF")
        return File(filename=self.filename, package=package, decls=decls)

    def convert_gen_decl(self, node: Node, kind: DeclKind) -> GenDecl:
        decl = GenDecl(tok=kind, pos=self.pos(node))
        spec_nodes = _SPEC_NODES[kind]
        for child in node.children:
            if child.type == "(":
                decl.grouped = True
            elif child.type.endswith("_spec_list"):
                decl.grouped = True
                decl.specs.extend(self.convert_spec(s, kind) for s in _named(child) if s.type in spec_nodes)
            elif child.type in spec_nodes:
                decl.specs.append(self.convert_spec(child, kind))
        return decl

    def convert_spec(self, node: Node, kind: DeclKind) -> Spec:
        if kind is DeclKind.IMPORT:
            name = node.child_by_field_name("name")
            path = node.child_by_field_name("path")
            try:
                import_path = unquote_string(_text(path)).decode("utf-8")
            except ValueError as e:
                raise self.error(path, f"invalid import path {_text(path)}: {e}") from e
            return ImportSpec(
                path=import_path,
                name=self.ident(name) if name is not None else None,
                pos=self.pos(node),
            )
        if kind is DeclKind.TYPE:
            return TypeSpec(
                name=self.ident(node.child_by_field_name("name")),
                type=self.convert_type(node.child_by_field_name("type")),
                alias=node.type == "type_alias",
                type_params=node.child_by_field_name("type_parameters") is not None,
                pos=self.pos(node),
            )

        # The name field also covers the commas between names.
        names = [self.ident(n) for n in node.children_by_field_name("name") if n.type == "identifier"]
        spec = ValueSpec(names=names, pos=self.pos(node))
        if kind is DeclKind.CONST:
            typ = node.child_by_field_name("type")
            if typ is not None:
                spec.type = self.convert_type(typ)
            values = node.child_by_field_name("value")
            if values is not None:
                spec.values = [self.convert_expr(v) for v in _named(values)]
        return spec

    # -- types ------------------------------------------------------------

    def convert_type(self, node: Node) -> Expr:
        if node.type in _IDENTIFIER_NODES:
            return self.ident(node)
        if node.type == "qualified_type":
            package = node.child_by_field_name("package")
            return SelectorExpr(self.ident(package), self.ident(node.child_by_field_name("name")), self.pos(node))
        if node.type == "parenthesized_type":
            return ParenExpr(self.convert_type(_named(node)[0]), self.pos(node))
        return CompositeType(_TYPE_DESCRIPTIONS.get(node.type, node.type), self.pos(node))

    # -- expressions ------------------------------------------------------

    def convert_expr(self, node: Node) -> Expr:
        kind = node.type
        if kind in _IDENTIFIER_NODES or kind in _PREDECLARED_NODES:
            return self.ident(node)
        if kind in _LITERAL_KINDS:
            return BasicLit(_LITERAL_KINDS[kind], _text(node), self.pos(node))
        if kind == "parenthesized_expression":
            return ParenExpr(self.convert_expr(_named(node)[0]), self.pos(node))
        if kind == "unary_expression":
            return UnaryExpr(
                _text(node.child_by_field_name("operator")),
                self.convert_expr(node.child_by_field_name("operand")),
                self.pos(node),
            )
        if kind == "binary_expression":
            return BinaryExpr(
                _text(node.child_by_field_name("operator")),
                self.convert_expr(node.child_by_field_name("left")),
                self.convert_expr(node.child_by_field_name("right")),
                self.pos(node),
            )
        if kind == "selector_expression":
            return SelectorExpr(
                self.convert_expr(node.child_by_field_name("operand")),
                self.ident(node.child_by_field_name("field")),
                self.pos(node),
            )
        if kind == "call_expression":
            arguments = node.child_by_field_name("arguments")
            return CallExpr(
                self.convert_expr(node.child_by_field_name("function")),
                [self.convert_expr(a) for a in _named(arguments)],
                self.pos(node),
            )
        if kind == "type_conversion_expression":
            return CallExpr(
                self.convert_type(node.child_by_field_name("type")),
                [self.convert_expr(node.child_by_field_name("operand"))],
                self.pos(node),
            )
        if kind == "index_expression":
            return IndexExpr(
                self.convert_expr(node.child_by_field_name("operand")),
                self.convert_expr(node.child_by_field_name("index")),
                self.pos(node),
            )
        if kind in ("qualified_type", "parenthesized_type"):
            return self.convert_type(node)
        # Composite literals, function literals and type expressions are never constant.
        return CompositeType(_TYPE_DESCRIPTIONS.get(kind, kind), self.pos(node))


def parse_source(source: str, filename: str = "<input>") -> File:
    """Parse Go source text into a ``File``."""
    tree = go_parser().parse(source.removeprefix("\ufeff").encode("utf-8"))
    return SyntaxConverter(filename).convert(tree.root_node)


def parse_file(file_path: Path) -> File:
    """
    Read and parse a Go source file.

    Args:
        file_path: Path to the ``.go`` file.

    Returns:
        The parsed file.

    Raises:
        LoadError: If the file cannot be read or is not valid Go.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"cannot read {file_path}: {e}") from e
    logger.debug("parsing %s", file_path)
    return parse_source(content, str(file_path))
