"""Tree-sitter powered parser producing :mod:`starlight_i18n.syntax.nodes`."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterator, List, Optional, Union

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..errors import ParseError
from ..logging import get_logger
from .nodes import (
    ArrayExpression,
    CallExpression,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    Expression,
    Identifier,
    ImportDeclaration,
    ObjectExpression,
    ObjectProperty,
    OtherStatement,
    Program,
    Statement,
    StringLiteral,
    Unsupported,
    VariableDeclaration,
    VariableDeclarator,
)

_LOGGER = get_logger("syntax")

_IGNORED_NODES = {"comment", "html_comment", "hash_bang_line"}

_ESCAPE_PATTERN = re.compile(
    r"\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2})"
    r"|([0-3][0-7]{0,2}|[4-7][0-7]?)|(\r\n|[\s\S]))"
)
_SINGLE_CHAR_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_LINE_TERMINATORS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}


@lru_cache(maxsize=1)
def _typescript_language() -> Language:
    # The TypeScript grammar is a superset of the JavaScript one, so it covers
    # astro.config.{mjs,cjs,js,ts} alike.
    return Language(tree_sitter_typescript.language_typescript())


def parse_source(source: str) -> Program:
    """Parse JavaScript/TypeScript ``source`` without evaluating it.

    Raises :class:`ParseError` carrying one diagnostic per syntax error.
    """
    source_bytes = source.encode("utf-8")
    parser = Parser(_typescript_language())
    tree = parser.parse(source_bytes)
    root = tree.root_node

    if root.has_error:
        diagnostics = list(_iter_diagnostics(root, source_bytes))
        raise ParseError(f"Failed to parse source: {'; '.join(diagnostics)}", diagnostics)

    program = _Converter(source_bytes).program(root)
    _LOGGER.debug("Parsed %d top-level statements", len(program.body))
    return program


def decode_string_literal(raw: str) -> str:
    """Return the value of a quoted string literal, resolving escapes."""

    def _replace(match: "re.Match[str]") -> str:
        code_point, code_unit, hex_byte, octal, other = match.groups()
        if code_point is not None:
            return chr(int(code_point, 16))
        if code_unit is not None:
            return chr(int(code_unit, 16))
        if hex_byte is not None:
            return chr(int(hex_byte, 16))
        if octal is not None:
            return chr(int(octal, 8))
        if other in _LINE_TERMINATORS:
            return ""
        return _SINGLE_CHAR_ESCAPES.get(other, other)

    decoded = _ESCAPE_PATTERN.sub(_replace, raw[1:-1])
    # \uD83D\uDE00 style escapes leave surrogate halves behind; fuse them.
    return decoded.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def _iter_diagnostics(root: Node, source_bytes: bytes) -> Iterator[str]:
    stack = [root]
    while stack:
        node = stack.pop()
        row, column = node.start_point
        position = f"{row + 1}:{column + 1}"
        if node.is_missing:
            yield f"{position}: missing {node.type!r}"
            continue
        if node.type == "ERROR":
            snippet = _node_text(node, source_bytes).strip().splitlines()
            yield f"{position}: unexpected {snippet[0][:40]!r}" if snippet else f"{position}: unexpected input"
            continue
        if node.has_error:
            stack.extend(reversed(node.children))


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _named(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type not in _IGNORED_NODES]


class _Converter:
    """Maps the concrete tree-sitter tree onto the closed node variant."""

    def __init__(self, source_bytes: bytes) -> None:
        self._source = source_bytes

    def program(self, root: Node) -> Program:
        body: List[Statement] = []
        has_default_export = False
        for child in _named(root):
            statement = self.statement(child)
            if isinstance(statement, ExportDefaultDeclaration):
                if has_default_export:
                    row, column = child.start_point
                    diagnostic = f"{row + 1}:{column + 1}: duplicate default export"
                    raise ParseError(
                        "Only one default export allowed per module.", [diagnostic]
                    )
                has_default_export = True
            body.append(statement)
        return Program(body=tuple(body))

    # ------------------------------------------------------------------
    # Statements

    def statement(self, node: Node) -> Statement:
        if node.type == "import_statement":
            return self._import(node)
        if node.type == "export_statement":
            return self._export(node)
        if node.type == "lexical_declaration":
            kind_node = node.child_by_field_name("kind")
            kind = self._text(kind_node) if kind_node is not None else "const"
            return self._variables(node, kind)
        if node.type == "variable_declaration":
            return self._variables(node, "var")
        return OtherStatement(kind=node.type)

    def _import(self, node: Node) -> Statement:
        source_node = node.child_by_field_name("source")
        if source_node is None or source_node.type != "string":
            return OtherStatement(kind=node.type)
        default_local: Optional[str] = None
        for child in _named(node):
            if child.type != "import_clause":
                continue
            for clause_child in _named(child):
                if clause_child.type == "identifier":
                    default_local = self._text(clause_child)
                    break
        return ImportDeclaration(
            source=decode_string_literal(self._text(source_node)),
            default_local=default_local,
        )

    def _export(self, node: Node) -> Statement:
        declaration = node.child_by_field_name("declaration")
        is_default = any(child.type == "default" for child in node.children)
        if is_default:
            value = node.child_by_field_name("value")
            if value is not None:
                return ExportDefaultDeclaration(declaration=self.expression(value))
            kind = declaration.type if declaration is not None else node.type
            return ExportDefaultDeclaration(declaration=Unsupported(kind=kind))
        if declaration is None:
            return ExportNamedDeclaration(declaration=None)
        return ExportNamedDeclaration(declaration=self.statement(declaration))

    def _variables(self, node: Node, kind: str) -> VariableDeclaration:
        declarators: List[VariableDeclarator] = []
        for child in _named(node):
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            declarators.append(
                VariableDeclarator(
                    name=self._text(name_node)
                    if name_node is not None and name_node.type == "identifier"
                    else None,
                    init=self.expression(value_node) if value_node is not None else None,
                )
            )
        return VariableDeclaration(kind=kind, declarations=tuple(declarators))

    # ------------------------------------------------------------------
    # Expressions

    def expression(self, node: Node) -> Expression:
        kind = node.type
        if kind == "parenthesized_expression":
            inner = _named(node)
            if not inner or inner[0].type == "sequence_expression":
                return Unsupported(kind=kind)
            return self.expression(inner[0])
        if kind == "object":
            return self._object(node)
        if kind == "array":
            return ArrayExpression(elements=tuple(self.expression(child) for child in _named(node)))
        if kind == "call_expression":
            return self._call(node)
        if kind == "identifier":
            return Identifier(name=self._text(node))
        if kind == "string":
            return StringLiteral(value=decode_string_literal(self._text(node)))
        return Unsupported(kind=kind)

    def _object(self, node: Node) -> ObjectExpression:
        properties: List[ObjectProperty] = []
        for child in _named(node):
            if child.type == "pair":
                key_node = child.child_by_field_name("key")
                value_node = child.child_by_field_name("value")
                if value_node is None:
                    continue
                properties.append(
                    ObjectProperty(
                        key=self._property_key(key_node) if key_node is not None else None,
                        value=self.expression(value_node),
                    )
                )
            elif child.type == "shorthand_property_identifier":
                identifier = Identifier(name=self._text(child))
                properties.append(ObjectProperty(key=identifier, value=identifier))
        return ObjectExpression(properties=tuple(properties))

    def _call(self, node: Node) -> Expression:
        if any(child.type == "optional_chain" for child in node.children):
            return Unsupported(kind="optional_call_expression")
        arguments = node.child_by_field_name("arguments")
        callee = node.child_by_field_name("function")
        if arguments is None or arguments.type != "arguments" or callee is None:
            return Unsupported(kind="tagged_template")
        return CallExpression(
            callee=self.expression(callee),
            arguments=tuple(self.expression(child) for child in _named(arguments)),
        )

    def _property_key(self, node: Node) -> Optional[Union[Identifier, StringLiteral]]:
        if node.type == "property_identifier":
            return Identifier(name=self._text(node))
        if node.type == "string":
            return StringLiteral(value=decode_string_literal(self._text(node)))
        if node.type == "computed_property_name":
            inner = _named(node)
            if inner and inner[0].type in {"identifier", "string"}:
                return self._property_key_from_expression(inner[0])
        return None

    def _property_key_from_expression(self, node: Node) -> Union[Identifier, StringLiteral]:
        if node.type == "identifier":
            return Identifier(name=self._text(node))
        return StringLiteral(value=decode_string_literal(self._text(node)))

    def _text(self, node: Node) -> str:
        return _node_text(node, self._source)


__all__ = ["decode_string_literal", "parse_source"]
