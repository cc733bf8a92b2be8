"""Static parsing of JavaScript/TypeScript configuration sources."""

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
from .parser import decode_string_literal, parse_source

__all__ = [
    "ArrayExpression",
    "CallExpression",
    "ExportDefaultDeclaration",
    "ExportNamedDeclaration",
    "Expression",
    "Identifier",
    "ImportDeclaration",
    "ObjectExpression",
    "ObjectProperty",
    "OtherStatement",
    "Program",
    "Statement",
    "StringLiteral",
    "Unsupported",
    "VariableDeclaration",
    "VariableDeclarator",
    "decode_string_literal",
    "parse_source",
]
