"""Closed set of syntax nodes recognised in Astro configuration files.

Only the shapes the extractor consumes get a dedicated node; every other
expression collapses to :class:`Unsupported` and every other statement to
:class:`OtherStatement`, both keeping the grammar kind for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class Unsupported:
    kind: str


@dataclass(frozen=True)
class ObjectProperty:
    """A ``key: value`` entry; shorthand entries reuse the identifier as value.

    ``key`` is None for keys that are neither identifiers nor string literals
    (numeric keys, computed expressions).
    """

    key: Optional[Union[Identifier, StringLiteral]]
    value: "Expression"

    @property
    def name(self) -> Optional[str]:
        if isinstance(self.key, Identifier):
            return self.key.name
        if isinstance(self.key, StringLiteral):
            return self.key.value
        return None


@dataclass(frozen=True)
class ObjectExpression:
    properties: Tuple[ObjectProperty, ...]

    def find(self, name: str) -> Optional[ObjectProperty]:
        """Return the first property whose key resolves to ``name``."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass(frozen=True)
class ArrayExpression:
    elements: Tuple["Expression", ...]


@dataclass(frozen=True)
class CallExpression:
    callee: "Expression"
    arguments: Tuple["Expression", ...]

    @property
    def first_argument(self) -> Optional["Expression"]:
        return self.arguments[0] if self.arguments else None


Expression = Union[
    ObjectExpression,
    ArrayExpression,
    CallExpression,
    Identifier,
    StringLiteral,
    Unsupported,
]


@dataclass(frozen=True)
class VariableDeclarator:
    """``name = init``; ``name`` is None for destructuring patterns."""

    name: Optional[str]
    init: Optional[Expression]


@dataclass(frozen=True)
class VariableDeclaration:
    kind: str
    declarations: Tuple[VariableDeclarator, ...]


@dataclass(frozen=True)
class ImportDeclaration:
    source: str
    default_local: Optional[str]


@dataclass(frozen=True)
class ExportDefaultDeclaration:
    declaration: Expression


@dataclass(frozen=True)
class ExportNamedDeclaration:
    declaration: Optional["Statement"]


@dataclass(frozen=True)
class OtherStatement:
    kind: str


Statement = Union[
    ImportDeclaration,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    VariableDeclaration,
    OtherStatement,
]


@dataclass(frozen=True)
class Program:
    body: Tuple[Statement, ...]

    def default_export(self) -> Optional[ExportDefaultDeclaration]:
        for statement in self.body:
            if isinstance(statement, ExportDefaultDeclaration):
                return statement
        return None


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
]
