"""Tests for the tree-sitter backed source parser."""

from __future__ import annotations

import pytest

from starlight_i18n.errors import ParseError
from starlight_i18n.syntax import (
    ArrayExpression,
    CallExpression,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    Identifier,
    ImportDeclaration,
    ObjectExpression,
    OtherStatement,
    StringLiteral,
    Unsupported,
    VariableDeclaration,
    decode_string_literal,
    parse_source,
)


def test_parse_source_reads_module_statements() -> None:
    program = parse_source(
        """
import { defineConfig } from 'astro/config';
import starlight from "@astrojs/starlight";
import locales from './locales.json';

export const shared = { fr: { label: 'Français' } };
let other = 1;

export default defineConfig({ integrations: [starlight({ title: 'Docs' })] });
"""
    )

    kinds = [type(statement) for statement in program.body]
    assert kinds == [
        ImportDeclaration,
        ImportDeclaration,
        ImportDeclaration,
        ExportNamedDeclaration,
        VariableDeclaration,
        ExportDefaultDeclaration,
    ]

    named_import, default_import, json_import = program.body[:3]
    assert named_import == ImportDeclaration(source="astro/config", default_local=None)
    assert default_import == ImportDeclaration(source="@astrojs/starlight", default_local="starlight")
    assert json_import == ImportDeclaration(source="./locales.json", default_local="locales")

    exported = program.body[3]
    assert isinstance(exported, ExportNamedDeclaration)
    assert isinstance(exported.declaration, VariableDeclaration)
    assert exported.declaration.kind == "const"
    assert exported.declaration.declarations[0].name == "shared"

    default_export = program.default_export()
    assert default_export is not None
    call = default_export.declaration
    assert isinstance(call, CallExpression)
    assert call.callee == Identifier(name="defineConfig")
    config = call.first_argument
    assert isinstance(config, ObjectExpression)
    integrations = config.find("integrations")
    assert integrations is not None
    assert isinstance(integrations.value, ArrayExpression)


def test_parse_source_accepts_type_annotations() -> None:
    program = parse_source(
        """
import type { AstroUserConfig } from 'astro';

interface Labels { label: string }

const locales: Record<string, Labels> = { fr: { label: 'Français' } };

export default defineConfig({ integrations: [] } as AstroUserConfig);
"""
    )

    assert isinstance(program.body[1], OtherStatement)
    declaration = program.body[2]
    assert isinstance(declaration, VariableDeclaration)
    assert declaration.declarations[0].name == "locales"
    assert isinstance(declaration.declarations[0].init, ObjectExpression)

    default_export = program.default_export()
    assert default_export is not None
    call = default_export.declaration
    assert isinstance(call, CallExpression)
    assert isinstance(call.first_argument, Unsupported)


def test_parse_source_accepts_script_syntax() -> None:
    program = parse_source(
        """
var locales = { 'pt-br': { label: 'Português' } };
module.exports = locales;
"""
    )

    assert isinstance(program.body[0], VariableDeclaration)
    assert program.body[0].kind == "var"
    assert program.default_export() is None


def test_parse_source_object_keys_and_values() -> None:
    program = parse_source(
        """
const value = {
  plain: 'a',
  'quoted-key': "b",
  ['computed']: 'c',
  42: 'd',
  shorthand,
  ...spread,
  method() { return 1 },
  nested: { inner: `template` },
  wrapped: ('e'),
};
"""
    )

    declaration = program.body[0]
    assert isinstance(declaration, VariableDeclaration)
    value = declaration.declarations[0].init
    assert isinstance(value, ObjectExpression)

    names = [prop.name for prop in value.properties]
    assert names == ["plain", "quoted-key", "computed", None, "shorthand", "nested", "wrapped"]
    assert value.properties[0].value == StringLiteral(value="a")
    assert value.properties[1].value == StringLiteral(value="b")
    assert value.properties[4].value == Identifier(name="shorthand")
    assert value.properties[6].value == StringLiteral(value="e")

    nested = value.find("nested")
    assert nested is not None
    assert isinstance(nested.value, ObjectExpression)
    assert nested.value.properties[0].value == Unsupported(kind="template_string")


def test_object_find_returns_first_match() -> None:
    program = parse_source("const value = { key: 'first', 'key': 'second' };")

    declaration = program.body[0]
    assert isinstance(declaration, VariableDeclaration)
    value = declaration.declarations[0].init
    assert isinstance(value, ObjectExpression)
    found = value.find("key")
    assert found is not None
    assert found.value == StringLiteral(value="first")


def test_parse_source_reports_syntax_errors() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_source("export default defineConfig({ integrations: [ })")

    assert excinfo.value.diagnostics
    assert all(":" in diagnostic for diagnostic in excinfo.value.diagnostics)


def test_parse_source_rejects_duplicate_default_exports() -> None:
    with pytest.raises(ParseError, match="Only one default export"):
        parse_source("export default a();\nexport default b();\n")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("'plain'", "plain"),
        ('"double"', "double"),
        (r"'it\'s'", "it's"),
        (r"'line\nbreak'", "line\nbreak"),
        (r"'\x41B\u{43}'", "ABC"),
        (r"'\uD83D\uDE00'", "\U0001F600"),
        (r"'caf\u00e9'", "caf\u00e9"),
        ("'日本語'", "日本語"),
    ],
)
def test_decode_string_literal(raw: str, expected: str) -> None:
    assert decode_string_literal(raw) == expected
