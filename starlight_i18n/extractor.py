"""Static extraction of the Starlight locales configuration from an Astro config.

The configuration file is never executed. Only a narrow set of shapes is
recognised::

    export default defineConfig({
      integrations: [
        starlight({ defaultLocale: 'en', locales: { ... } | identifier }),
      ],
    })

where ``identifier`` names a top-level (optionally exported) variable holding an
object literal, or the default import of a relative ``.json`` file.
"""

from __future__ import annotations

import json
from typing import Callable, Dict, Optional

from .errors import ExtractionError, ImportReadError, InvariantViolation, ParseError
from .logging import get_logger
from .models import ROOT_LOCALE, Locale, LocalesConfig
from .syntax import (
    ArrayExpression,
    CallExpression,
    ExportDefaultDeclaration,
    ExportNamedDeclaration,
    Identifier,
    ImportDeclaration,
    ObjectExpression,
    Program,
    StringLiteral,
    VariableDeclaration,
    parse_source,
)

JSONReader = Callable[[str], str]

INTEGRATION_NAME = "starlight"

_LOGGER = get_logger("extractor")


def extract_locales_config_from_code(code: str, read_json: JSONReader) -> LocalesConfig:
    """Parse ``code`` and extract its :class:`LocalesConfig`."""
    try:
        program = parse_source(code)
    except ParseError as exc:
        raise ParseError(
            "Failed to parse Astro configuration file: "
            f"{json.dumps(exc.diagnostics, ensure_ascii=False)}",
            exc.diagnostics,
        ) from exc
    return extract_locales_config(program, read_json)


def extract_locales_config(program: Program, read_json: JSONReader) -> LocalesConfig:
    """Walk ``program`` down to the Starlight locales and normalise them.

    ``read_json`` receives the relative import path of a JSON locales table and
    returns its raw text; it is only called for ``import x from './x.json'``.
    """
    starlight_config = _get_starlight_config(program)
    locales = _get_locales(program, starlight_config, read_json)

    default_locale = _get_default_locale(starlight_config)
    if default_locale is None:
        root = locales.get(ROOT_LOCALE)
        default_locale = root.lang if root is not None else None
    if not default_locale:
        raise InvariantViolation("Failed to find Starlight default locale.")

    translatable = {
        name: locale
        for name, locale in locales.items()
        if name != ROOT_LOCALE and name != default_locale
    }
    if not translatable:
        raise InvariantViolation("Failed to find any Starlight locale to translate.")

    _LOGGER.debug(
        "Default locale %s, locales to translate: %s", default_locale, ", ".join(translatable)
    )
    return LocalesConfig(default_locale=default_locale, locales=translatable)


def _get_starlight_config(program: Program) -> ObjectExpression:
    export = program.default_export()
    if export is None:
        raise ExtractionError(
            "Failed to find Starlight configuration in the Astro configuration file."
        )

    if not isinstance(export.declaration, CallExpression):
        raise ExtractionError(
            "The default export of the Astro configuration file must be a call to the "
            "`defineConfig` function."
        )

    astro_config = export.declaration.first_argument
    if not isinstance(astro_config, ObjectExpression):
        raise ExtractionError(
            "The first argument of the `defineConfig` function must be an object containing "
            "the Astro configuration."
        )

    integrations = astro_config.find("integrations")
    if integrations is None or not isinstance(integrations.value, ArrayExpression):
        raise ExtractionError(
            "The Astro configuration must contain an `integrations` property that must be an array."
        )

    integration = next(
        (
            element
            for element in integrations.value.elements
            if isinstance(element, CallExpression)
            and isinstance(element.callee, Identifier)
            and element.callee.name == INTEGRATION_NAME
        ),
        None,
    )
    if integration is None:
        raise ExtractionError(
            f"Failed to find the `{INTEGRATION_NAME}` integration in the Astro configuration."
        )

    starlight_config = integration.first_argument
    if not isinstance(starlight_config, ObjectExpression):
        raise ExtractionError(
            f"The first argument of the `{INTEGRATION_NAME}` integration must be an object "
            "containing the Starlight configuration."
        )
    return starlight_config


def _get_locales(
    program: Program, starlight_config: ObjectExpression, read_json: JSONReader
) -> Dict[str, Locale]:
    prop = starlight_config.find("locales")
    if prop is None or not isinstance(prop.value, (ObjectExpression, Identifier)):
        raise ExtractionError("Failed to find locales in Starlight configuration.")

    if isinstance(prop.value, Identifier):
        _LOGGER.debug("Resolving locales from identifier `%s`", prop.value.name)
        locales_object = _resolve_identifier(program, prop.value, read_json)
    else:
        locales_object = prop.value

    if locales_object is None:
        raise ExtractionError(
            "Failed to find valid locales configuration in Starlight configuration."
        )

    locales: Dict[str, Locale] = {}
    for entry in locales_object.properties:
        name = entry.name
        if not name or not isinstance(entry.value, ObjectExpression):
            continue
        record: Dict[str, str] = {}
        for field in entry.value.properties:
            if field.name and isinstance(field.value, StringLiteral):
                record[field.name] = field.value.value
        locale = Locale.from_record(record)
        if locale is not None:
            locales[name] = locale
    return locales


def _get_default_locale(starlight_config: ObjectExpression) -> Optional[str]:
    prop = starlight_config.find("defaultLocale")
    if prop is not None and isinstance(prop.value, StringLiteral):
        return prop.value.value
    return None


def _resolve_identifier(
    program: Program, identifier: Identifier, read_json: JSONReader
) -> Optional[ObjectExpression]:
    # Linear scan of the top-level statements: a matching JSON import wins
    # immediately, variable declarations resolve to the last match.
    resolved: Optional[ObjectExpression] = None
    for statement in program.body:
        if isinstance(statement, ImportDeclaration):
            imported = _resolve_json_import(statement, identifier, read_json)
            if imported is not None:
                return imported
            continue

        declaration = (
            statement.declaration if isinstance(statement, ExportNamedDeclaration) else statement
        )
        if not isinstance(declaration, VariableDeclaration):
            continue
        for declarator in declaration.declarations:
            if declarator.name == identifier.name and isinstance(
                declarator.init, ObjectExpression
            ):
                resolved = declarator.init
    return resolved


def _resolve_json_import(
    declaration: ImportDeclaration, identifier: Identifier, read_json: JSONReader
) -> Optional[ObjectExpression]:
    if declaration.default_local != identifier.name:
        return None

    source = declaration.source
    if not source.startswith(".") or not source.endswith(".json"):
        return None

    _LOGGER.debug("Reading locales from JSON import %s", source)
    try:
        text = read_json(source)
    except Exception as exc:
        raise ImportReadError(
            f"Failed to read imported JSON locales configuration at '{source}'."
        ) from exc

    if not text.strip():
        raise ImportReadError("The imported JSON locales configuration is empty.")

    try:
        json_program = parse_source(f"export default {text}")
    except ParseError as exc:
        raise ImportReadError(
            "Failed to parse imported JSON locales configuration.", exc.diagnostics
        ) from exc

    if len(json_program.body) != 1:
        return None
    statement = json_program.body[0]
    if isinstance(statement, ExportDefaultDeclaration) and isinstance(
        statement.declaration, ObjectExpression
    ):
        return statement.declaration
    return None


__all__ = [
    "INTEGRATION_NAME",
    "JSONReader",
    "extract_locales_config",
    "extract_locales_config_from_code",
]
