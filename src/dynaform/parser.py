"""Parse schema text pasted or loaded by developers into a schema document.

Supported inputs, tried in order:

- JSON text
- TOML text
- a JavaScript/TypeScript snippet containing an object literal, e.g.
  ``export const schema = { type: 'object', properties: { ... } }``

Object literals are translated into Python literals and read with
``ast.literal_eval``; nothing is ever executed.
"""

from __future__ import annotations

import ast
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .errors import SchemaException

logger = logging.getLogger(__name__)

ParseMode = Literal["json", "toml", "object-literal"]

LITERAL_NAMES = {
    "true": "True",
    "false": "False",
    "null": "None",
    "undefined": "None",
}

_TOKEN_RE = re.compile(
    r"""
    (?P<comment>//[^\n]*|/\*.*?\*/)
    |(?P<string>"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*'|`(?:\\.|[^`\\])*`)
    |(?P<number>\d[\w.]*)
    |(?P<name>[A-Za-z_$][\w$]*)
    |(?P<other>.)
    """,
    re.DOTALL | re.VERBOSE,
)
_KEY_FOLLOWS_RE = re.compile(r"\s*:")


@dataclass(frozen=True, slots=True)
class ParseResult:
    schema: dict
    mode: ParseMode


def ensure_form_schema(value: Any) -> dict:
    """Check that a parsed value has the shape of a form schema"""
    if not isinstance(value, dict):
        raise SchemaException("Parsed value is not an object")
    # an absent type is allowed, a different one is not
    if "type" in value and value["type"] != "object":
        raise SchemaException("Schema must have type: 'object'")
    if not isinstance(value.get("properties"), dict):
        raise SchemaException("Schema must include a properties object")
    return value


def extract_object_literal(source: str) -> Optional[str]:
    """Return the first balanced ``{...}`` after an assignment or default export.

    Braces inside quoted and template strings are ignored.
    """
    export_idx = source.find("export default")
    eq_idx = source.find("=")
    start = export_idx if export_idx >= 0 else eq_idx if eq_idx >= 0 else 0

    open_idx = source.find("{", start)
    if open_idx < 0:
        return None

    depth = 0
    quote = None
    escape = False
    for i in range(open_idx, len(source)):
        ch = source[i]

        if escape:
            escape = False
            continue

        if quote:
            if ch == "\\":
                escape = True
            elif ch == quote:
                quote = None
            continue

        if ch in ("'", '"', "`"):
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return source[open_idx : i + 1]

    return None


def _translate_string(token: str) -> str:
    if token.startswith("`"):
        inner = token[1:-1]
        if "${" in inner:
            raise SchemaException("Template strings with substitutions are not supported")
        return repr(inner)
    return token


def object_literal_to_python(literal: str) -> str:
    """Rewrite a JavaScript object literal as Python literal source.

    Bare keys are quoted, ``true``/``false``/``null``/``undefined`` become
    Python constants, comments are dropped. Any other identifier is an
    expression and is rejected.
    """
    out = []
    for match in _TOKEN_RE.finditer(literal):
        kind = match.lastgroup
        token = match.group()

        if kind == "comment":
            continue
        if kind == "string":
            out.append(_translate_string(token))
        elif kind == "name":
            if _KEY_FOLLOWS_RE.match(literal, match.end()):
                out.append(repr(token))
            elif token in LITERAL_NAMES:
                out.append(LITERAL_NAMES[token])
            else:
                raise SchemaException(f"Unsupported expression in schema literal: {token}")
        else:
            out.append(token)
    return "".join(out)


def _parse_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _parse_toml(text: str) -> Optional[Any]:
    try:
        return tomlkit.loads(text).unwrap()
    except TOMLKitError:
        return None


def _parse_object_literal(text: str) -> Any:
    literal = text if text.startswith("{") else extract_object_literal(text)
    if not literal:
        raise SchemaException(
            "Unable to find a schema object. Paste valid JSON or TOML, "
            "or a snippet that contains `= { ... }`."
        )

    source = object_literal_to_python(literal)
    try:
        return ast.literal_eval(source)
    except (ValueError, SyntaxError) as e:
        raise SchemaException(f"Invalid schema object literal: {e}") from e


def parse_schema_input(text: str) -> ParseResult:
    """Parse developer-supplied schema text.

    Args:
        text: JSON, TOML or source snippet

    Returns:
        The schema document and the format it was read as

    Raises:
        SchemaException: If the text is empty, unreadable, or not a form schema
    """
    raw = text.strip()
    if not raw:
        raise SchemaException("Paste a JSON schema first")

    parsed = _parse_json(raw)
    if parsed is not None:
        return ParseResult(schema=ensure_form_schema(parsed), mode="json")

    parsed = _parse_toml(raw)
    if parsed:
        return ParseResult(schema=ensure_form_schema(parsed), mode="toml")

    logger.debug("Input is neither JSON nor TOML, reading it as an object literal")
    parsed = _parse_object_literal(raw)
    return ParseResult(schema=ensure_form_schema(parsed), mode="object-literal")


def load_schema_file(path: Path | str) -> ParseResult:
    path = Path(path)
    if not path.is_file():
        raise SchemaException(f"Schema file not found: {path}")
    return parse_schema_input(path.read_text(encoding="utf-8"))
