"""Compiled query-path mappings built once from configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as parse_jsonpath

from influx_sink.config import MappingConfig
from influx_sink.errors import PathSyntaxError, SelectorError, UnknownTypeError

logger = logging.getLogger(__name__)


class ExpectedType(str, Enum):
    """Target representation for a matched JSON value."""

    BOOLEAN = "boolean"
    FLOAT = "float"
    SIGNED_INTEGER = "integer"
    UNSIGNED_INTEGER = "unsigned"
    TEXT = "text"
    NONE = "none"


_TYPE_KEYWORDS: dict[str, ExpectedType] = {
    "bool": ExpectedType.BOOLEAN,
    "boolean": ExpectedType.BOOLEAN,
    "float": ExpectedType.FLOAT,
    "number": ExpectedType.FLOAT,
    "int": ExpectedType.SIGNED_INTEGER,
    "integer": ExpectedType.SIGNED_INTEGER,
    "uint": ExpectedType.UNSIGNED_INTEGER,
    "unsigned": ExpectedType.UNSIGNED_INTEGER,
    "string": ExpectedType.TEXT,
    "text": ExpectedType.TEXT,
    "": ExpectedType.NONE,
    "none": ExpectedType.NONE,
}


def resolve_type_hint(hint: str | None) -> ExpectedType:
    """Map a type keyword to an `ExpectedType`; `None` means no entry at all."""
    if hint is None:
        return ExpectedType.NONE
    expected = _TYPE_KEYWORDS.get(hint.lower())
    if expected is None:
        raise UnknownTypeError(f"Unknown type: {hint}")
    return expected


@dataclass(frozen=True, slots=True)
class PathMapping:
    """A compiled query path with its destination name and expected type.

    The expression is parsed once, on construction, and reused for every
    document; a malformed path raises `PathSyntaxError` right away.
    """

    destination_name: str
    expression: str
    expected_type: ExpectedType = ExpectedType.NONE
    compiled_expression: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = parse_jsonpath(self.expression)
        except JSONPathError as exc:
            raise PathSyntaxError(f"Failed to parse JSON path: {exc}") from exc
        object.__setattr__(self, "compiled_expression", compiled)

    @classmethod
    def compile(
        cls,
        destination_name: str,
        expression: str,
        expected_type: ExpectedType = ExpectedType.NONE,
    ) -> "PathMapping":
        return cls(destination_name, expression, expected_type)

    def select(self, document: Any) -> list[Any]:
        """Return every value the path matches in `document`."""
        try:
            matches = self.compiled_expression.find(document)
        except Exception as exc:
            raise SelectorError(str(exc)) from exc
        return [match.value for match in matches]


@dataclass(frozen=True, slots=True)
class Mappings:
    """Field and tag mapping sets, keyed by destination name."""

    fields: dict[str, PathMapping] = field(default_factory=dict)
    tags: dict[str, PathMapping] = field(default_factory=dict)


def compile_mappings(config: MappingConfig) -> Mappings:
    """Compile every configured field and tag path.

    Raises `PathSyntaxError` or `UnknownTypeError` on the first bad entry.
    Names are lower-cased, so entries differing only by case overwrite each
    other.
    """

    fields: dict[str, PathMapping] = {}
    for name, expression in config.fields.items():
        logger.debug("Adding field - %s -> %s", name, expression)
        expected_type = resolve_type_hint(config.field_types.get(name))
        destination = name.lower()
        fields[destination] = PathMapping.compile(destination, expression, expected_type)

    tags: dict[str, PathMapping] = {}
    for name, expression in config.tags.items():
        logger.debug("Adding tag - %s -> %s", name, expression)
        destination = name.lower()
        tags[destination] = PathMapping.compile(destination, expression)

    logger.info("Compiled %d field and %d tag mappings", len(fields), len(tags))
    return Mappings(fields=fields, tags=tags)
