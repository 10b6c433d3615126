"""Record schemas built from annotated dataclasses.

A schema is built once per record type and cached. It lists the fields in
declaration order with their rules already sorted out, so the validation
pipeline never has to inspect annotations again.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Annotated, Any, get_args, get_origin

from pydantic import TypeAdapter

from sheet_record_extraction.rules import (
    FORMAT_RULES,
    DateFormat,
    DynamicRank,
    Ignored,
    NumberFormat,
    Required,
    Transform,
    ValueLimit,
)
from sheet_record_extraction.utils.exceptions import ConfigurationError, ErrorCode
from sheet_record_extraction.utils.logging import get_logger
from sheet_record_extraction.utils.patterns import parse_date

logger = get_logger(__name__)

__all__ = [
    "SCALAR_TYPES",
    "FieldDescriptor",
    "RecordBuilder",
    "RecordSchema",
    "build_schema",
    "convert_scalar",
    "is_scalar_type",
]

SCALAR_TYPES: tuple[type, ...] = (str, int, float, Decimal, bool, object)


def is_scalar_type(target: Any) -> bool:
    return target in SCALAR_TYPES


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def convert_scalar(value: str, target: Any, date_pattern: str | None = None) -> Any:
    """Convert a canonical string to ``target``.

    Strings (and ``object``/``Any``) are kept as is. Empty strings become
    ``None`` for every other type, so blank cells need an optional
    annotation. ``date``/``datetime`` targets are parsed with
    ``date_pattern`` when one is given; everything else goes through
    pydantic's lax conversion.

    Raises:
        pydantic.ValidationError: If the value cannot be converted.
    """
    if target in (str, object, Any):
        return value
    if value == "":
        return _adapter(target).validate_python(None)
    if date_pattern and target in (date, datetime):
        try:
            parsed = parse_date(value, date_pattern)
        except ValueError:
            return _adapter(target).validate_python(value)
        return parsed.date() if target is date else parsed
    return _adapter(target).validate_python(value)


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record type with its rules resolved."""

    name: str
    declared_index: int
    target_type: Any
    required: Required | None = None
    rule: DateFormat | NumberFormat | ValueLimit | DynamicRank | None = None
    transform: Transform | None = None
    ignored: bool = False
    nested: RecordSchema | None = None

    @property
    def is_dynamic(self) -> bool:
        return isinstance(self.rule, DynamicRank)

    @property
    def date_pattern(self) -> str | None:
        if isinstance(self.rule, DateFormat):
            return self.rule.pattern
        return None

    @property
    def number_pattern(self) -> str | None:
        if isinstance(self.rule, NumberFormat):
            return self.rule.format
        return None


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field descriptors of a record type."""

    record_type: type
    fields: tuple[FieldDescriptor, ...]

    @property
    def active_fields(self) -> tuple[FieldDescriptor, ...]:
        """Fields that consume cells, in declaration order."""
        return tuple(f for f in self.fields if not f.ignored)

    def new_builder(self) -> RecordBuilder:
        return RecordBuilder(self)


class RecordBuilder:
    """Accumulates validated field values and produces the record once.

    Fields that never receive a value (ignored fields and fields declared
    after a dynamic field) keep the defaults declared on the record type.
    """

    def __init__(self, schema: RecordSchema) -> None:
        self._schema = schema
        self._values: dict[str, Any] = {}

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def get(self, name: str) -> Any:
        """Return an already-assigned value.

        Raises:
            KeyError: If the field has not been assigned yet.
        """
        return self._values[name]

    def build(self) -> Any:
        return self._schema.record_type(**self._values)


def _split_annotation(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        base, *metadata = get_args(hint)
        return base, tuple(metadata)
    return hint, ()


def _declaration_error(record_type: type, message: str) -> ConfigurationError:
    return ConfigurationError(
        f"{record_type.__name__}: {message}",
        ErrorCode.SCHEMA_DECLARATION,
        details={"record_type": record_type.__qualname__},
    )


def _has_default(field: dataclasses.Field[Any]) -> bool:
    return (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )


def _nested_schema(record_type: type, name: str, base: Any) -> RecordSchema:
    args = get_args(base)
    if get_origin(base) is not list or len(args) != 1:
        raise _declaration_error(
            record_type, f"dynamic field '{name}' must be declared as list[...]"
        )
    item_type = args[0]
    if not dataclasses.is_dataclass(item_type):
        raise _declaration_error(
            record_type, f"dynamic field '{name}' must hold dataclass records"
        )
    nested = build_schema(item_type)
    if any(f.is_dynamic for f in nested.active_fields):
        raise _declaration_error(
            record_type,
            f"dynamic field '{name}' holds {item_type.__name__}, "
            "which declares a dynamic field itself",
        )
    # Only the header cell and the data cell are read per nested record.
    defaults = {f.name: _has_default(f) for f in dataclasses.fields(item_type)}
    for extra in nested.active_fields[2:]:
        if not defaults.get(extra.name, False):
            raise _declaration_error(
                item_type,
                f"field '{extra.name}' is not read from the header or data line "
                "and needs a default value",
            )
    return nested


@lru_cache(maxsize=128)
def build_schema(record_type: type) -> RecordSchema:
    """Build (once) the schema of a dataclass record type.

    Raises:
        ConfigurationError: If the type or its rule declarations are invalid.
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise ConfigurationError(
            f"Record type {record_type!r} must be a dataclass",
            ErrorCode.UNSUPPORTED_TARGET_TYPE,
        )

    hints = typing.get_type_hints(record_type, include_extras=True)
    descriptors: list[FieldDescriptor] = []
    after_dynamic = False

    for index, field in enumerate(f for f in dataclasses.fields(record_type) if f.init):
        base, metadata = _split_annotation(hints[field.name])

        required = next((m for m in metadata if isinstance(m, Required)), None)
        transform = next((m for m in metadata if isinstance(m, Transform)), None)
        ignored = any(isinstance(m, Ignored) for m in metadata)
        format_rules = [m for m in metadata if isinstance(m, FORMAT_RULES)]
        rule = format_rules[0] if format_rules else None
        if len(format_rules) > 1:
            logger.warning(
                "Conflicting format rules, keeping the first one",
                record_type=record_type.__name__,
                field=field.name,
                kept=type(rule).__name__,
            )

        if (ignored or after_dynamic) and not _has_default(field):
            reason = "ignored" if ignored else "declared after a dynamic field"
            raise _declaration_error(
                record_type,
                f"field '{field.name}' is {reason} and needs a default value",
            )

        nested = None
        if isinstance(rule, DynamicRank) and not ignored:
            if rule.header_line < 1:
                raise _declaration_error(
                    record_type,
                    f"dynamic field '{field.name}' needs a positive header line",
                )
            nested = _nested_schema(record_type, field.name, base)

        descriptors.append(
            FieldDescriptor(
                name=field.name,
                declared_index=index,
                target_type=base,
                required=required,
                rule=rule,
                transform=transform,
                ignored=ignored or after_dynamic,
                nested=nested,
            )
        )
        if nested is not None:
            after_dynamic = True

    logger.debug(
        "Built record schema",
        record_type=record_type.__name__,
        fields=len(descriptors),
    )
    return RecordSchema(record_type=record_type, fields=tuple(descriptors))
