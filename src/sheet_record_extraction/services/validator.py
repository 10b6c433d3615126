"""Field validation pipeline.

Every canonical cell value goes through the same fixed sequence:

1. ``Required``: empty values are rejected.
2. One format rule: ``DateFormat``, ``NumberFormat`` (optionally guarded by
   a ``field==value`` condition on an already-assigned sibling) or
   ``ValueLimit``.
3. ``Transform``: the first ``from->to`` rule matching the value rewrites it.
"""

from __future__ import annotations

from decimal import Decimal

from sheet_record_extraction.rules import (
    DateFormat,
    Guard,
    NumberFormat,
    Transform,
    ValueLimit,
    parse_guard,
    parse_transform_rule,
)
from sheet_record_extraction.services.schema import FieldDescriptor, RecordBuilder
from sheet_record_extraction.utils.coordinates import CellPosition
from sheet_record_extraction.utils.exceptions import (
    ConfigurationError,
    ErrorCode,
    ValidationError,
)
from sheet_record_extraction.utils.logging import get_logger
from sheet_record_extraction.utils.patterns import (
    NumberPattern,
    PatternSyntaxError,
    compile_number_pattern,
    parse_date,
    parse_decimal,
)

logger = get_logger(__name__)

EMPTY_NUMBER = "0"


class FieldValidator:
    """Applies the rule chain of one field to one canonical value."""

    def __init__(self, date_pattern: str, number_format: str) -> None:
        self.date_pattern = date_pattern
        self.number_format = number_format

    def validate(
        self,
        value: str,
        descriptor: FieldDescriptor,
        builder: RecordBuilder,
        position: CellPosition,
    ) -> str:
        """Validate and transform ``value`` for ``descriptor``.

        Args:
            value: Canonical (trimmed) cell value.
            descriptor: Field being populated.
            builder: Record in progress, used to resolve number guards.
            position: Location of the cell, for error messages.

        Returns:
            The final string value.

        Raises:
            ValidationError: If the value breaks a rule.
            ConfigurationError: If a guard or transform rule is malformed.
        """
        if descriptor.required is not None and not value:
            raise ValidationError(
                ErrorCode.REQUIRED, position, descriptor.required.message, value
            )

        rule = descriptor.rule
        if isinstance(rule, DateFormat):
            self._check_date(value, rule, position)
        elif isinstance(rule, NumberFormat):
            value = self._check_number(value, rule, builder, position)
        elif isinstance(rule, ValueLimit):
            if value not in rule.allowed:
                raise ValidationError(
                    ErrorCode.VALUE_LIMIT, position, rule.message, value
                )

        if descriptor.transform is not None:
            value = apply_transform(value, descriptor.transform)

        return value

    def _check_date(
        self, value: str, rule: DateFormat, position: CellPosition
    ) -> None:
        pattern = rule.pattern or self.date_pattern
        try:
            parse_date(value, pattern)
        except PatternSyntaxError as e:
            raise ConfigurationError(str(e), ErrorCode.SCHEMA_DECLARATION) from e
        except ValueError as e:
            raise ValidationError(
                ErrorCode.DATE_FORMAT, position, rule.message, value
            ) from e

    def _check_number(
        self,
        value: str,
        rule: NumberFormat,
        builder: RecordBuilder,
        position: CellPosition,
    ) -> str:
        if not value:
            return EMPTY_NUMBER
        if rule.when and not guard_holds(parse_guard(rule.when), builder):
            return value

        try:
            pattern = compile_number_pattern(rule.format or self.number_format)
        except PatternSyntaxError as e:
            raise ConfigurationError(str(e), ErrorCode.SCHEMA_DECLARATION) from e
        try:
            pattern.format(_read_number(value, pattern))
        except ValueError as e:
            raise ValidationError(
                ErrorCode.NUMBER_FORMAT, position, rule.message, value
            ) from e
        return value


def _read_number(value: str, pattern: NumberPattern) -> Decimal:
    """Parse a plain decimal, or a number displayed with the field pattern."""
    try:
        return parse_decimal(value)
    except ValueError:
        return pattern.parse(value)


def guard_holds(guard: Guard, builder: RecordBuilder) -> bool:
    """Evaluate a guard against the record in progress.

    A sibling that is unknown, not yet assigned or not a string makes the
    guard false.
    """
    try:
        current = builder.get(guard.field_name)
    except KeyError:
        logger.warning(
            "Guard field has no assigned value, skipping number check",
            field=guard.field_name,
        )
        return False
    if not isinstance(current, str):
        logger.warning(
            "Guard field is not a string, skipping number check",
            field=guard.field_name,
            value_type=type(current).__name__,
        )
        return False
    return current == guard.literal


def apply_transform(value: str, transform: Transform) -> str:
    """Rewrite ``value`` with the first matching ``from->to`` rule.

    All rules are parsed first, so a malformed rule fails even when an
    earlier rule matches.

    Raises:
        ConfigurationError: If a rule is missing the ``->`` operator.
    """
    rules = [parse_transform_rule(expression) for expression in transform.rules]
    for rule in rules:
        if rule.source == value:
            return rule.target
    return value
