"""Declarative field rules for record types.

Rules are attached to dataclass fields with ``typing.Annotated``::

    @dataclass(frozen=True)
    class Employee:
        badge: Annotated[str, Required("badge is required")]
        joined: Annotated[str, DateFormat("yyyy-MM-dd")]
        status: Annotated[str, ValueLimit(["A", "B"]), Transform(["A->active"])]
        salary: Annotated[Decimal, NumberFormat("#.##", when="status==active")]
        note: Annotated[str, Ignored()] = ""

A field may carry ``Required``, at most one of the format rules
(``DateFormat``, ``NumberFormat``, ``ValueLimit``, ``DynamicRank``) and a
``Transform``. When several format rules are declared, the first one wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from sheet_record_extraction.utils.exceptions import ConfigurationError, ErrorCode

GUARD_OPERATOR = "=="
TRANSFORM_OPERATOR = "->"


@dataclass(frozen=True)
class Required:
    """Reject empty cells."""

    message: str = "a value is required"


@dataclass(frozen=True)
class DateFormat:
    """Require the value to parse with a date pattern.

    ``pattern`` defaults to the session date pattern. The same pattern is
    used to display date cells of this field.
    """

    pattern: str | None = None
    message: str = "value does not match the expected date format"


@dataclass(frozen=True)
class NumberFormat:
    """Require the value to be a decimal number.

    Empty cells become ``"0"``. ``when`` is an optional guard of the form
    ``field==value``; the check only runs when the sibling field already
    holds that value. ``format`` defaults to the session number format and
    is also used to display numeric cells of this field.
    """

    format: str | None = None
    when: str = ""
    message: str = "value is not a valid number"


@dataclass(frozen=True)
class ValueLimit:
    """Restrict the value to a fixed set of allowed values."""

    allowed: frozenset[str] = field(default_factory=frozenset)
    message: str = "value is not one of the allowed values"

    def __init__(
        self,
        allowed: Iterable[str],
        message: str = "value is not one of the allowed values",
    ) -> None:
        object.__setattr__(self, "allowed", frozenset(allowed))
        object.__setattr__(self, "message", message)


@dataclass(frozen=True)
class Transform:
    """Rewrite exact values with ``from->to`` rules; the first match applies.

    Rules are parsed when a value is validated, so a malformed rule only
    surfaces once a cell reaches the field.
    """

    rules: tuple[str, ...] = ()

    def __init__(self, rules: Iterable[str]) -> None:
        if isinstance(rules, str):
            rules = (rules,)
        object.__setattr__(self, "rules", tuple(rules))


@dataclass(frozen=True)
class DynamicRank:
    """Collect a trailing variable-width group into a list of nested records.

    ``header_line`` is the 1-based row (horizontal tables) or column
    (vertical tables) that holds the dynamic headers. The field must be a
    ``list[...]`` of a dataclass and should be the last populated field:
    fields declared after it keep their defaults.
    """

    header_line: int
    dedupe: bool = False


@dataclass(frozen=True)
class Ignored:
    """Skip the field; it consumes no cell and keeps its default."""


FORMAT_RULES = (DateFormat, NumberFormat, ValueLimit, DynamicRank)

FieldRule = (
    Required | DateFormat | NumberFormat | ValueLimit | Transform | DynamicRank | Ignored
)


# =============================================================================
# Two-token expressions
# =============================================================================


@dataclass(frozen=True)
class Guard:
    """A parsed ``field==value`` guard."""

    field_name: str
    literal: str


@dataclass(frozen=True)
class TransformRule:
    """A parsed ``from->to`` rewrite."""

    source: str
    target: str


def _split_once(expression: str, operator: str) -> tuple[str, str] | None:
    head, found, tail = expression.partition(operator)
    if not found:
        return None
    return head.strip(), tail.strip()


def parse_guard(expression: str) -> Guard:
    """Parse a ``field==value`` guard.

    Raises:
        ConfigurationError: If the operator is missing or a side is empty.
    """
    parts = _split_once(expression, GUARD_OPERATOR)
    if parts is None:
        raise ConfigurationError(
            f"Guard '{expression}' is missing the '{GUARD_OPERATOR}' operator",
            ErrorCode.GUARD_SYNTAX,
            expression=expression,
        )
    name, literal = parts
    if not name:
        raise ConfigurationError(
            f"Guard '{expression}' has no field name",
            ErrorCode.GUARD_SYNTAX,
            expression=expression,
        )
    if not literal:
        raise ConfigurationError(
            f"Guard '{expression}' has no comparison value",
            ErrorCode.GUARD_SYNTAX,
            expression=expression,
        )
    return Guard(name, literal)


def parse_transform_rule(expression: str) -> TransformRule:
    """Parse a ``from->to`` rewrite rule.

    Raises:
        ConfigurationError: If the operator is missing.
    """
    parts = _split_once(expression, TRANSFORM_OPERATOR)
    if parts is None:
        raise ConfigurationError(
            f"Transform rule '{expression}' is missing the "
            f"'{TRANSFORM_OPERATOR}' operator",
            ErrorCode.TRANSFORM_SYNTAX,
            expression=expression,
        )
    return TransformRule(*parts)
