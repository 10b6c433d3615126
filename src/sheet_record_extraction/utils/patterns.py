"""Date and number display patterns.

Field rules and session settings describe how cells are displayed with the
classic spreadsheet pattern dialects:

- Date patterns built from letter runs, e.g. ``yyyy/MM/dd HH:mm:ss``.
  Text between single quotes is literal; ``''`` is a literal quote.
- Number patterns built from ``#``, ``0``, ``,`` and ``.``, e.g. ``#.##`` or
  ``#,##0.00``, with optional literal prefix/suffix (``%`` multiplies by 100).

Patterns are compiled once and cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, localcontext
from functools import lru_cache

# Date used for time-only cells, matching the spreadsheet epoch day.
_TIME_ONLY_DATE = date(1899, 12, 31)

_DATE_LETTERS = frozenset("yMdHhkKmsSaEDZX")


class PatternSyntaxError(ValueError):
    """Raised when a date or number pattern cannot be compiled."""


# =============================================================================
# Date patterns
# =============================================================================


@dataclass(frozen=True)
class _DateToken:
    text: str
    is_field: bool


@lru_cache(maxsize=128)
def _tokenize_date_pattern(pattern: str) -> tuple[_DateToken, ...]:
    tokens: list[_DateToken] = []
    literal: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "'":
            if pattern.startswith("''", i):
                literal.append("'")
                i += 2
                continue
            i += 1
            while True:
                if i >= len(pattern):
                    raise PatternSyntaxError(
                        f"Unterminated quote in date pattern: {pattern!r}"
                    )
                if pattern.startswith("''", i):
                    literal.append("'")
                    i += 2
                    continue
                if pattern[i] == "'":
                    i += 1
                    break
                literal.append(pattern[i])
                i += 1
            continue
        if ch.isascii() and ch.isalpha():
            if ch not in _DATE_LETTERS:
                raise PatternSyntaxError(
                    f"Illegal pattern character {ch!r} in date pattern {pattern!r}"
                )
            run = i
            while run < len(pattern) and pattern[run] == ch:
                run += 1
            if literal:
                tokens.append(_DateToken("".join(literal), False))
                literal = []
            tokens.append(_DateToken(pattern[i:run], True))
            i = run
            continue
        literal.append(ch)
        i += 1
    if literal:
        tokens.append(_DateToken("".join(literal), False))
    return tuple(tokens)


def _strptime_directive(field: str) -> str:
    letter, width = field[0], len(field)
    if letter == "y":
        return "%y" if width == 2 else "%Y"
    if letter == "M":
        if width >= 4:
            return "%B"
        return "%b" if width == 3 else "%m"
    if letter == "E":
        return "%A" if width >= 4 else "%a"
    return {
        "d": "%d",
        "H": "%H",
        "k": "%H",
        "h": "%I",
        "K": "%I",
        "m": "%M",
        "s": "%S",
        "S": "%f",
        "a": "%p",
        "D": "%j",
        "Z": "%z",
        "X": "%z",
    }[letter]


@lru_cache(maxsize=128)
def to_strptime_format(pattern: str) -> str:
    """Translate a date pattern into a :func:`datetime.strptime` format."""
    parts: list[str] = []
    for token in _tokenize_date_pattern(pattern):
        if token.is_field:
            parts.append(_strptime_directive(token.text))
        else:
            parts.append(token.text.replace("%", "%%"))
    return "".join(parts)


def parse_date(text: str, pattern: str) -> datetime:
    """Parse ``text`` with a date pattern.

    Raises:
        ValueError: If the text does not match the pattern.
        PatternSyntaxError: If the pattern itself is malformed.
    """
    return datetime.strptime(text, to_strptime_format(pattern))


def _render_date_field(field: str, value: datetime) -> str:
    letter, width = field[0], len(field)
    if letter == "y":
        if width == 2:
            return f"{value.year % 100:02d}"
        return str(value.year).zfill(width)
    if letter == "M":
        if width >= 4:
            return value.strftime("%B")
        if width == 3:
            return value.strftime("%b")
        return str(value.month).zfill(width)
    if letter == "E":
        return value.strftime("%A" if width >= 4 else "%a")
    if letter == "a":
        return "AM" if value.hour < 12 else "PM"
    if letter in "ZX":
        return value.strftime("%z")
    number = {
        "d": value.day,
        "H": value.hour,
        "k": value.hour or 24,
        "h": value.hour % 12 or 12,
        "K": value.hour % 12,
        "m": value.minute,
        "s": value.second,
        "S": value.microsecond // 1000,
        "D": value.timetuple().tm_yday,
    }[letter]
    return str(number).zfill(width)


def format_date(value: datetime | date | time, pattern: str) -> str:
    """Render a date, datetime or time value with a date pattern."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        moment = datetime.combine(_TIME_ONLY_DATE, value)
    return "".join(
        _render_date_field(token.text, moment) if token.is_field else token.text
        for token in _tokenize_date_pattern(pattern)
    )


# =============================================================================
# Number patterns
# =============================================================================

_NUMBER_CHARS = frozenset("#0,.")


@dataclass(frozen=True)
class NumberPattern:
    """A compiled number pattern."""

    prefix: str
    suffix: str
    min_integer_digits: int
    min_fraction_digits: int
    max_fraction_digits: int
    grouping_size: int
    multiplier: int

    def format(self, value: Decimal) -> str:
        quantum = Decimal(1).scaleb(-self.max_fraction_digits)
        with localcontext() as ctx:
            # Wide enough for every integer digit plus the kept fraction.
            ctx.prec = max(
                ctx.prec,
                len(value.as_tuple().digits) + 4,
                value.adjusted() + self.max_fraction_digits + 5,
            )
            scaled = value * self.multiplier
            rounded = scaled.quantize(quantum, rounding=ROUND_HALF_EVEN)
        negative = rounded < 0
        digits = format(abs(rounded), "f")
        integer, _, fraction = digits.partition(".")

        fraction = fraction.rstrip("0")
        if len(fraction) < self.min_fraction_digits:
            fraction = fraction.ljust(self.min_fraction_digits, "0")
        integer = integer.lstrip("0")
        if len(integer) < self.min_integer_digits:
            integer = integer.rjust(self.min_integer_digits, "0")
        if not integer and not fraction:
            integer = "0"
        if self.grouping_size and integer:
            integer = _group(integer, self.grouping_size)

        body = f"{integer}.{fraction}" if fraction else integer
        sign = "-" if negative and rounded != 0 else ""
        return f"{sign}{self.prefix}{body}{self.suffix}"

    def parse(self, text: str) -> Decimal:
        """Read back a number rendered with this pattern.

        Raises:
            ValueError: If the text is not a number in this pattern.
        """
        body = text
        negative = body.startswith("-")
        if negative:
            body = body[1:]
        if self.prefix:
            if not body.startswith(self.prefix):
                raise ValueError(f"Missing prefix {self.prefix!r} in {text!r}")
            body = body[len(self.prefix) :]
        if self.suffix:
            if not body.endswith(self.suffix):
                raise ValueError(f"Missing suffix {self.suffix!r} in {text!r}")
            body = body[: -len(self.suffix)]
        if self.grouping_size:
            body = body.replace(",", "")
        number = parse_decimal(body)
        if number.is_signed():
            raise ValueError(f"Misplaced sign in {text!r}")
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(number.as_tuple().digits) + 4)
            number = number / self.multiplier
        return -number if negative else number


def _group(integer: str, size: int) -> str:
    groups: list[str] = []
    while len(integer) > size:
        groups.append(integer[-size:])
        integer = integer[:-size]
    groups.append(integer)
    return ",".join(reversed(groups))


def _strip_quotes(affix: str) -> str:
    return affix.replace("''", "\0").replace("'", "").replace("\0", "'")


@lru_cache(maxsize=128)
def compile_number_pattern(pattern: str) -> NumberPattern:
    """Compile a number pattern such as ``#.##`` or ``#,##0.00``.

    Only the positive sub-pattern (before ``;``) is used.

    Raises:
        PatternSyntaxError: If the pattern has no digit placeholders.
    """
    positive = pattern.split(";", 1)[0]
    start = next((i for i, ch in enumerate(positive) if ch in "#0"), None)
    if start is None:
        raise PatternSyntaxError(f"Number pattern has no digits: {pattern!r}")
    # Leading separators belong to the numeric part (".##").
    while start > 0 and positive[start - 1] in ",.":
        start -= 1
    end = start
    while end < len(positive) and positive[end] in _NUMBER_CHARS:
        end += 1

    numeric = positive[start:end]
    prefix = _strip_quotes(positive[:start])
    suffix = _strip_quotes(positive[end:])
    if numeric.count(".") > 1:
        raise PatternSyntaxError(f"Multiple decimal separators in {pattern!r}")

    integer_part, _, fraction_part = numeric.partition(".")
    min_integer = integer_part.count("0")
    min_fraction = fraction_part.count("0")
    max_fraction = sum(1 for ch in fraction_part if ch in "#0")
    if "0" not in numeric and "." in numeric:
        # "#.##" still prints a leading zero for values below one.
        min_integer = 1

    grouping = 0
    if "," in integer_part:
        grouping = sum(1 for ch in integer_part.rsplit(",", 1)[1] if ch in "#0")

    multiplier = 1
    if "%" in prefix + suffix:
        multiplier = 100
    elif "‰" in prefix + suffix:
        multiplier = 1000

    return NumberPattern(
        prefix=prefix,
        suffix=suffix,
        min_integer_digits=min_integer,
        min_fraction_digits=min_fraction,
        max_fraction_digits=max_fraction,
        grouping_size=grouping,
        multiplier=multiplier,
    )


def parse_decimal(text: str) -> Decimal:
    """Parse a plain decimal literal (sign, digits, point, exponent).

    Raises:
        ValueError: If the text is not a finite decimal number.
    """
    if "_" in text or text != text.strip():
        raise ValueError(f"Not a decimal number: {text!r}")
    try:
        number = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal number: {text!r}") from e
    if not number.is_finite():
        raise ValueError(f"Not a finite decimal number: {text!r}")
    return number


def format_number(value: int | float | Decimal, pattern: str) -> str:
    """Render a number with a number pattern."""
    if isinstance(value, float):
        number = Decimal(repr(value))
    else:
        number = Decimal(value)
    return compile_number_pattern(pattern).format(number)
