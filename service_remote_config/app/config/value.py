"""
Typed wrapper around a resolved Remote Config value.
"""

import re
from dataclasses import dataclass
from enum import Enum

from shared.logging import get_logger

logger = get_logger("remote_config.value")

DEFAULT_VALUE_FOR_STRING = ""
DEFAULT_VALUE_FOR_BOOLEAN = False
DEFAULT_VALUE_FOR_LONG = 0
DEFAULT_VALUE_FOR_DOUBLE = 0.0

BOOLEAN_TRUTHY_VALUES = frozenset(["1", "true", "t", "yes", "y", "on"])

_LONG_MIN = -(2 ** 63)
_LONG_MAX = 2 ** 63 - 1

# Decimal floating point literals with an optional type suffix, no hex floats
_DOUBLE_PATTERN = re.compile(
    r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?[fFdD]?)"
)
# Control characters and spaces around a literal are ignored
_JAVA_BLANKS = "".join(chr(code) for code in range(0x21))


class ValueSource(str, Enum):
    """Where a resolved value came from."""
    STATIC = "static"
    DEFAULT = "default"
    REMOTE = "remote"


@dataclass(frozen=True)
class Value:
    """A resolved parameter value.

    ``STATIC`` values represent "no data available": every conversion
    returns the zero value of the requested type, whatever ``raw`` holds.
    """
    source: ValueSource
    raw: str = DEFAULT_VALUE_FOR_STRING

    @classmethod
    def static(cls) -> "Value":
        return cls(ValueSource.STATIC)

    def as_string(self) -> str:
        if self.source == ValueSource.STATIC:
            return DEFAULT_VALUE_FOR_STRING
        return self.raw

    def as_boolean(self) -> bool:
        if self.source == ValueSource.STATIC:
            return DEFAULT_VALUE_FOR_BOOLEAN
        return self.raw.lower() in BOOLEAN_TRUTHY_VALUES

    def as_long(self) -> int:
        if self.source == ValueSource.STATIC:
            return DEFAULT_VALUE_FOR_LONG
        text = self.raw
        # int() would also accept digit separators and surrounding blanks
        if "_" in text or text != text.strip():
            logger.warning("Unable to convert value to long", value=text)
            return DEFAULT_VALUE_FOR_LONG
        try:
            result = int(text, 10)
        except ValueError:
            logger.warning("Unable to convert value to long", value=text)
            return DEFAULT_VALUE_FOR_LONG
        if not _LONG_MIN <= result <= _LONG_MAX:
            logger.warning("Value out of range for long", value=text)
            return DEFAULT_VALUE_FOR_LONG
        return result

    def as_double(self) -> float:
        if self.source == ValueSource.STATIC:
            return DEFAULT_VALUE_FOR_DOUBLE
        try:
            return parse_double(self.raw)
        except ValueError:
            logger.warning("Unable to convert value to double", value=self.raw)
            return DEFAULT_VALUE_FOR_DOUBLE


def parse_double(text: str) -> float:
    """Parse a decimal floating point literal.

    Only ASCII digits are accepted. Infinities and NaN must be spelled
    ``Infinity`` and ``NaN``, and digit separators are rejected.

    Raises:
        ValueError: if ``text`` is not a plain floating point literal.
    """
    literal = text.strip(_JAVA_BLANKS)
    if not _DOUBLE_PATTERN.fullmatch(literal):
        raise ValueError(f"could not convert string to float: {text!r}")
    if literal[-1] in "fFdD":
        literal = literal[:-1]
    return float(literal)
