"""
Evaluation context for Remote Config.
"""

import math
from collections.abc import Mapping
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Iterator, Optional, Union

RANDOMIZATION_ID_KEY = "randomizationId"

SignalValue = Union[str, bool, int, float]


def _format_double(value: float) -> str:
    """Render a float with its shortest round-trip digits.

    Magnitudes in [1e-3, 1e7) use plain decimal notation, anything else uses
    scientific notation such as ``1.0E10`` or ``1.5E-5``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    magnitude = abs(value)
    if magnitude == 0 or 1e-3 <= magnitude < 1e7:
        return repr(value)

    _, digits, exponent = Decimal(repr(magnitude)).as_tuple()
    scientific_exponent = len(digits) + exponent - 1
    significant = "".join(str(digit) for digit in digits).rstrip("0")
    mantissa = significant[0] + "." + (significant[1:] or "0")
    sign = "-" if value < 0 else ""
    return f"{sign}{mantissa}E{scientific_exponent}"


def _to_signal_string(value: SignalValue) -> str:
    # bool must be checked before int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_double(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"Unsupported signal value type: {type(value).__name__}")


class EvaluationContext(Mapping):
    """Immutable mapping of signal keys to signal values.

    Values are always stored as strings. Booleans become ``"true"`` or
    ``"false"``, integers use their decimal form and floats switch to
    scientific notation outside [1e-3, 1e7), e.g. ``1.0E10``.
    """

    __slots__ = ("_signals",)

    def __init__(self, signals: Optional[Mapping[str, SignalValue]] = None):
        converted = {
            str(key): _to_signal_string(value)
            for key, value in (signals or {}).items()
        }
        self._signals = MappingProxyType(converted)

    @classmethod
    def builder(cls) -> "EvaluationContextBuilder":
        return EvaluationContextBuilder()

    @property
    def randomization_id(self) -> Optional[str]:
        return self._signals.get(RANDOMIZATION_ID_KEY)

    def __getitem__(self, key: str) -> str:
        return self._signals[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._signals)

    def __len__(self) -> int:
        return len(self._signals)

    def __hash__(self) -> int:
        return hash(frozenset(self._signals.items()))

    def __repr__(self) -> str:
        return f"EvaluationContext({dict(self._signals)!r})"


class EvaluationContextBuilder:
    """Collects signals before freezing them into an EvaluationContext."""

    def __init__(self):
        self._signals: Dict[str, SignalValue] = {}

    def put(self, key: str, value: SignalValue) -> "EvaluationContextBuilder":
        self._signals[key] = value
        return self

    def randomization_id(self, value: str) -> "EvaluationContextBuilder":
        return self.put(RANDOMIZATION_ID_KEY, value)

    def build(self) -> EvaluationContext:
        return EvaluationContext(self._signals)
