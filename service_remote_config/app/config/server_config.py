"""
Resolved configuration returned by a template evaluation.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..diagnostics import Anomaly
from .value import Value, ValueSource


class ServerConfig:
    """Read-only, typed view over the values resolved for one evaluation.

    Unknown keys never raise: they resolve to a ``STATIC`` value whose
    conversions return the zero value of the requested type.
    """

    def __init__(self, config_values: Mapping[str, Value], anomalies: Optional[Tuple[Anomaly, ...]] = None):
        self._config_values = MappingProxyType(dict(config_values))
        self._anomalies = tuple(anomalies or ())

    def get_value(self, key: str) -> Value:
        return self._config_values.get(key) or Value.static()

    def get_string(self, key: str) -> str:
        return self.get_value(key).as_string()

    def get_boolean(self, key: str) -> bool:
        return self.get_value(key).as_boolean()

    def get_long(self, key: str) -> int:
        return self.get_value(key).as_long()

    def get_double(self, key: str) -> float:
        return self.get_value(key).as_double()

    def get_value_source(self, key: str) -> ValueSource:
        return self.get_value(key).source

    def get_all(self) -> Mapping[str, Value]:
        return self._config_values

    @property
    def anomalies(self) -> Tuple[Anomaly, ...]:
        """Data-quality problems noticed while producing this config."""
        return self._anomalies

    def __contains__(self, key: str) -> bool:
        return key in self._config_values

    def __len__(self) -> int:
        return len(self._config_values)

    def __repr__(self) -> str:
        return f"ServerConfig({dict(self._config_values)!r})"
