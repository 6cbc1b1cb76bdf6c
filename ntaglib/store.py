"""Typed key/value store filled from config files and command-line options."""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import Enum

from ntaglib.argparser import ArgParser
from ntaglib.printer import Printer

_VEC_DELIMITER = ","

_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _parse_float_prefix(text: str) -> float | None:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return None
    return float(match.group(1))


def _format_float(value: float) -> str:
    return format(value, "g")


def parse_vector(text: str) -> list[float]:
    """Parse 'x,y,z' into three floats; missing or bad parts read as 0."""
    coordinates = [0.0, 0.0, 0.0]
    for index, part in enumerate(text.split(_VEC_DELIMITER)[:3]):
        value = _parse_float_prefix(part)
        coordinates[index] = value if value is not None else 0.0
    return coordinates


def format_vector(vec: Sequence[float]) -> str:
    """Format a 3-vector as 'x,y,z'."""
    return _VEC_DELIMITER.join(_format_float(float(v)) for v in vec[:3])


class ValueType(Enum):
    """Kind of value a key was set with."""

    INT = "int"
    FLOAT = "float"
    STRING = "string"


class Store:
    """Ordered key/value store whose values are kept as strings."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._values: dict[str, tuple[ValueType, str]] = {}

    def initialize(self, config_path: str) -> None:
        """Load 'key value' lines from a config file, skipping comments."""
        try:
            with open(config_path, encoding="utf-8") as config:
                lines = config.read().splitlines()
        except OSError:
            print(
                f"\033[38;5;196m WARNING: Config file {config_path} "
                "does not exist. No config loaded \033[0m"
            )
            return
        for line in lines:
            if not line or line.startswith("#"):
                continue
            words = line.split()
            if len(words) >= 2:
                self.set(words[0], words[1])

    def read_arguments(self, parser: ArgParser) -> None:
        """Set every option/value pair of an ArgParser."""
        for option, value in parser.option_pairs():
            self.set(option, value)

    def print(self) -> None:
        """Print all keys and values in insertion order."""
        Printer().print_block(f"{self.name}: Keys and values")
        width = max((len(key) for key in self._values), default=0)
        for key, (_, value) in self._values.items():
            print(f"{key:<{width + 1}}: {value}")
        print()

    def clear(self) -> None:
        """Remove every key."""
        self._values.clear()

    def has_key(self, key: str) -> bool:
        """True if key is set."""
        return key in self._values

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def remove_key(self, key: str) -> None:
        """Remove key if present."""
        self._values.pop(key, None)

    def get(self, key: str) -> int | float | str:
        """Value of key converted according to its type; KeyError if absent."""
        value_type, _ = self._values[key]
        if value_type is ValueType.INT:
            return self.get_int(key)
        if value_type is ValueType.FLOAT:
            return self.get_float(key)
        return self.get_string(key)

    def set(self, key: str, value: object) -> None:
        """Store value under key, recording its kind."""
        if isinstance(value, bool):
            entry = (ValueType.INT, "1" if value else "0")
        elif isinstance(value, int):
            entry = (ValueType.INT, str(value))
        elif isinstance(value, float):
            entry = (ValueType.FLOAT, _format_float(value))
        elif isinstance(value, (tuple, list)) and len(value) == 3:
            entry = (ValueType.STRING, format_vector(value))
        else:
            entry = (ValueType.STRING, str(value))
        self._values[key] = entry

    def get_bool(self, key: str, default: bool = True) -> bool:
        """'true'/'1' give True, 'false'/'0' give False, else default."""
        if key not in self._values:
            return default
        text = self._values[key][1]
        if text in ("true", "1"):
            return True
        if text in ("false", "0"):
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Leading integer of the value; ValueError if there is none."""
        if key not in self._values:
            return default
        text = self._values[key][1]
        match = _INT_PREFIX.match(text)
        if match is None:
            raise ValueError(f"value of {key!r} is not an integer: {text!r}")
        return int(match.group(1))

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Leading number of the value; ValueError if there is none."""
        if key not in self._values:
            return default
        text = self._values[key][1]
        value = _parse_float_prefix(text)
        if value is None:
            raise ValueError(f"value of {key!r} is not a number: {text!r}")
        return value

    def get_string(self, key: str, default: str = "") -> str:
        """Raw string value, or default."""
        if key not in self._values:
            return default
        return self._values[key][1]

    def items(self) -> list[tuple[str, ValueType, str]]:
        """(key, type, value) triples sorted by key."""
        return [(key, vt, text) for key, (vt, text) in sorted(self._values.items())]