"""
Hierarchical key/value parameter source.

Keys are dotted strings ("particles.fuel_species"); every key maps to a list
of raw values. Two file formats are accepted:
- YAML documents (nested mappings are flattened to dotted keys);
- AMReX-style inputs files ("prefix.key = v1 v2 ...", '#' comments).

Required lookups raise MissingParameterError; optional lookups return the
caller's default. Scalar lookups read the first value of the list.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from core.errors import InvalidParameterError, MissingParameterError

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def _flatten(raw: Mapping[str, Any], prefix: str, out: Dict[str, List[Any]]) -> None:
    for key, value in raw.items():
        full = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            _flatten(value, full, out)
        elif isinstance(value, (list, tuple)):
            out[full] = list(value)
        elif value is None:
            out[full] = []
        else:
            out[full] = [value]


def _coerce(value: Any, kind: type, key: str) -> Any:
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            if value in (0, 1):
                return bool(value)
        elif isinstance(value, str):
            low = value.strip().lower()
            if low in _TRUE:
                return True
            if low in _FALSE:
                return False
        raise InvalidParameterError(f"Parameter '{key}': cannot interpret {value!r} as bool")
    if kind is int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise InvalidParameterError(f"Parameter '{key}': cannot interpret {value!r} as int")
    if kind is float:
        if isinstance(value, bool):
            raise InvalidParameterError(f"Parameter '{key}': cannot interpret {value!r} as float")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise InvalidParameterError(f"Parameter '{key}': cannot interpret {value!r} as float") from None
    if kind is str:
        # YAML 1.1 reads bare NO/ON/YES as booleans
        if isinstance(value, bool):
            raise InvalidParameterError(
                f"Parameter '{key}': got boolean {value!r} where a name was expected; quote the value"
            )
        return str(value)
    raise TypeError(f"Unsupported parameter kind {kind!r}")


def parse_inputs_text(text: str) -> Dict[str, List[str]]:
    """Parse AMReX-style 'key = values' text; later definitions override earlier ones."""
    values: Dict[str, List[str]] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as exc:
            raise InvalidParameterError(f"inputs line {lineno}: {exc}") from None
        if not tokens:
            continue
        # "key=v", "key= v" and "key =v" are all accepted
        if not any("=" in tok for tok in tokens):
            raise InvalidParameterError(f"inputs line {lineno}: expected 'key = value', got {line.strip()!r}")
        key, _, rhs = line.partition("=")
        key = key.strip()
        if not key or " " in key:
            raise InvalidParameterError(f"inputs line {lineno}: invalid key {key!r}")
        values[key] = shlex.split(rhs, comments=True)
    return values


class ParamStore:
    """Dotted-key parameter lookup with optional prefix scoping."""

    def __init__(self, values: Optional[Mapping[str, Sequence[Any]]] = None, prefix: str = ""):
        self._values: Dict[str, List[Any]] = {k: list(v) for k, v in (values or {}).items()}
        self.prefix = prefix

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ParamStore":
        flat: Dict[str, List[Any]] = {}
        _flatten(raw or {}, "", flat)
        return cls(flat)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ParamStore":
        cfg_file = Path(path).expanduser().resolve()
        raw = yaml.safe_load(cfg_file.read_text()) or {}
        if not isinstance(raw, Mapping):
            raise InvalidParameterError(f"{cfg_file}: top level must be a mapping")
        return cls.from_mapping(raw)

    @classmethod
    def from_inputs(cls, path: str | Path) -> "ParamStore":
        cfg_file = Path(path).expanduser().resolve()
        return cls(parse_inputs_text(cfg_file.read_text()))

    @classmethod
    def from_file(cls, path: str | Path) -> "ParamStore":
        if Path(path).suffix.lower() in (".yaml", ".yml"):
            return cls.from_yaml(path)
        return cls.from_inputs(path)

    def scope(self, prefix: str) -> "ParamStore":
        view = ParamStore.__new__(ParamStore)
        view._values = self._values
        view.prefix = self.full_key(prefix)
        return view

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def full_key(self, key: str) -> str:
        return f"{self.prefix}.{key}" if self.prefix else key

    def contains(self, key: str) -> bool:
        return self.full_key(key) in self._values

    def countval(self, key: str) -> int:
        return len(self._values.get(self.full_key(key), ()))

    def get(self, key: str, kind: type = float) -> Any:
        full = self.full_key(key)
        vals = self._values.get(full)
        if not vals:
            raise MissingParameterError(full)
        return _coerce(vals[0], kind, full)

    def query(self, key: str, default: Any, kind: Optional[type] = None) -> Any:
        full = self.full_key(key)
        vals = self._values.get(full)
        if not vals:
            return default
        if kind is None:
            kind = type(default) if default is not None else str
        return _coerce(vals[0], kind, full)

    def getarr(self, key: str, kind: type = float) -> List[Any]:
        full = self.full_key(key)
        vals = self._values.get(full)
        if not vals:
            raise MissingParameterError(full)
        return [_coerce(v, kind, full) for v in vals]

    def queryarr(self, key: str, default: Sequence[Any], kind: type = float) -> List[Any]:
        full = self.full_key(key)
        vals = self._values.get(full)
        if not vals:
            return list(default)
        return [_coerce(v, kind, full) for v in vals]
