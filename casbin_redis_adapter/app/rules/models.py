"""
Policy record models for the Redis adapter.

A policy rule is a ``ptype`` plus up to six positional values. In Redis every
rule is stored as one JSON object with all seven keys present, in a fixed
order, so that the stored text has a stable shape the pattern builders can
match against. Missing values are stored as empty strings, which means an
empty trailing value and an absent one cannot be told apart once stored.
"""

import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from shared.errors import DecodeError, FilterTypeError


MAX_FIELDS = 6

# Python attribute name -> key in the stored JSON, in wire order
FIELD_KEYS = (
    ("ptype", "pType"),
    ("v0", "V0"),
    ("v1", "V1"),
    ("v2", "V2"),
    ("v3", "V3"),
    ("v4", "V4"),
    ("v5", "V5"),
)

# Written by older adapters, accepted on read only
LEGACY_PTYPE_KEY = "PType"


def encode_value(value: str) -> str:
    """Return ``value`` exactly as it appears between the quotes of a record."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


@dataclass(frozen=True)
class CasbinRule:
    """One stored policy line."""
    ptype: str
    v0: str = ""
    v1: str = ""
    v2: str = ""
    v3: str = ""
    v4: str = ""
    v5: str = ""

    @classmethod
    def from_policy(cls, ptype: str, rule: Sequence[str]) -> "CasbinRule":
        """Build a record from a ptype and its positional values."""
        values = list(rule[:MAX_FIELDS])
        values.extend([""] * (MAX_FIELDS - len(values)))
        return cls(ptype, *values)

    @classmethod
    def from_json(cls, payload: Union[str, bytes]) -> "CasbinRule":
        """Decode a stored record."""
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError("policy record is not valid UTF-8", {"error": str(e)}) from e

        try:
            data = json.loads(payload)
        except ValueError as e:
            raise DecodeError("policy record is not valid JSON", {"record": payload, "error": str(e)}) from e

        if not isinstance(data, dict):
            raise DecodeError("policy record is not a JSON object", {"record": payload})

        if "pType" not in data and LEGACY_PTYPE_KEY in data:
            data["pType"] = data[LEGACY_PTYPE_KEY]

        values = []
        for attr, key in FIELD_KEYS:
            value = data.get(key)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise DecodeError(
                    f"policy record field {key} is not a string",
                    {"record": payload, "field": key},
                )
            values.append(value)

        return cls(*values)

    def to_json(self) -> str:
        """Encode to the canonical stored form."""
        return json.dumps(
            {key: getattr(self, attr) for attr, key in FIELD_KEYS},
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def to_policy(self) -> List[str]:
        """Return the positional values with trailing empty values removed."""
        values = [self.v0, self.v1, self.v2, self.v3, self.v4, self.v5]
        while values and values[-1] == "":
            values.pop()
        return values

    @property
    def section(self) -> str:
        """Model section the rule belongs to ("p" or "g")."""
        return self.ptype[:1]


@dataclass
class Filter:
    """Accepted values per position; an empty list matches anything."""
    ptype: List[str] = field(default_factory=list)
    v0: List[str] = field(default_factory=list)
    v1: List[str] = field(default_factory=list)
    v2: List[str] = field(default_factory=list)
    v3: List[str] = field(default_factory=list)
    v4: List[str] = field(default_factory=list)
    v5: List[str] = field(default_factory=list)

    def positions(self) -> List[List[str]]:
        """Accepted values in wire order."""
        return [getattr(self, attr) or [] for attr, _ in FIELD_KEYS]

    @classmethod
    def from_value(cls, value: Any) -> "Filter":
        """Accept a Filter or an equivalent mapping, reject anything else."""
        if isinstance(value, Filter):
            return value

        if not isinstance(value, Mapping):
            raise FilterTypeError(
                "invalid filter type",
                {"type": type(value).__name__},
            )

        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in value if k not in known)
        if unknown:
            raise FilterTypeError("unknown filter fields", {"fields": unknown})

        kwargs: Dict[str, List[str]] = {}
        for name, accepted in value.items():
            kwargs[name] = _accepted_values(name, accepted)
        return cls(**kwargs)


def _accepted_values(name: str, accepted: Optional[Any]) -> List[str]:
    if accepted is None:
        return []
    if isinstance(accepted, (str, bytes)) or not isinstance(accepted, (list, tuple, set, frozenset)):
        raise FilterTypeError(
            f"filter field {name} must be a list of strings",
            {"field": name, "type": type(accepted).__name__},
        )
    values = list(accepted)
    if not all(isinstance(v, str) for v in values):
        raise FilterTypeError(f"filter field {name} must be a list of strings", {"field": name})
    return values
