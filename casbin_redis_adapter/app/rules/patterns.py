"""
Pattern builders over stored policy records.

Two matching engines read these patterns. Filtered loads run Python's ``re``
against each record client-side; filtered removals run Lua's
``string.find`` inside a Redis script. The engines disagree on which
characters are special, so each has its own escaper, and each escaper
covers exactly its engine's set.

Both builders work on the record text, so values are escaped in their
JSON-encoded form. The ptype key matches both ``pType`` and the older
``PType`` spelling.

Example record::

    {"pType":"p","V0":"data2_admin","V1":"data2","V2":"write","V3":"","V4":"","V5":""}
"""

import re
from typing import List, Sequence

from .models import FIELD_KEYS, LEGACY_PTYPE_KEY, MAX_FIELDS, Filter, encode_value


WILDCARD = ".*"

LUA_MAGIC_CHARACTERS = frozenset("^$()%.[]*+-?")

# Records written by older adapters use PType; both spellings must match
REGEX_PTYPE_KEY = "(?:" + FIELD_KEYS[0][1] + "|" + LEGACY_PTYPE_KEY + ")"
LUA_PTYPE_KEY = "[pP]Type"


def escape_regex(value: str) -> str:
    """Escape ``value`` for Python's regular expression engine."""
    return re.escape(value)


def escape_lua_pattern(value: str) -> str:
    """Escape ``value`` for Lua patterns by prefixing magic characters with ``%``."""
    return "".join("%" + char if char in LUA_MAGIC_CHARACTERS else char for char in value)


def _record_body(ptype_key: str, parts: Sequence[str]) -> str:
    # V0..V5 are plain ASCII words, literal in both engines
    fields = [f'"{ptype_key}":"{parts[0]}"']
    fields.extend(f'"{key}":"{part}"' for (_, key), part in zip(FIELD_KEYS[1:], parts[1:]))
    return ",".join(fields)


def build_select_filter_pattern(filter: Filter) -> "re.Pattern[str]":
    """Compile an anchored regex accepting records allowed by ``filter``.

    A position with no accepted values matches anything, including the empty
    string; otherwise it must equal one of the accepted values literally.
    """
    parts: List[str] = []
    for accepted in filter.positions():
        if not accepted:
            parts.append(WILDCARD)
        else:
            parts.append("(?:" + "|".join(escape_regex(encode_value(v)) for v in accepted) + ")")

    # \A...\Z rather than ^...$ so a trailing newline never matches
    return re.compile(r"\A\{" + _record_body(REGEX_PTYPE_KEY, parts) + r"\}\Z")


def build_field_range_pattern(ptype: str, field_index: int, *field_values: str) -> str:
    """Build an anchored Lua pattern for a Casbin field filter.

    ``field_values`` fill consecutive slots starting at ``field_index``
    (0-based over V0..V5). Slots outside that range, or given an empty value,
    match anything. ``ptype`` always matches literally.
    """
    parts = [escape_lua_pattern(encode_value(ptype))]
    end = field_index + len(field_values)
    for i in range(MAX_FIELDS):
        if field_index <= i < end and field_values[i - field_index] != "":
            parts.append(escape_lua_pattern(encode_value(field_values[i - field_index])))
        else:
            parts.append(WILDCARD)

    return "^{" + _record_body(LUA_PTYPE_KEY, parts) + "}$"
