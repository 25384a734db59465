"""
Redis policy adapter.

Stores every policy rule as one JSON record in a single Redis list and
implements the Casbin adapter contract on top of it: full and filtered
loads, full saves, single and batch add/remove, and in-place updates.

Updates and filtered removals run as one Lua script each so they cannot
interleave with other writers. ``save_policy``, ``add_policies`` and
``remove_policies`` are plain command sequences and are not atomic: a crash
between the DEL and RPUSH of a save leaves the list empty.

Records written by older adapters with a ``PType`` key are read by every
load and matched by the field-filtered operations. Exact-match removal and
update compare canonical text, so they only touch ``pType`` records.
"""

from typing import Any, Iterable, List, Optional, Sequence

import structlog

from shared.config import AdapterConfig
from shared.errors import ArityError, ConfigError, DecodeError
from shared.logging import configure_logging, get_logger
from shared.metrics import time_operation

from .rules.models import CasbinRule, Filter
from .rules.patterns import build_field_range_pattern, build_select_filter_pattern
from .storage.connection import (
    ConnectionProvider, PoolConnectionProvider, SingleConnectionProvider
)
from .storage.scripts import (
    DELETED_SENTINEL, REMOVE_FILTERED, UPDATE_FILTERED, UPDATE_RULE, UPDATE_RULES
)

# Sections written by save_policy, in order
SAVED_SECTIONS = ("p", "g")


def load_policy_line(rule: CasbinRule, model: Any) -> bool:
    """Add a decoded rule to the model.

    Rules whose section or ptype the model does not define are skipped.
    """
    sec = rule.section
    assertions = model.model.get(sec)
    if not assertions or rule.ptype not in assertions:
        return False

    model.add_policy(sec, rule.ptype, rule.to_policy())
    return True


def _record_text(value: Any) -> str:
    # Most servers reply with bytes, some managed services with str
    if isinstance(value, (bytes, bytearray)):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("policy record is not valid UTF-8", {"error": str(e)}) from e
    if isinstance(value, str):
        return value
    raise DecodeError("the type is wrong", {"type": type(value).__name__})


def _encode(ptype: str, rule: Sequence[str]) -> str:
    return CasbinRule.from_policy(ptype, rule).to_json()


class RedisAdapter:
    """Casbin adapter backed by one Redis list."""

    def __init__(self, config: Optional[AdapterConfig]):
        if config is None:
            raise ConfigError("config cannot be None")

        # Host applications that configured structlog keep their setup
        if not structlog.is_configured():
            configure_logging("casbin_redis_adapter", config.log_level)

        self.config = config
        self.key = config.storage_key()
        self.logger = get_logger("casbin_redis_adapter.adapter")
        self._filtered = False

        if config.pool is not None:
            self.provider: ConnectionProvider = PoolConnectionProvider(config.pool)
        else:
            self.provider = SingleConnectionProvider.dial(config.connection_kwargs())

        self.logger.info(
            "Redis adapter opened",
            key=self.key,
            pooled=config.pool is not None,
        )

    def __enter__(self) -> "RedisAdapter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection or pool. Safe to call more than once."""
        if self.provider.close():
            self.logger.info("Redis adapter closed", key=self.key)

    @property
    def closed(self) -> bool:
        return self.provider.closed

    # Loading

    def load_policy(self, model: Any) -> None:
        """Load every stored rule into the model."""
        with time_operation("load_policy"):
            with self.provider.connection() as conn:
                values = conn.lrange(self.key, 0, -1)

            loaded = self._load_records(model, values)
            self._filtered = False

        self.logger.debug("Policy loaded", key=self.key, rules=loaded)

    def load_filtered_policy(self, model: Any, filter: Any) -> None:
        """Load only the rules accepted by ``filter``.

        ``filter`` is a Filter, an equivalent mapping, or None for a full
        load. Anything else raises FilterTypeError before Redis is queried.
        """
        if filter is None:
            self.load_policy(model)
            return

        with time_operation("load_filtered_policy"):
            pattern = build_select_filter_pattern(Filter.from_value(filter))

            with self.provider.connection() as conn:
                values = conn.lrange(self.key, 0, -1)

            loaded = self._load_records(model, values, pattern)
            self._filtered = True

        self.logger.debug("Filtered policy loaded", key=self.key, rules=loaded)

    def is_filtered(self) -> bool:
        """True if the last successful load applied a filter."""
        return self._filtered

    def _load_records(self, model: Any, values: Iterable[Any], pattern=None) -> int:
        loaded = 0
        for value in values:
            text = _record_text(value)
            if pattern is not None and not pattern.match(text):
                continue
            if load_policy_line(CasbinRule.from_json(text), model):
                loaded += 1
        return loaded

    # Saving

    def save_policy(self, model: Any) -> bool:
        """Replace the stored list with every rule of the model."""
        with time_operation("save_policy"):
            texts = [
                _encode(ptype, rule)
                for sec in SAVED_SECTIONS
                for ptype, assertion in model.model.get(sec, {}).items()
                for rule in assertion.policy
            ]

            with self.provider.connection() as conn:
                conn.delete(self.key)
                if texts:
                    conn.rpush(self.key, *texts)

        self.logger.debug("Policy saved", key=self.key, rules=len(texts))
        return True

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Append one rule."""
        with time_operation("add_policy"):
            text = _encode(ptype, rule)
            with self.provider.connection() as conn:
                conn.rpush(self.key, text)
        return True

    def add_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """Append rules in the given order."""
        with time_operation("add_policies"):
            texts = [_encode(ptype, rule) for rule in rules]
            if not texts:
                return True

            with self.provider.connection() as conn:
                conn.rpush(self.key, *texts)

        self.logger.debug("Policies added", key=self.key, rules=len(texts))
        return True

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Remove the first stored copy of a rule. Missing rules are ignored."""
        with time_operation("remove_policy"):
            text = _encode(ptype, rule)
            with self.provider.connection() as conn:
                conn.lrem(self.key, 1, text)
        return True

    def remove_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """Remove rules one at a time; removals before a failure stay applied."""
        with time_operation("remove_policies"):
            texts = [_encode(ptype, rule) for rule in rules]
            if not texts:
                return True

            with self.provider.connection() as conn:
                for text in texts:
                    conn.lrem(self.key, 1, text)

        self.logger.debug("Policies removed", key=self.key, rules=len(texts))
        return True

    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *field_values: str) -> int:
        """Remove every rule matching the field filter. Returns the count removed."""
        with time_operation("remove_filtered_policy"):
            pattern = build_field_range_pattern(ptype, field_index, *field_values)
            with self.provider.connection() as conn:
                removed = conn.eval(REMOVE_FILTERED, 1, self.key, pattern, DELETED_SENTINEL)

        self.logger.debug("Filtered policies removed", key=self.key, pattern=pattern, rules=removed)
        return int(removed or 0)

    # Updating

    def update_policy(self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]) -> bool:
        """Replace the first stored copy of ``old_rule`` in place.

        Returns False, without error, if ``old_rule`` is not stored.
        """
        with time_operation("update_policy"):
            old_text = _encode(ptype, old_rule)
            new_text = _encode(ptype, new_rule)
            with self.provider.connection() as conn:
                changed = conn.eval(UPDATE_RULE, 1, self.key, old_text, new_text)

        return bool(changed)

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> int:
        """Replace every stored copy of each old rule with its new rule.

        Returns the number of list slots rewritten.
        """
        with time_operation("update_policies"):
            if len(old_rules) != len(new_rules):
                raise ArityError(
                    "old_rules and new_rules should have the same length",
                    {"old_rules": len(old_rules), "new_rules": len(new_rules)},
                )
            if not old_rules:
                return 0

            old_texts = [_encode(ptype, rule) for rule in old_rules]
            new_texts = [_encode(ptype, rule) for rule in new_rules]

            with self.provider.connection() as conn:
                changed = conn.eval(UPDATE_RULES, 1, self.key, *old_texts, *new_texts)

        self.logger.debug("Policies updated", key=self.key, rules=changed)
        return int(changed or 0)

    def update_filtered_policies(
        self,
        sec: str,
        ptype: str,
        new_rules: Iterable[Sequence[str]],
        field_index: int,
        *field_values: str,
    ) -> List[List[str]]:
        """Swap the rules matching the field filter for ``new_rules``.

        Matching rules are removed and ``new_rules`` appended at the tail in
        one script run. Returns the removed rules.
        """
        with time_operation("update_filtered_policies"):
            pattern = build_field_range_pattern(ptype, field_index, *field_values)
            new_texts = [_encode(ptype, rule) for rule in new_rules]

            with self.provider.connection() as conn:
                reply = conn.eval(UPDATE_FILTERED, 1, self.key, pattern, DELETED_SENTINEL, *new_texts)

            removed = [CasbinRule.from_json(_record_text(value)).to_policy() for value in reply or []]

        self.logger.debug(
            "Filtered policies replaced",
            key=self.key,
            removed=len(removed),
            added=len(new_texts),
        )
        return removed
