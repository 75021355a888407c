"""Deterministic pattern fallback for fields the AI extractor left empty."""

import logging
from typing import Mapping

from patterns import RULES, ExtractionRule, FieldName

logger = logging.getLogger(__name__)


class FallbackResolver:
    """Walks a field's ordered rules and returns the first valid capture.

    The rule table is shared read-only; a resolver holds a reference to it
    and never mutates it, so one instance can serve concurrent callers.
    """

    def __init__(self, rules: Mapping[FieldName, tuple[ExtractionRule, ...]] = RULES):
        self._rules = rules

    def resolve(self, field: FieldName | str, text: str) -> str | None:
        """Return the first rule's validated capture for ``field``, or None."""
        field = FieldName(field)
        if not text:
            return None

        for rule in self._rules.get(field, ()):
            value = _apply(rule, text)
            if value is not None:
                logger.debug("fallback: %s resolved by rule %d", field.value, rule.order)
                return value

        return None


def _apply(rule: ExtractionRule, text: str) -> str | None:
    """Return the leftmost capture of ``rule`` that passes its length bounds."""
    for match in rule.pattern.finditer(text):
        captured = match.group(rule.group_index)
        if captured is None:
            continue

        value = captured.strip()
        if not rule.min_length <= len(value) <= rule.max_length:
            continue

        if rule.truncate_to is not None:
            value = value[:rule.truncate_to].rstrip()
        return value

    return None


_default_resolver = FallbackResolver()


def resolve_field(field: FieldName | str, text: str) -> str | None:
    """Resolve ``field`` from ``text`` using the built-in rule table."""
    return _default_resolver.resolve(field, text)
